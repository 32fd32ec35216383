import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify, request
from flask_login import current_user

from .extensions import db, migrate, login_manager, csrf, mail, babel
from .config import Config
from .models.user import User

# Blueprints
from .blueprints.errors import errors_bp
from .blueprints.auth import auth_bp
from .blueprints.admin import admin_bp
from .blueprints.applications import applications_bp
from .blueprints.analytics import analytics_bp

__version__ = "1.0.0"

_TEXT_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"


# Optional: Sentry
def _init_sentry(app):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=app.config.get("SENTRY_TRACES_SAMPLE_RATE", 0.0),
        environment=os.getenv("ENV", "development"),
        release=app.config.get("APP_VERSION") or os.getenv("GIT_COMMIT", None),
        send_default_pii=False,
    )
    app.logger.info("Sentry initialized.")


def _init_logging(app):
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    app.logger.setLevel(level)

    log_dir = Path(app.config.get("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / app.config.get("LOG_FILENAME", "aplyease.log")

    # Formatter: text or JSON
    if app.config.get("LOG_JSON", False):
        import json_log_formatter
        formatter = json_log_formatter.VerboseJSONFormatter()
    else:
        formatter = logging.Formatter(_TEXT_FORMAT)

    # One file + one stream handler per logger, even when the factory runs repeatedly
    for h in list(app.logger.handlers):
        if getattr(h, "_aplyease", False):
            app.logger.removeHandler(h)
            h.close()

    # Rotating file handler (5MB x 5)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    stream_handler = logging.StreamHandler()
    for h in (file_handler, stream_handler):
        h.setLevel(level)
        h.setFormatter(formatter)
        h._aplyease = True
        app.logger.addHandler(h)

    app.logger.info("Logging initialized.")


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)
    app.config.from_pyfile("config.py", silent=True)

    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    app.config.setdefault("BABEL_DEFAULT_LOCALE", "en")
    app.config.setdefault("BABEL_DEFAULT_TIMEZONE", "UTC")
    app.config.setdefault("LANGUAGES", ["en", "hi"])

    # Logging must come before blueprints so errors during register are captured
    _init_logging(app)
    _init_sentry(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    mail.init_app(app)

    def _select_locale():
        return request.accept_languages.best_match(app.config.get("LANGUAGES", ["en"])) or "en"
    babel.init_app(app, locale_selector=_select_locale)

    @login_manager.user_loader
    def load_user(user_id):
        user = db.session.get(User, int(user_id))
        # disabled accounts lose their session on the next request
        return user if user and user.is_active else None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(message="Authentication required", code=401), 401

    # Blueprints
    app.register_blueprint(errors_bp)  # error handlers
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(applications_bp, url_prefix="/applications")
    app.register_blueprint(analytics_bp)

    @app.get("/")
    def index():
        return jsonify(
            name="AplyEase",
            version=app.config.get("APP_VERSION") or __version__,
            user=current_user.to_dict() if current_user.is_authenticated else None,
        )

    return app
