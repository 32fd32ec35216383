# aplyease/config.py
import os
from dotenv import load_dotenv

load_dotenv()

def _as_bool(val: str | None, default=False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}

class Config:
    # --- Core ---
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    # Salt for password-reset tokens signed with SECRET_KEY
    SECURITY_PASSWORD_SALT = os.getenv("SECURITY_PASSWORD_SALT", "pwd-reset")
    APP_VERSION = os.getenv("APP_VERSION")
    BABEL_DEFAULT_LOCALE = os.getenv("BABEL_DEFAULT_LOCALE", "en")
    BABEL_DEFAULT_TIMEZONE = os.getenv("BABEL_DEFAULT_TIMEZONE", "UTC")

    # DB
    SQLALCHEMY_DATABASE_URI = (
        os.getenv("SQLALCHEMY_DATABASE_URI")
        or os.getenv("DATABASE_URL")
        or "sqlite:///aplyease.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CSRF (JSON clients send X-CSRFToken, see /auth/csrf)
    WTF_CSRF_TIME_LIMIT = None

    # --- Mail ---
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _as_bool(os.getenv("MAIL_USE_TLS", "1"))
    MAIL_USE_SSL = _as_bool(os.getenv("MAIL_USE_SSL", "0"))  # don't enable together with TLS
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", MAIL_USERNAME)
    MAIL_SUPPRESS_SEND = _as_bool(os.getenv("MAIL_SUPPRESS_SEND", "0"))

    # --- Logging ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_FILENAME = os.getenv("LOG_FILENAME", "aplyease.log")
    LOG_JSON = _as_bool(os.getenv("LOG_JSON", "0"))

    # --- Sentry ---
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0"))

    # --- Analytics ---
    # Days of application history that count as "recent activity" for client priority.
    ACTIVITY_LOOKBACK_DAYS = int(os.getenv("ACTIVITY_LOOKBACK_DAYS", "14"))
    # Display-only conversion for the secondary currency; not a live exchange rate.
    USD_TO_INR_RATE = int(os.getenv("USD_TO_INR_RATE", "87"))

    # --- Employee payouts (cents per application) ---
    PAYOUT_DAILY_TARGET = int(os.getenv("PAYOUT_DAILY_TARGET", "15"))
    PAYOUT_BASE_RATE_CENTS = int(os.getenv("PAYOUT_BASE_RATE_CENTS", "20"))
    PAYOUT_BELOW_TARGET_RATE_CENTS = int(os.getenv("PAYOUT_BELOW_TARGET_RATE_CENTS", "15"))

    # --- Listing ---
    APPLICATIONS_PER_PAGE = int(os.getenv("APPLICATIONS_PER_PAGE", "10"))
    EXPORT_MAX_ROWS = int(os.getenv("EXPORT_MAX_ROWS", "10000"))

    # --- Security cookies (recommended for prod) ---
    SESSION_COOKIE_SECURE = _as_bool(os.getenv("SESSION_COOKIE_SECURE", "1"))
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "noreply@aplyease.test"
    SESSION_COOKIE_SECURE = False
    LOG_LEVEL = "WARNING"
    SENTRY_DSN = ""
