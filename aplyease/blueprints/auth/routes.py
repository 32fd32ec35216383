# aplyease/blueprints/auth/routes.py
import logging
from datetime import datetime
from typing import Optional

from flask import request, jsonify, url_for, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from ...extensions import db
from ...models.user import User
from ...services.email_service import send_email
from ..utils import form_errors
from . import auth_bp
from .forms import LoginForm, ForgotPasswordForm, ResetPasswordForm, ChangePasswordForm

log = logging.getLogger(__name__)

# -----------------
# Utilities
# -----------------

def _ts() -> URLSafeTimedSerializer:
    secret_key = current_app.config.get("SECRET_KEY")
    salt = current_app.config["SECURITY_PASSWORD_SALT"]
    return URLSafeTimedSerializer(secret_key=secret_key, salt=salt)


def _issue_reset_token(user_id: int) -> str:
    return _ts().dumps({"uid": user_id, "ts": datetime.utcnow().isoformat()})


def _verify_reset_token(token: str, max_age: int = 60 * 60 * 24) -> Optional[int]:
    try:
        data = _ts().loads(token, max_age=max_age)
        return int(data.get("uid"))
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None


def send_password_reset_email(user: User, link: str) -> bool:
    return send_email(
        to=user.email,
        subject="Reset your AplyEase password",
        template="password_reset.html",
        user=user,
        link=link,
    )

# -----------------
# Session
# -----------------

@auth_bp.get("/csrf")
def csrf_token():
    return jsonify(csrfToken=generate_csrf())


@auth_bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return form_errors(form)

    email = form.email.data.strip().lower()
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(form.password.data):
        log.info("Failed login for %s", email)
        return jsonify(message="Invalid credentials"), 401

    if not user.is_active:
        return jsonify(message="Your account is disabled. Contact support."), 403

    login_user(user, remember=bool(form.remember.data))
    user.mark_login()
    db.session.commit()
    log.info("User %s logged in", user.id)
    return jsonify(user=user.to_dict())


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify(message="Logged out successfully")


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(user=current_user.to_dict())

# -----------------
# Passwords
# -----------------

@auth_bp.post("/forgot-password")
def forgot_password():
    form = ForgotPasswordForm()
    if not form.validate_on_submit():
        return form_errors(form)

    email = form.email.data.strip().lower()
    user = User.query.filter_by(email=email).first()
    # mask whether email exists
    if user and user.is_active:
        token = _issue_reset_token(user.id)
        link = url_for("auth.reset_password", token=token, _external=True)
        send_password_reset_email(user, link)
    return jsonify(message="If that email is registered, you will receive a reset link shortly.")


@auth_bp.post("/reset-password/<token>")
def reset_password(token):
    user_id = _verify_reset_token(token)
    user = db.session.get(User, user_id) if user_id else None
    if not user:
        return jsonify(message="The reset link is invalid or has expired."), 400

    form = ResetPasswordForm()
    if not form.validate_on_submit():
        return form_errors(form)

    user.set_password(form.password.data)
    db.session.commit()
    return jsonify(message="Your password has been reset. Please sign in.")


@auth_bp.post("/change-password")
@login_required
def change_password():
    form = ChangePasswordForm()
    if not form.validate_on_submit():
        return form_errors(form)
    if not current_user.check_password(form.current_password.data):
        return jsonify(message="Current password is incorrect."), 400

    current_user.set_password(form.password.data)
    db.session.commit()
    return jsonify(message="Password updated.")
