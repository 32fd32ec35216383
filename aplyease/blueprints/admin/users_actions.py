import logging

from flask import jsonify, abort
from flask_login import login_required, current_user
from sqlalchemy import or_
from ...security import roles_required
from ...extensions import db
from ...models.application import JobApplication
from ...models.user import User
from ..utils import json_body, form_errors
from . import admin_bp
from .forms import UserCreateForm, UserUpdateForm
from .utils import apply_profile, ensure_profile, user_payload

log = logging.getLogger(__name__)


def _email_taken(email: str, exclude_id=None) -> bool:
    q = User.query.filter(db.func.lower(User.email) == email.lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return db.session.query(q.exists()).scalar()


# ---- Create ----

@admin_bp.post("/users")
@login_required
@roles_required("admin")
def user_create():
    form = UserCreateForm()
    if not form.validate_on_submit():
        return form_errors(form)

    email = form.email.data.strip().lower()
    if _email_taken(email):
        return jsonify(message="Email already in use"), 409

    u = User(name=form.name.data.strip(), email=email, role=form.role.data)
    u.set_password(form.password.data)
    if u.role == "client":
        u.applications_remaining = form.applicationsRemaining.data or 0
        ensure_profile(u)
        apply_profile(u, form, json_body())
    db.session.add(u)
    db.session.commit()
    log.info("Admin %s created %s user %s", current_user.id, u.role, u.id)
    return jsonify(user_payload(u)), 201


# ---- Update ----

@admin_bp.patch("/users/<int:user_id>")
@login_required
@roles_required("admin")
def user_update(user_id):
    u = db.session.get(User, user_id) or abort(404)
    payload = json_body()
    form = UserUpdateForm()
    if not form.validate_on_submit():
        return form_errors(form)

    if payload.get("name") is not None:
        u.name = form.name.data.strip()
    if payload.get("email") is not None:
        email = form.email.data.strip().lower()
        if _email_taken(email, exclude_id=u.id):
            return jsonify(message="Email already in use"), 409
        u.email = email
    if payload.get("password"):
        u.set_password(form.password.data)
    if payload.get("role") is not None:
        if u.id == current_user.id and form.role.data != "admin":
            return jsonify(message="You cannot remove your own admin role"), 400
        u.role = form.role.data
    if "isActive" in payload:
        if u.id == current_user.id and not form.isActive.data:
            return jsonify(message="You cannot disable your own account"), 400
        u.is_active = bool(form.isActive.data)
    if u.role == "client":
        apply_profile(u, form, payload)

    db.session.commit()
    return jsonify(user_payload(u))


# ---- Disable / Delete ----

@admin_bp.post("/users/<int:user_id>/disable")
@login_required
@roles_required("admin")
def user_disable(user_id):
    u = db.session.get(User, user_id) or abort(404)
    if u.id == current_user.id:
        return jsonify(message="You cannot disable your own account"), 400
    if not u.is_active:
        return jsonify(message="User is already disabled", user=u.to_dict())
    u.is_active = False
    db.session.commit()
    log.info("Admin %s disabled user %s", current_user.id, u.id)
    return jsonify(message=f"User {u.email} disabled", user=u.to_dict())


@admin_bp.delete("/users/<int:user_id>")
@login_required
@roles_required("admin")
def user_delete(user_id):
    u = db.session.get(User, user_id) or abort(404)
    if u.id == current_user.id:
        return jsonify(message="You cannot delete your own account"), 400
    # applications on both sides go first, then the user and profile
    JobApplication.query.filter(
        or_(JobApplication.client_id == u.id, JobApplication.employee_id == u.id)
    ).delete(synchronize_session=False)
    db.session.delete(u)
    db.session.commit()
    log.info("Admin %s deleted user %s", current_user.id, user_id)
    return jsonify(message="User deleted successfully")
