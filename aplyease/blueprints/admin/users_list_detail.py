from flask import request, jsonify, abort
from flask_login import login_required
from sqlalchemy import or_, asc, desc
from ...security import roles_required
from ...extensions import db
from ...models.user import User, ROLES
from ..utils import page_args
from . import admin_bp
from .utils import user_payload


@admin_bp.get("/users")
@login_required
@roles_required("admin")
def users_list():
    q = (request.args.get("q") or "").strip()
    role = (request.args.get("role") or "").strip()
    status = (request.args.get("status") or "").strip()
    sort = (request.args.get("sort") or "-created").strip()
    page, per_page = page_args(20)

    base = User.query

    if q:
        like = f"%{q}%"
        base = base.filter(or_(User.name.ilike(like), User.email.ilike(like)))

    if role in ROLES:
        base = base.filter(User.role == role)

    if status == "active":
        base = base.filter(User.is_active.is_(True))
    elif status == "disabled":
        base = base.filter(User.is_active.is_(False))

    if sort == "created":
        base = base.order_by(asc(User.created_at), asc(User.id))
    elif sort == "name":
        base = base.order_by(asc(User.name), asc(User.id))
    elif sort == "-last_login":
        base = base.order_by(desc(User.last_login_at), desc(User.id))
    else:
        base = base.order_by(desc(User.created_at), desc(User.id))

    total = base.count()
    pages = max((total + per_page - 1) // per_page, 1)
    page = min(page, pages)
    users = base.offset((page - 1) * per_page).limit(per_page).all()

    counts = {r: User.query.filter_by(role=r).count() for r in ROLES}
    counts["disabled"] = User.query.filter(User.is_active.is_(False)).count()
    return jsonify(users=[u.to_dict() for u in users], total=total, page=page, pages=pages, counts=counts)


@admin_bp.get("/users/<int:user_id>")
@login_required
@roles_required("admin")
def user_detail(user_id):
    u = db.session.get(User, user_id) or abort(404)
    data = user_payload(u)
    data["lastLoginAt"] = u.last_login_at.isoformat() if u.last_login_at else None
    if u.is_client:
        data["applicationCount"] = u.client_applications.count()
    elif u.is_employee:
        data["applicationCount"] = u.employee_applications.count()
    return jsonify(data)
