# aplyease/blueprints/analytics/stats.py
from flask import jsonify, abort
from flask_login import login_required, current_user

from ...extensions import db
from ...models.user import User
from ...security import roles_required, can_view_client, can_view_employee
from ...services import stats as svc
from ..utils import today, payout_rates
from . import analytics_bp


@analytics_bp.get("/stats/dashboard")
@login_required
@roles_required("admin")
def dashboard():
    return jsonify(svc.dashboard_stats(today=today()))


@analytics_bp.get("/stats/employee/<int:employee_id>")
@login_required
def employee(employee_id):
    if not can_view_employee(current_user, employee_id):
        abort(403)
    u = db.session.get(User, employee_id)
    if u is None or not u.is_employee:
        abort(404)
    return jsonify(svc.employee_stats(employee_id, rates=payout_rates()))


@analytics_bp.get("/stats/client/<int:client_id>")
@login_required
def client(client_id):
    if not can_view_client(current_user, client_id):
        abort(403)
    u = db.session.get(User, client_id)
    if u is None or not u.is_client:
        abort(404)
    return jsonify(svc.client_stats(u))



@analytics_bp.get("/clients")
@login_required
@roles_required("admin", "employee")
def clients():
    rows = (
        User.query.filter(User.role == "client", User.is_active.is_(True))
        .order_by(User.name.asc(), User.id.asc())
        .all()
    )
    return jsonify(clients=[u.to_dict() for u in rows])
