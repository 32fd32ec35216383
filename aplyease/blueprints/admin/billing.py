import logging

from flask import jsonify, abort
from flask_login import login_required, current_user
from ...security import roles_required
from ...extensions import db
from ...models.user import User
from ..utils import json_body, form_errors
from . import admin_bp
from .forms import BillingForm
from .utils import ensure_profile, user_payload

log = logging.getLogger(__name__)


@admin_bp.patch("/clients/<int:client_id>/billing")
@login_required
@roles_required("admin")
def client_billing(client_id):
    u = db.session.get(User, client_id)
    if u is None or not u.is_client:
        abort(404)
    payload = json_body()
    form = BillingForm()
    if not form.validate_on_submit():
        return form_errors(form)

    if payload.get("applicationsRemaining") is not None:
        u.applications_remaining = form.applicationsRemaining.data
    prof = ensure_profile(u)
    if payload.get("amountPaid") is not None:
        prof.amount_paid_cents = form.amountPaid.data
    if payload.get("amountDue") is not None:
        prof.amount_due_cents = form.amountDue.data
    db.session.commit()
    log.info("Admin %s updated billing for client %s", current_user.id, u.id)
    return jsonify(user_payload(u))
