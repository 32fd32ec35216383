# aplyease/blueprints/applications/bulk.py
from flask import jsonify
from flask_login import login_required, current_user

from ...exceptions import InvalidStatusError
from ...services.applications import bulk_update_status, bulk_delete
from ..utils import json_body, id_list
from . import applications_bp
from .routes import can_edit, can_delete


@applications_bp.post("/bulk-status")
@login_required
def bulk_status():
    payload = json_body()
    ids = id_list(payload.get("ids"))
    if not ids:
        return jsonify(message="No applications selected"), 400
    try:
        result = bulk_update_status(ids, payload.get("status"), can_edit=can_edit)
    except InvalidStatusError as e:
        return jsonify(message=f"Invalid status: {e.value!r}"), 400
    return jsonify(
        message=f"Updated {result.succeeded} application(s) to {payload.get('status')}",
        updatedBy=current_user.id,
        **result.to_dict(),
    )


@applications_bp.post("/bulk-delete")
@login_required
def bulk_delete_view():
    ids = id_list(json_body().get("ids"))
    if not ids:
        return jsonify(message="No applications selected"), 400
    result = bulk_delete(ids, can_delete=can_delete)
    return jsonify(message=f"Deleted {result.succeeded} application(s)", **result.to_dict())
