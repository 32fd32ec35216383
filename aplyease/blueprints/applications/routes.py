# aplyease/blueprints/applications/routes.py
import logging

from flask import request, jsonify, abort, current_app, Response
from flask_login import login_required, current_user

from ...extensions import db
from ...models.application import JobApplication, ApplicationStatus
from ...models.user import User
from ...security import roles_required
from ...services.applications import (
    ApplicationFilters, list_applications, build_query, export_csv, record_application,
)
from ...services.notifications import email_quota_low
from ..utils import _parse_date, _to_int, form_errors, json_body, page_args, today
from . import applications_bp
from .forms import ApplicationForm, ApplicationUpdateForm

log = logging.getLogger(__name__)

# -----------------
# Helpers
# -----------------

def _filters_from_args() -> ApplicationFilters:
    args = request.args
    status = (args.get("status") or "").strip() or None
    if status and status not in ApplicationStatus.values():
        abort(400, description=f"Unknown status {status!r}")
    f = ApplicationFilters(
        status=status,
        search=(args.get("search") or "").strip() or None,
        date_from=_parse_date(args.get("dateFrom")),
        date_to=_parse_date(args.get("dateTo")),
        sort_by=args.get("sortBy", "dateApplied"),
        sort_order="asc" if args.get("sortOrder") == "asc" else "desc",
    )
    # Clients only ever see applications made for them
    if current_user.role == "client":
        f.client_id = current_user.id
    else:
        f.client_id = _to_int(args.get("clientId"))
        f.employee_id = _to_int(args.get("employeeId"))
    return f


def can_edit(app: JobApplication) -> bool:
    if current_user.role == "admin":
        return True
    if current_user.role == "employee":
        return app.employee_id == current_user.id
    return current_user.role == "client" and app.client_id == current_user.id


def can_delete(app: JobApplication) -> bool:
    if current_user.role == "admin":
        return True
    return current_user.role == "client" and app.client_id == current_user.id


def _active_user(user_id, role):
    u = db.session.get(User, user_id) if user_id else None
    if not u or u.role != role or not u.is_active:
        return None
    return u

# -----------------
# List / Export
# -----------------

@applications_bp.get("")
@login_required
def list_view():
    filters = _filters_from_args()
    page, per_page = page_args(current_app.config.get("APPLICATIONS_PER_PAGE", 10))
    items, total, page, pages = list_applications(filters, page=page, per_page=per_page)
    return jsonify(applications=[a.to_dict() for a in items], total=total, page=page, pages=pages)


@applications_bp.get("/export")
@login_required
def export():
    filters = _filters_from_args()
    rows = build_query(filters).limit(current_app.config.get("EXPORT_MAX_ROWS", 10000)).all()
    return Response(
        export_csv(rows),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename=job_applications_{today().isoformat()}.csv"},
    )

# -----------------
# Create / Update / Delete
# -----------------

@applications_bp.post("")
@login_required
@roles_required("admin", "employee")
def create():
    form = ApplicationForm()
    if not form.validate_on_submit():
        return form_errors(form)

    client = _active_user(form.clientId.data, "client")
    if not client:
        return jsonify(message="Invalid client ID"), 400

    if current_user.role == "employee":
        employee = current_user
    else:
        if not form.employeeId.data:
            return jsonify(message="Employee ID is required for admin submissions"), 400
        employee = _active_user(form.employeeId.data, "employee")
        if not employee:
            return jsonify(message="Invalid employee ID"), 400

    app = JobApplication(
        client_id=client.id,
        employee_id=employee.id,
        applied_by_name=employee.name,
        date_applied=form.dateApplied.data or today(),
        job_title=form.jobTitle.data.strip(),
        company_name=form.companyName.data.strip(),
        location=(form.location.data or "").strip() or None,
        portal_name=(form.portalName.data or "").strip() or None,
        job_link=form.jobLink.data or None,
        job_page=form.jobPage.data or None,
        resume_url=form.resumeUrl.data or None,
        additional_link=form.additionalLink.data or None,
        status=form.status.data,
        mail_sent=bool(form.mailSent.data),
        notes=(form.notes.data or "").strip() or None,
    )
    record_application(app)

    db.session.refresh(client)
    email_quota_low(client)
    return jsonify(app.to_dict()), 201


@applications_bp.patch("/<int:application_id>")
@login_required
def update(application_id):
    app = db.session.get(JobApplication, application_id)
    if app is None:
        abort(404)
    if not can_edit(app):
        abort(403)

    payload = json_body()
    form = ApplicationUpdateForm()
    if not form.validate_on_submit():
        return form_errors(form)
    changes = form.present_fields(payload)

    if current_user.role == "client":
        # Clients can only move the status of their own applications
        if "status" not in changes:
            return jsonify(message="Clients can only update application status"), 400
        changes = {"status": changes["status"]}
    elif current_user.role == "employee":
        changes.pop("employee_id", None)

    if "client_id" in changes and not _active_user(changes["client_id"], "client"):
        return jsonify(message="Invalid client ID"), 400
    if "employee_id" in changes:
        employee = _active_user(changes["employee_id"], "employee")
        if not employee:
            return jsonify(message="Invalid employee ID"), 400
        changes["applied_by_name"] = employee.name

    for attr, value in changes.items():
        setattr(app, attr, value)
    db.session.commit()
    log.info("Application %s updated by user %s: %s", app.id, current_user.id, sorted(changes))
    return jsonify(app.to_dict())


@applications_bp.delete("/<int:application_id>")
@login_required
def delete(application_id):
    app = db.session.get(JobApplication, application_id)
    if app is None:
        abort(404)
    if not can_delete(app):
        abort(403)
    db.session.delete(app)
    db.session.commit()
    return jsonify(message="Application deleted successfully")

