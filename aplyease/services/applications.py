# aplyease/services/applications.py
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models.application import ApplicationStatus, JobApplication
from ..models.user import User
from .retry import retry

log = logging.getLogger(__name__)

CSV_HEADERS = [
    "Date Applied", "Applied By", "Client", "Job Title", "Company", "Location",
    "Portal", "Link", "Job Page", "Resume", "Status", "Mail Sent", "Notes",
]


@dataclass(frozen=True)
class BulkResult:
    succeeded: int
    failed: int

    def to_dict(self) -> dict:
        return {"succeeded": self.succeeded, "failed": self.failed}


@dataclass
class ApplicationFilters:
    client_id: Optional[int] = None
    employee_id: Optional[int] = None
    status: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: str = "dateApplied"
    sort_order: str = "desc"


# -----------------
# Quota
# -----------------

def decrement_quota(client_id: int) -> bool:
    """Take one application off the client's quota, never below zero.

    Single conditional UPDATE so concurrent submissions cannot lose a
    decrement. Does not commit; runs inside the caller's transaction.
    """
    updated = (
        User.query
        .filter(User.id == client_id, User.role == "client", User.applications_remaining > 0)
        .update({User.applications_remaining: User.applications_remaining - 1}, synchronize_session=False)
    )
    return bool(updated)


def record_application(application: JobApplication) -> JobApplication:
    db.session.add(application)
    db.session.flush()  # ensures application.id is available
    if not decrement_quota(application.client_id):
        log.info("Client %s has no quota left; application %s recorded anyway",
                 application.client_id, application.id)
    db.session.commit()
    log.info("Application %s logged for client %s by employee %s",
             application.id, application.client_id, application.employee_id)
    return application


# -----------------
# Listing / export
# -----------------

def build_query(filters: ApplicationFilters):
    q = JobApplication.query.options(
        joinedload(JobApplication.client), joinedload(JobApplication.employee)
    )
    if filters.client_id:
        q = q.filter(JobApplication.client_id == filters.client_id)
    if filters.employee_id:
        q = q.filter(JobApplication.employee_id == filters.employee_id)
    if filters.status:
        q = q.filter(JobApplication.status == filters.status)
    if filters.search:
        like = f"%{filters.search}%"
        q = q.filter(or_(JobApplication.job_title.ilike(like), JobApplication.company_name.ilike(like)))
    if filters.date_from:
        q = q.filter(JobApplication.date_applied >= filters.date_from)
    if filters.date_to:
        q = q.filter(JobApplication.date_applied <= filters.date_to)

    column = JobApplication.date_applied if filters.sort_by == "dateApplied" else JobApplication.created_at
    if filters.sort_order == "asc":
        q = q.order_by(column.asc(), JobApplication.id.asc())
    else:
        q = q.order_by(column.desc(), JobApplication.id.desc())
    return q


def list_applications(filters: ApplicationFilters, *, page: int = 1, per_page: int = 10):
    q = build_query(filters)
    total = q.order_by(None).count()
    pages = max((total + per_page - 1) // per_page, 1)
    page = min(max(page, 1), pages)
    items = q.offset((page - 1) * per_page).limit(per_page).all()
    return items, total, page, pages


def export_csv(applications: Iterable[JobApplication]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for a in applications:
        writer.writerow([
            a.date_applied.isoformat() if a.date_applied else "",
            a.applied_by_name or "",
            a.client.name if a.client else "",
            a.job_title or "",
            a.company_name or "",
            a.location or "",
            a.portal_name or "",
            a.job_link or "",
            a.job_page or "",
            a.resume_url or "",
            a.status,
            "Yes" if a.mail_sent else "No",
            a.notes or "",
        ])
    return buf.getvalue()


# -----------------
# Bulk operations
# -----------------

def bulk_update_status(ids: Iterable[int], new_status, *,
                       can_edit: Callable[[JobApplication], bool],
                       attempts: int = 3) -> BulkResult:
    """Set one status on many applications, each in its own transaction.

    An unknown status raises InvalidStatusError before anything is touched;
    per-item failures (missing row, no permission, database error) are only
    counted.
    """
    target = ApplicationStatus.parse(new_status).value

    @retry(max_attempts=attempts, retryable=(OperationalError,))
    def _apply(application_id: int) -> bool:
        try:
            app = db.session.get(JobApplication, application_id)
            if app is None or not can_edit(app):
                return False
            app.status = target
            db.session.commit()
            return True
        except SQLAlchemyError:
            db.session.rollback()
            raise

    succeeded = failed = 0
    for application_id in ids:
        try:
            ok = _apply(application_id)
        except SQLAlchemyError as e:
            log.warning("Bulk status: application %s failed: %s", application_id, e)
            ok = False
        if ok:
            succeeded += 1
        else:
            failed += 1

    log.info("Bulk status %s: %d succeeded, %d failed", target, succeeded, failed)
    return BulkResult(succeeded=succeeded, failed=failed)


def bulk_delete(ids: Iterable[int], *, can_delete: Callable[[JobApplication], bool]) -> BulkResult:
    succeeded = failed = 0
    for application_id in ids:
        try:
            app = db.session.get(JobApplication, application_id)
            if app is None or not can_delete(app):
                failed += 1
                continue
            db.session.delete(app)
            db.session.commit()
            succeeded += 1
        except SQLAlchemyError as e:
            db.session.rollback()
            log.warning("Bulk delete: application %s failed: %s", application_id, e)
            failed += 1
    return BulkResult(succeeded=succeeded, failed=failed)
