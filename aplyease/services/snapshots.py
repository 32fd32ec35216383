# aplyease/services/snapshots.py
"""Load immutable snapshots of clients/applications for the analytics layer."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional

from sqlalchemy.orm import aliased, joinedload

from ..extensions import db
from ..models.application import JobApplication
from ..models.user import User
from .analytics import ApplicationRecord, ClientSnapshot


def _application_rows(client_ids: Optional[list[int]] = None):
    employee = aliased(User)
    q = (
        db.session.query(
            JobApplication.client_id,
            JobApplication.status,
            JobApplication.date_applied,
            JobApplication.employee_id,
            employee.name,
        )
        .join(employee, JobApplication.employee_id == employee.id)
        .order_by(JobApplication.date_applied.asc(), JobApplication.id.asc())
    )
    if client_ids is not None:
        q = q.filter(JobApplication.client_id.in_(client_ids))
    return q.all()


def load_client_snapshots(*, active_only: bool = True, client_ids: Optional[list[int]] = None) -> list[ClientSnapshot]:
    q = User.query.options(joinedload(User.client_profile)).filter(User.role == "client")
    if active_only:
        q = q.filter(User.is_active.is_(True))
    if client_ids is not None:
        q = q.filter(User.id.in_(client_ids))
    clients = q.order_by(User.created_at.desc(), User.id.desc()).all()
    if not clients:
        return []

    by_client: dict[int, list[ApplicationRecord]] = defaultdict(list)
    for client_id, status, applied, employee_id, employee_name in _application_rows([c.id for c in clients]):
        by_client[client_id].append(ApplicationRecord(
            status=status, date_applied=applied,
            employee_id=employee_id, employee_name=employee_name,
        ))

    snaps = []
    for c in clients:
        prof = c.client_profile
        snaps.append(ClientSnapshot(
            id=c.id,
            name=c.name,
            company=prof.company if prof else None,
            applications_remaining=c.applications_remaining,
            amount_paid=prof.amount_paid_cents if prof else None,
            amount_due=prof.amount_due_cents if prof else None,
            applications=tuple(by_client.get(c.id, ())),
        ))
    return snaps


def load_employees(*, active_only: bool = False) -> list[User]:
    q = User.query.filter(User.role == "employee")
    if active_only:
        q = q.filter(User.is_active.is_(True))
    return q.order_by(User.name.asc()).all()


def application_dates_by_employee(employee_ids: Optional[list[int]] = None,
                                  *, date_from: Optional[date] = None,
                                  date_to: Optional[date] = None) -> dict[int, list[date]]:
    q = db.session.query(JobApplication.employee_id, JobApplication.date_applied)
    if employee_ids is not None:
        q = q.filter(JobApplication.employee_id.in_(employee_ids))
    if date_from is not None:
        q = q.filter(JobApplication.date_applied >= date_from)
    if date_to is not None:
        q = q.filter(JobApplication.date_applied <= date_to)
    out: dict[int, list[date]] = defaultdict(list)
    for employee_id, applied in q.all():
        out[employee_id].append(applied)
    return out
