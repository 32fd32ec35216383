# aplyease/services/stats.py
"""Headline numbers for the admin, employee and client dashboards."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import func

from ..extensions import db
from ..models.application import ApplicationStatus, JobApplication
from ..models.user import User
from .analytics import percentage
from .payouts import PayoutRates, total_payout_cents
from .snapshots import application_dates_by_employee, load_employees

PENDING_REVIEW_STATUSES = (ApplicationStatus.APPLIED.value, ApplicationStatus.SCREENING.value)
EMPLOYEE_IN_PROGRESS_STATUSES = (
    ApplicationStatus.APPLIED.value,
    ApplicationStatus.SCREENING.value,
    ApplicationStatus.INTERVIEW.value,
)


def _count(*criteria) -> int:
    return db.session.query(func.count(JobApplication.id)).filter(*criteria).scalar() or 0


def dashboard_stats(*, today: date) -> dict:
    month_start = datetime(today.year, today.month, 1)
    active_employees = User.query.filter(User.role == "employee", User.is_active.is_(True)).count()
    return {
        "totalApplications": _count(),
        "activeEmployees": active_employees,
        "hiredThisMonth": _count(
            JobApplication.status == ApplicationStatus.HIRED.value,
            JobApplication.updated_at >= month_start,
        ),
        "pendingReview": _count(JobApplication.status.in_(PENDING_REVIEW_STATUSES)),
    }


def employee_stats(employee_id: int, *, rates: PayoutRates) -> dict:
    mine = JobApplication.employee_id == employee_id
    total = _count(mine)
    hired = _count(mine, JobApplication.status == ApplicationStatus.HIRED.value)
    dates = application_dates_by_employee([employee_id]).get(employee_id, [])
    return {
        "myApplications": total,
        "inProgress": _count(mine, JobApplication.status.in_(EMPLOYEE_IN_PROGRESS_STATUSES)),
        "successRate": round(hired * 100 / total) if total else 0,
        "earnings": total_payout_cents(dates, rates),
    }


def client_stats(client: User) -> dict:
    mine = JobApplication.client_id == client.id
    return {
        "totalApplications": _count(mine),
        "inProgress": _count(mine, JobApplication.status.in_(PENDING_REVIEW_STATUSES)),
        "interviews": _count(mine, JobApplication.status == ApplicationStatus.INTERVIEW.value),
        "hired": _count(mine, JobApplication.status == ApplicationStatus.HIRED.value),
        "applicationsRemaining": client.applications_remaining or 0,
    }


def employee_performance(*, today: date, rates: PayoutRates) -> dict:
    employees = load_employees()
    rows = (
        db.session.query(
            JobApplication.employee_id,
            JobApplication.client_id,
            User.name.label("client_name"),
            JobApplication.status,
            JobApplication.date_applied,
        )
        .join(User, JobApplication.client_id == User.id)
        .all()
    )

    per: dict[int, list] = {e.id: [] for e in employees}
    for row in rows:
        per.setdefault(row.employee_id, []).append(row)

    interview = ApplicationStatus.INTERVIEW.value
    out = []
    total_payout = 0
    for e in employees:
        apps = per.get(e.id, [])
        total = len(apps)
        hired = sum(1 for r in apps if r.status == ApplicationStatus.HIRED.value)
        this_month = [r for r in apps
                      if r.date_applied.year == today.year and r.date_applied.month == today.month]
        clients: dict[int, str] = {}
        for r in apps:
            clients.setdefault(r.client_id, r.client_name)
        earnings = total_payout_cents((r.date_applied for r in apps), rates)
        total_payout += earnings
        out.append({
            "id": e.id,
            "name": e.name,
            "totalApplications": total,
            "interviews": sum(1 for r in apps if r.status == interview),
            "successRate": percentage(hired, total),
            "earnings": earnings,
            "applicationsToday": sum(1 for r in apps if r.date_applied == today),
            "applicationsThisMonth": len(this_month),
            "interviewsThisMonth": sum(1 for r in this_month if r.status == interview),
            "earningsThisMonth": total_payout_cents((r.date_applied for r in this_month), rates),
            "assignedClients": list(clients.values()),
        })
    return {"totalPayout": total_payout, "employees": out}


def daily_employee_analytics(*, today: date) -> dict:
    week_ago = today - timedelta(days=6)
    dates = application_dates_by_employee(date_from=week_ago, date_to=today)
    yesterday = today - timedelta(days=1)
    three_days = today - timedelta(days=2)

    employees = []
    totals = {"today": 0, "yesterday": 0, "last3": 0, "last7": 0}
    for e in load_employees():
        ds = dates.get(e.id, [])
        row = {
            "id": e.id,
            "name": e.name,
            "applicationsToday": sum(1 for d in ds if d == today),
            "applicationsYesterday": sum(1 for d in ds if d == yesterday),
            "applicationsLast3Days": sum(1 for d in ds if d >= three_days),
            "applicationsLast7Days": len(ds),
        }
        totals["today"] += row["applicationsToday"]
        totals["yesterday"] += row["applicationsYesterday"]
        totals["last3"] += row["applicationsLast3Days"]
        totals["last7"] += row["applicationsLast7Days"]
        employees.append(row)

    return {
        "totalApplicationsToday": totals["today"],
        "totalApplicationsYesterday": totals["yesterday"],
        "totalApplicationsLast3Days": totals["last3"],
        "totalApplicationsLast7Days": totals["last7"],
        "employees": employees,
    }


def rejection_stats(*, client_id: Optional[int] = None, employee_id: Optional[int] = None,
                    recent: int = 10) -> dict:
    criteria = []
    if client_id is not None:
        criteria.append(JobApplication.client_id == client_id)
    if employee_id is not None:
        criteria.append(JobApplication.employee_id == employee_id)
    rejected_q = JobApplication.status == ApplicationStatus.REJECTED.value

    total = _count(*criteria)
    rejected = _count(*criteria, rejected_q)
    latest = (
        JobApplication.query.filter(*criteria, rejected_q)
        .order_by(JobApplication.updated_at.desc(), JobApplication.id.desc())
        .limit(recent)
        .all()
    )
    return {
        "totalApplications": total,
        "rejected": rejected,
        "rejectionRate": percentage(rejected, total),
        "recentRejections": [a.to_dict() for a in latest],
    }

