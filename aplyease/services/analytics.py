# aplyease/services/analytics.py
"""
Client performance aggregation.

Everything here is a pure function over immutable snapshots: callers load
rows (see ``snapshots.py``), pass them in together with an explicit
``AnalyticsSettings`` and get plain dataclasses back. No database access,
no Flask globals, so the same snapshot can be aggregated from any number of
requests at once.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from ..models.application import ApplicationStatus

IN_PROGRESS_STATUSES = frozenset({
    ApplicationStatus.APPLIED.value,
    ApplicationStatus.SCREENING.value,
    ApplicationStatus.ON_HOLD.value,
})
INTERVIEW_STATUSES = frozenset({
    ApplicationStatus.INTERVIEW.value,
    ApplicationStatus.OFFER.value,
})

HIGH_QUOTA_THRESHOLD = 2
MEDIUM_QUOTA_THRESHOLD = 5

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_ONE_DECIMAL = Decimal("0.1")


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class AnalyticsSettings:
    lookback_days: int = 14
    usd_to_inr: int = 87

    @classmethod
    def from_config(cls, config: Mapping) -> "AnalyticsSettings":
        return cls(
            lookback_days=int(config.get("ACTIVITY_LOOKBACK_DAYS", 14)),
            usd_to_inr=int(config.get("USD_TO_INR_RATE", 87)),
        )


@dataclass(frozen=True)
class ApplicationRecord:
    status: str
    date_applied: date
    employee_id: Optional[int] = None
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class ClientSnapshot:
    id: int
    name: str
    company: Optional[str] = None
    # Billing/quota may be missing on legacy rows; None means "treat as 0".
    applications_remaining: Optional[int] = None
    amount_paid: Optional[int] = None
    amount_due: Optional[int] = None
    applications: tuple[ApplicationRecord, ...] = ()


@dataclass(frozen=True)
class ClientMetrics:
    id: int
    name: str
    company: Optional[str]
    applications_remaining: int
    amount_paid: int
    amount_due: int
    total_applications: int
    in_progress: int
    interviews: int
    hired: int
    rejected: int
    rejection_rate: float
    success_rate: float
    priority: Priority
    last_applied_at: Optional[date] = None
    assigned_employees: tuple[tuple[int, str], ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company,
            "applicationsRemaining": self.applications_remaining,
            "amountPaid": self.amount_paid,
            "amountDue": self.amount_due,
            "totalApplications": self.total_applications,
            "inProgress": self.in_progress,
            "interviews": self.interviews,
            "hired": self.hired,
            "rejected": self.rejected,
            "rejectionRate": self.rejection_rate,
            "successRate": self.success_rate,
            "priority": self.priority.value,
            "lastAppliedAt": self.last_applied_at.isoformat() if self.last_applied_at else None,
            "assignedEmployees": [{"id": eid, "name": name} for eid, name in self.assigned_employees],
        }


@dataclass(frozen=True)
class PortfolioSummary:
    total_clients: int
    high_priority_count: int
    total_applications_remaining: int
    average_success_rate: float
    average_rejection_rate: float
    total_revenue: int
    total_due: int
    ranked: tuple[ClientMetrics, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "totalClients": self.total_clients,
            "highPriorityCount": self.high_priority_count,
            "totalApplicationsRemaining": self.total_applications_remaining,
            "averageSuccessRate": self.average_success_rate,
            "averageRejectionRate": self.average_rejection_rate,
            "totalRevenue": self.total_revenue,
            "totalDue": self.total_due,
            "ranked": [{"id": m.id, "name": m.name, "applicationsRemaining": m.applications_remaining}
                       for m in self.ranked],
        }


@dataclass(frozen=True)
class MonthlyRollup:
    month: int
    revenue: int
    expenses: int

    @property
    def label(self) -> str:
        return MONTH_LABELS[self.month - 1]

    @property
    def profit(self) -> int:
        return self.revenue - self.expenses

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "label": self.label,
            "revenue": self.revenue,
            "expenses": self.expenses,
            "profit": self.profit,
        }


# -----------------
# Helpers
# -----------------

def status_value(status) -> str:
    return status.value if isinstance(status, ApplicationStatus) else status


def _int_or_zero(val) -> int:
    return int(val) if val is not None else 0


def _round1(value: Decimal) -> float:
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> float:
    """``part / whole * 100`` rounded half-up to one decimal; 0 when whole is 0."""
    if not whole:
        return 0.0
    return _round1(Decimal(part) * 100 / Decimal(whole))


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    total = sum((Decimal(str(v)) for v in values), Decimal(0))
    return _round1(total / len(values))


def has_recent_activity(dates: Iterable[date], today: date, lookback_days: int) -> bool:
    cutoff = today - timedelta(days=lookback_days)
    return any(d is not None and d >= cutoff for d in dates)


def classify_priority(applications_remaining: Optional[int], recent_activity: bool) -> Priority:
    remaining = _int_or_zero(applications_remaining)
    if remaining <= HIGH_QUOTA_THRESHOLD:
        return Priority.HIGH
    if remaining <= MEDIUM_QUOTA_THRESHOLD and not recent_activity:
        return Priority.HIGH
    if remaining <= MEDIUM_QUOTA_THRESHOLD or not recent_activity:
        return Priority.MEDIUM
    return Priority.LOW


# -----------------
# Per-client metrics
# -----------------

def compute_client_metrics(client: ClientSnapshot, *, today: date,
                           settings: AnalyticsSettings) -> ClientMetrics:
    apps = client.applications
    statuses = [status_value(a.status) for a in apps]
    total = len(apps)
    in_progress = sum(1 for s in statuses if s in IN_PROGRESS_STATUSES)
    interviews = sum(1 for s in statuses if s in INTERVIEW_STATUSES)
    hired = statuses.count(ApplicationStatus.HIRED.value)
    rejected = statuses.count(ApplicationStatus.REJECTED.value)

    dates = [a.date_applied for a in apps if a.date_applied is not None]
    recent = has_recent_activity(dates, today, settings.lookback_days)

    employees: dict[int, str] = {}
    for a in apps:
        if a.employee_id is not None and a.employee_id not in employees:
            employees[a.employee_id] = a.employee_name or ""

    remaining = _int_or_zero(client.applications_remaining)
    return ClientMetrics(
        id=client.id,
        name=client.name,
        company=client.company,
        applications_remaining=remaining,
        amount_paid=_int_or_zero(client.amount_paid),
        amount_due=_int_or_zero(client.amount_due),
        total_applications=total,
        in_progress=in_progress,
        interviews=interviews,
        hired=hired,
        rejected=rejected,
        rejection_rate=percentage(rejected, total),
        success_rate=percentage(hired, total),
        priority=classify_priority(remaining, recent),
        last_applied_at=max(dates) if dates else None,
        assigned_employees=tuple(employees.items()),
    )


def compute_all(clients: Iterable[ClientSnapshot], *, today: date,
                settings: AnalyticsSettings) -> list[ClientMetrics]:
    return [compute_client_metrics(c, today=today, settings=settings) for c in clients]


# -----------------
# Portfolio
# -----------------

def rank_by_remaining(metrics: Iterable[ClientMetrics]) -> list[ClientMetrics]:
    # sorted() is stable with reverse=True, equal quotas keep input order
    return sorted(metrics, key=lambda m: m.applications_remaining, reverse=True)


def summarize_portfolio(metrics: Sequence[ClientMetrics]) -> PortfolioSummary:
    return PortfolioSummary(
        total_clients=len(metrics),
        high_priority_count=sum(1 for m in metrics if m.priority is Priority.HIGH),
        total_applications_remaining=sum(m.applications_remaining for m in metrics),
        average_success_rate=mean([m.success_rate for m in metrics]),
        average_rejection_rate=mean([m.rejection_rate for m in metrics]),
        total_revenue=sum(m.amount_paid for m in metrics),
        total_due=sum(m.amount_due for m in metrics),
        ranked=tuple(rank_by_remaining(metrics)),
    )


def split_evenly(total: int, parts: int = 12) -> list[int]:
    """Integer split of ``total`` cents; the remainder goes to the earliest parts."""
    base, extra = divmod(int(total), parts)
    return [base + (1 if i < extra else 0) for i in range(parts)]


def monthly_rollups(total_revenue: int, expenses_by_month: Mapping[int, int]) -> list[MonthlyRollup]:
    # Payments carry no transaction date, so revenue is spread evenly over the year.
    revenue = split_evenly(total_revenue, 12)
    return [
        MonthlyRollup(month=m, revenue=revenue[m - 1], expenses=int(expenses_by_month.get(m, 0)))
        for m in range(1, 13)
    ]


def financial_overview(summary: PortfolioSummary, *, year: int,
                       expenses_by_month: Mapping[int, int],
                       employee_earnings: Mapping[int, int] | None = None,
                       employee_names: Mapping[int, str] | None = None,
                       top: int = 5) -> dict:
    total_expenses = sum(int(v) for v in expenses_by_month.values())
    net_profit = summary.total_revenue - total_expenses
    margin = percentage(net_profit, summary.total_revenue) if summary.total_revenue > 0 else 0.0

    paying = [m for m in summary.ranked if m.amount_paid > 0]
    top_clients = sorted(paying, key=lambda m: m.amount_paid, reverse=True)[:top]
    names = employee_names or {}
    earners = sorted(((eid, cents) for eid, cents in (employee_earnings or {}).items() if cents > 0),
                     key=lambda item: item[1], reverse=True)[:top]

    return {
        "year": year,
        "totalRevenue": summary.total_revenue,
        "totalDue": summary.total_due,
        "totalExpenses": total_expenses,
        "netProfit": net_profit,
        "profitMargin": margin,
        "months": [r.to_dict() for r in monthly_rollups(summary.total_revenue, expenses_by_month)],
        "revenueByClient": [{"id": m.id, "name": m.name, "amount": m.amount_paid} for m in top_clients],
        "expensesByEmployee": [{"id": eid, "name": names.get(eid, f"Employee {eid}"), "amount": cents}
                               for eid, cents in earners],
    }
