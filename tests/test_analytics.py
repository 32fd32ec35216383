from datetime import date, timedelta

import pytest

from aplyease.services.analytics import (
    AnalyticsSettings, ApplicationRecord, ClientSnapshot, Priority,
    classify_priority, compute_client_metrics, financial_overview, has_recent_activity,
    mean, monthly_rollups, percentage, rank_by_remaining, split_evenly, summarize_portfolio,
)

TODAY = date(2025, 6, 15)
SETTINGS = AnalyticsSettings(lookback_days=14)


def _apps(*pairs, when=TODAY):
    out = []
    for status, count in pairs:
        out.extend(ApplicationRecord(status=status, date_applied=when, employee_id=1, employee_name="Sam")
                   for _ in range(count))
    return tuple(out)


def _client(cid=1, remaining=8, apps=(), **kw):
    return ClientSnapshot(id=cid, name=f"Client {cid}", applications_remaining=remaining, applications=apps, **kw)


def test_mixed_client_metrics():
    apps = _apps(("Hired", 3), ("Rejected", 2), ("Interview", 1), ("Applied", 4))
    m = compute_client_metrics(_client(apps=apps), today=TODAY, settings=SETTINGS)
    assert m.total_applications == 10
    assert m.success_rate == 30.0
    assert m.rejection_rate == 20.0
    assert m.in_progress == 4
    assert m.interviews == 1
    assert m.hired == 3
    assert m.rejected == 2
    assert m.priority is Priority.LOW


@pytest.mark.parametrize("when", [TODAY, TODAY - timedelta(days=60)])
def test_two_remaining_is_high_regardless_of_activity(when):
    apps = _apps(("Hired", 3), ("Rejected", 2), ("Interview", 1), ("Applied", 4), when=when)
    m = compute_client_metrics(_client(remaining=2, apps=apps), today=TODAY, settings=SETTINGS)
    assert m.priority is Priority.HIGH


def test_empty_client_has_zero_rates_and_high_priority():
    m = compute_client_metrics(_client(remaining=0), today=TODAY, settings=SETTINGS)
    assert m.total_applications == 0
    assert m.success_rate == 0
    assert m.rejection_rate == 0
    assert m.priority is Priority.HIGH
    assert m.last_applied_at is None


def test_missing_billing_fields_default_to_zero():
    m = compute_client_metrics(ClientSnapshot(id=7, name="Legacy"), today=TODAY, settings=SETTINGS)
    assert m.applications_remaining == 0
    assert m.amount_paid == 0
    assert m.amount_due == 0
    assert m.priority is Priority.HIGH


def test_buckets_never_exceed_total():
    apps = _apps(("Applied", 2), ("Screening", 1), ("On Hold", 3), ("Interview", 1),
                 ("Offer", 2), ("Hired", 1), ("Rejected", 4))
    m = compute_client_metrics(_client(apps=apps), today=TODAY, settings=SETTINGS)
    assert m.in_progress == 6
    assert m.interviews == 3
    assert m.in_progress + m.interviews + m.hired + m.rejected == m.total_applications


def test_assigned_employees_in_first_seen_order():
    apps = (
        ApplicationRecord("Applied", TODAY, 5, "Zoe"),
        ApplicationRecord("Applied", TODAY, 2, "Ann"),
        ApplicationRecord("Applied", TODAY, 5, "Zoe"),
    )
    m = compute_client_metrics(_client(apps=apps), today=TODAY, settings=SETTINGS)
    assert m.assigned_employees == ((5, "Zoe"), (2, "Ann"))
    assert m.to_dict()["assignedEmployees"] == [{"id": 5, "name": "Zoe"}, {"id": 2, "name": "Ann"}]


@pytest.mark.parametrize("remaining,recent,expected", [
    (0, True, Priority.HIGH),
    (2, True, Priority.HIGH),
    (3, True, Priority.MEDIUM),
    (5, True, Priority.MEDIUM),
    (5, False, Priority.HIGH),
    (6, False, Priority.MEDIUM),
    (6, True, Priority.LOW),
    (None, True, Priority.HIGH),
    (-3, False, Priority.HIGH),
])
def test_classify_priority(remaining, recent, expected):
    assert classify_priority(remaining, recent) is expected


def test_priority_is_total():
    for remaining in range(-5, 50):
        for recent in (True, False):
            assert classify_priority(remaining, recent) in set(Priority)


def test_activity_window_boundaries():
    assert has_recent_activity([TODAY - timedelta(days=14)], TODAY, 14)
    assert not has_recent_activity([TODAY - timedelta(days=15)], TODAY, 14)
    assert has_recent_activity([TODAY + timedelta(days=3)], TODAY, 14)
    assert not has_recent_activity([], TODAY, 14)


def test_lookback_is_configurable():
    apps = _apps(("Applied", 1), when=TODAY - timedelta(days=20))
    client = _client(remaining=10, apps=apps)
    assert compute_client_metrics(client, today=TODAY, settings=SETTINGS).priority is Priority.MEDIUM
    wide = AnalyticsSettings(lookback_days=30)
    assert compute_client_metrics(client, today=TODAY, settings=wide).priority is Priority.LOW


@pytest.mark.parametrize("part,whole,expected", [(1, 8, 12.5), (1, 3, 33.3), (2, 3, 66.7), (0, 0, 0.0), (5, 0, 0.0)])
def test_percentage_rounds_half_up(part, whole, expected):
    assert percentage(part, whole) == expected


def test_empty_portfolio():
    s = summarize_portfolio([])
    assert s.total_clients == 0
    assert s.average_success_rate == 0
    assert s.average_rejection_rate == 0
    assert s.total_revenue == 0
    assert s.ranked == ()


def test_portfolio_totals():
    a = compute_client_metrics(_client(1, remaining=1, amount_paid=5000, amount_due=100,
                                       apps=_apps(("Hired", 1), ("Rejected", 1))),
                               today=TODAY, settings=SETTINGS)
    b = compute_client_metrics(_client(2, remaining=20, amount_paid=2500, apps=_apps(("Applied", 2))),
                               today=TODAY, settings=SETTINGS)
    s = summarize_portfolio([a, b])
    assert s.total_clients == 2
    assert s.high_priority_count == 1
    assert s.total_applications_remaining == 21
    assert s.average_success_rate == 25.0
    assert s.total_revenue == 7500
    assert s.total_due == 100
    assert [m.id for m in s.ranked] == [2, 1]


def test_mean_rounds_to_one_decimal():
    assert mean([33.3, 66.7, 0.0]) == 33.3
    assert mean([]) == 0.0


def test_rank_by_remaining_is_stable():
    metrics = [compute_client_metrics(_client(cid, remaining=r), today=TODAY, settings=SETTINGS)
               for cid, r in [(1, 5), (2, 9), (3, 5), (4, 9), (5, 0)]]
    assert [m.id for m in rank_by_remaining(metrics)] == [2, 4, 1, 3, 5]


@pytest.mark.parametrize("total", [0, 11, 100, 123457, 1200])
def test_split_evenly_sums_to_total(total):
    parts = split_evenly(total)
    assert len(parts) == 12
    assert sum(parts) == total
    assert max(parts) - min(parts) <= 1


def test_split_remainder_goes_to_earliest_months():
    assert split_evenly(100) == [9, 9, 9, 9] + [8] * 8


def test_monthly_rollups_and_overview():
    expenses = {1: 300, 2: 150}
    rollups = monthly_rollups(1200, expenses)
    assert [r.revenue for r in rollups] == [100] * 12
    assert rollups[0].profit == -200
    assert rollups[0].label == "Jan"

    m = compute_client_metrics(_client(1, amount_paid=1200), today=TODAY, settings=SETTINGS)
    data = financial_overview(summarize_portfolio([m]), year=2025, expenses_by_month=expenses,
                              employee_earnings={3: 450, 4: 0, 5: 200},
                              employee_names={3: "Sam", 4: "Idle", 5: "Sam"})
    assert data["totalRevenue"] == 1200
    assert data["totalExpenses"] == 450
    assert data["netProfit"] == 750
    assert data["profitMargin"] == 62.5
    assert sum(month["revenue"] for month in data["months"]) == 1200
    assert data["revenueByClient"] == [{"id": 1, "name": "Client 1", "amount": 1200}]
    assert data["expensesByEmployee"] == [{"id": 3, "name": "Sam", "amount": 450},
                                         {"id": 5, "name": "Sam", "amount": 200}]


def test_overview_without_revenue_has_zero_margin():
    data = financial_overview(summarize_portfolio([]), year=2025, expenses_by_month={3: 100})
    assert data["netProfit"] == -100
    assert data["profitMargin"] == 0.0
