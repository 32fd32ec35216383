from datetime import date

from aplyease.services.payouts import (
    PayoutRates, daily_breakdown, expenses_by_month, monthly_payout, payout_for_day, total_payout_cents,
)

RATES = PayoutRates()
DAY = date(2025, 3, 10)


def test_day_above_target_pays_base_rate():
    assert payout_for_day(DAY, 25, RATES).payout_cents == 500


def test_day_below_target_pays_reduced_rate():
    p = payout_for_day(DAY, 14, RATES)
    assert not p.met_target
    assert p.rate_cents == 15
    assert p.payout_cents == 210


def test_target_is_inclusive():
    p = payout_for_day(DAY, 15, RATES)
    assert p.met_target
    assert p.payout_cents == 300


def test_each_day_is_rated_separately():
    dates = [date(2025, 3, 10)] * 20 + [date(2025, 3, 11)] * 10
    days = daily_breakdown(dates, RATES)
    assert [d.day for d in days] == [date(2025, 3, 10), date(2025, 3, 11)]
    assert [d.payout_cents for d in days] == [400, 150]
    assert total_payout_cents(dates, RATES) == 550


def test_monthly_total_is_sum_of_days():
    dates = ([date(2025, 3, 3)] * 16 + [date(2025, 3, 4)] * 3 + [date(2025, 4, 1)] * 30)
    mp = monthly_payout(7, "Sam", dates, year=2025, month=3, rates=RATES)
    assert mp.total_applications == 19
    assert mp.total_payout_cents == sum(d.payout_cents for d in mp.days) == 16 * 20 + 3 * 15
    assert mp.days_met_target == 1
    assert mp.working_days == 2

    data = mp.to_dict()
    assert data["monthYear"] == "March 2025"
    assert data["monthlyTotal"]["totalPayout"] == 365
    assert data["dailyBreakdown"][0]["dayOfWeek"] == "Monday"
    assert "dailyBreakdown" not in mp.to_dict(with_days=False)


def test_custom_rates_from_config():
    rates = PayoutRates.from_config({"PAYOUT_DAILY_TARGET": "10", "PAYOUT_BASE_RATE_CENTS": "30",
                                     "PAYOUT_BELOW_TARGET_RATE_CENTS": "10"})
    assert payout_for_day(DAY, 10, rates).payout_cents == 300
    assert payout_for_day(DAY, 9, rates).payout_cents == 90


def test_expenses_by_month_across_employees():
    dates = {
        1: [date(2025, 1, 5)] * 15,
        2: [date(2025, 1, 5)] * 2 + [date(2025, 2, 1)] * 4 + [date(2024, 12, 31)] * 50,
    }
    totals = expenses_by_month(dates, year=2025, rates=RATES)
    assert set(totals) == set(range(1, 13))
    assert totals[1] == 15 * 20 + 2 * 15
    assert totals[2] == 4 * 15
    assert totals[12] == 0
