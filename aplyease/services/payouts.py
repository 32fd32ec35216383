# aplyease/services/payouts.py
"""Employee payouts: a per-application rate that depends on the day's volume."""
from __future__ import annotations

import calendar
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping


@dataclass(frozen=True)
class PayoutRates:
    daily_target: int = 15
    base_rate_cents: int = 20
    below_target_rate_cents: int = 15

    @classmethod
    def from_config(cls, config: Mapping) -> "PayoutRates":
        return cls(
            daily_target=int(config.get("PAYOUT_DAILY_TARGET", 15)),
            base_rate_cents=int(config.get("PAYOUT_BASE_RATE_CENTS", 20)),
            below_target_rate_cents=int(config.get("PAYOUT_BELOW_TARGET_RATE_CENTS", 15)),
        )

    def to_dict(self) -> dict:
        return {
            "dailyTarget": self.daily_target,
            "baseRate": self.base_rate_cents,
            "belowTargetRate": self.below_target_rate_cents,
        }


@dataclass(frozen=True)
class DailyPayout:
    day: date
    applications: int
    met_target: bool
    rate_cents: int

    @property
    def payout_cents(self) -> int:
        return self.applications * self.rate_cents

    @property
    def weekday(self) -> str:
        return calendar.day_name[self.day.weekday()]

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "dayOfWeek": self.weekday,
            "applicationsCount": self.applications,
            "metTarget": self.met_target,
            "rateApplied": self.rate_cents,
            "dailyPayout": self.payout_cents,
        }


@dataclass(frozen=True)
class MonthlyPayout:
    employee_id: int
    employee_name: str
    year: int
    month: int
    days: tuple[DailyPayout, ...]
    rates: PayoutRates

    @property
    def total_applications(self) -> int:
        return sum(d.applications for d in self.days)

    @property
    def total_payout_cents(self) -> int:
        return sum(d.payout_cents for d in self.days)

    @property
    def days_met_target(self) -> int:
        return sum(1 for d in self.days if d.met_target)

    @property
    def working_days(self) -> int:
        return len(self.days)

    def to_dict(self, *, with_days: bool = True) -> dict:
        data = {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "monthYear": f"{calendar.month_name[self.month]} {self.year}",
            "monthlyTotal": {
                "totalApplications": self.total_applications,
                "totalPayout": self.total_payout_cents,
                "daysMetTarget": self.days_met_target,
                "totalWorkingDays": self.working_days,
            },
            "rates": self.rates.to_dict(),
        }
        if with_days:
            data["dailyBreakdown"] = [d.to_dict() for d in self.days]
        return data


def payout_for_day(day: date, applications: int, rates: PayoutRates) -> DailyPayout:
    met = applications >= rates.daily_target
    rate = rates.base_rate_cents if met else rates.below_target_rate_cents
    return DailyPayout(day=day, applications=applications, met_target=met, rate_cents=rate)


def daily_breakdown(dates: Iterable[date], rates: PayoutRates) -> list[DailyPayout]:
    """One entry per day that has at least one application, oldest first."""
    counts = Counter(d for d in dates if d is not None)
    return [payout_for_day(day, counts[day], rates) for day in sorted(counts)]


def total_payout_cents(dates: Iterable[date], rates: PayoutRates) -> int:
    return sum(d.payout_cents for d in daily_breakdown(dates, rates))


def monthly_payout(employee_id: int, employee_name: str, dates: Iterable[date], *,
                   year: int, month: int, rates: PayoutRates) -> MonthlyPayout:
    in_month = [d for d in dates if d is not None and d.year == year and d.month == month]
    return MonthlyPayout(
        employee_id=employee_id,
        employee_name=employee_name,
        year=year,
        month=month,
        days=tuple(daily_breakdown(in_month, rates)),
        rates=rates,
    )


def expenses_by_month(dates_by_employee: Mapping[int, Iterable[date]], *, year: int,
                      rates: PayoutRates) -> dict[int, int]:
    """Total payout in cents for every month of ``year`` across all employees."""
    totals = {m: 0 for m in range(1, 13)}
    for dates in dates_by_employee.values():
        for day in daily_breakdown((d for d in dates if d is not None and d.year == year), rates):
            totals[day.day.month] += day.payout_cents
    return totals
