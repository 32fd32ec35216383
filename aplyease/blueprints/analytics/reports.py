# aplyease/blueprints/analytics/reports.py
"""Portfolio, financial and payout reports built on the pure analytics layer."""
from flask import jsonify, abort, request
from flask_login import login_required, current_user

from ...extensions import db
from ...models.user import User
from ...security import roles_required, can_view_client, can_view_employee
from ...services.analytics import compute_all, summarize_portfolio, financial_overview as build_overview
from ...services.currency import money_dict
from ...services.payouts import monthly_payout as build_monthly, expenses_by_month, total_payout_cents
from ...services.snapshots import load_client_snapshots, load_employees, application_dates_by_employee
from ...services.stats import employee_performance as perf, daily_employee_analytics, rejection_stats
from ..utils import today, analytics_settings, payout_rates, month_year_args, _to_int
from . import analytics_bp


@analytics_bp.get("/analytics/client-performance")
@login_required
@roles_required("admin", "employee")
def client_performance():
    settings = analytics_settings()
    metrics = compute_all(load_client_snapshots(), today=today(), settings=settings)
    summary = summarize_portfolio(metrics)

    clients = []
    for m in metrics:
        row = m.to_dict()
        row["amountPaidDisplay"] = money_dict(m.amount_paid, settings.usd_to_inr)
        row["amountDueDisplay"] = money_dict(m.amount_due, settings.usd_to_inr)
        clients.append(row)

    portfolio = summary.to_dict()
    portfolio["totalRevenueDisplay"] = money_dict(summary.total_revenue, settings.usd_to_inr)
    portfolio["totalDueDisplay"] = money_dict(summary.total_due, settings.usd_to_inr)
    return jsonify(clients=clients, summary=portfolio, lookbackDays=settings.lookback_days)


@analytics_bp.get("/analytics/financial-overview")
@login_required
@roles_required("admin")
def financial_overview():
    now = today()
    year = _to_int(request.args.get("year")) or now.year
    settings = analytics_settings()
    rates = payout_rates()

    summary = summarize_portfolio(compute_all(load_client_snapshots(), today=now, settings=settings))
    dates = application_dates_by_employee()
    names = {e.id: e.name for e in load_employees()}
    earnings = {employee_id: total_payout_cents((d for d in ds if d.year == year), rates)
                for employee_id, ds in dates.items()}

    data = build_overview(summary, year=year,
                          expenses_by_month=expenses_by_month(dates, year=year, rates=rates),
                          employee_earnings=earnings, employee_names=names)
    data["rates"] = rates.to_dict()
    data["usdToInr"] = settings.usd_to_inr
    return jsonify(data)


@analytics_bp.get("/analytics/monthly-payout")
@login_required
@roles_required("admin")
def monthly_payout():
    month, year = month_year_args(today())
    rates = payout_rates()
    employees = load_employees()
    dates = application_dates_by_employee([e.id for e in employees])

    payouts = [build_monthly(e.id, e.name, dates.get(e.id, []), year=year, month=month, rates=rates)
               for e in employees]
    return jsonify(
        month=month,
        year=year,
        rates=rates.to_dict(),
        totalApplications=sum(p.total_applications for p in payouts),
        totalPayout=sum(p.total_payout_cents for p in payouts),
        employees=[p.to_dict(with_days=False) for p in payouts],
    )


@analytics_bp.get("/analytics/employee-daily-payout/<int:employee_id>")
@login_required
def employee_daily_payout(employee_id):
    if not can_view_employee(current_user, employee_id):
        abort(403)
    e = db.session.get(User, employee_id)
    if e is None or not e.is_employee:
        abort(404)
    month, year = month_year_args(today())
    dates = application_dates_by_employee([employee_id]).get(employee_id, [])
    return jsonify(build_monthly(e.id, e.name, dates, year=year, month=month, rates=payout_rates()).to_dict())


@analytics_bp.get("/analytics/employee-performance")
@login_required
@roles_required("admin")
def employee_performance():
    return jsonify(perf(today=today(), rates=payout_rates()))


@analytics_bp.get("/analytics/daily-employee-applications")
@login_required
@roles_required("admin")
def daily_employee_applications():
    return jsonify(daily_employee_analytics(today=today()))


@analytics_bp.get("/analytics/rejection-rate/client/<int:client_id>")
@login_required
def client_rejection_rate(client_id):
    if not can_view_client(current_user, client_id):
        abort(403)
    return jsonify(rejection_stats(client_id=client_id))


@analytics_bp.get("/analytics/rejection-rate/employee/<int:employee_id>")
@login_required
def employee_rejection_rate(employee_id):
    if not can_view_employee(current_user, employee_id):
        abort(403)
    return jsonify(rejection_stats(employee_id=employee_id))
