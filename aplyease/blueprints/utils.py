# aplyease/blueprints/utils.py
from datetime import datetime, date
from typing import Optional

from flask import jsonify, request, current_app

from ..services.analytics import AnalyticsSettings
from ..services.payouts import PayoutRates


# ---- small helpers ----
def _parse_date(val) -> Optional[date]:
    if not val:
        return None
    try:
        return datetime.strptime(str(val), "%Y-%m-%d").date()
    except ValueError:
        return None


def _to_int(val) -> Optional[int]:
    try:
        return int(val) if str(val).strip() else None
    except (TypeError, ValueError):
        return None


def today() -> date:
    return datetime.utcnow().date()


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def id_list(raw) -> list[int]:
    """Distinct positive ints from a JSON list, in the order given."""
    if not isinstance(raw, list):
        return []
    seen, out = set(), []
    for x in raw:
        n = _to_int(x)
        if n and n > 0 and n not in seen:
            seen.add(n)
            out.append(n)
    return out


def form_errors(form, status: int = 400):
    return jsonify(message="Validation error", errors=form.errors), status


def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings.from_config(current_app.config)


def payout_rates() -> PayoutRates:
    return PayoutRates.from_config(current_app.config)


def month_year_args(default: date):
    month = _to_int(request.args.get("month")) or default.month
    year = _to_int(request.args.get("year")) or default.year
    if not 1 <= month <= 12:
        month = default.month
    return month, year


def page_args(default_per_page: int, max_per_page: int = 100):
    """``?page=`` and ``?limit=`` clamped to 1 <= page and 1 <= limit <= max_per_page."""
    page = max(_to_int(request.args.get("page")) or 1, 1)
    per_page = _to_int(request.args.get("limit")) or default_per_page
    return page, min(max(per_page, 1), max_per_page)
