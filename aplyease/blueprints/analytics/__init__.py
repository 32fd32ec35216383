from flask import Blueprint

analytics_bp = Blueprint("analytics", __name__)

from . import stats     # noqa: E402,F401
from . import reports   # noqa: E402,F401
