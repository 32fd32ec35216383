from flask import Blueprint

applications_bp = Blueprint("applications", __name__)

# Import route modules to register their endpoints
from . import routes       # noqa: E402,F401
from . import bulk         # noqa: E402,F401
