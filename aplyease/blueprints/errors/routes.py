import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from . import errors_bp

log = logging.getLogger(__name__)


def _error(message, status, **extra):
    return jsonify(message=message, code=status, **extra), status


# 401 – Unauthorized
@errors_bp.app_errorhandler(401)
def err_401(e):
    return _error("Authentication required", 401)

# 403 – Forbidden
@errors_bp.app_errorhandler(403)
def err_403(e):
    return _error("Insufficient permissions", 403)

# 404 – Not Found
@errors_bp.app_errorhandler(404)
def err_404(e):
    return _error("Not found", 404, path=request.path)

# 405 – Method Not Allowed
@errors_bp.app_errorhandler(405)
def err_405(e):
    return _error("Method not allowed", 405)

# CSRF – treated as 400 Bad Request
@errors_bp.app_errorhandler(CSRFError)
def err_csrf(e):
    return _error(e.description or "CSRF token missing or invalid", 400)

# Fallback for uncaught HTTPException
@errors_bp.app_errorhandler(HTTPException)
def err_http(e: HTTPException):
    return _error(e.description or e.name, e.code)

# Last-resort: any other Exception
@errors_bp.app_errorhandler(Exception)
def err_unexpected(e):
    # a failed DB action must not leave the session in a broken transaction
    try:
        db.session.rollback()
    except SQLAlchemyError:
        log.exception("Rollback failed while handling an error")
    log.exception("Unhandled error on %s %s", request.method, request.path)
    return _error("Internal server error", 500)
