# aplyease/security.py
from functools import wraps
from flask import abort
from flask_login import current_user


def roles_required(*roles):
    """Allow the view only for authenticated users whose role is in ``roles``.

    Stack under ``@login_required`` so anonymous users get 401 first.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in roles:
                abort(403)
            return view_func(*args, **kwargs)
        return _wrapped_view
    return decorator


def can_view_client(user, client_id: int) -> bool:
    if user.role in ("admin", "employee"):
        return True
    return user.role == "client" and user.id == client_id


def can_view_employee(user, employee_id: int) -> bool:
    return user.role == "admin" or (user.role == "employee" and user.id == employee_id)
