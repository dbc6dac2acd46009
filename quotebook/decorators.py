"""Role-based access control decorators."""
from functools import wraps
from flask import abort
from flask_login import current_user


def role_required(*roles):
    """Require user to have one of the given roles."""
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in roles:
                abort(403)
            return f(*args, **kwargs)
        return wrapped
    return decorator


def editor_required(f):
    """Viewers may read but not create or change quotes, invoices or payments."""
    return role_required('admin', 'manager', 'user')(f)


def settings_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.can_manage_settings():
            abort(403)
        return f(*args, **kwargs)
    return wrapped
