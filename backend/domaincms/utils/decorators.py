from functools import wraps
from flask_jwt_extended import verify_jwt_in_request, current_user
from domaincms.errors import error_response


def admin_required(fn):
    """
    Require a valid JWT belonging to an active admin.

    The user is reloaded from the database on every request so a
    deactivated or demoted admin loses access immediately.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()

        user = current_user
        if user is None or not user.is_active:
            return error_response("Account is inactive", 403)

        if not user.is_admin:
            return error_response("Admin access required", 403)

        return fn(*args, **kwargs)
    return wrapper
