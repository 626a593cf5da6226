from typing import Any, Dict

from flask import current_app

from domaincms.errors import ValidationError, NotFound, Conflict, Forbidden
from domaincms.extensions import db
from domaincms.models.user import User
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_fields, require_string, validate_email, parse_bool

MIN_PASSWORD_LENGTH = 8


def _check_password(password):
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def create_user(*, data: Dict[str, Any], actor_id: str = None) -> User:
    require_fields(data, "email", "name", "password")
    email = validate_email(data["email"])
    _check_password(data["password"])

    if User.query.filter_by(email=email).first():
        raise Conflict("A user with this email already exists")

    user = User()
    user.email = email
    user.name = require_string(data["name"], "Name")
    user.is_admin = parse_bool(data.get("isAdmin"), default=True)
    user.is_active = parse_bool(data.get("isActive"), default=True)
    user.created_by = actor_id
    user.set_password(data["password"])

    with transactional():
        db.session.add(user)

    current_app.logger.info("User created: %s", email)
    return user


def update_user(*, user_id: str, data: Dict[str, Any], actor_id: str) -> User:
    """
    Update a user.

    An admin cannot deactivate themselves or drop their own admin flag.
    """
    user = get_user(user_id)

    if user.id == actor_id:
        if "isActive" in data and not parse_bool(data["isActive"], default=True):
            raise Forbidden("You cannot deactivate your own account")
        if "isAdmin" in data and not parse_bool(data["isAdmin"], default=True):
            raise Forbidden("You cannot remove your own admin privileges")

    email = None
    if "email" in data:
        email = validate_email(data["email"])
        if User.query.filter(User.email == email, User.id != user.id).first():
            raise Conflict("A user with this email already exists")

    name = None
    if "name" in data:
        name = require_string(data["name"], "Name")

    if data.get("password"):
        _check_password(data["password"])

    with transactional():
        if email is not None:
            user.email = email
        if name is not None:
            user.name = name
        if "isAdmin" in data:
            user.is_admin = parse_bool(data["isAdmin"])
        if "isActive" in data:
            user.is_active = parse_bool(data["isActive"])
        if data.get("password"):
            user.set_password(data["password"])

    return user


def delete_user(*, user_id: str, actor_id: str, hard: bool = False) -> User:
    """Deactivate a user, or remove the row entirely with ``hard``."""
    user = get_user(user_id)
    if user.id == actor_id:
        raise Forbidden("You cannot delete your own account")

    with transactional():
        if hard:
            db.session.delete(user)
        else:
            user.is_active = False

    current_app.logger.info("User %s: %s", "deleted" if hard else "deactivated", user_id)
    return user
