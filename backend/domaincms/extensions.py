from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_caching import Cache

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
cache = Cache()


@jwt.user_lookup_loader
def load_user(_jwt_header, jwt_data):
    """flask-jwt-extended user loader; identity is the user id."""
    from domaincms.models.user import User
    return db.session.get(User, jwt_data["sub"])


def _jwt_error(message, status_code):
    from domaincms.errors import error_response
    return error_response(message, status_code)


@jwt.unauthorized_loader
def missing_token(reason):
    return _jwt_error("Authentication required", 401)


@jwt.invalid_token_loader
def invalid_token(reason):
    return _jwt_error("Invalid token", 401)


@jwt.expired_token_loader
def expired_token(_jwt_header, _jwt_data):
    return _jwt_error("Token has expired", 401)


@jwt.user_lookup_error_loader
def unknown_user(_jwt_header, _jwt_data):
    return _jwt_error("User not found", 401)
