from flask import request, jsonify
from flask_jwt_extended import (
    create_access_token,
    current_user,
    jwt_required,
    set_access_cookies,
    unset_jwt_cookies,
)
from domaincms.extensions import db
from domaincms.models.base import utc_now
from domaincms.models.user import User
from domaincms.normalizers.user import normalize_user
from domaincms.errors import error_response
from . import api_bp


@api_bp.route("/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return error_response("Invalid request body", 400)

    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str):
        return error_response("Email and password required", 400)

    email = email.strip().lower()
    if not email or not password:
        return error_response("Email and password required", 400)

    user = User.query.filter_by(email=email).first()

    if not user or not user.check_password(password):
        return error_response("Invalid credentials", 401)

    if not user.is_active:
        return error_response("User account disabled", 403)

    user.last_login_at = utc_now()
    db.session.commit()

    access_token = create_access_token(
        identity=user.id,
        additional_claims={
            "is_admin": user.is_admin,
            "is_active": user.is_active,
        },
    )

    response = jsonify({
        "success": True,
        "access_token": access_token,
        "user": normalize_user(user),
    })
    set_access_cookies(response, access_token)
    return response, 200


@api_bp.route("/auth/logout", methods=["POST"])
def logout():
    response = jsonify({"success": True, "message": "Logged out successfully"})
    unset_jwt_cookies(response)
    return response, 200


@api_bp.route("/auth/me", methods=["GET"])
@jwt_required()
def me():
    return jsonify({"success": True, "user": normalize_user(current_user)}), 200
