from flask import request, jsonify
from flask_jwt_extended import current_user
from sqlalchemy import or_

from domaincms.application.cms.users import create_user, delete_user, get_user, update_user
from domaincms.models.user import User
from domaincms.normalizers.pagination import normalize_pagination
from domaincms.normalizers.user import normalize_user
from domaincms.utils.decorators import admin_required
from domaincms.utils.pagination import page_args, paginate_query
from domaincms.utils.validators import get_json_body, parse_bool
from . import api_bp


@api_bp.route("/admin/users", methods=["GET"])
@admin_required
def list_users():
    page, per_page = page_args(size_param="limit")
    query = User.query

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.email.ilike(pattern), User.name.ilike(pattern)))

    status = request.args.get("status", "all")
    if status == "active":
        query = query.filter(User.is_active.is_(True))
    elif status == "inactive":
        query = query.filter(User.is_active.is_(False))

    pagination = paginate_query(query.order_by(User.created_at.desc()), page=page, per_page=per_page)

    payload = normalize_pagination(
        pagination.items,
        normalize_user,
        page=page,
        per_page=per_page,
        total=pagination.total,
        items_key="users",
        size_key="limit",
    )
    payload["success"] = True
    return jsonify(payload), 200


@api_bp.route("/admin/users", methods=["POST"])
@admin_required
def create_user_route():
    user = create_user(data=get_json_body(request), actor_id=current_user.id)
    return jsonify({
        "success": True,
        "message": "User created successfully",
        "user": normalize_user(user),
    }), 201


@api_bp.route("/admin/users/<user_id>", methods=["GET"])
@admin_required
def get_user_route(user_id):
    return jsonify({"success": True, "user": normalize_user(get_user(user_id))}), 200


@api_bp.route("/admin/users/<user_id>", methods=["PUT"])
@admin_required
def update_user_route(user_id):
    user = update_user(user_id=user_id, data=get_json_body(request), actor_id=current_user.id)
    return jsonify({
        "success": True,
        "message": "User updated successfully",
        "user": normalize_user(user),
    }), 200


@api_bp.route("/admin/users/<user_id>", methods=["DELETE"])
@admin_required
def delete_user_route(user_id):
    hard = parse_bool(request.args.get("hard"))
    delete_user(user_id=user_id, actor_id=current_user.id, hard=hard)
    return jsonify({
        "success": True,
        "message": "User deleted successfully" if hard else "User deactivated successfully",
    }), 200
