from flask import request, jsonify
from domaincms.application.cms.categories import (
    category_domain_counts,
    create_category,
    delete_category,
    get_category,
    update_category,
)
from domaincms.models.category import DomainCategory
from domaincms.normalizers.category import normalize_category
from domaincms.utils.decorators import admin_required
from domaincms.utils.validators import get_json_body
from . import api_bp


def _with_counts(category, counts):
    total, published = counts.get(category.id, (0, 0))
    return normalize_category(category, domain_count=total, published_domains=published)


@api_bp.route("/admin/categories", methods=["GET"])
@admin_required
def list_categories():
    categories = DomainCategory.query.order_by(
        DomainCategory.column_position.asc(),
        DomainCategory.category_order.asc(),
    ).all()
    counts = category_domain_counts()

    return jsonify({
        "success": True,
        "categories": [_with_counts(category, counts) for category in categories],
    }), 200


@api_bp.route("/admin/categories", methods=["POST"])
@admin_required
def create_category_route():
    category = create_category(data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Category created successfully",
        "category": normalize_category(category, domain_count=0, published_domains=0),
    }), 201


@api_bp.route("/admin/categories/<category_id>", methods=["GET"])
@admin_required
def get_category_route(category_id):
    category = get_category(category_id)
    return jsonify({
        "success": True,
        "category": _with_counts(category, category_domain_counts()),
    }), 200


@api_bp.route("/admin/categories/<category_id>", methods=["PUT"])
@admin_required
def update_category_route(category_id):
    category = update_category(category_id=category_id, data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Category updated successfully",
        "category": _with_counts(category, category_domain_counts()),
    }), 200


@api_bp.route("/admin/categories/<category_id>", methods=["DELETE"])
@admin_required
def delete_category_route(category_id):
    delete_category(category_id=category_id)
    return jsonify({
        "success": True,
        "message": "Category deleted successfully",
    }), 200
