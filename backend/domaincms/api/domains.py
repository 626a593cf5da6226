from flask import request, jsonify
from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from domaincms.application.cms.domains import (
    create_domain,
    delete_domain,
    get_domain,
    page_counts_by_domain,
    patch_domain,
    update_domain,
)
from domaincms.errors import ValidationError
from domaincms.models.domain import Domain, PAGE_TYPES
from domaincms.normalizers.domain import normalize_domain
from domaincms.utils.decorators import admin_required
from domaincms.utils.validators import get_json_body
from . import api_bp


@api_bp.route("/admin/domains", methods=["GET"])
@admin_required
def list_domains():
    query = Domain.query.options(joinedload(Domain.category))

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Domain.name.ilike(pattern), Domain.slug.ilike(pattern)))

    category = request.args.get("category")
    if category == "uncategorized":
        query = query.filter(Domain.category_id.is_(None))
    elif category:
        query = query.filter(Domain.category_id == category)

    status = request.args.get("status")
    if status == "published":
        query = query.filter(Domain.is_published.is_(True))
    elif status == "draft":
        query = query.filter(Domain.is_published.is_(False))

    page_type = request.args.get("pageType")
    if page_type:
        if page_type not in PAGE_TYPES:
            raise ValidationError("Page type must be one of: direct, hierarchical")
        query = query.filter(Domain.page_type == page_type)

    domains = query.order_by(Domain.order_in_category.asc(), Domain.name.asc()).all()
    counts = page_counts_by_domain()

    return jsonify({
        "success": True,
        "domains": [
            normalize_domain(domain, admin=True, page_count=counts.get(domain.id, 0))
            for domain in domains
        ],
        "total": len(domains),
    }), 200


@api_bp.route("/admin/domains", methods=["POST"])
@admin_required
def create_domain_route():
    domain = create_domain(data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Domain created successfully",
        "domain": normalize_domain(domain, admin=True),
    }), 201


@api_bp.route("/admin/domains/<domain_id>", methods=["GET"])
@admin_required
def get_domain_route(domain_id):
    domain = get_domain(domain_id)
    counts = page_counts_by_domain()
    return jsonify({
        "success": True,
        "domain": normalize_domain(domain, admin=True, page_count=counts.get(domain.id, 0)),
    }), 200


@api_bp.route("/admin/domains/<domain_id>", methods=["PUT"])
@admin_required
def update_domain_route(domain_id):
    domain = update_domain(domain_id=domain_id, data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Domain updated successfully",
        "domain": normalize_domain(domain, admin=True),
    }), 200


@api_bp.route("/admin/domains/<domain_id>", methods=["PATCH"])
@admin_required
def patch_domain_route(domain_id):
    domain = patch_domain(domain_id=domain_id, data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Domain updated successfully",
        "domain": normalize_domain(domain, admin=True),
    }), 200


@api_bp.route("/admin/domains/<domain_id>", methods=["DELETE"])
@admin_required
def delete_domain_route(domain_id):
    deleted_pages = delete_domain(domain_id=domain_id)
    return jsonify({
        "success": True,
        "message": "Domain deleted successfully",
        "deletedPages": deleted_pages,
    }), 200
