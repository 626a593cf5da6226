from flask import request, jsonify

from domaincms.application.cms.update_page import get_page
from domaincms.application.cms.update_sections import update_sections
from domaincms.domain.sections import load_sections, unorganized_page_ids
from domaincms.errors import ValidationError
from domaincms.models.page import Page
from domaincms.normalizers.page import normalize_page_summary
from domaincms.utils.validators import get_json_body
from domaincms.utils.decorators import admin_required
from . import api_bp


def _sections_payload(page):
    children = (
        Page.query.filter_by(parent_id=page.id)
        .order_by(Page.order.asc(), Page.title.asc())
        .all()
    )
    sections = load_sections(page.sections)
    by_id = {child.id: child for child in children}
    leftover = unorganized_page_ids([child.id for child in children], sections)

    return {
        "success": True,
        "page": {
            "id": page.id,
            "title": page.title,
            "slug": page.slug,
            "contentType": page.content_type,
            "domainId": page.domain_id,
        },
        "sections": [section.to_dict() for section in sections],
        "childPages": [normalize_page_summary(child) for child in children],
        "unorganizedPages": [normalize_page_summary(by_id[cid]) for cid in leftover],
    }


@api_bp.route("/admin/sections/<page_id>", methods=["GET"])
@admin_required
def get_sections(page_id):
    page = get_page(page_id)
    if page.content_type != "section_based":
        raise ValidationError("Sections can only be configured on section-based pages")
    return jsonify(_sections_payload(page)), 200


@api_bp.route("/admin/sections/<page_id>", methods=["PUT"])
@admin_required
def put_sections(page_id):
    data = get_json_body(request)
    page = update_sections(page_id=page_id, sections=data.get("sections"))

    payload = _sections_payload(page)
    payload["message"] = "Sections updated successfully"
    return jsonify(payload), 200
