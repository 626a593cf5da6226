from flask import request, jsonify

from domaincms.application.cms.rich_text import (
    delete_rich_text,
    get_rich_text,
    save_rich_text,
    update_rich_text,
)
from domaincms.models.page import Page
from domaincms.models.rich_text import RichTextContent
from domaincms.normalizers.rich_text import normalize_rich_text
from domaincms.utils.decorators import admin_required
from domaincms.utils.validators import get_json_body
from . import api_bp


@api_bp.route("/admin/rich-text", methods=["GET"])
@admin_required
def list_rich_text():
    query = RichTextContent.query.join(Page, RichTextContent.page_id == Page.id)

    domain_id = request.args.get("domainId")
    if domain_id:
        query = query.filter(Page.domain_id == domain_id)

    contents = query.order_by(RichTextContent.updated_at.desc()).all()
    return jsonify({
        "success": True,
        "contents": [normalize_rich_text(content, include_html=False) for content in contents],
    }), 200


@api_bp.route("/admin/rich-text", methods=["POST"])
@admin_required
def save_rich_text_route():
    content = save_rich_text(data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Rich text content saved successfully",
        "content": normalize_rich_text(content),
    }), 200


@api_bp.route("/admin/rich-text/<page_id>", methods=["GET"])
@admin_required
def get_rich_text_route(page_id):
    return jsonify({"success": True, "content": normalize_rich_text(get_rich_text(page_id))}), 200


@api_bp.route("/admin/rich-text/<page_id>", methods=["PUT"])
@admin_required
def update_rich_text_route(page_id):
    content = update_rich_text(page_id=page_id, data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Rich text content updated successfully",
        "content": normalize_rich_text(content),
    }), 200


@api_bp.route("/admin/rich-text/<page_id>", methods=["DELETE"])
@admin_required
def delete_rich_text_route(page_id):
    delete_rich_text(page_id=page_id)
    return jsonify({"success": True, "message": "Rich text content deleted successfully"}), 200
