from flask import request, jsonify

from domaincms.application.cms.create_page import create_page
from domaincms.application.cms.delete_page import delete_page
from domaincms.application.cms.update_page import get_page, update_page
from domaincms.domain.page_tree import PageTree
from domaincms.errors import ValidationError
from domaincms.models.page import Page
from domaincms.normalizers.page import normalize_page, normalize_page_summary, page_url
from domaincms.utils.decorators import admin_required
from domaincms.utils.validators import get_json_body
from . import api_bp


def _preview_urls(domain, pages):
    """Map page id to its public URL, walking each page's ancestors."""
    tree = PageTree((page.id, page.parent_id) for page in pages)
    slug_of = {page.id: page.slug for page in pages}

    urls = {}
    for page in pages:
        chain = list(reversed(tree.ancestors(page.id))) + [page.id]
        urls[page.id] = page_url(domain.slug, [slug_of[pid] for pid in chain if pid in slug_of])
    return urls, tree


def _admin_page(page, urls, tree):
    data = normalize_page(page, admin=True)
    children = tree.children(page.id)
    data["hasChildren"] = bool(children)
    data["childrenCount"] = len(children)
    data["previewUrl"] = urls.get(page.id)
    return data


@api_bp.route("/admin/pages", methods=["GET"])
@admin_required
def list_pages():
    domain_id = request.args.get("domain")
    if not domain_id:
        raise ValidationError("Query parameter 'domain' is required")

    pages = (
        Page.query.filter_by(domain_id=domain_id)
        .order_by(Page.order.asc(), Page.title.asc())
        .all()
    )
    if not pages:
        return jsonify({"success": True, "pages": []}), 200

    urls, tree = _preview_urls(pages[0].domain, pages)

    return jsonify({
        "success": True,
        "pages": [_admin_page(page, urls, tree) for page in pages],
    }), 200


@api_bp.route("/admin/pages", methods=["POST"])
@admin_required
def create_page_route():
    page = create_page(data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Page created successfully",
        "page": normalize_page(page, admin=True),
    }), 201


@api_bp.route("/admin/pages/<page_id>", methods=["GET"])
@admin_required
def get_page_route(page_id):
    page = get_page(page_id)
    pages = Page.query.filter_by(domain_id=page.domain_id).order_by(Page.order.asc(), Page.title.asc()).all()
    urls, tree = _preview_urls(page.domain, pages)
    by_id = {p.id: p for p in pages}

    data = _admin_page(page, urls, tree)
    data["domain"] = {
        "id": page.domain.id,
        "name": page.domain.name,
        "slug": page.domain.slug,
        "pageType": page.domain.page_type,
    }
    data["children"] = [normalize_page_summary(by_id[cid]) for cid in tree.children(page.id)]
    data["siblings"] = [
        normalize_page_summary(by_id[sid])
        for sid in tree.children(page.parent_id)
        if sid != page.id
    ]

    return jsonify({"success": True, "page": data}), 200


@api_bp.route("/admin/pages/<page_id>", methods=["PUT"])
@admin_required
def update_page_route(page_id):
    page = update_page(page_id=page_id, data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Page updated successfully",
        "page": normalize_page(page, admin=True),
    }), 200


@api_bp.route("/admin/pages/<page_id>", methods=["DELETE"])
@admin_required
def delete_page_route(page_id):
    result = delete_page(page_id=page_id)
    return jsonify({
        "success": True,
        "message": (
            f'Page "{result["title"]}" and {result["descendants"]} '
            "descendant page(s) deleted successfully"
        ),
        "deletedPages": result["deletedPages"],
    }), 200
