from flask import request, jsonify, g

from domaincms.errors import NotFound, ValidationError
from domaincms.services import domain_service, page_service, table_service
from domaincms.utils.validators import parse_bool
from .tables import EXPORT_FORMATS, export_response
from . import api_bp


def _published_domain(slug):
    domain = domain_service.get_domain_by_slug(slug, g.user_country)
    if domain is None:
        raise NotFound("Domain not found")
    return domain


@api_bp.route("/domain", methods=["GET"])
def list_public_domains():
    domains = domain_service.get_domains_for_navigation(g.user_country)
    return jsonify({"success": True, "domains": domains, "userCountry": g.user_country}), 200


@api_bp.route("/domain/<slug>", methods=["GET"])
def get_public_domain(slug):
    domain = _published_domain(slug)
    root = page_service.get_domain_root(domain, g.user_country)
    return jsonify({"success": True, "domain": domain, **root}), 200


@api_bp.route("/domain/<slug>/<path:segments>", methods=["GET"])
def get_public_page(slug, segments):
    domain = _published_domain(slug)
    page = page_service.get_by_path(domain, segments.split("/"), g.user_country)
    if page is None:
        raise NotFound("Page not found")
    return jsonify({"success": True, "domain": domain, "page": page}), 200


@api_bp.route("/domain/tables/by-page/<page_id>", methods=["GET"])
def get_public_table(page_id):
    payload = table_service.get_public_table(page_id, g.user_country)
    if payload is None:
        raise NotFound("No table found for this page")

    fmt = request.args.get("format")
    if fmt:
        if fmt not in EXPORT_FORMATS:
            raise ValidationError("Format must be 'csv' or 'json'")
        table = payload["table"]
        body, mimetype, extension = table_service.export_table(
            table["schema"], table["data"]["rows"], table["data"]["metadata"], fmt
        )
        return export_response(
            body,
            mimetype,
            f"{table['page']['slug']}-table.{extension}",
            parse_bool(request.args.get("download")),
        )

    return jsonify({"success": True, **payload}), 200
