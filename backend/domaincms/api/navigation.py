from flask import request, jsonify, g

from domaincms.services import navigation_service
from domaincms.services.cache import get_cache_headers, CACHE_DURATIONS
from . import api_bp


def _cached_json(payload):
    response = jsonify(payload)
    response.headers.update(
        get_cache_headers(0, CACHE_DURATIONS["MEDIUM"], CACHE_DURATIONS["LONG"])
    )
    # content varies by the user-country cookie
    response.headers["Vary"] = "Cookie"
    return response


@api_bp.route("/page-context", methods=["GET"])
def page_context():
    path = request.args.get("path") or "/"
    context = navigation_service.get_page_context(path, g.user_country)
    return _cached_json({"success": True, **context})


@api_bp.route("/header-domains", methods=["GET"])
def header_domains():
    return _cached_json({
        "success": True,
        **navigation_service.get_header_data(g.user_country),
    })


@api_bp.route("/sidebar", methods=["GET"])
def sidebar():
    return _cached_json({
        "success": True,
        **navigation_service.get_sidebar_data(g.user_country),
    })


@api_bp.route("/page-sidebar", methods=["GET"])
def page_sidebar():
    path = request.args.get("path") or "/"
    return _cached_json({
        "success": True,
        "pageSidebar": navigation_service.get_page_sidebar_data(path, g.user_country),
    })


@api_bp.route("/breadcrumb", methods=["GET"])
def breadcrumb():
    path = request.args.get("path") or "/"
    return _cached_json({
        "success": True,
        **navigation_service.get_breadcrumb_data(path, g.user_country),
    })
