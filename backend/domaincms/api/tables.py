from flask import request, jsonify, Response
from sqlalchemy import or_

from domaincms.application.cms.tables import (
    clear_table_data,
    create_table,
    delete_table,
    get_table,
    update_table,
    update_table_data,
)
from domaincms.models.data_table import DataTable
from domaincms.models.page import Page
from domaincms.normalizers.pagination import normalize_pagination
from domaincms.normalizers.table import normalize_table
from domaincms.services.table_service import export_table
from domaincms.errors import ValidationError
from domaincms.utils.decorators import admin_required
from domaincms.utils.pagination import page_args, paginate_query
from domaincms.utils.validators import get_json_body, parse_bool
from . import api_bp

EXPORT_FORMATS = ("csv", "json")


def export_response(body, mimetype, filename, download):
    response = Response(body, mimetype=mimetype)
    if download:
        response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@api_bp.route("/admin/tables", methods=["GET"])
@admin_required
def list_tables():
    page, per_page = page_args()

    query = DataTable.query.join(Page, DataTable.page_id == Page.id)

    domain_id = request.args.get("domain")
    if domain_id:
        query = query.filter(Page.domain_id == domain_id)

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(DataTable.name.ilike(pattern), Page.title.ilike(pattern)))

    query = query.order_by(DataTable.updated_at.desc())
    pagination = paginate_query(query, page=page, per_page=per_page)

    payload = normalize_pagination(
        pagination.items,
        lambda table: normalize_table(table, include_data=False),
        page=page,
        per_page=per_page,
        total=pagination.total,
        items_key="tables",
    )
    payload["success"] = True
    return jsonify(payload), 200


@api_bp.route("/admin/tables", methods=["POST"])
@admin_required
def create_table_route():
    table = create_table(data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Table created successfully",
        "table": normalize_table(table),
    }), 201


@api_bp.route("/admin/tables/<table_id>", methods=["GET"])
@admin_required
def get_table_route(table_id):
    return jsonify({"success": True, "table": normalize_table(get_table(table_id))}), 200


@api_bp.route("/admin/tables/<table_id>", methods=["PUT"])
@admin_required
def update_table_route(table_id):
    table = update_table(table_id=table_id, data=get_json_body(request))
    return jsonify({
        "success": True,
        "message": "Table updated successfully",
        "table": normalize_table(table),
    }), 200


@api_bp.route("/admin/tables/<table_id>", methods=["DELETE"])
@admin_required
def delete_table_route(table_id):
    delete_table(
        table_id=table_id,
        reset_page_type=parse_bool(request.args.get("resetPageType")),
    )
    return jsonify({"success": True, "message": "Table deleted successfully"}), 200


@api_bp.route("/admin/tables/<table_id>/data", methods=["GET"])
@admin_required
def get_table_data(table_id):
    table = get_table(table_id)
    fmt = request.args.get("format")

    if fmt:
        if fmt not in EXPORT_FORMATS:
            raise ValidationError("Format must be 'csv' or 'json'")
        body, mimetype, extension = export_table(
            table.table_schema, table.rows, table.table_metadata, fmt
        )
        return export_response(
            body,
            mimetype,
            f"{table.page.slug}-table.{extension}",
            parse_bool(request.args.get("download")),
        )

    return jsonify({
        "success": True,
        "schema": table.table_schema,
        "data": table.data,
    }), 200


@api_bp.route("/admin/tables/<table_id>/data", methods=["PUT"])
@admin_required
def put_table_data(table_id):
    table = update_table_data(table_id=table_id, data=get_json_body(request))
    metadata = table.table_metadata
    return jsonify({
        "success": True,
        "message": f"Table data updated successfully ({metadata['totalRows']} rows)",
        "data": table.data,
    }), 200


@api_bp.route("/admin/tables/<table_id>/data", methods=["DELETE"])
@admin_required
def delete_table_data(table_id):
    table = clear_table_data(table_id=table_id)
    return jsonify({
        "success": True,
        "message": "Table data cleared successfully",
        "data": table.data,
    }), 200
