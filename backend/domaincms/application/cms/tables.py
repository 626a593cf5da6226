from typing import Any, Dict

from flask import current_app

from domaincms.domain.invariants.table import assert_table_schema
from domaincms.errors import ValidationError, NotFound
from domaincms.extensions import db
from domaincms.models.data_table import DataTable
from domaincms.models.page import Page
from domaincms.services.cache import invalidate, CACHE_TAGS, page_tag, table_tag
from domaincms.utils.table_data import (
    COLUMN_TYPES,
    IMPORT_SOURCES,
    build_metadata,
    ensure_rows_have_target_countries,
    ensure_target_countries_column,
    merge_settings,
    transform_rows,
)
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_fields, require_string

DATA_OPERATIONS = ("replace", "append")


def get_table(table_id: str) -> DataTable:
    table = db.session.get(DataTable, table_id)
    if table is None:
        raise NotFound("Table not found")
    return table


def _invalidate_table(table_id, page_id):
    invalidate(
        CACHE_TAGS["TABLES"],
        CACHE_TAGS["PAGES"],
        table_tag(table_id),
        page_tag(page_id),
    )


def _clean_schema(schema):
    assert_table_schema(schema)
    for column in schema["columns"]:
        column_type = column.get("type") or "text"
        if column_type not in COLUMN_TYPES:
            raise ValidationError(f"Unsupported column type: {column_type}")
    return ensure_target_countries_column(schema)


def _clean_rows(rows, schema):
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ValidationError("Rows must be an array of objects")
    return ensure_rows_have_target_countries(transform_rows(rows, schema["columns"]))


def create_table(*, data: Dict[str, Any]) -> DataTable:
    """
    Attach a data table to a page.

    Responsibilities:
    - Schema has at least one column plus the reserved targetCountries column
    - One table per page
    - The page becomes a ``table`` page in the same transaction
    """
    require_fields(data, "name", "pageId", "schema")
    schema = _clean_schema(data["schema"])

    page = db.session.get(Page, data["pageId"])
    if page is None:
        raise NotFound("Page not found")

    if DataTable.query.filter_by(page_id=page.id).first() is not None:
        raise ValidationError("This page already has a table")

    rows = _clean_rows(data.get("rows") or [], schema)
    import_source = data.get("importSource") or "manual"

    table = DataTable()
    table.name = require_string(data["name"], "Name")
    table.page_id = page.id
    table.table_schema = schema
    table.data = {"rows": rows, "metadata": build_metadata(rows, import_source)}
    table.settings = merge_settings(data.get("settings"))

    with transactional():
        db.session.add(table)
        page.content_type = "table"

    current_app.logger.info("Table created for page %s (%d rows)", page.id, len(rows))
    _invalidate_table(table.id, table.page_id)
    return table


def update_table(*, table_id: str, data: Dict[str, Any]) -> DataTable:
    table = get_table(table_id)

    schema = None
    if "schema" in data:
        schema = _clean_schema(data["schema"])

    name = None
    if "name" in data:
        name = require_string(data["name"], "Name")

    with transactional():
        if name is not None:
            table.name = name
        if schema is not None:
            table.table_schema = schema
            rows = ensure_rows_have_target_countries(table.rows)
            previous = table.table_metadata
            table.data = {
                "rows": rows,
                "metadata": build_metadata(rows, previous.get("importSource", "manual"), previous),
            }
        if "settings" in data:
            table.settings = merge_settings(data["settings"])

    _invalidate_table(table.id, table.page_id)
    return table


def delete_table(*, table_id: str, reset_page_type: bool = False) -> None:
    table = get_table(table_id)
    page = table.page
    page_id = table.page_id

    with transactional():
        db.session.delete(table)
        if reset_page_type and page is not None:
            page.content_type = "narrative"

    current_app.logger.info("Table deleted: %s", table_id)
    _invalidate_table(table_id, page_id)


def update_table_data(*, table_id: str, data: Dict[str, Any]) -> DataTable:
    """
    Replace or append rows; metadata is recomputed from the final row list.
    """
    table = get_table(table_id)

    operation = data.get("operation") or "replace"
    if operation not in DATA_OPERATIONS:
        raise ValidationError("Operation must be 'replace' or 'append'")

    import_source = data.get("importSource") or "manual"
    if import_source not in IMPORT_SOURCES:
        raise ValidationError(f"Import source must be one of: {', '.join(IMPORT_SOURCES)}")

    schema = ensure_target_countries_column(table.table_schema)
    incoming = _clean_rows(data.get("rows"), schema)

    rows = table.rows + incoming if operation == "append" else incoming

    with transactional():
        table.table_schema = schema
        table.data = {"rows": rows, "metadata": build_metadata(rows, import_source, table.table_metadata)}

    current_app.logger.info(
        "Table %s data %s: %d row(s), %d total", table.id, operation, len(incoming), len(rows)
    )
    _invalidate_table(table.id, table.page_id)
    return table


def clear_table_data(*, table_id: str) -> DataTable:
    table = get_table(table_id)

    with transactional():
        table.data = {"rows": [], "metadata": build_metadata([], "manual")}

    _invalidate_table(table.id, table.page_id)
    return table
