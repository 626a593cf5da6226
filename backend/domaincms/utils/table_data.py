import copy
import csv
import io
import json
from datetime import datetime, timezone

from dateutil.parser import parse as parse_date

from domaincms.utils.countries import ALL_COUNTRIES

TARGET_COUNTRIES_COLUMN = "targetCountries"

COLUMN_TYPES = ("text", "number", "currency", "boolean", "date", "url", "email")

DEFAULT_TABLE_SETTINGS = {
    "pagination": {
        "enabled": True,
        "pageSize": 25,
        "showSizeSelector": True,
        "showInfo": True,
    },
    "sorting": {
        "enabled": True,
        "defaultColumn": None,
        "defaultDirection": "asc",
    },
    "filtering": {
        "enabled": True,
        "globalSearch": True,
        "columnFilters": True,
    },
    "responsive": {
        "enabled": True,
        "stackOnMobile": True,
    },
    "export": {
        "enabled": True,
        "formats": ["csv", "json"],
    },
    "ui": {
        "striped": True,
        "bordered": True,
        "compact": False,
        "showRowNumbers": False,
    },
}

IMPORT_SOURCES = ("manual", "csv", "json", "api")


def utc_iso_now():
    return datetime.now(timezone.utc).isoformat()


def create_target_countries_column():
    return {
        "id": TARGET_COUNTRIES_COLUMN,
        "name": "Target Countries",
        "type": "text",
        "sortable": False,
        "filterable": False,
        "searchable": False,
        "required": False,
        "isSystem": True,
        "isHidden": True,
        "defaultValue": ALL_COUNTRIES,
    }


def ensure_target_countries_column(schema):
    """Return a copy of ``schema`` whose columns include the reserved column."""
    schema = dict(schema or {})
    columns = [dict(column) for column in schema.get("columns") or []]

    if not any(column.get("id") == TARGET_COUNTRIES_COLUMN for column in columns):
        columns.append(create_target_countries_column())

    schema["columns"] = columns
    schema.setdefault("version", 1)
    return schema


def ensure_rows_have_target_countries(rows):
    normalized = []
    for row in rows or []:
        row = dict(row)
        value = row.get(TARGET_COUNTRIES_COLUMN)
        if value is None or str(value).strip() == "":
            row[TARGET_COUNTRIES_COLUMN] = ALL_COUNTRIES
        normalized.append(row)
    return normalized


def is_row_visible(row, user_country):
    value = row.get(TARGET_COUNTRIES_COLUMN)
    if value is None:
        return True

    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")

    codes = [code for code in (str(item).strip().upper() for item in items) if code]
    if not codes:
        return True

    country = (user_country or "").upper()
    return ALL_COUNTRIES in codes or country in codes


def filter_rows_by_country(rows, user_country):
    return [row for row in rows or [] if is_row_visible(row, user_country)]


def get_public_schema(schema):
    schema = dict(schema or {})
    schema["columns"] = [
        column for column in schema.get("columns") or []
        if column.get("id") != TARGET_COUNTRIES_COLUMN
    ]
    return schema


def get_public_rows(rows):
    public = []
    for row in rows or []:
        row = dict(row)
        row.pop(TARGET_COUNTRIES_COLUMN, None)
        public.append(row)
    return public


def build_metadata(rows, import_source="manual", previous=None):
    """Fresh row metadata; ``totalRows`` always mirrors ``len(rows)``."""
    metadata = dict(previous or {})
    metadata.update({
        "totalRows": len(rows),
        "lastUpdated": utc_iso_now(),
        "importSource": import_source,
    })
    return metadata


def merge_settings(settings):
    """Deep-merge user settings over ``DEFAULT_TABLE_SETTINGS``."""
    merged = copy.deepcopy(DEFAULT_TABLE_SETTINGS)
    for key, value in (settings or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def transform_value(value, column_type):
    """Coerce a raw cell value according to its column type."""
    if column_type in ("number", "currency"):
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return value
        cleaned = str(value).replace(",", "").replace("$", "").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number

    if column_type == "boolean":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "1", "yes", "y")

    if column_type == "date":
        if value is None or value == "":
            return None
        try:
            return parse_date(str(value)).isoformat()
        except (ValueError, OverflowError):
            return str(value)

    if value is None:
        return ""
    return str(value)


def transform_rows(rows, columns):
    """Apply ``transform_value`` to every typed column of every row."""
    types = {
        column["id"]: column.get("type", "text")
        for column in columns
        if column.get("id") != TARGET_COUNTRIES_COLUMN
    }

    transformed = []
    for row in rows or []:
        row = dict(row)
        for column_id, column_type in types.items():
            if column_id in row:
                row[column_id] = transform_value(row[column_id], column_type)
        transformed.append(row)
    return transformed


def export_table_to_csv(columns, rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)

    writer.writerow([column.get("name", column.get("id")) for column in columns])
    for row in rows:
        writer.writerow([
            "" if row.get(column["id"]) is None else row.get(column["id"])
            for column in columns
        ])

    return buffer.getvalue().rstrip("\n")


def export_table_to_json(schema, rows, metadata=None):
    payload = {
        "schema": {
            "columns": [
                {"id": column.get("id"), "name": column.get("name"), "type": column.get("type")}
                for column in (schema or {}).get("columns") or []
            ],
            "version": (schema or {}).get("version", 1),
        },
        "data": rows,
        "metadata": metadata or {},
        "exportedAt": utc_iso_now(),
    }
    return json.dumps(payload, indent=2)
