from domaincms.models.data_table import DataTable
from domaincms.utils.table_data import (
    filter_rows_by_country,
    get_public_rows,
    get_public_schema,
    merge_settings,
    export_table_to_csv,
    export_table_to_json,
)
from .cache import remember, CACHE_TAGS, CACHE_DURATIONS, page_tag


def get_public_table(page_id, country):
    """
    Public payload for the table attached to ``page_id``, or None.

    Rows are filtered by country first, then the reserved
    ``targetCountries`` column is stripped from schema and rows.
    """
    def load():
        table = DataTable.query.filter_by(page_id=page_id).first()
        if table is None:
            return None

        all_rows = table.rows
        visible_rows = filter_rows_by_country(all_rows, country)
        metadata = table.table_metadata
        metadata.update({
            "totalRows": len(visible_rows),
            "unfilteredTotalRows": len(all_rows),
        })

        page = table.page
        return {
            "table": {
                "id": table.id,
                "name": table.name,
                "schema": get_public_schema(table.table_schema),
                "data": {
                    "rows": get_public_rows(visible_rows),
                    "metadata": metadata,
                },
                "settings": merge_settings(table.settings),
                "updatedAt": table.updated_at.isoformat() if table.updated_at else None,
                "page": {
                    "id": page.id,
                    "title": page.title,
                    "slug": page.slug,
                },
            },
            "filtering": {
                "userCountry": country,
                "originalRowCount": len(all_rows),
                "filteredRowCount": len(visible_rows),
            },
        }

    return remember(
        f"public-table:{page_id}:{country}",
        load,
        tags=(CACHE_TAGS["TABLES"], page_tag(page_id)),
        timeout=CACHE_DURATIONS["MEDIUM"],
    )


def export_table(schema, rows, metadata, fmt):
    """Serialize rows as ``csv`` or ``json``; returns (body, mimetype, extension)."""
    if fmt == "csv":
        return export_table_to_csv(schema.get("columns") or [], rows), "text/csv", "csv"
    return export_table_to_json(schema, rows, metadata), "application/json", "json"
