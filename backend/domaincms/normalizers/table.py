from .common import iso


def normalize_table(table, *, include_data=True):
    data = {
        "id": table.id,
        "name": table.name,
        "pageId": table.page_id,
        "schema": table.table_schema or {},
        "settings": table.settings or {},
        "rowCount": len(table.rows),
        "createdAt": iso(table.created_at),
        "updatedAt": iso(table.updated_at),
    }

    if include_data:
        data["data"] = table.data or {"rows": [], "metadata": {}}

    if table.page is not None:
        data["page"] = {
            "id": table.page.id,
            "title": table.page.title,
            "slug": table.page.slug,
            "domainId": table.page.domain_id,
        }

    return data
