import json

import pytest

SCHEMA = {
    "columns": [
        {"id": "name", "name": "Name", "type": "text"},
        {"id": "price", "name": "Price", "type": "currency"},
    ]
}


@pytest.fixture()
def table_page(make_domain, make_page):
    domain = make_domain("pricing")
    return make_page(domain["id"], "plans")


@pytest.fixture()
def table(client, admin_headers, table_page):
    response = client.post(
        "/api/admin/tables",
        json={
            "name": "Plans",
            "pageId": table_page["id"],
            "schema": SCHEMA,
            "rows": [
                {"name": "Basic", "price": "10"},
                {"name": "India only", "price": "5", "targetCountries": "IN"},
            ],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()["table"]


def test_create_table_flips_page_type(client, admin_headers, table, table_page):
    response = client.get(f"/api/admin/pages/{table_page['id']}", headers=admin_headers)
    assert response.get_json()["page"]["contentType"] == "table"

    column_ids = [column["id"] for column in table["schema"]["columns"]]
    assert column_ids == ["name", "price", "targetCountries"]
    assert table["data"]["metadata"]["totalRows"] == 2
    assert table["data"]["rows"][0]["targetCountries"] == "ALL"
    assert table["data"]["rows"][0]["price"] == 10


def test_second_table_on_page_rejected(client, admin_headers, table, table_page):
    response = client.post(
        "/api/admin/tables",
        json={"name": "Again", "pageId": table_page["id"], "schema": SCHEMA},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "This page already has a table"


def test_table_for_missing_page(client, admin_headers):
    response = client.post(
        "/api/admin/tables",
        json={"name": "Orphan", "pageId": "missing", "schema": SCHEMA},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_schema_needs_columns(client, admin_headers, table_page):
    response = client.post(
        "/api/admin/tables",
        json={"name": "Empty", "pageId": table_page["id"], "schema": {"columns": []}},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_row_count_follows_data_operations(client, admin_headers, table):
    url = f"/api/admin/tables/{table['id']}/data"

    response = client.put(
        url,
        json={"operation": "append", "rows": [{"name": "Pro", "price": "20"}]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["metadata"]["totalRows"] == 3
    assert response.get_json()["message"] == "Table data updated successfully (3 rows)"

    response = client.put(
        url,
        json={"operation": "replace", "rows": [{"name": "Only"}], "importSource": "csv"},
        headers=admin_headers,
    )
    metadata = response.get_json()["data"]["metadata"]
    assert metadata["totalRows"] == 1
    assert metadata["importSource"] == "csv"

    response = client.delete(url, headers=admin_headers)
    assert response.get_json()["data"]["metadata"]["totalRows"] == 0
    assert response.get_json()["data"]["rows"] == []


def test_bad_data_operation(client, admin_headers, table):
    response = client.put(
        f"/api/admin/tables/{table['id']}/data",
        json={"operation": "merge", "rows": []},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_admin_sees_every_row(client, admin_headers, table):
    response = client.get(f"/api/admin/tables/{table['id']}/data", headers=admin_headers)
    rows = response.get_json()["data"]["rows"]
    assert [row["name"] for row in rows] == ["Basic", "India only"]


def test_public_rows_filtered_by_country(client, table, table_page):
    url = f"/api/domain/tables/by-page/{table_page['id']}"

    body = client.get(url).get_json()
    assert [row["name"] for row in body["table"]["data"]["rows"]] == ["Basic"]
    assert body["filtering"] == {"userCountry": "US", "originalRowCount": 2, "filteredRowCount": 1}
    assert body["table"]["data"]["metadata"]["totalRows"] == 1
    assert body["table"]["data"]["metadata"]["unfilteredTotalRows"] == 2
    assert "targetCountries" not in body["table"]["data"]["rows"][0]
    assert "targetCountries" not in [c["id"] for c in body["table"]["schema"]["columns"]]

    client.set_cookie("user-country", "IN")
    body = client.get(url).get_json()
    assert [row["name"] for row in body["table"]["data"]["rows"]] == ["Basic", "India only"]
    assert body["filtering"]["userCountry"] == "IN"


def test_public_table_missing(client, make_domain, make_page):
    domain = make_domain("pricing")
    page = make_page(domain["id"], "plain")

    response = client.get(f"/api/domain/tables/by-page/{page['id']}")
    assert response.status_code == 404
    assert response.get_json()["error"] == "No table found for this page"


def test_csv_export(client, admin_headers, table, table_page):
    response = client.get(
        f"/api/admin/tables/{table['id']}/data?format=csv&download=true",
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert response.headers["Content-Disposition"] == 'attachment; filename="plans-table.csv"'
    lines = response.get_data(as_text=True).split("\n")
    assert lines[0] == "Name,Price,Target Countries"
    assert lines[1] == "Basic,10,ALL"


def test_public_json_export_is_filtered(client, table, table_page):
    response = client.get(f"/api/domain/tables/by-page/{table_page['id']}?format=json")
    assert response.mimetype == "application/json"
    assert "Content-Disposition" not in response.headers

    payload = json.loads(response.get_data(as_text=True))
    assert payload["data"] == [{"name": "Basic", "price": 10}]


def test_unknown_export_format(client, admin_headers, table):
    response = client.get(f"/api/admin/tables/{table['id']}/data?format=xml", headers=admin_headers)
    assert response.status_code == 400


def test_page_detail_embeds_public_table(client, table):
    response = client.get("/api/domain/pricing/plans")
    page = response.get_json()["page"]
    assert page["contentType"] == "table"
    assert [row["name"] for row in page["table"]["data"]["rows"]] == ["Basic"]


def test_delete_table_can_reset_page(client, admin_headers, table, table_page):
    response = client.delete(f"/api/admin/tables/{table['id']}?resetPageType=true", headers=admin_headers)
    assert response.status_code == 200

    response = client.get(f"/api/admin/pages/{table_page['id']}", headers=admin_headers)
    assert response.get_json()["page"]["contentType"] == "narrative"


def test_unknown_column_type(client, admin_headers, table_page):
    schema = {"columns": [{"id": "x", "name": "X", "type": "json"}]}
    response = client.post(
        "/api/admin/tables",
        json={"name": "Odd", "pageId": table_page["id"], "schema": schema},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Unsupported column type: json"
