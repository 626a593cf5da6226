import pytest

from domaincms.extensions import db
from domaincms.models.content_block import ContentBlock


def main_page_of(client, headers, domain_id):
    response = client.get(f"/api/admin/pages?domain={domain_id}", headers=headers)
    return next(page for page in response.get_json()["pages"] if page["isMain"])


def test_admin_routes_require_token(client):
    response = client.get("/api/admin/domains")
    assert response.status_code == 401
    assert response.get_json() == {"success": False, "error": "Authentication required"}


def test_non_admin_is_forbidden(client, make_user, headers_for):
    user_id = make_user(is_admin=False)
    response = client.get("/api/admin/domains", headers=headers_for(user_id))
    assert response.status_code == 403
    assert response.get_json()["error"] == "Admin access required"


def test_inactive_admin_is_forbidden(client, make_user, headers_for):
    user_id = make_user(is_active=False)
    response = client.get("/api/admin/categories", headers=headers_for(user_id))
    assert response.status_code == 403
    assert response.get_json()["error"] == "Account is inactive"


def test_category_crud_and_counts(client, admin_headers, make_category, make_domain):
    first = make_category("tech", column=2)
    second = make_category("science", column=2)
    assert (first["categoryOrder"], second["categoryOrder"]) == (1, 2)

    make_domain("webdev", categoryId=first["id"])

    response = client.get(f"/api/admin/categories/{first['id']}", headers=admin_headers)
    category = response.get_json()["category"]
    assert category["domainCount"] == 1
    assert category["publishedDomains"] == 1

    response = client.put(
        f"/api/admin/categories/{second['id']}",
        json={"columnPosition": 3, "name": "Science & Nature"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    updated = response.get_json()["category"]
    assert updated["columnPosition"] == 3
    assert updated["categoryOrder"] == 1

    response = client.delete(f"/api/admin/categories/{second['id']}", headers=admin_headers)
    assert response.status_code == 200


def test_category_validation(client, admin_headers, make_category):
    make_category("tech")

    response = client.post(
        "/api/admin/categories",
        json={"name": "Tech", "slug": "tech", "columnPosition": 1},
        headers=admin_headers,
    )
    assert response.status_code == 409

    response = client.post(
        "/api/admin/categories",
        json={"name": "Bad", "slug": "bad", "columnPosition": 4},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Column position must be 1, 2, or 3"

    response = client.post(
        "/api/admin/categories",
        json={"name": "Bad", "slug": "Not A Slug", "columnPosition": 1},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_category_with_domains_cannot_be_deleted(client, admin_headers, make_category, make_domain):
    category = make_category("tech")
    make_domain("webdev", categoryId=category["id"])
    make_domain("mobile", categoryId=category["id"])

    response = client.delete(f"/api/admin/categories/{category['id']}", headers=admin_headers)
    assert response.status_code == 409
    assert response.get_json()["error"] == (
        "Cannot delete category. It contains 2 domain(s). "
        "Please move or delete the domains first."
    )


def test_missing_body_fields(client, admin_headers):
    response = client.post("/api/admin/domains", json={"name": "x"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Missing required fields: slug"

    response = client.post("/api/admin/domains", data="not json", headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid request body"


def test_non_string_names_are_rejected(client, admin_headers, make_domain, make_page):
    response = client.post("/api/admin/domains", json={"name": 5, "slug": "x"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Name must be a string"

    response = client.post(
        "/api/admin/categories",
        json={"name": None, "slug": "tech", "columnPosition": 1},
        headers=admin_headers,
    )
    assert response.status_code == 400

    domain = make_domain("webdev")
    page = make_page(domain["id"], "intro")
    response = client.put(f"/api/admin/pages/{page['id']}", json={"title": []}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Title must be a string"

    response = client.put(f"/api/admin/pages/{page['id']}", json={"title": "   "}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Title is required"



def test_domain_slug_conflict(client, admin_headers, make_domain):
    make_domain("webdev")
    response = client.post(
        "/api/admin/domains",
        json={"name": "Again", "slug": "webdev"},
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_domain_rejects_unknown_country_codes(client, admin_headers):
    response = client.post(
        "/api/admin/domains",
        json={"name": "Geo", "slug": "geo", "targetCountries": ["IN", "XX"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid country codes: XX"


def test_direct_domain_gets_main_page(client, admin_headers, make_domain):
    domain = make_domain("webdev")
    main = main_page_of(client, admin_headers, domain["id"])

    assert main["slug"] == "__main__"
    assert main["contentType"] == "section_based"
    assert main["sections"] == []
    assert main["parentId"] is None


def test_domain_list_filters(client, admin_headers, make_domain):
    make_domain("webdev")
    make_domain("drafts", isPublished=False)
    make_domain("tree", pageType="hierarchical")

    response = client.get("/api/admin/domains?status=draft", headers=admin_headers)
    assert [d["slug"] for d in response.get_json()["domains"]] == ["drafts"]

    response = client.get("/api/admin/domains?pageType=hierarchical", headers=admin_headers)
    assert [d["slug"] for d in response.get_json()["domains"]] == ["tree"]

    response = client.get("/api/admin/domains?search=web", headers=admin_headers)
    domains = response.get_json()["domains"]
    assert [d["slug"] for d in domains] == ["webdev"]
    assert domains[0]["pageCount"] == 1
    assert domains[0]["targetCountries"] == ["ALL"]


def test_patch_domain_toggles_publish(client, admin_headers, make_domain):
    domain = make_domain("webdev")
    response = client.patch(
        f"/api/admin/domains/{domain['id']}",
        json={"isPublished": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["domain"]["isPublished"] is False


def test_page_slug_unique_per_parent_only(client, admin_headers, make_domain, make_page):
    domain = make_domain("docs", pageType="hierarchical")
    guides = make_page(domain["id"], "guides")
    api = make_page(domain["id"], "api")

    make_page(domain["id"], "intro", parentId=guides["id"])
    make_page(domain["id"], "intro", parentId=api["id"])

    response = client.post(
        "/api/admin/pages",
        json={"title": "Intro", "slug": "intro", "domainId": domain["id"], "parentId": guides["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.get_json()["error"] == 'A page with slug "intro" already exists under the same parent'


def test_direct_domain_pages_attach_to_main(client, admin_headers, make_domain, make_page):
    domain = make_domain("webdev")
    page = make_page(domain["id"], "html")
    main = main_page_of(client, admin_headers, domain["id"])

    assert page["parentId"] == main["id"]


def test_main_slug_is_reserved(client, admin_headers, make_domain):
    domain = make_domain("webdev")
    response = client.post(
        "/api/admin/pages",
        json={"title": "Main", "slug": "__main__", "domainId": domain["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_delete_page_cascades(client, admin_headers, make_domain, make_page):
    domain = make_domain("docs", pageType="hierarchical")
    root = make_page(domain["id"], "guides")
    child = make_page(domain["id"], "setup", parentId=root["id"])
    make_page(domain["id"], "linux", parentId=child["id"])
    make_page(domain["id"], "windows", parentId=child["id"])
    survivor = make_page(domain["id"], "faq")

    response = client.delete(f"/api/admin/pages/{root['id']}", headers=admin_headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body["deletedPages"] == 4
    assert body["message"] == 'Page "Guides" and 3 descendant page(s) deleted successfully'

    response = client.get(f"/api/admin/pages?domain={domain['id']}", headers=admin_headers)
    assert [page["id"] for page in response.get_json()["pages"]] == [survivor["id"]]


def test_main_page_cannot_be_deleted(client, admin_headers, make_domain):
    domain = make_domain("webdev")
    main = main_page_of(client, admin_headers, domain["id"])

    response = client.delete(f"/api/admin/pages/{main['id']}", headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Cannot delete the main page"


def test_circular_move_is_rejected(client, admin_headers, make_domain, make_page):
    domain = make_domain("docs", pageType="hierarchical")
    root = make_page(domain["id"], "guides")
    child = make_page(domain["id"], "setup", parentId=root["id"])
    grandchild = make_page(domain["id"], "linux", parentId=child["id"])

    response = client.put(
        f"/api/admin/pages/{root['id']}",
        json={"parentId": grandchild["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Cannot move a page under one of its own descendants"

    response = client.put(
        f"/api/admin/pages/{root['id']}",
        json={"parentId": root["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_page_detail_lists_children_and_siblings(client, admin_headers, make_domain, make_page):
    domain = make_domain("docs", pageType="hierarchical")
    root = make_page(domain["id"], "guides")
    first = make_page(domain["id"], "setup", parentId=root["id"])
    second = make_page(domain["id"], "usage", parentId=root["id"])

    response = client.get(f"/api/admin/pages/{first['id']}", headers=admin_headers)
    page = response.get_json()["page"]
    assert page["previewUrl"] == "/domain/docs/guides/setup"
    assert [s["id"] for s in page["siblings"]] == [second["id"]]

    response = client.get(f"/api/admin/pages/{root['id']}", headers=admin_headers)
    page = response.get_json()["page"]
    assert page["childrenCount"] == 2
    assert page["hasChildren"] is True


def test_delete_domain_removes_pages(client, admin_headers, make_domain, make_page):
    domain = make_domain("webdev")
    make_page(domain["id"], "html")
    make_page(domain["id"], "css")

    response = client.delete(f"/api/admin/domains/{domain['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["deletedPages"] == 3

    response = client.get(f"/api/admin/domains/{domain['id']}", headers=admin_headers)
    assert response.status_code == 404


def add_block(app, page_id, block_type="PARAGRAPH", order=0, **fields):
    with app.app_context():
        block = ContentBlock()
        block.page_id = page_id
        block.type = block_type
        block.order = order
        block.content = fields.get("content", {"text": "hello"})
        block.is_active = fields.get("is_active", True)
        db.session.add(block)
        db.session.commit()
        return block.id


def test_delete_page_removes_content_blocks(app, client, admin_headers, make_domain, make_page):
    domain = make_domain("docs", pageType="hierarchical")
    root = make_page(domain["id"], "guides")
    child = make_page(domain["id"], "setup", parentId=root["id"])
    keep = make_page(domain["id"], "faq")

    add_block(app, root["id"])
    add_block(app, child["id"], "HEADING")
    add_block(app, keep["id"])

    client.delete(f"/api/admin/pages/{root['id']}", headers=admin_headers)

    with app.app_context():
        remaining = ContentBlock.query.all()
        assert [block.page_id for block in remaining] == [keep["id"]]


def test_page_detail_lists_active_blocks_in_order(app, client, make_domain, make_page):
    domain = make_domain("docs", pageType="hierarchical")
    page = make_page(domain["id"], "guides")
    add_block(app, page["id"], "PARAGRAPH", order=2)
    add_block(app, page["id"], "HEADING", order=1)
    add_block(app, page["id"], "QUOTE", order=3, is_active=False)

    body = client.get("/api/domain/docs/guides").get_json()
    assert [block["type"] for block in body["page"]["contentBlocks"]] == ["HEADING", "PARAGRAPH"]


def test_unknown_block_type_rejected():
    with pytest.raises(ValueError):
        ContentBlock().type = "MARQUEE"
