"""
Navigation view models for the public site.

``get_page_context`` builds header, sidebar, page sidebar and breadcrumb
from one URL path. Domains and categories are read once; header and
sidebar are derived from them in memory; the page chain is resolved once
and shared by the page sidebar, breadcrumb and current page.
"""
from typing import Any, Dict, List, Optional

from domaincms.models.page import MAIN_PAGE_SLUG
from . import category_service, domain_service, page_service

UNCATEGORIZED = {
    "id": "uncategorized",
    "name": "Other Domains",
    "slug": "other",
    "icon": None,
    "description": "Miscellaneous domains",
    "columnPosition": 1,
    "categoryOrder": 999,
    "isActive": True,
}

UNCATEGORIZED_ORDER = 999


def parse_path(path: Optional[str]) -> Dict[str, Any]:
    """Split ``/domain/<slug>/<page>/<page>`` into its parts."""
    segments = [segment for segment in (path or "/").split("/") if segment]
    is_domain_path = bool(segments) and segments[0] == "domain"

    return {
        "segments": segments,
        "domainSlug": segments[1] if is_domain_path and len(segments) >= 2 else None,
        "pageSegments": segments[2:] if is_domain_path and len(segments) >= 3 else [],
    }


def format_slug_to_title(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def _domain_link(domain):
    return {
        "id": domain["id"],
        "name": domain["name"],
        "slug": domain["slug"],
        "url": domain["url"],
    }


def build_header_data(domains: List[Dict], categories: List[Dict]) -> Dict[str, Any]:
    column_data: Dict[int, List[Dict]] = {1: [], 2: [], 3: []}

    for category in categories:
        category_domains = sorted(
            (d for d in domains if d.get("categoryId") == category["id"]),
            key=lambda d: d["orderInCategory"],
        )
        if not category_domains:
            continue

        column = category["columnPosition"] if category["columnPosition"] in column_data else 1
        column_data[column].append({
            "category": category,
            "domains": [_domain_link(d) for d in category_domains],
        })

    active_ids = {category["id"] for category in categories}
    uncategorized = [d for d in domains if d.get("categoryId") not in active_ids]
    if uncategorized:
        column_data[1].append({
            "category": UNCATEGORIZED,
            "domains": [_domain_link(d) for d in uncategorized],
        })

    return {
        "columnData": column_data,
        "totalDomains": len(domains),
        "totalCategories": len(categories),
    }


def build_sidebar_data(domains: List[Dict], categories: List[Dict]) -> Dict[str, Any]:
    organized = []

    def sidebar_entry(domain, category_id, category_order, column_position):
        return {
            "id": domain["id"],
            "name": domain["name"],
            "slug": domain["slug"],
            "pageType": domain["pageType"],
            "url": domain["url"],
            # root pages are listed for hierarchical domains only
            "pages": domain.get("pages", []) if domain["pageType"] == "hierarchical" else [],
            "categoryId": category_id,
            "categoryOrder": category_order,
            "columnPosition": column_position,
        }

    for category in categories:
        category_domains = sorted(
            (d for d in domains if d.get("categoryId") == category["id"]),
            key=lambda d: d["orderInCategory"],
        )
        for domain in category_domains:
            organized.append(
                sidebar_entry(
                    domain,
                    category["id"],
                    category["categoryOrder"],
                    category["columnPosition"],
                )
            )

    active_ids = {category["id"] for category in categories}
    for domain in domains:
        if domain.get("categoryId") not in active_ids:
            organized.append(sidebar_entry(domain, None, UNCATEGORIZED_ORDER, UNCATEGORIZED_ORDER))

    return {
        "domains": organized,
        "categories": categories,
    }


def _sidebar_page(page, base_url, all_pages):
    has_children = page["contentType"] == "subcategory_list"
    url = f"{base_url}/{page['slug']}"
    children = []
    if has_children:
        children = [
            {
                "id": child["id"],
                "title": child["title"],
                "slug": child["slug"],
                "contentType": child["contentType"],
                "parentId": child["parentId"],
                "order": child["order"],
                "url": f"{url}/{child['slug']}",
                "hasChildren": False,
                "children": [],
            }
            for child in all_pages
            if child["parentId"] == page["id"]
        ]

    return {
        "id": page["id"],
        "title": page["title"],
        "slug": page["slug"],
        "contentType": page["contentType"],
        "parentId": page["parentId"],
        "order": page["order"],
        "url": url,
        "hasChildren": has_children,
        "children": children,
    }


def organize_pages_into_sections(sections_config, candidates, all_pages, base_url, fallback_title):
    """
    Map configured sections to sidebar entries.

    ``candidates`` are the pages a section may reference (the configured
    page's children). Without configured sections every candidate goes
    into one ``fallback_title`` section.
    """
    by_id = {page["id"]: page for page in candidates}

    if not sections_config:
        return [{
            "title": fallback_title,
            "column": 1,
            "order": 1,
            "pages": [
                _sidebar_page(page, base_url, all_pages)
                for page in candidates
                if page["slug"] != MAIN_PAGE_SLUG
            ],
        }]

    return [
        {
            "title": section.get("title"),
            "column": section.get("column"),
            "order": section.get("order"),
            "pages": [
                _sidebar_page(by_id[page_id], base_url, all_pages)
                for page_id in section.get("pageIds") or []
                if page_id in by_id
            ],
        }
        for section in sections_config
    ]


def build_page_sidebar_data(domain, root_page, country) -> Optional[Dict[str, Any]]:
    """
    Sections of the page that owns the current sidebar.

    Direct domains use their ``__main__`` page; hierarchical domains use the
    root page named by the first path segment (``root_page``, already
    resolved).
    """
    if domain["pageType"] == "direct":
        main = page_service.get_or_create_main_page(domain["id"], domain["name"])
        all_pages = page_service.get_pages_with_sections(domain["id"], country)
        children = [page for page in all_pages if page["parentId"] == main.id]
        main_entry = next((page for page in all_pages if page["id"] == main.id), None)
        sections = (main_entry or {}).get("sections") or []

        return {
            "type": "direct_domain",
            "domain": {"name": domain["name"], "slug": domain["slug"]},
            "sections": organize_pages_into_sections(
                sections, children, all_pages, domain["url"], "All Pages"
            ),
        }

    if root_page is None:
        return None

    all_pages = page_service.get_pages_with_sections(domain["id"], country)
    children = [page for page in all_pages if page["parentId"] == root_page["id"]]
    base_url = f"{domain['url']}/{root_page['slug']}"

    return {
        "type": "hierarchical_page",
        "domain": {"name": domain["name"], "slug": domain["slug"]},
        "page": {"name": root_page["title"], "slug": root_page["slug"]},
        "sections": organize_pages_into_sections(
            root_page.get("sections") or [], children, all_pages, base_url, "Pages"
        ),
    }


def build_breadcrumb_data(segments, domain, chain) -> Dict[str, Any]:
    items = []
    if segments and segments[0] == "domain":
        items.append({"label": "Domains", "url": "/domain", "type": "root"})

    if len(segments) < 2 or domain is None:
        return {"items": items}

    items.append({"label": domain["name"], "url": domain["url"], "type": "domain"})

    current = domain["url"]
    for index, slug in enumerate(segments[2:]):
        current = f"{current}/{slug}"
        entry = chain[index] if chain and index < len(chain) else None
        items.append({
            "label": entry["title"] if entry else format_slug_to_title(slug),
            "url": current,
            "type": "page",
            "contentType": entry["contentType"] if entry else None,
        })

    return {"items": items}


def _find_domain(domains, slug):
    if slug is None:
        return None
    return next((domain for domain in domains if domain["slug"] == slug), None)


def _resolve_context(path, country):
    parsed = parse_path(path)
    domains = domain_service.get_domains_for_navigation(country)
    categories = category_service.get_active_categories()
    domain = _find_domain(domains, parsed["domainSlug"])

    chain = None
    root_page = None
    if domain is not None and parsed["pageSegments"]:
        chain = page_service.resolve_page_chain(domain, parsed["pageSegments"], country)
        if chain:
            root_page = chain[0]
        else:
            # a broken deep link still gets its root page's sidebar
            root_chain = page_service.resolve_page_chain(domain, parsed["pageSegments"][:1], country)
            root_page = root_chain[0] if root_chain else None

    return parsed, domains, categories, domain, chain, root_page


def get_page_context(path: str, country: str) -> Dict[str, Any]:
    parsed, domains, categories, domain, chain, root_page = _resolve_context(path, country)

    page_sidebar = None
    if domain is not None and (parsed["pageSegments"] or domain["pageType"] == "direct"):
        page_sidebar = build_page_sidebar_data(domain, root_page, country)

    current_page = None
    if chain:
        current_page = {
            "id": chain[-1]["id"],
            "title": chain[-1]["title"],
            "contentType": chain[-1]["contentType"],
        }

    return {
        "header": build_header_data(domains, categories),
        "sidebar": build_sidebar_data(domains, categories),
        "pageSidebar": page_sidebar,
        "breadcrumb": build_breadcrumb_data(parsed["segments"], domain, chain),
        "currentPage": current_page,
    }


def get_header_data(country):
    return build_header_data(
        domain_service.get_domains_for_navigation(country),
        category_service.get_active_categories(),
    )


def get_sidebar_data(country):
    return build_sidebar_data(
        domain_service.get_domains_for_navigation(country),
        category_service.get_active_categories(),
    )


def get_page_sidebar_data(path, country):
    parsed, _, _, domain, _, root_page = _resolve_context(path, country)
    if domain is None:
        return None
    if not parsed["pageSegments"] and domain["pageType"] != "direct":
        return None
    return build_page_sidebar_data(domain, root_page, country)


def get_breadcrumb_data(path, country):
    parsed, _, _, domain, chain, _ = _resolve_context(path, country)
    return build_breadcrumb_data(parsed["segments"], domain, chain)
