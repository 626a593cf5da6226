from typing import Any, Dict, List, Optional

from flask import current_app

from domaincms.extensions import db
from domaincms.models.content_block import ContentBlock
from domaincms.models.page import Page, MAIN_PAGE_SLUG
from domaincms.domain.sections import load_sections, unorganized_page_ids
from domaincms.normalizers.page import normalize_page, normalize_page_summary, normalize_content_block
from domaincms.utils.countries import country_visibility_clause
from domaincms.utils.transaction import transactional
from .cache import remember, invalidate, CACHE_TAGS, CACHE_DURATIONS, domain_tag, page_tag
from . import table_service


def get_main_page(domain_id: str) -> Optional[Page]:
    return Page.query.filter_by(domain_id=domain_id, slug=MAIN_PAGE_SLUG).first()


def get_or_create_main_page(domain_id: str, domain_name: str) -> Page:
    """
    Return the synthetic root of a direct domain, creating it on first use.

    Responsibilities:
    - One ``__main__`` page per domain
    - New main pages are section-based with no sections configured
    """
    page = get_main_page(domain_id)
    if page is not None:
        return page

    page = Page()
    page.domain_id = domain_id
    page.parent_id = None
    page.title = domain_name
    page.slug = MAIN_PAGE_SLUG
    page.content_type = "section_based"
    page.sections = []
    page.target_countries = ["ALL"]
    page.order = 0

    with transactional():
        db.session.add(page)

    current_app.logger.info("Created main page for domain %s", domain_id)
    invalidate(CACHE_TAGS["PAGES"])
    return page


def _chain_entry(page: Page) -> Dict[str, Any]:
    entry = normalize_page_summary(page)
    entry["sections"] = page.sections or []
    return entry


def _stitch_chain(candidates, segments, root_parent_id):
    """
    Walk ``segments`` through the batch-fetched candidates.

    Returns ``(chain, ambiguous)``. ``chain`` is None when a link is
    missing, or when two candidates share a (parent, slug) pair.
    """
    by_key: Dict[tuple, List[Page]] = {}
    for page in candidates:
        by_key.setdefault((page.parent_id, page.slug), []).append(page)

    chain = []
    parent_id = root_parent_id
    for slug in segments:
        matches = by_key.get((parent_id, slug), [])
        if len(matches) != 1:
            return None, len(matches) > 1
        chain.append(matches[0])
        parent_id = matches[0].id

    return chain, False


def _resolve_sequentially(domain_id, segments, root_parent_id, country):
    chain = []
    parent_id = root_parent_id
    for slug in segments:
        query = Page.query.filter(
            Page.domain_id == domain_id,
            Page.slug == slug,
            country_visibility_clause(Page.target_countries, country),
        )
        if parent_id is None:
            query = query.filter(Page.parent_id.is_(None))
        else:
            query = query.filter(Page.parent_id == parent_id)

        page = query.order_by(Page.order.asc(), Page.created_at.asc()).first()
        if page is None:
            return None
        chain.append(page)
        parent_id = page.id

    return chain


def resolve_page_chain(domain: Dict[str, Any], segments: List[str], country: str) -> Optional[List[Dict[str, Any]]]:
    """
    Resolve a slug path to the chain of pages it names, root first.

    Direct domains start below the ``__main__`` page, hierarchical ones at
    the parentless pages. Slugs are unique only under one parent, so the
    chain is stitched by (parent, slug) rather than by slug alone.
    Returns None when any segment does not resolve.
    """
    segments = [segment for segment in segments if segment]
    if not segments:
        return []
    if MAIN_PAGE_SLUG in segments:
        return None

    def load():
        root_parent_id = None
        if domain["pageType"] == "direct":
            root_parent_id = get_or_create_main_page(domain["id"], domain["name"]).id

        candidates = Page.query.filter(
            Page.domain_id == domain["id"],
            Page.slug.in_(set(segments)),
            country_visibility_clause(Page.target_countries, country),
        ).all()

        chain, ambiguous = _stitch_chain(candidates, segments, root_parent_id)
        if chain is None and (len(segments) > 1 or ambiguous):
            current_app.logger.info(
                "Batch resolution incomplete for %s/%s, resolving per segment",
                domain["slug"],
                "/".join(segments),
            )
            chain = _resolve_sequentially(domain["id"], segments, root_parent_id, country)

        if chain is None:
            return None
        return [_chain_entry(page) for page in chain]

    return remember(
        f"page-chain:{domain['id']}:{country}:{'/'.join(segments)}",
        load,
        tags=(CACHE_TAGS["PAGES"], domain_tag(domain["slug"])),
        timeout=CACHE_DURATIONS["MEDIUM"],
    )


def get_child_pages(page_id: str, country: str) -> List[Page]:
    return (
        Page.query.filter(
            Page.parent_id == page_id,
            country_visibility_clause(Page.target_countries, country),
        )
        .order_by(Page.order.asc(), Page.title.asc())
        .all()
    )


def get_pages_with_sections(domain_id: str, country: str) -> List[Dict[str, Any]]:
    """Every visible page of a domain with its sections, for sidebar building."""
    def load():
        pages = (
            Page.query.filter(
                Page.domain_id == domain_id,
                country_visibility_clause(Page.target_countries, country),
            )
            .order_by(Page.order.asc(), Page.title.asc())
            .all()
        )
        return [_chain_entry(page) for page in pages]

    return remember(
        f"pages:with-sections:{domain_id}:{country}",
        load,
        tags=(CACHE_TAGS["PAGES"],),
        timeout=CACHE_DURATIONS["MEDIUM"],
    )


def organize_children(sections_raw, children: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Group child summaries by the page's section configuration.

    Returns ``{"sections": [...], "unorganizedPages": [...]}``. Sections
    are ordered by column, then order; ids that no longer match a child
    are skipped.
    """
    sections = load_sections(sections_raw)
    by_id = {child["id"]: child for child in children}

    organized = []
    for section in sorted(sections, key=lambda s: (s.column, s.order)):
        organized.append({
            "title": section.title,
            "column": section.column,
            "order": section.order,
            "pages": [by_id[page_id] for page_id in section.page_ids if page_id in by_id],
        })

    leftover = unorganized_page_ids([child["id"] for child in children], sections)
    return {
        "sections": organized,
        "unorganizedPages": [by_id[page_id] for page_id in leftover],
    }


def get_page_detail(page_id: str, base_url: str, country: str) -> Optional[Dict[str, Any]]:
    """
    Full public view of one page: content blocks, visible children,
    rich text, public table and, for section-based pages, its sections.
    """
    def load():
        page = db.session.get(Page, page_id)
        if page is None:
            return None

        data = normalize_page(page)
        data["url"] = base_url

        blocks = (
            ContentBlock.query.filter_by(page_id=page.id, is_active=True)
            .order_by(ContentBlock.order.asc())
            .all()
        )
        data["contentBlocks"] = [normalize_content_block(block) for block in blocks]

        children = [
            normalize_page_summary(child, base_url=base_url)
            for child in get_child_pages(page.id, country)
        ]
        data["children"] = children

        if page.content_type == "section_based":
            data.update(organize_children(page.sections, children))

        if page.rich_text is not None:
            data["richText"] = {
                "id": page.rich_text.id,
                "title": page.rich_text.title,
                "htmlContent": page.rich_text.html_content,
                "wordCount": page.rich_text.word_count,
                "updatedAt": page.rich_text.updated_at.isoformat() if page.rich_text.updated_at else None,
            }
        else:
            data["richText"] = None

        data["table"] = None
        if page.content_type == "table":
            public = table_service.get_public_table(page.id, country)
            if public is not None:
                data["table"] = public["table"]

        return data

    return remember(
        f"page-detail:{page_id}:{country}",
        load,
        tags=(CACHE_TAGS["PAGES"], CACHE_TAGS["TABLES"], page_tag(page_id)),
        timeout=CACHE_DURATIONS["MEDIUM"],
    )


def get_by_path(domain: Dict[str, Any], segments: List[str], country: str) -> Optional[Dict[str, Any]]:
    """Resolve ``segments`` and return the detail view of the last page."""
    chain = resolve_page_chain(domain, segments, country)
    if not chain:
        return None

    base_url = "/".join([domain["url"]] + [entry["slug"] for entry in chain])
    detail = get_page_detail(chain[-1]["id"], base_url, country)
    if detail is None:
        return None

    detail = dict(detail)
    detail["path"] = [
        {"id": entry["id"], "title": entry["title"], "slug": entry["slug"]}
        for entry in chain
    ]
    return detail


def get_domain_root(domain: Dict[str, Any], country: str) -> Dict[str, Any]:
    """
    Landing view of a domain.

    Direct domains show their main page (created if needed); hierarchical
    domains list their visible root pages.
    """
    if domain["pageType"] == "direct":
        main = get_or_create_main_page(domain["id"], domain["name"])
        return {
            "page": get_page_detail(main.id, domain["url"], country),
            "pages": [],
        }

    roots = (
        Page.query.filter(
            Page.domain_id == domain["id"],
            Page.parent_id.is_(None),
            Page.slug != MAIN_PAGE_SLUG,
            country_visibility_clause(Page.target_countries, country),
        )
        .order_by(Page.order.asc(), Page.title.asc())
        .all()
    )
    return {
        "page": None,
        "pages": [normalize_page_summary(page, base_url=domain["url"]) for page in roots],
    }
