from typing import Any, Dict

from flask import current_app

from domaincms.domain.invariants.page import assert_parent_allowed
from domaincms.domain.sections import without_page
from domaincms.domain.page_tree import PageTree
from domaincms.errors import ValidationError, NotFound
from domaincms.extensions import db
from domaincms.models.page import Page, CONTENT_TYPES, MAIN_PAGE_SLUG
from domaincms.services.cache import invalidate, CACHE_TAGS, domain_tag, page_tag
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_string, validate_slug, validate_choice
from .create_page import assert_slug_available, clean_target_countries


def get_page(page_id: str) -> Page:
    page = db.session.get(Page, page_id)
    if page is None:
        raise NotFound("Page not found")
    return page


def update_page(
    *,
    page_id: str,
    data: Dict[str, Any],
) -> Page:
    """
    Update a page's fields and, optionally, move it under another parent.

    Edge cases handled:
    - Moving under itself or a descendant (cycle)
    - Slug conflict under the target parent
    - The main page keeps its reserved slug and root position
    """
    page = get_page(page_id)

    slug = data.get("slug", page.slug)
    parent_id = data["parentId"] if "parentId" in data else page.parent_id
    parent_id = parent_id or None

    if page.is_main:
        if slug != MAIN_PAGE_SLUG or parent_id is not None:
            raise ValidationError("The main page cannot be renamed or moved")
    else:
        validate_slug(slug)
        if slug == MAIN_PAGE_SLUG:
            raise ValidationError("This slug is reserved")

    if parent_id is not None and parent_id != page.parent_id:
        parent = db.session.get(Page, parent_id)
        if parent is None or parent.domain_id != page.domain_id:
            raise ValidationError("Parent page must belong to the same domain")
        assert_parent_allowed(
            PageTree.for_domain(page.domain_id),
            page_id=page.id,
            parent_id=parent_id,
        )

    if slug != page.slug or parent_id != page.parent_id:
        assert_slug_available(
            domain_id=page.domain_id,
            parent_id=parent_id,
            slug=slug,
            exclude_id=page.id,
        )

    if "contentType" in data:
        validate_choice(data["contentType"], CONTENT_TYPES, "Content type")

    title = None
    if "title" in data:
        title = require_string(data["title"], "Title")

    target_countries = None
    if "targetCountries" in data:
        target_countries = clean_target_countries(data["targetCountries"])

    with transactional():
        if parent_id != page.parent_id and page.parent is not None and page.parent.sections:
            page.parent.sections = without_page(page.parent.sections, page.id)
        page.slug = slug
        page.parent_id = parent_id
        if title is not None:
            page.title = title
        if "contentType" in data:
            page.content_type = data["contentType"]
            if page.content_type == "section_based" and page.sections is None:
                page.sections = []
        if "order" in data:
            try:
                page.order = int(data["order"])
            except (TypeError, ValueError):
                raise ValidationError("Order must be a number")
        if target_countries is not None:
            page.target_countries = target_countries

    current_app.logger.info("Page updated: %s", page.id)
    invalidate(
        CACHE_TAGS["PAGES"],
        CACHE_TAGS["NAVIGATION"],
        domain_tag(page.domain.slug),
        page_tag(page.id),
    )
    return page
