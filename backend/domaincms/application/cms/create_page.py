from typing import Any, Dict

from flask import current_app
from sqlalchemy import func

from domaincms.errors import ValidationError, NotFound, Conflict
from domaincms.extensions import db
from domaincms.models.domain import Domain
from domaincms.models.page import Page, CONTENT_TYPES, MAIN_PAGE_SLUG
from domaincms.services.cache import invalidate, CACHE_TAGS, domain_tag
from domaincms.services.page_service import get_or_create_main_page
from domaincms.utils.countries import parse_target_countries, invalid_country_codes
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_fields, require_string, validate_slug, validate_choice


def clean_target_countries(value):
    try:
        codes = parse_target_countries(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    invalid = invalid_country_codes(codes)
    if invalid:
        raise ValidationError(f"Invalid country codes: {', '.join(invalid)}")
    return codes


def assert_slug_available(*, domain_id, parent_id, slug, exclude_id=None):
    query = Page.query.filter(Page.domain_id == domain_id, Page.slug == slug)
    if parent_id is None:
        query = query.filter(Page.parent_id.is_(None))
    else:
        query = query.filter(Page.parent_id == parent_id)
    if exclude_id is not None:
        query = query.filter(Page.id != exclude_id)

    if query.first() is not None:
        where = "under the same parent" if parent_id else "at the root level"
        raise Conflict(f'A page with slug "{slug}" already exists {where}')


def next_page_order(domain_id, parent_id):
    query = db.session.query(func.max(Page.order)).filter(Page.domain_id == domain_id)
    if parent_id is None:
        query = query.filter(Page.parent_id.is_(None))
    else:
        query = query.filter(Page.parent_id == parent_id)
    current = query.scalar()
    return 0 if current is None else current + 1


def create_page(
    *,
    data: Dict[str, Any],
) -> Page:
    """
    Create a page in a domain's tree.

    Edge cases handled:
    - Direct domains: a page without a parent is attached to ``__main__``
    - Parent must belong to the same domain
    - Slug unique under its parent only
    """
    require_fields(data, "title", "slug", "domainId")
    validate_slug(data["slug"])
    if data["slug"] == MAIN_PAGE_SLUG:
        raise ValidationError("This slug is reserved")

    content_type = data.get("contentType") or "narrative"
    validate_choice(content_type, CONTENT_TYPES, "Content type")

    domain = db.session.get(Domain, data["domainId"])
    if domain is None:
        raise NotFound("Domain not found")

    parent_id = data.get("parentId") or None
    if parent_id is None and domain.is_direct:
        parent_id = get_or_create_main_page(domain.id, domain.name).id
    elif parent_id is not None:
        parent = db.session.get(Page, parent_id)
        if parent is None or parent.domain_id != domain.id:
            raise ValidationError("Parent page must belong to the same domain")

    assert_slug_available(domain_id=domain.id, parent_id=parent_id, slug=data["slug"])

    page = Page()
    page.domain_id = domain.id
    page.parent_id = parent_id
    page.title = require_string(data["title"], "Title")
    page.slug = data["slug"]
    page.content_type = content_type
    page.target_countries = clean_target_countries(data.get("targetCountries"))
    page.sections = [] if content_type == "section_based" else None

    with transactional():
        page.order = next_page_order(domain.id, parent_id)
        db.session.add(page)

    current_app.logger.info("Page created: %s/%s", domain.slug, page.slug)
    invalidate(CACHE_TAGS["PAGES"], CACHE_TAGS["NAVIGATION"], domain_tag(domain.slug))
    return page
