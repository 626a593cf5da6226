from typing import Any, Dict

from flask import current_app
from sqlalchemy import func

from domaincms.errors import ValidationError, NotFound, Conflict
from domaincms.extensions import db
from domaincms.models.category import DomainCategory
from domaincms.models.domain import Domain, PAGE_TYPES
from domaincms.models.page import Page
from domaincms.services.cache import invalidate, CACHE_TAGS, domain_tag
from domaincms.services.page_service import get_or_create_main_page
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_fields, require_string, validate_slug, validate_choice, parse_bool
from .create_page import clean_target_countries
from .delete_page import purge_page_content


def get_domain(domain_id: str) -> Domain:
    domain = db.session.get(Domain, domain_id)
    if domain is None:
        raise NotFound("Domain not found")
    return domain


def _resolve_category_id(value):
    if not value:
        return None
    if db.session.get(DomainCategory, value) is None:
        raise ValidationError("Selected category does not exist")
    return value


def _next_order_in_category(category_id, exclude_id=None):
    query = db.session.query(func.max(Domain.order_in_category))
    if category_id is None:
        query = query.filter(Domain.category_id.is_(None))
    else:
        query = query.filter(Domain.category_id == category_id)
    if exclude_id is not None:
        query = query.filter(Domain.id != exclude_id)
    current = query.scalar()
    return 0 if current is None else current + 1


def _parse_order(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Order in category must be a number")


def _invalidate_domain(slug):
    invalidate(
        CACHE_TAGS["DOMAINS"],
        CACHE_TAGS["NAVIGATION"],
        CACHE_TAGS["PAGES"],
        domain_tag(slug),
    )


def page_counts_by_domain():
    rows = (
        db.session.query(Page.domain_id, func.count(Page.id))
        .group_by(Page.domain_id)
        .all()
    )
    return dict(rows)


def create_domain(*, data: Dict[str, Any]) -> Domain:
    """
    Create a domain.

    Responsibilities:
    - Slug format and uniqueness
    - Category must exist when given
    - Append to the end of its category
    - Direct domains get their ``__main__`` root page immediately
    """
    require_fields(data, "name", "slug")
    validate_slug(data["slug"])

    page_type = data.get("pageType") or "direct"
    validate_choice(page_type, PAGE_TYPES, "Page type")

    if Domain.query.filter_by(slug=data["slug"]).first():
        raise Conflict("A domain with this slug already exists")

    category_id = _resolve_category_id(data.get("categoryId"))

    domain = Domain()
    domain.name = require_string(data["name"], "Name")
    domain.slug = data["slug"]
    domain.page_type = page_type
    domain.is_published = parse_bool(data.get("isPublished"), default=False)
    domain.target_countries = clean_target_countries(data.get("targetCountries"))
    domain.category_id = category_id

    with transactional():
        if data.get("orderInCategory") is not None:
            domain.order_in_category = _parse_order(data["orderInCategory"])
        else:
            domain.order_in_category = _next_order_in_category(category_id)
        db.session.add(domain)

    if domain.is_direct:
        get_or_create_main_page(domain.id, domain.name)

    current_app.logger.info("Domain created: %s (%s)", domain.slug, domain.page_type)
    _invalidate_domain(domain.slug)
    return domain


def update_domain(*, domain_id: str, data: Dict[str, Any]) -> Domain:
    domain = get_domain(domain_id)
    old_slug = domain.slug

    if "slug" in data and data["slug"] != domain.slug:
        validate_slug(data["slug"])
        if Domain.query.filter(Domain.slug == data["slug"], Domain.id != domain.id).first():
            raise Conflict("A domain with this slug already exists")

    name = None
    if "name" in data:
        name = require_string(data["name"], "Name")

    if "pageType" in data:
        validate_choice(data["pageType"], PAGE_TYPES, "Page type")

    category_id = domain.category_id
    if "categoryId" in data:
        category_id = _resolve_category_id(data["categoryId"])

    target_countries = None
    if "targetCountries" in data:
        target_countries = clean_target_countries(data["targetCountries"])

    with transactional():
        if name is not None:
            domain.name = name
        if "slug" in data:
            domain.slug = data["slug"]
        if "pageType" in data:
            domain.page_type = data["pageType"]
        if "isPublished" in data:
            domain.is_published = parse_bool(data["isPublished"])
        if target_countries is not None:
            domain.target_countries = target_countries

        if category_id != domain.category_id:
            domain.category_id = category_id
            domain.order_in_category = _next_order_in_category(category_id, exclude_id=domain.id)
        elif data.get("orderInCategory") is not None:
            domain.order_in_category = _parse_order(data["orderInCategory"])

    if domain.is_direct:
        get_or_create_main_page(domain.id, domain.name)

    current_app.logger.info("Domain updated: %s", domain.slug)
    _invalidate_domain(old_slug)
    if old_slug != domain.slug:
        invalidate(domain_tag(domain.slug))
    return domain


def patch_domain(*, domain_id: str, data: Dict[str, Any]) -> Domain:
    """Quick toggles: publish state, order within category, target countries."""
    domain = get_domain(domain_id)

    allowed = {"isPublished", "orderInCategory", "targetCountries"}
    if not allowed.intersection(data):
        raise ValidationError("Nothing to update")

    target_countries = None
    if "targetCountries" in data:
        target_countries = clean_target_countries(data["targetCountries"])

    with transactional():
        if "isPublished" in data:
            domain.is_published = parse_bool(data["isPublished"])
        if "orderInCategory" in data:
            domain.order_in_category = _parse_order(data["orderInCategory"])
        if target_countries is not None:
            domain.target_countries = target_countries

    _invalidate_domain(domain.slug)
    return domain


def delete_domain(*, domain_id: str) -> int:
    """
    Delete a domain with every page and page content it owns.

    Returns the number of deleted pages.
    """
    domain = get_domain(domain_id)
    slug = domain.slug

    page_ids = [row.id for row in Page.query.with_entities(Page.id).filter_by(domain_id=domain.id)]

    with transactional():
        purge_page_content(page_ids)
        # detach self references before the bulk delete
        Page.query.filter_by(domain_id=domain.id).update(
            {Page.parent_id: None}, synchronize_session=False
        )
        Page.query.filter_by(domain_id=domain.id).delete(synchronize_session=False)
        db.session.delete(domain)

    db.session.expire_all()

    current_app.logger.info("Domain deleted: %s (%d pages)", slug, len(page_ids))
    _invalidate_domain(slug)
    invalidate(CACHE_TAGS["TABLES"])
    return len(page_ids)
