from typing import Any, List

from flask import current_app

from domaincms.domain.invariants.section import parse_sections, assert_sections_reference_children
from domaincms.errors import ValidationError
from domaincms.models.page import Page
from domaincms.services.cache import invalidate, CACHE_TAGS, page_tag
from domaincms.utils.transaction import transactional
from .update_page import get_page


def child_ids_of(page_id: str) -> List[str]:
    rows = (
        Page.query.with_entities(Page.id)
        .filter(Page.parent_id == page_id)
        .order_by(Page.order.asc(), Page.title.asc())
        .all()
    )
    return [row.id for row in rows]


def update_sections(
    *,
    page_id: str,
    sections: Any,
) -> Page:
    """
    Replace a section-based page's section configuration.

    The whole list is validated before anything is written: one bad
    entry or one page id that is not a child rejects the update.
    """
    page = get_page(page_id)
    if page.content_type != "section_based":
        raise ValidationError("Sections can only be configured on section-based pages")

    parsed = parse_sections(sections)
    assert_sections_reference_children(parsed, child_ids_of(page.id))

    with transactional():
        page.sections = [section.to_dict() for section in parsed]

    current_app.logger.info("Sections updated for page %s (%d)", page.id, len(parsed))
    invalidate(CACHE_TAGS["PAGES"], CACHE_TAGS["NAVIGATION"], page_tag(page.id))
    return page
