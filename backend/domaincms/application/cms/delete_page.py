from typing import Dict, Iterable

from flask import current_app

from domaincms.domain.invariants.page import assert_page_deletable
from domaincms.domain.page_tree import PageTree
from domaincms.domain.sections import without_page
from domaincms.extensions import db
from domaincms.models.content_block import ContentBlock
from domaincms.models.data_table import DataTable
from domaincms.models.page import Page
from domaincms.models.rich_text import RichTextContent
from domaincms.services.cache import invalidate, CACHE_TAGS, domain_tag
from domaincms.utils.transaction import transactional
from .update_page import get_page


def purge_page_content(page_ids: Iterable[str]) -> None:
    """Bulk-delete blocks, tables and rich text owned by ``page_ids``."""
    page_ids = list(page_ids)
    if not page_ids:
        return

    for model in (ContentBlock, DataTable, RichTextContent):
        model.query.filter(model.page_id.in_(page_ids)).delete(synchronize_session=False)


def delete_page(
    *,
    page_id: str,
) -> Dict[str, object]:
    """
    Hard-delete a page and all its descendants.

    Notes:
    - The domain's ``__main__`` page is never deletable
    - Content first, then pages deepest-first, then the page itself,
      all in one transaction
    """
    page = get_page(page_id)
    assert_page_deletable(page)

    title = page.title
    domain_slug = page.domain.slug
    descendant_ids = PageTree.for_domain(page.domain_id).descendants_deepest_first(page.id)

    with transactional():
        if page.parent is not None and page.parent.sections:
            page.parent.sections = without_page(page.parent.sections, page.id)

        purge_page_content(descendant_ids + [page.id])

        for descendant_id in descendant_ids:
            Page.query.filter(Page.id == descendant_id).delete(synchronize_session=False)

        Page.query.filter(Page.id == page.id).delete(synchronize_session=False)

    db.session.expire_all()

    current_app.logger.info(
        "Page deleted: %s with %d descendant(s)", page_id, len(descendant_ids)
    )
    invalidate(CACHE_TAGS["PAGES"], CACHE_TAGS["NAVIGATION"], CACHE_TAGS["TABLES"], domain_tag(domain_slug))

    return {
        "title": title,
        "descendants": len(descendant_ids),
        "deletedPages": len(descendant_ids) + 1,
    }
