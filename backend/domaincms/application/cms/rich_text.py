import html
from typing import Any, Dict

import bleach
from flask import current_app

from domaincms.errors import ValidationError, NotFound
from domaincms.extensions import db
from domaincms.models.page import Page
from domaincms.models.rich_text import RichTextContent
from domaincms.services.cache import invalidate, CACHE_TAGS, page_tag
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_fields


def html_to_plain_text(markup: str) -> str:
    """Visible text of ``markup`` with whitespace collapsed."""
    # adjacent block elements must not glue words together
    spaced = (markup or "").replace("<", " <")
    text = bleach.clean(spaced, tags=[], strip=True)
    return " ".join(html.unescape(text).split())


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def get_rich_text(page_id: str) -> RichTextContent:
    content = RichTextContent.query.filter_by(page_id=page_id).first()
    if content is None:
        raise NotFound("Rich text content not found")
    return content


def save_rich_text(*, data: Dict[str, Any]) -> RichTextContent:
    """
    Create or replace the rich text of a ``rich_text`` page.

    Plain text and word count are always derived from the HTML.
    """
    require_fields(data, "pageId")
    if not isinstance(data.get("htmlContent"), str):
        raise ValidationError("Missing required fields: htmlContent")

    page = db.session.get(Page, data["pageId"])
    if page is None:
        raise NotFound("Page not found")
    if page.content_type != "rich_text":
        raise ValidationError("Page must have content type 'rich_text'")

    plain_text = html_to_plain_text(data["htmlContent"])

    content = RichTextContent.query.filter_by(page_id=page.id).first()
    with transactional():
        if content is None:
            content = RichTextContent()
            content.page_id = page.id
            db.session.add(content)
        content.html_content = data["htmlContent"]
        content.title = data.get("title") or None
        content.plain_text = plain_text
        content.word_count = count_words(plain_text)

    current_app.logger.info("Rich text saved for page %s (%d words)", page.id, content.word_count)
    invalidate(CACHE_TAGS["PAGES"], page_tag(page.id))
    return content


def update_rich_text(*, page_id: str, data: Dict[str, Any]) -> RichTextContent:
    content = get_rich_text(page_id)

    with transactional():
        if "htmlContent" in data:
            if not isinstance(data["htmlContent"], str):
                raise ValidationError("htmlContent must be a string")
            content.html_content = data["htmlContent"]
            content.plain_text = html_to_plain_text(data["htmlContent"])
            content.word_count = count_words(content.plain_text)
        if "title" in data:
            content.title = data["title"] or None

    invalidate(CACHE_TAGS["PAGES"], page_tag(page_id))
    return content


def delete_rich_text(*, page_id: str) -> None:
    content = get_rich_text(page_id)

    with transactional():
        db.session.delete(content)

    invalidate(CACHE_TAGS["PAGES"], page_tag(page_id))
