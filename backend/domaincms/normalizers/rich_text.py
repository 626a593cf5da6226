from .common import iso


def normalize_rich_text(content, *, include_html=True):
    data = {
        "id": content.id,
        "pageId": content.page_id,
        "title": content.title,
        "wordCount": content.word_count,
        "createdAt": iso(content.created_at),
        "updatedAt": iso(content.updated_at),
    }

    if include_html:
        data["htmlContent"] = content.html_content

    if content.page is not None:
        data["page"] = {
            "id": content.page.id,
            "title": content.page.title,
            "slug": content.page.slug,
            "domainId": content.page.domain_id,
        }

    return data
