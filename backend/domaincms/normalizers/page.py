from domaincms.models.page import MAIN_PAGE_SLUG
from .common import iso


def page_url(domain_slug, slugs):
    """Public URL for a page given its slug path; ``__main__`` is never part of it."""
    parts = [slug for slug in slugs if slug != MAIN_PAGE_SLUG]
    return "/".join([f"/domain/{domain_slug}"] + parts)


def normalize_page_summary(page, base_url=None):
    data = {
        "id": page.id,
        "title": page.title,
        "slug": page.slug,
        "contentType": page.content_type,
        "parentId": page.parent_id,
        "order": page.order or 0,
    }
    if base_url is not None:
        data["url"] = f"{base_url}/{page.slug}"
    return data


def normalize_page(page, admin=False):
    data = normalize_page_summary(page)
    data.update({
        "domainId": page.domain_id,
        "sections": page.sections or [],
        "isMain": page.is_main,
    })

    if admin:
        data["targetCountries"] = page.target_countries or []
        data["createdAt"] = iso(page.created_at)
        data["updatedAt"] = iso(page.updated_at)

    return data


def normalize_content_block(block):
    return {
        "id": block.id,
        "type": block.type,
        "content": block.content or {},
        "order": block.order,
        "columnPosition": block.column_position,
    }
