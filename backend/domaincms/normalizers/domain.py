from .common import iso


def domain_url(slug):
    return f"/domain/{slug}"


def normalize_domain(domain, *, admin=False, page_count=None):
    data = {
        "id": domain.id,
        "name": domain.name,
        "slug": domain.slug,
        "pageType": domain.page_type,
        "isPublished": domain.is_published,
        "categoryId": domain.category_id,
        "orderInCategory": domain.order_in_category,
        "url": domain_url(domain.slug),
    }

    if domain.category is not None:
        data["category"] = {
            "id": domain.category.id,
            "name": domain.category.name,
            "slug": domain.category.slug,
            "icon": domain.category.icon,
            "columnPosition": domain.category.column_position,
            "categoryOrder": domain.category.category_order,
        }
    else:
        data["category"] = None

    if admin:
        data["targetCountries"] = domain.target_countries or []
        data["previewUrl"] = domain_url(domain.slug)
        data["createdAt"] = iso(domain.created_at)
        data["updatedAt"] = iso(domain.updated_at)

    if page_count is not None:
        data["pageCount"] = page_count

    return data
