from .common import iso


def normalize_category(category, *, domain_count=None, published_domains=None):
    data = {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "icon": category.icon,
        "columnPosition": category.column_position,
        "categoryOrder": category.category_order,
        "isActive": category.is_active,
        "createdAt": iso(category.created_at),
        "updatedAt": iso(category.updated_at),
    }

    if domain_count is not None:
        data["domainCount"] = domain_count
    if published_domains is not None:
        data["publishedDomains"] = published_domains

    return data
