from domaincms.models.category import DomainCategory
from domaincms.normalizers.category import normalize_category
from .cache import remember, CACHE_TAGS, CACHE_DURATIONS


def get_active_categories():
    """Active categories ordered for the 3-column layout, as plain dicts."""
    def load():
        categories = (
            DomainCategory.query.filter_by(is_active=True)
            .order_by(
                DomainCategory.column_position.asc(),
                DomainCategory.category_order.asc(),
                DomainCategory.name.asc(),
            )
            .all()
        )
        return [normalize_category(category) for category in categories]

    return remember(
        "categories:active",
        load,
        tags=(CACHE_TAGS["CATEGORIES"],),
        timeout=CACHE_DURATIONS["LONG"],
    )
