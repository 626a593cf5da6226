from typing import Any, Dict

from flask import current_app
from sqlalchemy import func

from domaincms.errors import ValidationError, NotFound, Conflict
from domaincms.extensions import db
from domaincms.models.category import DomainCategory
from domaincms.models.domain import Domain
from domaincms.services.cache import invalidate, CACHE_TAGS
from domaincms.utils.transaction import transactional
from domaincms.utils.validators import require_fields, require_string, validate_slug, parse_bool

COLUMN_POSITIONS = (1, 2, 3)


def _next_category_order(column_position, exclude_id=None):
    query = db.session.query(func.max(DomainCategory.category_order)).filter(
        DomainCategory.column_position == column_position
    )
    if exclude_id is not None:
        query = query.filter(DomainCategory.id != exclude_id)
    current = query.scalar()
    return (current or 0) + 1


def _validate_category_fields(data: Dict[str, Any]) -> None:
    if "slug" in data:
        validate_slug(data["slug"])

    if "columnPosition" in data:
        try:
            column = int(data["columnPosition"])
        except (TypeError, ValueError):
            column = None
        if column not in COLUMN_POSITIONS:
            raise ValidationError("Column position must be 1, 2, or 3")

    icon = data.get("icon")
    if icon is not None and len(str(icon)) > 10:
        raise ValidationError("Icon must be 10 characters or fewer")

    description = data.get("description")
    if description is not None and len(str(description)) > 500:
        raise ValidationError("Description must be 500 characters or fewer")


def get_category(category_id: str) -> DomainCategory:
    category = db.session.get(DomainCategory, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


def category_domain_counts():
    """Map category id to ``(domain_count, published_count)``."""
    rows = (
        db.session.query(
            Domain.category_id,
            func.count(Domain.id),
            func.sum(db.case((Domain.is_published.is_(True), 1), else_=0)),
        )
        .filter(Domain.category_id.isnot(None))
        .group_by(Domain.category_id)
        .all()
    )
    return {category_id: (total, int(published or 0)) for category_id, total, published in rows}


def create_category(*, data: Dict[str, Any]) -> DomainCategory:
    """
    Create a display category.

    Responsibilities:
    - Slug format and uniqueness
    - Column position in 1..3
    - Append to the end of its column
    """
    require_fields(data, "name", "slug", "columnPosition")
    _validate_category_fields(data)

    if DomainCategory.query.filter_by(slug=data["slug"]).first():
        raise Conflict("A category with this slug already exists")

    column = int(data["columnPosition"])

    category = DomainCategory()
    category.name = require_string(data["name"], "Name")
    category.slug = data["slug"]
    category.description = data.get("description") or None
    category.icon = data.get("icon") or None
    category.column_position = column
    category.category_order = _next_category_order(column)
    category.is_active = parse_bool(data.get("isActive"), default=True)

    with transactional():
        db.session.add(category)

    current_app.logger.info("Category created: %s", category.slug)
    invalidate(CACHE_TAGS["CATEGORIES"], CACHE_TAGS["NAVIGATION"])
    return category


def update_category(*, category_id: str, data: Dict[str, Any]) -> DomainCategory:
    category = get_category(category_id)
    _validate_category_fields(data)

    if "slug" in data and data["slug"] != category.slug:
        clash = DomainCategory.query.filter(
            DomainCategory.slug == data["slug"],
            DomainCategory.id != category.id,
        ).first()
        if clash:
            raise Conflict("A category with this slug already exists")

    name = None
    if "name" in data:
        name = require_string(data["name"], "Name")

    category_order = None
    if "categoryOrder" in data and "columnPosition" not in data:
        try:
            category_order = int(data["categoryOrder"])
        except (TypeError, ValueError):
            raise ValidationError("Category order must be a number")

    with transactional():
        if "slug" in data:
            category.slug = data["slug"]
        if name is not None:
            category.name = name
        if "description" in data:
            category.description = data["description"] or None
        if "icon" in data:
            category.icon = data["icon"] or None
        if "isActive" in data:
            category.is_active = parse_bool(data["isActive"])
        if category_order is not None:
            category.category_order = category_order

        if "columnPosition" in data:
            column = int(data["columnPosition"])
            if column != category.column_position:
                # moving columns re-appends to the end of the new column
                category.category_order = _next_category_order(column, exclude_id=category.id)
                category.column_position = column

    invalidate(CACHE_TAGS["CATEGORIES"], CACHE_TAGS["NAVIGATION"], CACHE_TAGS["DOMAINS"])
    return category


def delete_category(*, category_id: str) -> None:
    category = get_category(category_id)

    domain_count = Domain.query.filter_by(category_id=category.id).count()
    if domain_count:
        raise Conflict(
            f"Cannot delete category. It contains {domain_count} domain(s). "
            "Please move or delete the domains first."
        )

    with transactional():
        db.session.delete(category)

    current_app.logger.info("Category deleted: %s", category_id)
    invalidate(CACHE_TAGS["CATEGORIES"], CACHE_TAGS["NAVIGATION"])
