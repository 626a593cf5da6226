from domaincms.extensions import db
from .base import BaseModel


class DomainCategory(BaseModel):
    __tablename__ = "domain_categories"

    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500), nullable=True)
    icon = db.Column(db.String(10), nullable=True)

    # Fixed 3-column header layout
    column_position = db.Column(db.Integer, nullable=False, default=1)
    category_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    domains = db.relationship(
        "Domain",
        back_populates="category",
        order_by="Domain.order_in_category",
    )
