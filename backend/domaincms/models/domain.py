from domaincms.extensions import db
from .base import BaseModel
from .types import CountryList

PAGE_TYPES = ("direct", "hierarchical")


class Domain(BaseModel):
    __tablename__ = "domains"

    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), unique=True, nullable=False, index=True)
    page_type = db.Column(db.String(20), nullable=False, default="direct")
    is_published = db.Column(db.Boolean, nullable=False, default=False, index=True)
    target_countries = db.Column(CountryList, nullable=True, default=lambda: ["ALL"])

    category_id = db.Column(
        db.String(36), db.ForeignKey("domain_categories.id"), nullable=True, index=True
    )
    order_in_category = db.Column(db.Integer, nullable=False, default=0)

    category = db.relationship("DomainCategory", back_populates="domains")
    pages = db.relationship("Page", back_populates="domain", lazy="dynamic")

    @property
    def is_direct(self):
        return self.page_type == "direct"
