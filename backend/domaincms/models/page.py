from domaincms.extensions import db
from .base import BaseModel
from .types import CountryList

MAIN_PAGE_SLUG = "__main__"

CONTENT_TYPES = (
    "narrative",
    "section_based",
    "subcategory_list",
    "table",
    "rich_text",
    "mixed_content",
)


class Page(BaseModel):
    __tablename__ = "pages"

    domain_id = db.Column(db.String(36), db.ForeignKey("domains.id"), nullable=False)
    parent_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=True)

    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False)
    content_type = db.Column(db.String(30), nullable=False, default="narrative")

    # Ordered list of {title, column, order, pageIds}
    sections = db.Column(db.JSON(none_as_null=True), nullable=True)
    target_countries = db.Column(CountryList, nullable=True, default=lambda: ["ALL"])
    order = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.Index("ix_pages_domain_parent_slug", "domain_id", "parent_id", "slug"),
    )

    domain = db.relationship("Domain", back_populates="pages")
    children = db.relationship(
        "Page",
        backref=db.backref("parent", remote_side="Page.id"),
        order_by="Page.order",
    )
    content_blocks = db.relationship(
        "ContentBlock",
        back_populates="page",
        order_by="ContentBlock.order",
    )
    table = db.relationship("DataTable", back_populates="page", uselist=False)
    rich_text = db.relationship("RichTextContent", back_populates="page", uselist=False)

    @property
    def is_main(self):
        return self.slug == MAIN_PAGE_SLUG
