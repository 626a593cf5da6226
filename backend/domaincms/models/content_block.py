from sqlalchemy.orm import validates

from domaincms.extensions import db
from .base import BaseModel

BLOCK_TYPES = (
    "HEADING",
    "PARAGRAPH",
    "BULLETLIST",
    "TABLE",
    "COLLAPSIBLE",
    "COLUMN",
    "TEXT",
    "LINK_BUTTON",
    "NAVIGATION",
    "SECTION_DIVIDER",
    "IMAGE",
    "VIDEO",
    "QUOTE",
    "SECTION_HEADER",
    "SECTION_LINKS",
    "SUBCATEGORY_CARD",
    "TABLE_CONTAINER",
)


class ContentBlock(BaseModel):
    __tablename__ = "content_blocks"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, index=True)
    type = db.Column(db.String(30), nullable=False)
    content = db.Column(db.JSON, default=dict)
    order = db.Column(db.Integer, nullable=False, default=0)
    column_position = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    page = db.relationship("Page", back_populates="content_blocks")

    @validates("type")
    def validate_type(self, _key, value):
        if value not in BLOCK_TYPES:
            raise ValueError(f"Unknown block type: {value}")
        return value
