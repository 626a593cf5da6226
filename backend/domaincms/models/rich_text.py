from domaincms.extensions import db
from .base import BaseModel


class RichTextContent(BaseModel):
    __tablename__ = "rich_text_contents"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, unique=True)
    html_content = db.Column(db.Text, nullable=False, default="")
    title = db.Column(db.String(200), nullable=True)
    word_count = db.Column(db.Integer, nullable=False, default=0)
    plain_text = db.Column(db.Text, nullable=True)

    page = db.relationship("Page", back_populates="rich_text")
