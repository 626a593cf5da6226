from domaincms.extensions import db
from .base import BaseModel


class DataTable(BaseModel):
    __tablename__ = "tables"

    name = db.Column(db.String(200), nullable=False)
    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, unique=True)

    # mapped to the "schema" column
    table_schema = db.Column("schema", db.JSON, nullable=False, default=dict)
    data = db.Column(db.JSON, nullable=False, default=dict)
    settings = db.Column(db.JSON, nullable=True)

    page = db.relationship("Page", back_populates="table")

    @property
    def rows(self):
        return list((self.data or {}).get("rows") or [])

    @property
    def table_metadata(self):
        return dict((self.data or {}).get("metadata") or {})
