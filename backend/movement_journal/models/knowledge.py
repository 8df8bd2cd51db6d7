from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class KnowledgeBaseEntry(db.Model):
    """Reference document or link. Immutable once created."""
    __tablename__ = "knowledge_base"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(128), nullable=True)
    type = db.Column(db.String(16), nullable=False)  # pdf, word, excel, link
    content = db.Column(db.Text, nullable=True)  # URL or description
    version = db.Column(db.String(32), nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "type": self.type,
            "content": self.content,
            "version": self.version,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
        }
