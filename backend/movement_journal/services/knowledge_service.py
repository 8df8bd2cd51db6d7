# Overview: Service-layer operations for the knowledge base; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import KnowledgeBaseEntry
from . import audit_service


VALID_ENTRY_TYPES = ("pdf", "word", "excel", "link")


def list_entries() -> list[dict]:
    entries = db.session.query(KnowledgeBaseEntry).order_by(
        KnowledgeBaseEntry.created_at.desc(),
        KnowledgeBaseEntry.id.desc(),
    ).all()
    return [entry.to_dict() for entry in entries]


def create_entry(data: dict, *, actor_id: int) -> KnowledgeBaseEntry:
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("title is required")

    entry_type = (data.get("type") or "").strip().lower()
    if entry_type not in VALID_ENTRY_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(VALID_ENTRY_TYPES)}")

    entry = KnowledgeBaseEntry(
        title=title,
        category=(data.get("category") or None),
        type=entry_type,
        content=data.get("content"),
        version=(data.get("version") or None),
        created_by=actor_id,
    )
    db.session.add(entry)
    db.session.flush()

    audit_service.log_action(actor_id, "KB_ENTRY_CREATED", f"Created knowledge base entry #{entry.id}: {title}")
    db.session.commit()
    return entry
