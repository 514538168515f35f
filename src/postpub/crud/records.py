"""Rebuild cache persistence: upsert by (path, segment), lookup, and pruning"""

from datetime import datetime
from typing import Iterable

from sqlmodel import Session, select

from postpub.core.models import Document
from postpub.crud.models import BuildRecord


def get_record(session: Session, path: str, segment: int) -> BuildRecord | None:
    """Return the BuildRecord for a file segment, or None if never built."""
    return session.exec(
        select(BuildRecord).where(BuildRecord.path == path).where(BuildRecord.segment == segment)
    ).one_or_none()


def list_records(session: Session, path: str | None = None) -> list[BuildRecord]:
    """Return records ordered by path and segment, optionally for one file."""
    query = select(BuildRecord)
    if path is not None:
        query = query.where(BuildRecord.path == path)
    return list(session.exec(query.order_by(BuildRecord.path, BuildRecord.segment)).all())


def commit_record(session: Session, doc: Document, built_at: datetime | None = None) -> str:
    """Upsert the record for a Document.

    Returns 'created', 'updated', or 'unchanged' (same segment hash and slug).
    Flushes but does not commit; caller controls the transaction.
    """
    record = get_record(session, doc.source_path, doc.segment)
    built_at = built_at or datetime.now()

    if record:
        if record.hash == doc.hash and record.slug == doc.slug:
            return 'unchanged'
        record.hash = doc.hash
        record.slug = doc.slug
        record.built_at = built_at
        session.add(record)
        session.flush()
        return 'updated'

    session.add(BuildRecord(
        path=doc.source_path, segment=doc.segment, slug=doc.slug, hash=doc.hash, built_at=built_at,
    ))
    session.flush()
    return 'created'


def prune_records(session: Session, path: str, keep: Iterable[int]) -> int:
    """Delete records of a file whose segment index is not in keep. Returns count deleted."""
    keep = set(keep)
    stale = [r for r in list_records(session, path) if r.segment not in keep]
    for record in stale:
        session.delete(record)
    session.flush()
    return len(stale)
