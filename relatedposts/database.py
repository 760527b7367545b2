"""
Database schema and connection management.

Uses SQLite with SQLAlchemy as an alternative corpus store.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Tuple

from sqlalchemy import create_engine, text, Boolean, Column, DateTime, JSON, String, Text
from sqlalchemy.orm import declarative_base, sessionmaker

from .records import ContentRecord, EPOCH_FALLBACK, as_utc

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Post(Base):
    """Post model."""

    __tablename__ = "posts"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    category = Column(String, nullable=True)
    published_at = Column(DateTime, nullable=False)  # stored as naive UTC
    description = Column(Text, nullable=False, default="")
    restricted = Column(Boolean, nullable=False, default=False)
    pinned = Column(Boolean, nullable=False, default=False)
    draft = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_record(self) -> ContentRecord:
        published = self.published_at or EPOCH_FALLBACK
        return ContentRecord(
            id=self.id,
            title=self.title,
            published_at=as_utc(published),
            tags=frozenset(self.tags or []),
            category=self.category or None,
            restricted=bool(self.restricted),
            description=self.description or "",
            pinned=bool(self.pinned),
            draft=bool(self.draft),
        )


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()


def upsert_records(db_path: Path, records: Iterable[ContentRecord]) -> Tuple[int, int]:
    """
    Insert or update posts by id.

    Returns:
        Tuple of (inserted, updated)
    """
    inserted = updated = 0
    session = get_session(db_path)
    try:
        for r in records:
            values = dict(
                title=r.title,
                tags=sorted(r.tags),
                category=r.category,
                published_at=r.published_at.astimezone(timezone.utc).replace(tzinfo=None),
                description=r.description,
                restricted=r.restricted,
                pinned=r.pinned,
                draft=r.draft,
            )
            existing = session.get(Post, r.id)
            if existing is None:
                session.add(Post(id=r.id, **values))
                inserted += 1
            else:
                for k, v in values.items():
                    setattr(existing, k, v)
                updated += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return inserted, updated


def load_records(db_path: Path, include_drafts: bool = False) -> List[ContentRecord]:
    """Load posts in insertion (rowid) order, which ranking uses as its tie-break order."""
    session = get_session(db_path)
    try:
        query = session.query(Post)
        if not include_drafts:
            query = query.filter(Post.draft.is_(False))
        return [p.to_record() for p in query.order_by(text("posts.rowid")).all()]
    finally:
        session.close()
