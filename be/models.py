"""Core SQLAlchemy models (2.x style) for the Catalyst schema.

Two tables: published voice pitches and email subscriptions.
Tags are stored as a JSON-encoded string column and decoded on read.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


class PitchStatus(str, Enum):
    """Pitch lifecycle status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class SubscriptionStatus(str, Enum):
    """Subscription status."""
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"
    BOUNCED = "bounced"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Pitch(Base):
    """Voice pitches table."""
    __tablename__ = "pitches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    quote: Mapped[str | None] = mapped_column(Text)
    audio_url: Mapped[str | None] = mapped_column(String(1024))
    tags: Mapped[str | None] = mapped_column(Text)  # JSON-encoded list of strings
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PitchStatus.PUBLISHED.value,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_pitches_status_created_at", "status", "created_at"),
    )

    @property
    def tag_list(self) -> list[str]:
        """Decoded tag list; missing or unreadable values decode to an empty list."""
        if not self.tags:
            return []
        try:
            decoded = json.loads(self.tags)
        except (TypeError, ValueError):
            logger.warning(f"Pitch {self.id} has unreadable tags column: {self.tags!r}")
            return []
        if not isinstance(decoded, list):
            return []
        return [t for t in decoded if isinstance(t, str)]

    def set_tags(self, tags: list[str] | None) -> None:
        """Encode tags; an empty list is stored as NULL."""
        self.tags = json.dumps(tags, ensure_ascii=False) if tags else None


class Subscription(Base):
    """Email subscriptions table."""
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="website")  # website, workshop, event
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SubscriptionStatus.ACTIVE.value,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
