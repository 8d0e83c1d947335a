"""Published feed: read pitches and project them into display records.

Display-only fields (creator, avatar, relative timestamp and the quote/summary
fallbacks) are recomputed on every read and never stored.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ai.tags import collect_existing, merge_and_sort
from be import models
from be.pipelines.normalization import truncate
from config.tag_vocabulary import STANDARD_TAGS

logger = logging.getLogger(__name__)


@dataclass
class FeedItem:
    """A pitch as shown in the public feed."""
    id: int
    creator: str
    title: str
    avatar: str
    quote: str
    summary: str
    tags: list[str]
    timestamp: str
    audio_url: str | None
    transcript: str


@dataclass
class TagCatalog:
    """Tags available for filtering the feed."""
    standard: list[str]
    all: list[str]
    existing: list[str]


class FeedError(Exception):
    """Raised when the feed cannot be read."""
    pass


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def relative_timestamp(created_at: datetime, now: datetime | None = None) -> str:
    """Human-readable age: ``Just now``, ``N hour(s) ago`` or ``N day(s) ago``."""
    now = _as_utc(now or datetime.now(timezone.utc))
    hours = int((now - _as_utc(created_at)).total_seconds() // 3600)

    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days > 1 else ''} ago"


def derive_creator(title: str) -> str:
    """Placeholder creator name: the title's first two space-separated words.

    Pitches carry no author field, so this is a display heuristic only.
    """
    words = title.split(" ")
    return words[0] + " " + (words[1] if len(words) > 1 else "")


def derive_avatar(creator: str) -> str:
    """Initials of the derived creator name."""
    return "".join(part[:1] for part in creator.split(" "))


def project_pitch(pitch: models.Pitch, now: datetime | None = None) -> FeedItem:
    """Pure projection of a stored pitch into a feed record."""
    creator = derive_creator(pitch.title)
    return FeedItem(
        id=pitch.id,
        creator=creator,
        title=pitch.title,
        avatar=derive_avatar(creator),
        quote=pitch.quote or truncate(pitch.transcript, 100, keep=100),
        summary=pitch.description or pitch.transcript[:200] + "...",
        tags=pitch.tag_list,
        timestamp=relative_timestamp(pitch.created_at, now),
        audio_url=pitch.audio_url,
        transcript=pitch.transcript,
    )


async def fetch_published(session: AsyncSession) -> list[models.Pitch]:
    """Published pitches ordered by creation time (oldest first)."""
    query = (
        select(models.Pitch)
        .where(models.Pitch.status == models.PitchStatus.PUBLISHED.value)
        .order_by(models.Pitch.created_at, models.Pitch.id)
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def list_published(session: AsyncSession, now: datetime | None = None) -> list[FeedItem]:
    """Feed records for every published pitch.

    Raises:
        FeedError: If the pitches cannot be read
    """
    try:
        pitches = await fetch_published(session)
    except Exception as e:
        logger.error(f"Failed to read published pitches: {e}", exc_info=True)
        raise FeedError(f"Feed read failed: {e}") from e

    now = now or datetime.now(timezone.utc)
    items = [project_pitch(p, now) for p in pitches]
    logger.debug(f"Projected {len(items)} published pitches")
    return items


async def collect_tags(session: AsyncSession) -> TagCatalog:
    """Standard vocabulary plus every tag used by a published pitch.

    Raises:
        FeedError: If the pitches cannot be read
    """
    try:
        pitches = await fetch_published(session)
    except Exception as e:
        logger.error(f"Failed to read pitch tags: {e}", exc_info=True)
        raise FeedError(f"Tag read failed: {e}") from e

    existing = collect_existing(p.tag_list for p in pitches)
    return TagCatalog(
        standard=list(STANDARD_TAGS),
        all=merge_and_sort(existing),
        existing=existing,
    )
