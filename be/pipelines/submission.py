"""Pitch submission pipeline: validate, enrich with a quote, normalize tags, persist.

Every submitted pitch is published immediately; there is no draft path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ai.enrichment import PitchEnricher, fallback_quote
from ai.tags import validate as validate_tags
from be import models
from be.pipelines.normalization import clean_str

logger = logging.getLogger(__name__)


@dataclass
class PitchSubmission:
    """Raw submission fields as received from the client."""
    title: Any = None
    transcript: Any = None
    description: Any = None
    audio_url: Any = None
    tags: list[Any] = field(default_factory=list)


@dataclass
class SubmittedPitch:
    """Identity of a newly stored pitch."""
    id: int
    uuid: str
    title: str
    status: str


class PitchValidationError(Exception):
    """Raised when a submission is missing required fields."""
    pass


class PitchSubmissionError(Exception):
    """Raised when a valid submission could not be stored."""
    pass


async def derive_quote(enricher: PitchEnricher, transcript: str) -> str:
    """Quote for a new pitch; failures here must never block submission."""
    try:
        return await enricher.extract_quote(transcript)
    except Exception as e:
        logger.warning(f"Quote extraction failed during submission, using fallback: {e}", exc_info=True)
        return fallback_quote(transcript)


async def submit_pitch(
    session: AsyncSession,
    enricher: PitchEnricher,
    submission: PitchSubmission,
) -> SubmittedPitch:
    """Validate and publish a pitch.

    Steps:
    1. Require non-blank title and transcript
    2. Trim string fields
    3. Extract a quote (falls back inline on any error)
    4. Clean tags; an empty list is stored as NULL
    5. Insert with status ``published``

    Raises:
        PitchValidationError: If title or transcript is missing
        PitchSubmissionError: If persisting fails
    """
    title = clean_str(submission.title)
    transcript = clean_str(submission.transcript)
    if not title or not transcript:
        raise PitchValidationError("Title and transcript are required")

    tags = validate_tags(submission.tags if isinstance(submission.tags, list) else [])
    quote = await derive_quote(enricher, transcript)

    try:
        pitch = models.Pitch(
            title=title,
            description=clean_str(submission.description),
            transcript=transcript,
            quote=quote,
            audio_url=clean_str(submission.audio_url),
            status=models.PitchStatus.PUBLISHED.value,
        )
        pitch.set_tags(tags)
        session.add(pitch)
        await session.commit()
    except Exception as e:
        logger.error(f"Pitch submission failed: {e}", exc_info=True)
        await session.rollback()
        raise PitchSubmissionError(f"Submission failed: {e}") from e

    logger.info(f"Published pitch {pitch.id} ({pitch.uuid}): {title}")

    return SubmittedPitch(
        id=pitch.id,
        uuid=pitch.uuid,
        title=pitch.title,
        status=pitch.status,
    )
