"""Backfill quotes for pitches stored before quote extraction existed.

Usable from the API (``POST /api/update-existing-quotes``) or the command line:

    python -m be.pipelines.backfill
"""
from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ai.enrichment import PitchEnricher
from be import models

logger = logging.getLogger(__name__)


@dataclass
class BackfillResult:
    """Outcome of a quote backfill run."""
    pending: int
    updated: int

    @property
    def message(self) -> str:
        if self.pending == 0:
            return "All pitches already have quotes"
        return f"Updated {self.updated} pitches with quotes"


class QuoteBackfillError(Exception):
    """Raised when pending pitches cannot be read."""
    pass


async def pending_pitches(session: AsyncSession) -> list[tuple[int, str]]:
    """(id, transcript) of every pitch, of any status, with no stored quote."""
    result = await session.execute(
        select(models.Pitch.id, models.Pitch.transcript)
        .where(models.Pitch.quote.is_(None))
        .order_by(models.Pitch.id)
    )
    return [(row.id, row.transcript) for row in result]


async def backfill_quotes(session: AsyncSession, enricher: PitchEnricher) -> BackfillResult:
    """Extract and store a quote for every pitch missing one.

    Each row is committed on its own; a failing row is logged and skipped.

    Raises:
        QuoteBackfillError: If the pending pitches cannot be read
    """
    try:
        pending = await pending_pitches(session)
    except Exception as e:
        logger.error(f"Failed to read pitches without quotes: {e}", exc_info=True)
        raise QuoteBackfillError(f"Backfill failed: {e}") from e

    if not pending:
        logger.info("All pitches already have quotes")
        return BackfillResult(pending=0, updated=0)

    updated = 0
    for pitch_id, transcript in pending:
        try:
            quote = await enricher.extract_quote(transcript)
            await session.execute(
                update(models.Pitch).where(models.Pitch.id == pitch_id).values(quote=quote)
            )
            await session.commit()
            updated += 1
        except Exception as e:
            logger.error(f"Error updating pitch {pitch_id}: {e}", exc_info=True)
            await session.rollback()

    logger.info(f"Backfilled quotes for {updated}/{len(pending)} pitches")
    return BackfillResult(pending=len(pending), updated=updated)


async def main() -> int:
    from ai.llm import get_llm_client
    from be.db import AsyncSessionMaker
    from be.logging_config import setup_logging

    setup_logging()
    async with AsyncSessionMaker() as session:
        result = await backfill_quotes(session, PitchEnricher(get_llm_client()))
    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
