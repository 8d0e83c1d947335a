"""Content analysis for the record flow.

Two request shapes are served:
- ``{content, type: "pitch"}``: AI title/summary/tags suggestions
- legacy ``{imageAnalysis}`` / ``{transcript}``: keyword tags plus matching pitch templates
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ai.enrichment import Enrichment, PitchEnricher
from ai.tags import suggest
from config.tag_vocabulary import GENERIC_TEMPLATE, PITCH_TEMPLATES

logger = logging.getLogger(__name__)


@dataclass
class LegacyAnalysis:
    """Keyword analysis of free text with suggested templates."""
    source: str
    text: str
    suggested_tags: list[str] = field(default_factory=list)
    templates: list[dict[str, Any]] = field(default_factory=list)


class AnalysisRequestError(Exception):
    """Raised when the request carries nothing to analyze."""
    pass


def match_templates(tags: list[str]) -> list[dict[str, Any]]:
    """Templates for the suggested tags, in template order; the generic one if none match."""
    wanted = set(tags)
    matched = [dict(t) for t in PITCH_TEMPLATES if t["tag"] in wanted]
    return matched or [dict(GENERIC_TEMPLATE)]


def analyze_legacy(image_analysis: Any = None, transcript: Any = None) -> LegacyAnalysis:
    """Suggest tags and templates from an image description or a transcript.

    ``image_analysis`` wins when both are given.

    Raises:
        AnalysisRequestError: If neither field holds text
    """
    if isinstance(image_analysis, str) and image_analysis.strip():
        source, text = "imageAnalysis", image_analysis.strip()
    elif isinstance(transcript, str) and transcript.strip():
        source, text = "transcript", transcript.strip()
    else:
        raise AnalysisRequestError('Invalid request. Please provide content with type "pitch".')

    tags = suggest(text)
    logger.info(f"Legacy analysis of {source}: {len(tags)} tags suggested")
    return LegacyAnalysis(
        source=source,
        text=text,
        suggested_tags=tags,
        templates=match_templates(tags),
    )


async def analyze_pitch(enricher: PitchEnricher, content: str) -> Enrichment:
    """AI suggestions for a pitch transcript; never fails on service errors."""
    return await enricher.enrich_pitch(content)
