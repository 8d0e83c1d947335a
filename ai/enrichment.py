"""Pitch enrichment: title, summary, tags and a quotable excerpt from a transcript.

Each operation makes a single call to the text-generation service. Any failure
(network, empty reply, unparseable or wrongly-shaped JSON) is absorbed into a
deterministic fallback derived from the transcript itself, so callers always
get usable content.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from ai.tags import validate as validate_tags
from be.config import settings
from be.pipelines.normalization import first_sentence, strip_wrapping_quotes, truncate
from config.tag_vocabulary import TAG_KEYWORDS

logger = logging.getLogger(__name__)

TITLE_MAX = 60
SUMMARY_MAX = 500
TAGS_MAX = 5
QUOTE_MAX = 150

FALLBACK_TITLE = "Innovative Business Idea"
UNTITLED = "Untitled Pitch"
FALLBACK_TAGS = ("🤖 AI/ML", "💸 Needs Funding", "Innovation")
NON_LIST_TAGS = ("Innovation", "Startup")


class CompletionClient(Protocol):
    async def complete(self, system: str, user: str, *, max_tokens: int | None = None) -> str: ...


@dataclass
class Enrichment:
    """AI-suggested presentation fields for a pitch."""
    title: str
    summary: str
    tags: list[str]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


ENRICH_SYSTEM = (
    "You are a marketing expert who creates compelling pitch summaries and titles. "
    "Always respond with valid JSON."
)

_TAG_GUIDE = "\n".join(f"  * {entry['tag']} (for {entry['description']})" for entry in TAG_KEYWORDS)

ENRICH_TEMPLATE = """
You are an AI assistant specialized in analyzing pitch transcripts and creating compelling marketing content.

Analyze this pitch transcript and generate:
1. A catchy, professional title (max 60 characters)
2. A compelling summary that would attract collaborators and investors (100-200 words)
3. 3-5 relevant tags/categories

Pitch transcript:
"{transcript}"

Guidelines:
- Title should be engaging, clear, and professional
- Summary should highlight the problem, solution, and value proposition
- Choose tags from this standardized list when applicable:
{tag_guide}
- You can also suggest other relevant tags not in this list
- Focus on what would appeal to potential collaborators, investors, or partners

Respond in JSON format:
{{
  "title": "Engaging pitch title",
  "summary": "Compelling summary that highlights key points and value proposition",
  "tags": ["Tag1", "Tag2", "Tag3", "Tag4", "Tag5"]
}}
"""

QUOTE_SYSTEM = (
    "You are an expert at identifying compelling quotes from business pitches. "
    "Always respond with just the quote, no additional text."
)

QUOTE_TEMPLATE = """
You are an expert at identifying the most compelling and quotable moments from pitch transcripts.

Extract the most impactful, memorable quote that captures the essence of the idea. The quote should be:
- Inspiring and thought-provoking
- 50-150 characters long
- Something that would make people want to learn more
- Representative of the core value proposition

Pitch transcript:
"{transcript}"

If the transcript doesn't contain a strong quote, create one that captures the essence of the idea.

Respond with just the quote, no additional text or formatting.
"""


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object from a model reply, tolerating fences or surrounding prose.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    try:
        data = json.loads(text)
    except ValueError:
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("LLM returned non-JSON")
        data = json.loads(text[start:end + 1])

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def fallback_enrichment(transcript: str) -> Enrichment:
    """Deterministic title/summary/tags derived from the transcript."""
    sentence = first_sentence(transcript)
    title = sentence if 10 < len(sentence) < TITLE_MAX else FALLBACK_TITLE
    return Enrichment(
        title=title,
        summary=truncate(transcript, 200),
        tags=list(FALLBACK_TAGS),
    )


def coerce_enrichment(data: dict[str, Any], transcript: str) -> Enrichment:
    """Clamp a parsed (or fallback) payload to the published field limits."""
    title = data.get("title")
    summary = data.get("summary")
    tags = data.get("tags")

    if isinstance(tags, (list, tuple)):
        tags = validate_tags(tags)[:TAGS_MAX]
    else:
        tags = list(NON_LIST_TAGS)

    return Enrichment(
        title=title[:TITLE_MAX] if isinstance(title, str) and title else UNTITLED,
        summary=summary[:SUMMARY_MAX] if isinstance(summary, str) and summary else transcript[:200],
        tags=tags,
    )


def clean_quote(raw: str) -> str:
    """Strip wrapping quote marks and cap the length at 150 characters."""
    return truncate(strip_wrapping_quotes(raw.strip()), QUOTE_MAX)


def fallback_quote(transcript: str) -> str:
    """First sentence when it reads like a quote, else the transcript's opening."""
    sentence = first_sentence(transcript)
    if 20 < len(sentence) < QUOTE_MAX:
        return sentence
    return truncate(transcript, 100)


class PitchEnricher:
    """Generates pitch metadata through the text-generation service with fallbacks."""

    def __init__(self, llm: CompletionClient) -> None:
        self.llm = llm

    async def enrich_pitch(self, transcript: str) -> Enrichment:
        """Suggest a title, summary and tags for ``transcript``.

        Never raises for service or parsing problems; those produce the
        transcript-derived fallback instead.
        """
        prompt = ENRICH_TEMPLATE.format(transcript=transcript, tag_guide=_TAG_GUIDE)
        try:
            reply = await self.llm.complete(ENRICH_SYSTEM, prompt)
            data = parse_json_object(reply)
        except Exception as e:
            logger.warning(f"Pitch enrichment fell back to transcript heuristics: {e}")
            return coerce_enrichment(fallback_enrichment(transcript).to_dict(), transcript)

        return coerce_enrichment(data, transcript)

    async def extract_quote(self, transcript: str) -> str:
        """Pick one compelling 50-150 character quote from ``transcript``."""
        prompt = QUOTE_TEMPLATE.format(transcript=transcript)
        try:
            reply = await self.llm.complete(
                QUOTE_SYSTEM,
                prompt,
                max_tokens=settings.llm.quote_max_tokens,
            )
            quote = clean_quote(reply)
            if not quote:
                raise ValueError("No quote extracted")
            return quote
        except Exception as e:
            logger.warning(f"Quote extraction fell back to transcript heuristics: {e}")
            return fallback_quote(transcript)
