"""Tag normalization and keyword-based tag suggestion.

Works against the fixed standard vocabulary in ``config.tag_vocabulary``.
All functions are pure; nothing here touches the database.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable

from pyuca import Collator

from config.tag_vocabulary import STANDARD_TAGS, TAG_KEYWORDS

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _collator() -> Collator:
    """DUCET collator, loaded on first use."""
    return Collator()


@dataclass(frozen=True)
class TagRule:
    """A standard tag with the keywords that suggest it."""
    tag: str
    keywords: tuple[str, ...] = field(default_factory=tuple)
    description: str = ""


class TagNormalizer:
    """Dedupe, order, and suggest tags against a standard vocabulary.

    Supports:
    - Exact membership checks against the vocabulary
    - Merging arbitrary tags with the vocabulary, standard tags first
    - Cleaning user-entered tag lists
    - Naive keyword suggestion (lower-cased substring containment)
    """

    def __init__(
        self,
        standard_tags: Iterable[str] | None = None,
        rules: Iterable[TagRule] | None = None,
    ) -> None:
        self.standard_tags: tuple[str, ...] = tuple(standard_tags or STANDARD_TAGS)
        self.rules: tuple[TagRule, ...] = tuple(rules or self._load_default_rules())
        self._standard_set = frozenset(self.standard_tags)

    @staticmethod
    def _load_default_rules() -> list[TagRule]:
        return [
            TagRule(entry["tag"], tuple(entry["keywords"]), entry.get("description", ""))
            for entry in TAG_KEYWORDS
        ]

    def is_standard(self, tag: str) -> bool:
        """Exact-string membership in the standard vocabulary."""
        return tag in self._standard_set

    @staticmethod
    def _collation_key(tag: str) -> tuple[tuple[int, ...], str]:
        return _collator().sort_key(tag), tag

    def merge_and_sort(self, existing_tags: Iterable[str] = ()) -> list[str]:
        """Union the vocabulary with ``existing_tags``; standard tags sort first.

        Within each group tags follow Unicode collation order (punctuation,
        symbols, digits, then letters), ties broken on the raw string.
        """
        unique = list(dict.fromkeys([*self.standard_tags, *existing_tags]))
        standard = sorted((t for t in unique if self.is_standard(t)), key=self._collation_key)
        custom = sorted((t for t in unique if not self.is_standard(t)), key=self._collation_key)
        return standard + custom

    def validate(self, tags: Iterable[str] | None) -> list[str]:
        """Trim, drop empties, and dedupe (first occurrence wins, order kept)."""
        if not tags:
            return []

        seen: set[str] = set()
        cleaned: list[str] = []
        for tag in tags:
            if not isinstance(tag, str):
                logger.debug(f"Dropping non-string tag: {tag!r}")
                continue
            tag = tag.strip()
            if not tag or tag in seen:
                continue
            seen.add(tag)
            cleaned.append(tag)
        return cleaned

    def suggest(self, free_text: str | None) -> list[str]:
        """Tags whose keyword group appears in ``free_text``, in table order."""
        if not free_text:
            return []

        text_lower = free_text.lower()
        suggestions = [
            rule.tag
            for rule in self.rules
            if any(keyword in text_lower for keyword in rule.keywords)
        ]
        logger.debug(f"Suggested {len(suggestions)} tags from text of length {len(free_text)}")
        return suggestions

    @staticmethod
    def collect_existing(tag_lists: Iterable[Iterable[str]]) -> list[str]:
        """Flatten stored tag lists, removing duplicates (first occurrence wins)."""
        return list(dict.fromkeys(tag for tags in tag_lists for tag in tags))


default_normalizer = TagNormalizer()

is_standard = default_normalizer.is_standard
merge_and_sort = default_normalizer.merge_and_sort
validate = default_normalizer.validate
suggest = default_normalizer.suggest
collect_existing = TagNormalizer.collect_existing
