"""
backend/clash_hub/services/fuzzy_search.py

Purpose:
    Clan name search that tolerates case, punctuation and over-long input by
    trying an ordered list of query variants until one returns clans.

Dependencies:
    - re
    - logging
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from clash_hub.errors import ConfigurationError

logger = logging.getLogger("clash_hub.fuzzy_search")

_WORD_START_RE = re.compile(r"\b\w")
_PUNCT_RE = re.compile(r"[^a-zA-Z0-9\s]")

SHORT_PREFIX_THRESHOLD = 8
SHORT_PREFIX_LENGTHS = (6, 4)

NameSearch = Callable[[str, "str | None"], Awaitable[list[Any]]]


def _case_forms(text: str) -> list[str]:
    return [text, text.lower(), text.upper()]


def generate_search_variations(name: str) -> list[str]:
    """Ordered, de-duplicated query variants for a clan name."""
    variations: list[str] = []

    variations.extend(_case_forms(name))

    title_case = _WORD_START_RE.sub(lambda m: m.group(0).upper(), name)
    if title_case != name:
        variations.append(title_case)

    cleaned = _PUNCT_RE.sub("", name).strip()
    if cleaned != name:
        variations.extend(_case_forms(cleaned))

    words = [w for w in name.split(" ") if w]
    if len(words) > 1:
        variations.extend(_case_forms(words[0]))
        variations.extend(_case_forms(" ".join(words[:2])))

    if len(name) > SHORT_PREFIX_THRESHOLD:
        for length in SHORT_PREFIX_LENGTHS:
            variations.extend(_case_forms(name[:length]))

    # dict keeps first-occurrence order
    return [v for v in dict.fromkeys(variations) if v]


@dataclass(frozen=True)
class SearchAttempt:
    """Outcome of one variant: clans found, nothing found, or a soft failure."""
    variant: str
    items: list[Any] = field(default_factory=list)
    failure: str | None = None

    @property
    def found(self) -> bool:
        return self.failure is None and len(self.items) > 0


async def attempt_variant(search: NameSearch, variant: str, location_id: str | None) -> SearchAttempt:
    try:
        items = await search(variant, location_id)
    except ConfigurationError:
        raise
    except Exception as exc:
        return SearchAttempt(variant=variant, failure=str(exc) or exc.__class__.__name__)
    return SearchAttempt(variant=variant, items=list(items or []))


async def fuzzy_name_search(
    name: str,
    search: NameSearch,
    location_id: str | None = None,
) -> list[Any]:
    """Try each variant in order; the first non-empty result wins. Exhausted → []."""
    for variant in generate_search_variations(name):
        attempt = await attempt_variant(search, variant, location_id)
        if attempt.found:
            logger.info("Clan search matched on variant %r (%d results)", variant, len(attempt.items))
            return attempt.items
        if attempt.failure is not None:
            logger.info("Clan search variant %r failed: %s", variant, attempt.failure)
        else:
            logger.debug("No clans for variant %r", variant)
    return []
