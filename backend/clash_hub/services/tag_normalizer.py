"""
backend/clash_hub/services/tag_normalizer.py

Purpose:
    Canonicalize user-typed player/clan tags and report why a tag is
    unusable without raising.

Dependencies:
    - re
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

TAG_MARKER = "#"
TAG_MIN_LENGTH = 3
TAG_MAX_LENGTH = 12

_TAG_CHARS_RE = re.compile(r"^[A-Z0-9]+$")


class TagProblem(str, Enum):
    EMPTY = "empty"
    INVALID_CHARACTERS = "invalid_characters"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"


_MESSAGES = {
    TagProblem.EMPTY: "Please enter a tag to search",
    TagProblem.INVALID_CHARACTERS: "Invalid tag format - use only letters and numbers (e.g. #9Q2YJ0U)",
    TagProblem.TOO_SHORT: "Tag too short - need at least 3 characters",
    TagProblem.TOO_LONG: "Tag too long - most tags are 8-10 characters",
}


@dataclass(frozen=True)
class TagValidationError:
    problem: TagProblem
    message: str


@dataclass(frozen=True)
class TagResult:
    tag: str
    error: TagValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fail(tag: str, problem: TagProblem) -> TagResult:
    return TagResult(tag=tag, error=TagValidationError(problem, _MESSAGES[problem]))


def normalize_tag(raw: str | None, max_length: int | None = TAG_MAX_LENGTH) -> TagResult:
    """
    Normalize a tag for API use.

    Steps:
        1. trim whitespace
        2. drop one leading '#'
        3. upper-case
        4. validate charset, then minimum and (optional) maximum length
    """
    text = str(raw or "").strip()
    if text.startswith(TAG_MARKER):
        text = text[1:]
    text = text.upper()

    if not text:
        return _fail(text, TagProblem.EMPTY)
    if not _TAG_CHARS_RE.match(text):
        return _fail(text, TagProblem.INVALID_CHARACTERS)
    if len(text) < TAG_MIN_LENGTH:
        return _fail(text, TagProblem.TOO_SHORT)
    if max_length is not None and len(text) > max_length:
        return _fail(text, TagProblem.TOO_LONG)
    return TagResult(tag=text)


def looks_like_tag(raw: str | None) -> bool:
    """True when free text should be looked up as a tag rather than a name."""
    text = str(raw or "").strip().upper()
    return text.startswith(TAG_MARKER) or bool(re.match(r"^[A-Z0-9]{3,}$", text))


def display_tag(tag: str) -> str:
    return f"{TAG_MARKER}{tag}"
