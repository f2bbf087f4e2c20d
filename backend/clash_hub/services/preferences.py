"""
backend/clash_hub/services/preferences.py

Purpose:
    Persisted display preferences (inverted theme, font scale, UI sound) and
    their presentational effects. Storage is a flat string key/value map kept
    per browser (the signed session cookie); the confirmation tone is an
    optional injected capability.

Dependencies:
    - clash_hub.models.preferences
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Optional, Protocol

from clash_hub.models.preferences import (
    FONT_SCALE_MAX,
    FONT_SCALE_MIN,
    PreferenceFlag,
    PreferenceSet,
)

logger = logging.getLogger("clash_hub.preferences")

STORAGE_KEYS: dict[str, str] = {
    "theme_inverted": "clash_hub_invert_colours",
    "font_scale_percent": "clash_hub_font_scale",
    "sound_enabled": "clash_hub_sound_enabled",
}
_STORED_KEYS = frozenset(STORAGE_KEYS.values())

LIGHT_THEME_CLASS = "light-theme"


@dataclass(frozen=True)
class Tone:
    frequency_hz: int = 800
    duration_ms: int = 100
    waveform: str = "sine"
    volume: float = 0.1


SETTINGS_TONE = Tone()


class TonePlayer(Protocol):
    def play(self, tone: Tone) -> None: ...


class RecordingTonePlayer:
    """Collects played tones so a response can tell the browser to beep."""

    def __init__(self) -> None:
        self.played: list[Tone] = []

    def play(self, tone: Tone) -> None:
        self.played.append(tone)


@dataclass
class Appearance:
    body_classes: set[str] = field(default_factory=set)
    font_scale_percent: int = FONT_SCALE_MIN


class MemoryStorage(dict):
    """Process-local storage."""


class SessionStorage(MutableMapping[str, str]):
    """Preference keys kept in one browser's signed session cookie.

    Only the preference keys are visible; anything else the session holds
    (the clan search page id) is left alone.
    """

    def __init__(self, session: MutableMapping[str, object]) -> None:
        self._session = session

    def __getitem__(self, key: str) -> str:
        if key not in _STORED_KEYS or key not in self._session:
            raise KeyError(key)
        return str(self._session[key])

    def __setitem__(self, key: str, value: str) -> None:
        if key not in _STORED_KEYS:
            raise KeyError(key)
        self._session[key] = str(value)

    def __delitem__(self, key: str) -> None:
        if key not in _STORED_KEYS or key not in self._session:
            raise KeyError(key)
        del self._session[key]

    def __iter__(self):
        return (key for key in self._session if key in _STORED_KEYS)

    def __len__(self) -> int:
        return sum(1 for _ in self)


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw == "true"


def _parse_scale(raw: Optional[str]) -> int:
    try:
        value = int(str(raw), 10)
    except (TypeError, ValueError):
        return FONT_SCALE_MIN
    return min(FONT_SCALE_MAX, max(FONT_SCALE_MIN, value))


def _serialize(flag: PreferenceFlag, value: bool | int) -> str:
    if flag == "font_scale_percent":
        if isinstance(value, bool):
            raise ValueError("font_scale_percent must be an integer")
        scale = int(value)
        if not FONT_SCALE_MIN <= scale <= FONT_SCALE_MAX:
            raise ValueError(f"font_scale_percent must be within [{FONT_SCALE_MIN}, {FONT_SCALE_MAX}]")
        return str(scale)
    if not isinstance(value, bool):
        raise ValueError(f"{flag} must be a boolean")
    return "true" if value else "false"


def parse_form_value(flag: PreferenceFlag, raw: str) -> bool | int:
    """Typed value from an HTML form field ("true"/"false" or a percentage)."""
    text = str(raw).strip().lower()
    if flag == "font_scale_percent":
        return int(text, 10)
    if text not in ("true", "false"):
        raise ValueError(f"{flag} must be true or false")
    return text == "true"


class PreferenceStore:
    def __init__(
        self,
        storage: MutableMapping[str, str],
        appearance: Optional[Appearance] = None,
        tone_player: Optional[TonePlayer] = None,
    ) -> None:
        self._storage = storage
        self.appearance = appearance or Appearance()
        self._tone_player = tone_player

    def get(self) -> PreferenceSet:
        return PreferenceSet(
            theme_inverted=_parse_bool(self._storage.get(STORAGE_KEYS["theme_inverted"]), False),
            font_scale_percent=_parse_scale(self._storage.get(STORAGE_KEYS["font_scale_percent"])),
            sound_enabled=_parse_bool(self._storage.get(STORAGE_KEYS["sound_enabled"]), True),
        )

    def set(self, flag: PreferenceFlag, value: bool | int) -> PreferenceSet:
        """Persist one flag, re-apply its effect and play the confirmation tone."""
        if flag not in STORAGE_KEYS:
            raise ValueError(f"unknown preference: {flag}")
        self._storage[STORAGE_KEYS[flag]] = _serialize(flag, value)
        prefs = self.get()
        self._apply_flag(flag, prefs)
        logger.info("Preference %s set to %s", flag, getattr(prefs, flag))
        # Toggling sound always confirms audibly, even when switching it off.
        self._play_tone(force=(flag == "sound_enabled"), prefs=prefs)
        return prefs

    def apply_all(self) -> PreferenceSet:
        """Re-apply every stored preference silently (page load)."""
        prefs = self.get()
        for flag in STORAGE_KEYS:
            self._apply_flag(flag, prefs)
        return prefs

    def _apply_flag(self, flag: str, prefs: PreferenceSet) -> None:
        if flag == "theme_inverted":
            if prefs.theme_inverted:
                self.appearance.body_classes.add(LIGHT_THEME_CLASS)
            else:
                self.appearance.body_classes.discard(LIGHT_THEME_CLASS)
        elif flag == "font_scale_percent":
            self.appearance.font_scale_percent = prefs.font_scale_percent

    def _play_tone(self, force: bool, prefs: PreferenceSet) -> None:
        if self._tone_player is None:
            return
        if not (force or prefs.sound_enabled):
            return
        self._tone_player.play(SETTINGS_TONE)
