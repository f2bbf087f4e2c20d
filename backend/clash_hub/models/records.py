"""
backend/clash_hub/models/records.py

Purpose:
    Read-only views over Clash Royale API payloads (battles, clans, players).
    Field names follow Python style; aliases match the upstream camelCase keys.

Dependencies:
    - pydantic
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def strip_tag_marker(value: object) -> str:
    """Canonical tag form: trimmed, upper-case, no leading '#'."""
    text = str(value or "").strip()
    if text.startswith("#"):
        text = text[1:]
    return text.upper()


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class NamedRef(_Record):
    id: int | None = None
    name: str | None = None


class ArenaRecord(NamedRef):
    pass


class LocationRef(_Record):
    id: int | None = None
    name: str | None = None
    is_country: bool = Field(default=False, alias="isCountry")
    country_code: str | None = Field(default=None, alias="countryCode")


class ClanSummary(_Record):
    """Clan as embedded in player and battle payloads."""

    tag: str = ""
    name: str | None = None
    role: str | None = None
    badge_id: int | None = Field(default=None, alias="badgeId")

    @field_validator("tag", mode="before")
    @classmethod
    def _canonical_tag(cls, value):
        return strip_tag_marker(value)


class BattleParticipant(_Record):
    tag: str = ""
    name: str | None = None
    crowns: int = 0
    clan: ClanSummary | None = None

    @field_validator("tag", mode="before")
    @classmethod
    def _canonical_tag(cls, value):
        return strip_tag_marker(value)

    @field_validator("crowns", mode="before")
    @classmethod
    def _crowns_default(cls, value):
        return value or 0


class BattleRecord(_Record):
    """One completed match from a player's battle log."""

    battle_time: str = Field(default="", alias="battleTime")
    type: str | None = None
    game_mode: NamedRef | None = Field(default=None, alias="gameMode")
    arena: NamedRef | None = None
    team: list[BattleParticipant] = Field(default_factory=list)
    opponent: list[BattleParticipant] = Field(default_factory=list)

    @field_validator("team", "opponent", mode="before")
    @classmethod
    def _roster_default(cls, value):
        return value or []

    @property
    def game_mode_name(self) -> str | None:
        return self.game_mode.name if self.game_mode else None

    @property
    def arena_name(self) -> str | None:
        return self.arena.name if self.arena else None


class ClanType(str, Enum):
    OPEN = "open"
    INVITE_ONLY = "inviteOnly"
    CLOSED = "closed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "ClanType":
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN


class ClanRecord(_Record):
    tag: str = ""
    name: str | None = None
    type: str = "open"
    description: str | None = None
    members: int = 0
    clan_score: int | None = Field(default=None, alias="clanScore")
    trophies: int | None = None
    clan_war_trophies: int = Field(default=0, alias="clanWarTrophies")
    required_trophies: int = Field(default=0, alias="requiredTrophies")
    location: LocationRef | None = None
    badge_id: int | None = Field(default=None, alias="badgeId")

    @field_validator("tag", mode="before")
    @classmethod
    def _canonical_tag(cls, value):
        return strip_tag_marker(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type_default(cls, value):
        return value or "open"

    @field_validator("members", "clan_war_trophies", "required_trophies", mode="before")
    @classmethod
    def _count_default(cls, value):
        return value or 0

    @property
    def clan_type(self) -> ClanType:
        return ClanType.parse(self.type)

    @property
    def score(self) -> int:
        if self.clan_score is not None:
            return self.clan_score
        return self.trophies or 0


class PlayerRecord(_Record):
    tag: str = ""
    name: str | None = None
    exp_level: int = Field(default=1, alias="expLevel")
    exp_points: int = Field(default=0, alias="expPoints")
    trophies: int = 0
    best_trophies: int = Field(default=0, alias="bestTrophies")
    wins: int = 0
    losses: int = 0
    three_crown_wins: int = Field(default=0, alias="threeCrownWins")
    donations: int = 0
    donations_received: int = Field(default=0, alias="donationsReceived")
    clan_cards_collected: int = Field(default=0, alias="clanCardsCollected")
    clan: ClanSummary | None = None
    arena: ArenaRecord | None = None

    @field_validator("tag", mode="before")
    @classmethod
    def _canonical_tag(cls, value):
        return strip_tag_marker(value)

    @field_validator(
        "trophies", "best_trophies", "exp_points", "wins", "losses",
        "three_crown_wins", "donations", "donations_received",
        "clan_cards_collected", mode="before",
    )
    @classmethod
    def _count_default(cls, value):
        return value or 0

    @field_validator("exp_level", mode="before")
    @classmethod
    def _level_default(cls, value):
        return value or 1
