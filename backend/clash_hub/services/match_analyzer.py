"""
backend/clash_hub/services/match_analyzer.py

Purpose:
    Crown-based outcome classification for battle log entries, opponent
    identity, relative time labels and small battle-log aggregates.

Dependencies:
    - clash_hub.models.records
    - clash_hub.utils
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from clash_hub.models.records import BattleRecord
from clash_hub.utils import utcnow

UNKNOWN_OPPONENT = "Unknown"
PATTERN_LENGTH = 5

_BATTLE_TIME_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})")


class MatchStatus(str, Enum):
    WON = "WON"
    LOST = "LOST"
    DRAW = "DRAW"

    @property
    def letter(self) -> str:
        return {"WON": "W", "LOST": "L", "DRAW": "D"}[self.value]


@dataclass(frozen=True)
class MatchOutcome:
    status: MatchStatus
    player_crowns: int
    opponent_crowns: int

    @property
    def is_crown_win(self) -> bool:
        # Only a 3-0 counts; a 1-0 or 2-0 shutout does not.
        return (
            self.status is MatchStatus.WON
            and self.player_crowns == 3
            and self.opponent_crowns == 0
        )


@dataclass(frozen=True)
class OpponentInfo:
    name: str
    clan: Optional[str] = None


@dataclass(frozen=True)
class MatchSummary:
    total: int
    wins: int
    crown_wins: int
    win_percentage: int
    pattern: list[MatchStatus]


def classify(player_crowns: int, opponent_crowns: int) -> MatchStatus:
    if player_crowns > opponent_crowns:
        return MatchStatus.WON
    if player_crowns < opponent_crowns:
        return MatchStatus.LOST
    return MatchStatus.DRAW


def analyze_match(battle: BattleRecord) -> MatchOutcome:
    player_crowns = sum(p.crowns for p in battle.team)
    opponent_crowns = sum(p.crowns for p in battle.opponent)
    return MatchOutcome(
        status=classify(player_crowns, opponent_crowns),
        player_crowns=player_crowns,
        opponent_crowns=opponent_crowns,
    )


def opponent_info(battle: BattleRecord) -> OpponentInfo:
    opponents = battle.opponent
    if not opponents:
        return OpponentInfo(name=UNKNOWN_OPPONENT)

    first_clan = opponents[0].clan.name if opponents[0].clan else None
    if len(opponents) > 1:
        names = " & ".join(op.name or UNKNOWN_OPPONENT for op in opponents)
        return OpponentInfo(name=names, clan=first_clan)

    return OpponentInfo(name=opponents[0].name or UNKNOWN_OPPONENT, clan=first_clan or None)


def parse_battle_time(battle_time: str) -> datetime | None:
    """'20250101T120000.000Z' -> aware UTC datetime; None when unparseable."""
    match = _BATTLE_TIME_RE.match(str(battle_time or ""))
    if not match:
        return None
    try:
        return datetime(*(int(part) for part in match.groups()), tzinfo=timezone.utc)
    except ValueError:
        return None


def format_time_ago(battle_time: str, now: datetime | None = None) -> str:
    when = parse_battle_time(battle_time)
    if when is None:
        return "recently"

    elapsed = max(0.0, ((now or utcnow()) - when).total_seconds())
    minutes = int(elapsed // 60)
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return "just now"


def summarize_matches(battles: Iterable[BattleRecord]) -> MatchSummary:
    """Win rate, wins and 3-crown wins over the returned log plus the latest W/L/D pattern."""
    outcomes = [analyze_match(b) for b in battles]
    wins = sum(1 for o in outcomes if o.status is MatchStatus.WON)
    crown_wins = sum(1 for o in outcomes if o.is_crown_win)
    total = len(outcomes)
    win_percentage = math.floor(wins / total * 100 + 0.5) if total else 0
    return MatchSummary(
        total=total,
        wins=wins,
        crown_wins=crown_wins,
        win_percentage=win_percentage,
        pattern=[o.status for o in outcomes[:PATTERN_LENGTH]],
    )
