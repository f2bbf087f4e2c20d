"""
backend/clash_hub/services/renderer.py

Purpose:
    Record -> view-model mapping (pure, DOM-free) and HTML card rendering for
    clans, battles and player profiles, plus the search and settings forms.
    Every API-sourced string is escaped before it is interpolated into markup.

Dependencies:
    - html.escape
    - clash_hub.services.match_analyzer
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Iterable, Optional
from urllib.parse import quote

from clash_hub.models.preferences import PreferenceSet
from clash_hub.models.records import BattleRecord, ClanRecord, ClanType, LocationRef, PlayerRecord
from clash_hub.services.match_analyzer import (
    MatchStatus,
    MatchSummary,
    analyze_match,
    format_time_ago,
    opponent_info,
)
from clash_hub.services.preferences import Tone
from clash_hub.services.tag_normalizer import display_tag
from clash_hub.utils import format_count

CLAN_MAX_MEMBERS = 50
GLOBE = "\U0001F310"
_REGIONAL_INDICATOR_BASE = 127397

_CLAN_TYPES = {
    ClanType.OPEN: ("type-open", "\U0001F513", "Open"),
    ClanType.INVITE_ONLY: ("type-invite", "✉️", "Invite only"),
    ClanType.CLOSED: ("type-closed", "\U0001F512", "Closed"),
}

_CLAN_ROLES = {
    "member": "Member",
    "elder": "Elder",
    "coLeader": "Co-Leader",
    "leader": "Leader",
}

FONT_SCALE_CHOICES = (100, 125, 150, 175, 200)

_RESULT_ICONS = {
    MatchStatus.WON: "./assets/winarrow.png",
    MatchStatus.LOST: "./assets/down-arrow.png",
    MatchStatus.DRAW: "./assets/arrow.png",
}


def escape_html(value: object) -> str:
    """Escape & < > " ' for safe interpolation into text and attribute values."""
    return escape("" if value is None else str(value), quote=True)


# -----------------------------
# Display helpers
# -----------------------------

@dataclass(frozen=True)
class ClanTypeInfo:
    class_name: str
    icon: str
    label: str


def clan_type_info(raw_type: str | None) -> ClanTypeInfo:
    clan_type = ClanType.parse(raw_type)
    if clan_type in _CLAN_TYPES:
        return ClanTypeInfo(*_CLAN_TYPES[clan_type])
    return ClanTypeInfo("type-unknown", "❔", str(raw_type or "Unknown"))


def country_code_to_emoji(country_code: str) -> str:
    letters = [c for c in str(country_code or "").upper() if "A" <= c <= "Z"][:2]
    return "".join(chr(_REGIONAL_INDICATOR_BASE + ord(c)) for c in letters)


def country_flag(location: LocationRef | None) -> str:
    if location and location.is_country and location.country_code:
        return country_code_to_emoji(location.country_code) or GLOBE
    return GLOBE


def format_clan_role(role: str | None) -> str:
    if not role:
        return "Member"
    return _CLAN_ROLES.get(role) or role[:1].upper() + role[1:]


def result_icon(status: MatchStatus) -> str:
    return _RESULT_ICONS[status]


# -----------------------------
# View models
# -----------------------------

@dataclass(frozen=True)
class ClanCardView:
    name: str
    tag: str
    location_name: str
    flag: str
    members: str
    score: str
    war_trophies: str
    required_trophies: str
    type_info: ClanTypeInfo
    description: str
    link: str


@dataclass(frozen=True)
class MatchCardView:
    status: MatchStatus
    score: str
    time_ago: str
    game_mode: str
    opponent_name: str
    opponent_clan: Optional[str]
    arena_name: Optional[str]
    icon: str


@dataclass(frozen=True)
class PlayerProfileView:
    name: str
    tag: str
    level: int
    trophies: str
    best_trophies: str
    exp_points: str
    wins: str
    losses: str
    three_crown_wins: str
    donations: str
    donations_received: str
    clan_cards_collected: str
    clan_name: Optional[str]
    clan_tag: Optional[str]
    clan_role: Optional[str]
    arena_name: Optional[str]
    arena_id: Optional[str]


def clan_card_view(clan: ClanRecord) -> ClanCardView:
    return ClanCardView(
        name=clan.name or "Unknown",
        tag=display_tag(clan.tag),
        location_name=(clan.location.name if clan.location else None) or "Unknown",
        flag=country_flag(clan.location),
        members=f"{clan.members}/{CLAN_MAX_MEMBERS}",
        score=format_count(clan.score),
        war_trophies=str(clan.clan_war_trophies),
        required_trophies=str(clan.required_trophies),
        type_info=clan_type_info(clan.type),
        description=clan.description or "No description available",
        link=f"/pages/clans?q={quote(display_tag(clan.tag), safe='')}",
    )


def match_card_view(battle: BattleRecord, now: datetime | None = None) -> MatchCardView:
    outcome = analyze_match(battle)
    opponent = opponent_info(battle)
    return MatchCardView(
        status=outcome.status,
        score=f"{outcome.player_crowns} - {outcome.opponent_crowns}",
        time_ago=format_time_ago(battle.battle_time, now=now),
        game_mode=battle.game_mode_name or "unknown mode",
        opponent_name=opponent.name,
        opponent_clan=opponent.clan,
        arena_name=battle.arena_name,
        icon=result_icon(outcome.status),
    )


def player_profile_view(player: PlayerRecord) -> PlayerProfileView:
    clan = player.clan if player.clan and player.clan.name else None
    arena = player.arena if player.arena and player.arena.name else None
    return PlayerProfileView(
        name=player.name or "Unknown Player",
        tag=display_tag(player.tag) if player.tag else "#UNKNOWN",
        level=player.exp_level,
        trophies=format_count(player.trophies),
        best_trophies=format_count(player.best_trophies),
        exp_points=format_count(player.exp_points),
        wins=format_count(player.wins),
        losses=format_count(player.losses),
        three_crown_wins=format_count(player.three_crown_wins),
        donations=format_count(player.donations),
        donations_received=format_count(player.donations_received),
        clan_cards_collected=format_count(player.clan_cards_collected),
        clan_name=clan.name if clan else None,
        clan_tag=(display_tag(clan.tag) if clan.tag else "No tag") if clan else None,
        clan_role=format_clan_role(clan.role) if clan else None,
        arena_name=arena.name if arena else None,
        arena_id=(str(arena.id) if arena.id is not None else "Unknown") if arena else None,
    )


# -----------------------------
# HTML rendering
# -----------------------------

def render_clan_card(view: ClanCardView) -> str:
    e = escape_html
    return (
        "<div class=\"clan-card\"><div class=\"clan-card-content\">"
        "<div class=\"clan-card-header\">"
        f"<h4 class=\"clan-name\">{e(view.name)}</h4>"
        f"<div class=\"clan-tag\">{e(view.tag)}</div>"
        f"<div class=\"clan-location\">{view.flag} {e(view.location_name)}</div>"
        "</div>"
        "<div class=\"clan-stats-row\">"
        f"<div class=\"clan-stat\"><span class=\"stat-label\">Members</span><span class=\"stat-value\">{e(view.members)}</span></div>"
        f"<div class=\"clan-stat\"><span class=\"stat-label\">Score</span><span class=\"stat-value\">{e(view.score)}</span></div>"
        f"<div class=\"clan-stat\"><span class=\"stat-label\">War</span><span class=\"stat-value\">{e(view.war_trophies)}</span></div>"
        f"<div class=\"clan-stat\"><span class=\"stat-label\">Req. Trophies</span><span class=\"stat-value\">{e(view.required_trophies)}</span></div>"
        "</div>"
        "<div class=\"clan-details\">"
        f"<div class=\"clan-type {e(view.type_info.class_name)}\">{view.type_info.icon} {e(view.type_info.label)}</div>"
        f"<p class=\"clan-description\">{e(view.description)}</p>"
        "</div>"
        f"<div class=\"clan-actions\"><a class=\"view-clan-btn\" href=\"{e(view.link)}\">View clan</a></div>"
        "</div></div>"
    )


def render_match_card(view: MatchCardView) -> str:
    e = escape_html
    status = view.status.value
    clan = f"<span class=\"opponent-clan\">[{e(view.opponent_clan)}]</span>" if view.opponent_clan else ""
    arena = f"<div class=\"arena-name\">{e(view.arena_name)}</div>" if view.arena_name else ""
    return (
        "<div class=\"match-card\"><div class=\"match-card-content\">"
        "<div class=\"match-card-header\">"
        f"<div class=\"match-result {status.lower()}\">"
        f"<span class=\"result-badge\">{status}</span>"
        f"<span class=\"match-score\">{e(view.score)}</span>"
        "</div>"
        f"<div class=\"match-time\">{e(view.time_ago)}</div>"
        "</div>"
        "<div class=\"match-details\">"
        f"<div class=\"game-mode\">{e(view.game_mode)}</div>"
        f"<div class=\"opponent-info\"><strong>vs {e(view.opponent_name)}</strong>{clan}</div>"
        f"{arena}"
        "</div>"
        f"<div class=\"result-arrow\"><img src=\"{e(view.icon)}\" alt=\"{status} icon\" /></div>"
        "</div></div>"
    )


def render_match_summary(summary: MatchSummary) -> str:
    letters = "".join(
        f"<span class=\"pattern-letter {s.value.lower()}\">{s.letter}</span>" for s in summary.pattern
    )
    n = summary.total
    return (
        "<div class=\"matches-stats\">"
        f"<div class=\"stat\"><span class=\"stat-label\">Win Rate (last {n}):</span><span id=\"winPercentage\">{summary.win_percentage}%</span></div>"
        f"<div class=\"stat\"><span class=\"stat-label\">Wins (last {n}):</span><span id=\"totalWins\">{summary.wins}</span></div>"
        f"<div class=\"stat\"><span class=\"stat-label\">3-Crown Wins (last {n}):</span><span id=\"crownWins\">{summary.crown_wins}</span></div>"
        "</div>"
        f"<div class=\"game-pattern\" id=\"gamePattern\">{letters}</div>"
    )


def render_player_profile(view: PlayerProfileView) -> str:
    e = escape_html
    if view.clan_name:
        clan = (
            "<div class=\"clan-info-content\">"
            f"<h4 class=\"clan-name\">{e(view.clan_name)}</h4>"
            f"<div class=\"clan-tag\">{e(view.clan_tag)}</div>"
            f"<div class=\"clan-role\"><span class=\"role-label\">Role:</span><span class=\"role-value\">{e(view.clan_role)}</span></div>"
            "</div>"
        )
    else:
        clan = "<div class=\"no-clan\"><span>Not in a clan</span></div>"

    if view.arena_name:
        arena = (
            "<div class=\"arena-info-content\">"
            f"<h4 class=\"arena-name\">{e(view.arena_name)}</h4>"
            f"<div class=\"arena-id\">Arena {e(view.arena_id)}</div>"
            f"<div class=\"trophy-current\">Current: {e(view.trophies)}</div>"
            f"<div class=\"trophy-best\">Best: {e(view.best_trophies)}</div>"
            "</div>"
        )
    else:
        arena = "<div class=\"no-arena\"><span>Arena information not available</span></div>"

    stats = [
        ("playerLevel", "Level", str(view.level)),
        ("playerTrophies", "Trophies", view.trophies),
        ("playerBest", "Best", view.best_trophies),
        ("playerExp", "Experience", view.exp_points),
        ("playerWins", "Wins", view.wins),
        ("playerLosses", "Losses", view.losses),
        ("playerThreeCrowns", "3-Crown Wins", view.three_crown_wins),
        ("playerDonations", "Donations", view.donations),
        ("playerReceived", "Received", view.donations_received),
        ("playerClanWars", "Clan Cards", view.clan_cards_collected),
    ]
    stat_html = "".join(
        f"<div class=\"stat\"><span class=\"stat-label\">{label}</span><span id=\"{dom_id}\">{e(value)}</span></div>"
        for dom_id, label, value in stats
    )
    return (
        "<div class=\"player-profile\">"
        f"<h3 id=\"playerName\">{e(view.name)}</h3>"
        f"<div id=\"playerTag\">{e(view.tag)}</div>"
        f"<div class=\"player-stats\">{stat_html}</div>"
        f"<div id=\"playerClanInfo\">{clan}</div>"
        f"<div id=\"playerArenaInfo\">{arena}</div>"
        "</div>"
    )


def render_show_more(remaining: int, href: str) -> str:
    if remaining <= 0:
        return ""
    return (
        f"<a class=\"load-matches-btn show-more-btn\" href=\"{escape_html(href)}\">"
        f"Show More ({remaining} remaining)</a>"
    )


def render_error(message: str) -> str:
    return f"<div class=\"error-message\" id=\"errorMessage\">{escape_html(message)}</div>"


# -----------------------------
# Forms
# -----------------------------

def render_tag_form(action: str, value: str | None, input_id: str, button: str = "Search") -> str:
    """GET form submitting one player tag to a page route."""
    e = escape_html
    return (
        f"<form class=\"search-form\" method=\"get\" action=\"{e(action)}\">"
        f"<input type=\"text\" name=\"tag\" id=\"{e(input_id)}\" value=\"{e(value or '')}\" "
        "placeholder=\"#9Q2YJ0U\" autocomplete=\"off\" />"
        f"<button type=\"submit\">{e(button)}</button>"
        "</form>"
    )


def render_clan_search_form(
    query: str | None,
    location_id: str | None,
    locations: Iterable[LocationRef] = (),
) -> str:
    e = escape_html
    selected = str(location_id or "")
    options = ["<option value=\"\">Any location</option>"]
    for location in locations:
        value = str(location.id)
        mark = " selected" if value == selected else ""
        options.append(f"<option value=\"{e(value)}\"{mark}>{e(location.name)}</option>")
    return (
        "<form class=\"search-form\" method=\"get\" action=\"/pages/clans\">"
        f"<input type=\"text\" name=\"q\" id=\"clanSearchInput\" value=\"{e(query or '')}\" "
        "placeholder=\"Clan tag or name\" autocomplete=\"off\" />"
        f"<select name=\"locationId\" id=\"locationSelect\">{''.join(options)}</select>"
        "<button type=\"submit\">Search</button>"
        "<a class=\"clear-btn\" href=\"/pages/clans/clear\">Clear</a>"
        "</form>"
    )


def _toggle_form(flag: str, dom_id: str, label: str, enabled: bool) -> str:
    # Submitting flips the current value.
    state = "on" if enabled else "off"
    return (
        f"<form class=\"setting\" method=\"post\" action=\"/pages/settings/{flag}\">"
        f"<input type=\"hidden\" name=\"value\" value=\"{'false' if enabled else 'true'}\" />"
        f"<span>{label}</span>"
        f"<button type=\"submit\" id=\"{dom_id}\" class=\"toggle {state}\" aria-pressed=\"{str(enabled).lower()}\">{state}</button>"
        "</form>"
    )


def render_settings_controls(prefs: PreferenceSet, confirmation: Optional[Tone] = None) -> str:
    """Toggle forms for the three display preferences."""
    choices = sorted(set(FONT_SCALE_CHOICES) | {prefs.font_scale_percent})
    options = "".join(
        f"<option value=\"{c}\"{' selected' if c == prefs.font_scale_percent else ''}>{c}%</option>"
        for c in choices
    )
    font = (
        "<form class=\"setting\" method=\"post\" action=\"/pages/settings/font_scale_percent\">"
        "<span>Font size</span>"
        f"<select name=\"value\" id=\"fontSize\">{options}</select>"
        "<button type=\"submit\">Apply</button>"
        "</form>"
    )
    tone = ""
    if confirmation is not None:
        tone = (
            "<div class=\"settings-tone\" id=\"settingsTone\" "
            f"data-frequency=\"{confirmation.frequency_hz}\" data-duration=\"{confirmation.duration_ms}\" "
            f"data-waveform=\"{escape_html(confirmation.waveform)}\" data-volume=\"{confirmation.volume}\"></div>"
        )
    return (
        "<div class=\"settings-list\">"
        f"{_toggle_form('theme_inverted', 'invertColours', 'Invert colours', prefs.theme_inverted)}"
        f"{font}"
        f"{_toggle_form('sound_enabled', 'soundToggle', 'Sound', prefs.sound_enabled)}"
        "</div>"
        f"{tone}"
    )


def render_page(title: str, body: str, body_classes: Iterable[str] = (), font_scale_percent: int = 100) -> str:
    """Full HTML document; the body carries the current display preferences."""
    classes = " ".join(sorted(body_classes))
    return (
        "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"utf-8\" />"
        f"<title>{escape_html(title)} - Clash Hub</title></head>"
        f"<body class=\"{escape_html(classes)}\" style=\"font-size: {int(font_scale_percent)}%\">"
        f"<main>{body}</main></body></html>"
    )
