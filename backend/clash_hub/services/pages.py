"""
backend/clash_hub/services/pages.py

Purpose:
    Page controllers for the player, matches and clan-search pages. Each
    flow validates input, calls the hub client and returns rendered HTML or
    exactly one inline error message. Clan search keeps its SearchState in a
    per-session ClanSearchPage; a search that finishes after a newer one has
    started on the same page is discarded.

Dependencies:
    - clash_hub.services.hub_client
    - clash_hub.services.fuzzy_search
    - clash_hub.services.paginator
    - clash_hub.services.renderer
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from clash_hub.errors import ClashHubError, ClientInputError, UpstreamRelayError
from clash_hub.models.records import ClanRecord, LocationRef
from clash_hub.services.fuzzy_search import fuzzy_name_search
from clash_hub.services.hub_client import RoyaleHubClient, failure_message
from clash_hub.services.match_analyzer import summarize_matches
from clash_hub.services.paginator import ResultPaginator
from clash_hub.services.renderer import (
    clan_card_view,
    escape_html,
    match_card_view,
    player_profile_view,
    render_clan_card,
    render_error,
    render_match_card,
    render_match_summary,
    render_player_profile,
    render_show_more,
)
from clash_hub.services.tag_normalizer import display_tag, looks_like_tag, normalize_tag

logger = logging.getLogger("clash_hub.pages")

CLAN_MORE_HREF = "/pages/clans/more"
NO_CLANS_MESSAGE = "no clans found - try different spelling or shorter name"
EMPTY_CLAN_QUERY_MESSAGE = "need a clan tag or name to search"


@dataclass(frozen=True)
class PageResult:
    title: str
    body: str = ""
    error: Optional[str] = None

    def html(self) -> str:
        if self.error:
            return render_error(self.error)
        return self.body


def _failure(title: str, exc: Exception, subject: str | None, kind: str) -> PageResult:
    if isinstance(exc, ValidationError):
        logger.warning("Unexpected %s payload shape: %s", kind, exc.error_count())
        return PageResult(title=title, error="Invalid response from server - please try again")
    return PageResult(title=title, error=failure_message(exc, subject, kind=kind))


async def player_page(client: RoyaleHubClient, raw_tag: str | None) -> PageResult:
    title = "Player"
    result = normalize_tag(raw_tag)
    if not result.ok:
        return PageResult(title=title, error=result.error.message)

    try:
        player = await client.get_player(result.tag)
    except (ClashHubError, ValidationError) as exc:
        logger.info("Player lookup for %s failed: %s", display_tag(result.tag), exc)
        return _failure(title, exc, display_tag(result.tag), "player")

    view = player_profile_view(player)
    return PageResult(title=f"{view.name} ({view.tag})", body=render_player_profile(view))


async def matches_page(
    client: RoyaleHubClient,
    raw_tag: str | None,
    now: datetime | None = None,
) -> PageResult:
    title = "Recent Matches"
    result = normalize_tag(raw_tag)
    if not result.ok:
        return PageResult(title=title, error=result.error.message)

    try:
        battles = await client.get_battlelog(result.tag)
    except (ClashHubError, ValidationError) as exc:
        logger.info("Battle log for %s failed: %s", display_tag(result.tag), exc)
        return _failure(title, exc, display_tag(result.tag), "player")

    if not battles:
        return PageResult(title=title, error="no matches found for this player")

    cards = "".join(render_match_card(match_card_view(b, now=now)) for b in battles)
    body = (
        f"<div class=\"current-player\" id=\"playerText\">{escape_html(display_tag(result.tag))}</div>"
        f"{render_match_summary(summarize_matches(battles))}"
        f"<div class=\"matches-list\" id=\"matchesList\">{cards}</div>"
    )
    return PageResult(title=title, body=body)


class ClanSearchPage:
    """Owns the SearchState of one clan-search page session."""

    def __init__(self, client: RoyaleHubClient, page_size: int = 15):
        self._client = client
        self._page_size = page_size
        self._generation = 0
        self._label = ""
        self.query = ""
        self.location_id: str | None = None
        self.paginator = ResultPaginator()

    async def search(self, query: str | None, location_id: str | None = None) -> PageResult:
        text = str(query or "").strip()
        self._generation += 1
        generation = self._generation
        self.paginator.reset()
        self._label = ""
        self.query = text
        self.location_id = location_id or None

        if not text:
            return PageResult(title="Clans", error=EMPTY_CLAN_QUERY_MESSAGE)

        try:
            clans, label = await self._lookup(text, location_id or None)
        except (ClashHubError, ValidationError) as exc:
            if generation != self._generation:
                return self.render()
            logger.info("Clan search for %r failed: %s", text, exc)
            return _failure("Clans", exc, None, "clan")

        if generation != self._generation:
            logger.debug("Discarding stale clan search %r", text)
            return self.render()

        if not clans:
            return PageResult(title="Clans", error=NO_CLANS_MESSAGE)

        self._label = label if not location_id else f"{label} in location {location_id}"
        self.paginator.load_all(clans, query=text)
        self.paginator.reveal_next(self._page_size)
        return self.render()

    async def _lookup(self, text: str, location_id: str | None) -> tuple[list[ClanRecord], str]:
        if looks_like_tag(text):
            result = normalize_tag(text)
            if result.ok:
                try:
                    clan = await self._client.get_clan(result.tag)
                    return [clan], f"Tag: {display_tag(result.tag)}"
                except UpstreamRelayError as exc:
                    # A bare word like "LEGENDS" is also a plausible clan name.
                    if exc.status != 404 or text.startswith("#"):
                        raise
            elif text.startswith("#"):
                raise ClientInputError(result.error.message)

        clans = await fuzzy_name_search(text, self._client.search_clans, location_id)
        return clans, f"Name: \"{text}\""

    def reveal_more(self) -> PageResult:
        if self.paginator.show_more:
            self.paginator.reveal_next(self._page_size)
        return self.render()

    def clear(self) -> PageResult:
        self._generation += 1
        self.paginator.reset()
        self._label = ""
        self.query = ""
        self.location_id = None
        return self.render()

    def render(self) -> PageResult:
        items = self.paginator.revealed_items()
        if not items:
            return PageResult(title="Clans")
        cards = "".join(render_clan_card(clan_card_view(c)) for c in items)
        body = (
            f"<div class=\"current-search\" id=\"searchText\">{escape_html(self._label)}</div>"
            f"<div class=\"clans-list\" id=\"clansList\">{cards}</div>"
            f"{render_show_more(self.paginator.remaining, CLAN_MORE_HREF)}"
        )
        return PageResult(title="Clans", body=body)


class PageSessions:
    """Bounded map of session id -> ClanSearchPage (least recently used evicted)."""

    def __init__(self, client: RoyaleHubClient, page_size: int = 15, max_sessions: int = 256):
        self._client = client
        self._page_size = page_size
        self._max_sessions = max(1, max_sessions)
        self._pages: OrderedDict[str, ClanSearchPage] = OrderedDict()

    def get(self, session_id: str) -> ClanSearchPage:
        page = self._pages.get(session_id)
        if page is None:
            page = ClanSearchPage(self._client, page_size=self._page_size)
            self._pages[session_id] = page
            while len(self._pages) > self._max_sessions:
                self._pages.popitem(last=False)
        else:
            self._pages.move_to_end(session_id)
        return page

    def __len__(self) -> int:
        return len(self._pages)


class LocationCatalog:
    """Upstream location list for the clan search filter, fetched once."""

    def __init__(self, client: RoyaleHubClient):
        self._client = client
        self._locations: list[LocationRef] = []

    async def options(self) -> list[LocationRef]:
        if self._locations:
            return self._locations
        try:
            locations = await self._client.list_locations()
        except (ClashHubError, ValidationError) as exc:
            # The filter degrades to "any location"; the next page load retries.
            logger.info("Location list unavailable: %s", exc)
            return []
        self._locations = [loc for loc in locations if loc.id is not None and loc.name]
        return self._locations
