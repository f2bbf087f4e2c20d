"""
backend/clash_hub/services/paginator.py

Purpose:
    In-memory "show more" pagination for search results. State transitions
    are pure functions over a frozen SearchState; ResultPaginator owns the
    current state for one page session.

Dependencies:
    - dataclasses
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable


@dataclass(frozen=True)
class SearchState:
    items: tuple[Any, ...] = ()
    revealed: int = 0
    query: str = ""

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def remaining(self) -> int:
        return self.total - self.revealed

    @property
    def show_more(self) -> bool:
        return self.revealed < self.total


def reset_state() -> SearchState:
    return SearchState()


def load_results(state: SearchState, items: Iterable[Any], query: str = "") -> SearchState:
    """Install a full result set; nothing is revealed yet."""
    return replace(state, items=tuple(items), revealed=0, query=query)


def reveal_next(state: SearchState, page_size: int) -> tuple[SearchState, list[Any]]:
    """Reveal up to page_size more items; fewer at the tail."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    page = list(state.items[state.revealed:state.revealed + page_size])
    return replace(state, revealed=state.revealed + len(page)), page


class ResultPaginator:
    def __init__(self) -> None:
        self.state = reset_state()

    def reset(self) -> None:
        self.state = reset_state()

    def load_all(self, items: Iterable[Any], query: str = "") -> None:
        self.state = load_results(self.state, items, query)

    def reveal_next(self, page_size: int) -> list[Any]:
        self.state, page = reveal_next(self.state, page_size)
        return page

    @property
    def revealed(self) -> int:
        return self.state.revealed

    @property
    def remaining(self) -> int:
        return self.state.remaining

    @property
    def show_more(self) -> bool:
        return self.state.show_more

    def revealed_items(self) -> list[Any]:
        return list(self.state.items[:self.state.revealed])
