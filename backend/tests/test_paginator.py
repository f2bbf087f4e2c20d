"""
backend/tests/test_paginator.py

Purpose:
    Show-more pagination: page sizes, tail pages and reset behavior.
"""

import sys

import pytest

sys.path.insert(0, "backend")

from clash_hub.services.paginator import ResultPaginator, load_results, reset_state, reveal_next


def test_thirty_five_results_in_pages_of_fifteen():
    paginator = ResultPaginator()
    paginator.load_all(range(35), query="legends")

    assert paginator.revealed == 0
    assert paginator.reveal_next(15) == list(range(15))
    assert (paginator.revealed, paginator.remaining, paginator.show_more) == (15, 20, True)

    assert len(paginator.reveal_next(15)) == 15
    tail = paginator.reveal_next(15)
    assert tail == list(range(30, 35))
    assert paginator.revealed == 35
    assert paginator.show_more is False
    assert paginator.reveal_next(15) == []


def test_show_more_flips_on_second_reveal():
    paginator = ResultPaginator()
    paginator.load_all(range(20))

    paginator.reveal_next(15)
    assert (paginator.revealed, paginator.show_more) == (15, True)
    paginator.reveal_next(15)
    assert (paginator.revealed, paginator.show_more) == (20, False)


def test_revealed_never_exceeds_total():
    state = load_results(reset_state(), ["a", "b", "c"])
    for _ in range(4):
        state, _page = reveal_next(state, 2)
        assert 0 <= state.revealed <= state.total
    assert state.revealed == 3
    assert state.remaining == 0


def test_load_replaces_previous_results():
    paginator = ResultPaginator()
    paginator.load_all(["old"] * 20, query="first")
    paginator.reveal_next(15)

    paginator.load_all(["new"], query="second")

    assert paginator.revealed == 0
    assert paginator.state.query == "second"
    assert paginator.reveal_next(15) == ["new"]
    assert paginator.revealed_items() == ["new"]


def test_reset_clears_everything():
    paginator = ResultPaginator()
    paginator.load_all([1, 2, 3])
    paginator.reveal_next(2)
    paginator.reset()
    assert paginator.state == reset_state()
    assert paginator.show_more is False


def test_empty_result_set_has_no_show_more():
    paginator = ResultPaginator()
    paginator.load_all([])
    assert paginator.reveal_next(15) == []
    assert paginator.show_more is False


@pytest.mark.parametrize("size", [0, -1])
def test_non_positive_page_size_rejected(size):
    with pytest.raises(ValueError):
        reveal_next(reset_state(), size)
