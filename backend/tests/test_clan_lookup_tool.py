"""
backend/tests/test_clan_lookup_tool.py

Purpose:
    tools/clan_lookup prints matching clans, tried variants and inline
    errors without touching the real upstream.
"""

import sys

import pytest

sys.path.insert(0, "backend")

from conftest import FakeGateway

from tools import clan_lookup


@pytest.mark.asyncio
async def test_prints_clans_and_variants(monkeypatch, capsys):
    gateway = FakeGateway(lambda req: (200, {"items": [{"tag": "#AAA", "name": "The Crushers", "members": 12}]}))
    monkeypatch.setattr(clan_lookup, "RoyaleApiGateway", lambda: gateway)

    code = await clan_lookup.run("The Crushers", None, show_variants=True)

    out = capsys.readouterr().out
    assert code == 0
    assert "variant: 'the crushers'" in out
    assert "#AAA" in out
    assert "members=12/50" in out
    assert "1 clan(s) for 'The Crushers'" in out


@pytest.mark.asyncio
async def test_error_exit_code(monkeypatch, capsys):
    gateway = FakeGateway(lambda req: (404, {"reason": "notFound"}))
    monkeypatch.setattr(clan_lookup, "RoyaleApiGateway", lambda: gateway)

    code = await clan_lookup.run("#ABC123", None, show_variants=False)

    assert code == 1
    assert "Clan not found" in capsys.readouterr().out
