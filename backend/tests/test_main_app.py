"""
backend/tests/test_main_app.py

Purpose:
    Application wiring: health probe, CORS policy, request id header and
    structured request logging.
"""

from __future__ import annotations

import json
import logging
import sys

sys.path.insert(0, "backend")


def test_health_reports_token_state(app_env, monkeypatch):
    from clash_hub.config import settings

    monkeypatch.setattr(settings, "CR_API_TOKEN", "")
    body = app_env.client.get("/health").json()
    assert body["token_configured"] is False
    assert body["status"] == "degraded"

    monkeypatch.setattr(settings, "CR_API_TOKEN", "abc")
    assert app_env.client.get("/health").json()["token_configured"] is True


def test_cors_allows_any_origin_for_get(app_env):
    resp = app_env.client.get("/api/test", headers={"Origin": "https://fan.example"})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_cors_preflight(app_env):
    resp = app_env.client.options(
        "/proxy",
        headers={
            "Origin": "https://fan.example",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert resp.status_code == 200
    assert "GET" in resp.headers["access-control-allow-methods"]


def test_request_log_line_has_resource_but_no_tag(app_env, caplog):
    app_env.install(lambda req: (404, {"reason": "notFound"}))
    with caplog.at_level(logging.INFO, logger="clash_hub.access"):
        resp = app_env.client.get("/proxy", params={"resource": "players", "tag": "SECRET1"})

    assert resp.headers["X-Request-ID"]
    lines = [r for r in caplog.records if r.name == "clash_hub.access"]
    entry = json.loads(lines[-1].getMessage())
    assert entry["path"] == "/proxy"
    assert entry["status"] == 404
    assert entry["resource"] == "players"
    assert lines[-1].levelno == logging.WARNING
    assert entry["battlelog"] is False
    assert "SECRET1" not in lines[-1].getMessage()
