"""
backend/clash_hub/dependencies.py

Purpose:
    FastAPI dependencies resolving the per-process singletons created in
    the application lifespan (gateway, hub client, page sessions, location
    catalog) and the per-browser preference storage.

Dependencies:
    - fastapi.Request
"""

import secrets
from collections.abc import MutableMapping

from fastapi import Request

from clash_hub.providers.royale_api import RoyaleApiGateway
from clash_hub.services.hub_client import RoyaleHubClient
from clash_hub.services.pages import ClanSearchPage, LocationCatalog, PageSessions
from clash_hub.services.preferences import SessionStorage

_SESSION_KEY = "page_id"


def get_gateway(request: Request) -> RoyaleApiGateway:
    return request.app.state.gateway


def get_hub_client(request: Request) -> RoyaleHubClient:
    return request.app.state.hub_client


def get_location_catalog(request: Request) -> LocationCatalog:
    return request.app.state.location_catalog


def get_preference_storage(request: Request) -> MutableMapping[str, str]:
    # Each browser keeps its own preferences in its signed session cookie.
    return SessionStorage(request.session)


def get_clan_search_page(request: Request) -> ClanSearchPage:
    sessions: PageSessions = request.app.state.page_sessions
    page_id = request.session.get(_SESSION_KEY)
    if not page_id:
        page_id = secrets.token_urlsafe(12)
        request.session[_SESSION_KEY] = page_id
    return sessions.get(page_id)
