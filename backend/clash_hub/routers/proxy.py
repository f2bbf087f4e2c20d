"""
backend/clash_hub/routers/proxy.py

Purpose:
    Browser-facing proxy to the Clash Royale API. Upstream status codes and
    bodies are relayed unchanged so callers can tell 404/403/429 apart.

Dependencies:
    - clash_hub.providers.royale_api
    - clash_hub.models.proxy
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from clash_hub.dependencies import get_gateway
from clash_hub.models.proxy import ProxyRequest, UpstreamReply
from clash_hub.providers.royale_api import RoyaleApiGateway

logger = logging.getLogger("clash_hub.proxy")

router = APIRouter(tags=["proxy"])

_BODYLESS_STATUSES = {204, 304}


def _is_true(value: Optional[str]) -> bool:
    return str(value).strip().lower() == "true"


def relay_response(reply: UpstreamReply) -> Response:
    """JSON when the upstream body parses, raw text otherwise; status untouched."""
    if reply.status in _BODYLESS_STATUSES:
        return Response(status_code=reply.status)
    is_json, data = reply.parsed()
    if is_json:
        return JSONResponse(status_code=reply.status, content=data)
    return Response(
        content=reply.body,
        status_code=reply.status,
        media_type=reply.content_type or "text/plain",
    )


@router.get("/proxy")
@router.get("/api/royale")
async def proxy(
    resource: Optional[str] = Query(None, description="Upstream resource path, e.g. players or clans"),
    path: Optional[str] = Query(None, description="Legacy alias of resource"),
    tag: Optional[str] = Query(None),
    battlelog: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None, alias="locationId"),
    test: Optional[str] = Query(None),
    gateway: RoyaleApiGateway = Depends(get_gateway),
):
    """Relay one request to the Clash Royale API with the server-side token."""
    if _is_true(test):
        return {"status": "ok", "message": "Server is running!"}

    target = (resource or path or "").strip()
    if not target:
        return JSONResponse(status_code=400, content={"error": "Missing resource parameter"})

    reply = await gateway.relay(
        ProxyRequest(
            resource=target,
            tag=tag or None,
            battlelog=_is_true(battlelog),
            name=name or None,
            location_id=location_id or None,
        )
    )
    return relay_response(reply)


@router.get("/api/test")
async def server_test():
    return {"message": "Server is running"}


@router.get("/api/player/{tag}")
async def player_by_tag(tag: str, gateway: RoyaleApiGateway = Depends(get_gateway)):
    """Shortcut for /proxy?resource=players&tag=..."""
    reply = await gateway.relay(ProxyRequest(resource="players", tag=tag))
    return relay_response(reply)
