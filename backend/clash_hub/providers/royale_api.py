"""
backend/clash_hub/providers/royale_api.py

Purpose:
    Clash Royale API gateway: builds upstream URLs from logical proxy
    requests, injects the configured bearer token and hands back upstream
    status/body unchanged.

Dependencies:
    - clash_hub.providers.http_client
    - clash_hub.config
"""

import logging
from typing import Optional
from urllib.parse import quote, urlencode

import httpx

from clash_hub.config import settings
from clash_hub.errors import ConfigurationError, TransportError
from clash_hub.models.proxy import ProxyRequest, UpstreamReply
from clash_hub.providers.http_client import UpstreamClient

logger = logging.getLogger("clash_hub.royale_api")

PROVIDER_NAME = "royale_api"
BATTLELOG_SEGMENT = "battlelog"


def encode_tag_segment(tag: str) -> str:
    """Path segment for a tag: '#' always travels as %23, the rest percent-encoded."""
    bare = str(tag).strip()
    if bare.startswith("#"):
        bare = bare[1:]
    return "%23" + quote(bare, safe="")


def build_upstream_url(base_url: str, request: ProxyRequest) -> str:
    """Join the base URL, resource path, optional tag/battlelog segments and filters."""
    clean_path = str(request.resource).lstrip("/")
    url = f"{base_url.rstrip('/')}/{clean_path}"

    if request.tag:
        url += "/" + encode_tag_segment(request.tag)

    if request.battlelog:
        url += "/" + BATTLELOG_SEGMENT

    params: list[tuple[str, str]] = []
    if request.name:
        params.append(("name", request.name))
    if request.location_id:
        params.append(("locationId", str(request.location_id)))
    if params:
        url += "?" + urlencode(params, quote_via=quote)

    return url


class RoyaleApiGateway:
    """Forwards proxy requests to the Clash Royale API with server-side credentials."""

    def __init__(
        self,
        client: Optional[UpstreamClient] = None,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self._client = client or UpstreamClient(
            PROVIDER_NAME,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            max_retries=settings.UPSTREAM_MAX_RETRIES,
            base_delay=settings.UPSTREAM_RETRY_BASE_DELAY,
        )
        self._base_url = base_url
        self._token = token

    @property
    def base_url(self) -> str:
        return self._base_url or settings.ROYALE_API_BASE_URL

    def _auth_token(self) -> str:
        token = (self._token if self._token is not None else settings.CR_API_TOKEN).strip()
        if not token:
            raise ConfigurationError("upstream credential is not configured")
        return token

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._auth_token()}",
            "Accept": "application/json",
        }

    async def relay(self, request: ProxyRequest) -> UpstreamReply:
        """Call upstream and return its status/body verbatim.

        Raises ConfigurationError before any network traffic when no token is
        configured, and TransportError when upstream cannot be reached.
        """
        headers = self._headers()
        url = build_upstream_url(self.base_url, request)
        logger.info("Proxying %s request (tag=%s, battlelog=%s)",
                    request.resource, bool(request.tag), request.battlelog)

        try:
            resp = await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError("upstream unreachable") from exc

        return UpstreamReply(
            status=resp.status_code,
            body=resp.text,
            content_type=resp.headers.get("content-type"),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
