"""
backend/clash_hub/middleware/logging.py

Purpose:
    One JSON access line per request and process-wide logging setup.
    Player tags and clan search text never reach the access log; only the
    proxied resource name and the page path do.
"""

import hashlib
import json
import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from clash_hub.config import settings

logger = logging.getLogger("clash_hub.access")

REQUEST_ID_HEADER = "X-Request-ID"


def _client_fingerprint(request: Request) -> Optional[str]:
    if not request.client or not request.client.host:
        return None
    return hashlib.sha256(request.client.host.encode()).hexdigest()[:12]


def _access_fields(request: Request) -> dict:
    fields = {
        "method": request.method,
        "path": request.url.path,
        "client_ip_hash": _client_fingerprint(request),
    }
    resource = request.query_params.get("resource") or request.query_params.get("path")
    if resource:
        fields["resource"] = resource
        fields["battlelog"] = request.query_params.get("battlelog", "").lower() == "true"
    return fields


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        entry = {"request_id": request_id, **_access_fields(request)}
        entry["status"] = response.status_code
        entry["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)

        # Relayed upstream 4xx (404 player, 429 throttled) are worth seeing.
        logger.log(logging.WARNING if response.status_code >= 400 else logging.INFO, json.dumps(entry))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
