"""
backend/clash_hub/models/proxy.py

Purpose:
    Request/response contracts of the Clash Royale proxy gateway.

Dependencies:
    - pydantic
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict


class ProxyRequest(BaseModel):
    """One logical upstream call. Credentials are never part of it."""

    resource: str
    tag: str | None = None
    battlelog: bool = False
    name: str | None = None
    location_id: str | None = None

    model_config = ConfigDict(frozen=True)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity parse in Python but cannot be re-serialized as JSON.
    raise ValueError(f"non-standard JSON constant {name}")


class UpstreamReply(BaseModel):
    """Status and body exactly as the upstream API sent them."""

    status: int
    body: str
    content_type: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def parsed(self) -> tuple[bool, Any]:
        """Return (True, data) when the body is strict JSON, else (False, raw text)."""
        try:
            return True, json.loads(self.body, parse_constant=_reject_constant)
        except ValueError:
            return False, self.body
