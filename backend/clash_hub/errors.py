"""
backend/clash_hub/errors.py

Purpose:
    Error taxonomy shared by the gateway, the hub client and the page
    controllers.

Dependencies:
    - none
"""

from __future__ import annotations


class ClashHubError(Exception):
    """Base class for all Clash Hub failures."""


class ClientInputError(ClashHubError):
    """Invalid or missing user input (tag, search text). Never reaches the network."""


class ConfigurationError(ClashHubError):
    """Server-side configuration is missing something an upstream call needs."""


class TransportError(ClashHubError):
    """The upstream API (or the gateway) could not be reached."""


class UpstreamRelayError(ClashHubError):
    """Upstream answered with a non-2xx status; status and body are preserved."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(f"upstream returned {status}")
        self.status = status
        self.body = body


class ParseError(ClashHubError):
    """A 2xx upstream body that should have been JSON was not."""
