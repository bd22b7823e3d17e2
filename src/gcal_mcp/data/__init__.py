"""Data access layer."""

from __future__ import annotations

from .google import GoogleGateway, GoogleNotConfiguredError, GoogleRequestError, GoogleTransportError

__all__ = [
    "GoogleGateway",
    "GoogleNotConfiguredError",
    "GoogleRequestError",
    "GoogleTransportError",
]
