"""
Error taxonomy for the consent gateway.

HTTP mapping happens in src/error_handler.py:
- ValidationError          -> 400
- DownstreamError (+ subs) -> 500
- StoreUnavailable         -> swallowed during session lookup, 503 on /health
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ConsentGatewayError(Exception):
    """Base class for all gateway errors."""


class ConfigurationError(ConsentGatewayError):
    pass


class ValidationError(ConsentGatewayError):
    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class DownstreamError(ConsentGatewayError):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class AuthenticationError(DownstreamError):
    pass


class StoreUnavailable(ConsentGatewayError):
    pass
