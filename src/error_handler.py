"""Error handling helpers for the consent gateway HTTP boundary."""
from http import HTTPStatus
from typing import Any, Dict, List, Tuple
import logging

from src.integrations.finvu.errors import ConsentGatewayError, StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def status_for(self, exc: Exception) -> int:
        if isinstance(exc, ValidationError):
            return HTTPStatus.BAD_REQUEST
        if isinstance(exc, StoreUnavailable):
            return HTTPStatus.SERVICE_UNAVAILABLE
        return HTTPStatus.INTERNAL_SERVER_ERROR

    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Tuple[int, Dict[str, Any]]:
        status_code = self.status_for(exc)
        if isinstance(exc, ValidationError):
            logger.warning("Bad request: %s context=%s", exc, context or {})
        elif isinstance(exc, ConsentGatewayError):
            logger.error("Request failed: %s context=%s", exc, context or {})
        else:
            logger.error("Unhandled exception: %s", exc, exc_info=True)
        return int(status_code), {
            "error": HTTPStatus(status_code).phrase,
            "message": str(exc),
        }

    def describe_request_errors(self, errors: List[Dict[str, Any]]) -> str:
        """Flatten FastAPI/pydantic request errors into one client-facing sentence."""
        parts = []
        for error in errors:
            if error.get("type") == "json_invalid":
                parts.append("body is not valid JSON")
                continue
            location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
            parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        return "Invalid request: " + "; ".join(parts)
