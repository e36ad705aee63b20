"""
FastAPI dependencies.

Services are built once in src/api/main.py:create_app and stored on
app.state; handlers receive them through these providers, so tests can swap
them with app.dependency_overrides.
"""

from fastapi import Request

from src.error_handler import ErrorHandler
from src.integrations.finvu.consent_service import ConsentService
from src.utils.config_loader import GatewayConfig


def get_consent_service(request: Request) -> ConsentService:
    return request.app.state.consent_service


def get_session_cache(request: Request):
    return request.app.state.session_cache


def get_gateway_config(request: Request) -> GatewayConfig:
    return request.app.state.config


def get_error_handler(request: Request) -> ErrorHandler:
    return request.app.state.error_handler
