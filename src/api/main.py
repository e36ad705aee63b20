"""
FastAPI application - Main entry point

Run with:
  uvicorn src.api.main:create_app --factory --host 0.0.0.0 --port 3002
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.endpoints.consent import SERVICE_NAME, consent_api, probe_session_store
from src.error_handler import ErrorHandler
from src.integrations.contracts.finvu import AANetworkClient
from src.integrations.finvu.consent_service import ConsentService
from src.integrations.finvu.errors import ConsentGatewayError, StoreUnavailable, ValidationError
from src.integrations.finvu.session_service import SessionService
from src.integrations.finvu.token_service import TokenService
from src.utils.config_loader import GatewayConfig, load_gateway_config

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
ROUTE_PREFIX = "/finvu-aa"


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

def build_session_cache(config: GatewayConfig):
    # Real Redis when REDIS_URL is set, else the in-memory stub.
    if config.session_store.url:
        from src.database.redis_real import RedisCache

        return RedisCache(url=config.session_store.url, db=config.session_store.db)

    from src.database.redis import RedisCache

    logger.warning("REDIS_URL not set; using in-memory session store")
    return RedisCache()


def build_finvu_client(config: GatewayConfig) -> AANetworkClient:
    if config.integrations_mode == "mock":
        from src.integrations.clients.mocks.finvu import MockFinvuClient

        logger.warning("INTEGRATIONS_MODE=mock; Finvu AA calls are simulated")
        return MockFinvuClient(user_id=config.finvu.user_id, password=config.finvu.password)

    from src.integrations.clients.real_http.finvu import FinvuHttpClient

    return FinvuHttpClient(base_url=config.finvu.base_url, timeout_seconds=config.finvu.timeout_seconds)


async def check_session_store_connection(cache, config: GatewayConfig) -> None:
    logger.info("Checking session store connection...")
    try:
        await probe_session_store(
            cache,
            config.session_store.startup_check_key,
            config.session_store.startup_check_ttl,
        )
    except StoreUnavailable as exc:
        logger.error("Session store connection failed: %s", exc)
        raise StoreUnavailable(
            "Redis is not running or not accessible. Please check your Redis server and configuration.\n"
            f"Error: {exc}\n"
            "Make sure REDIS_URL (and REDIS_DB) are configured correctly."
        ) from exc
    logger.info("Session store connection successful")


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

def create_app(
    config: Optional[GatewayConfig] = None,
    session_cache=None,
    finvu_client: Optional[AANetworkClient] = None,
    check_store_on_startup: bool = True,
) -> FastAPI:
    config = config or load_gateway_config()
    session_cache = session_cache if session_cache is not None else build_session_cache(config)
    finvu_client = finvu_client or build_finvu_client(config)

    token_service = TokenService(
        finvu_client,
        user_id=config.finvu.user_id,
        password=config.finvu.password,
        channel_id=config.finvu.channel_id,
    )
    consent_service = ConsentService(
        finvu_client,
        token_service=token_service,
        session_service=SessionService(session_cache),
        settings=config.finvu,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if check_store_on_startup:
            await check_session_store_connection(session_cache, config)
        logger.info("Finvu AA Service running on %s:%s", config.server.host, config.server.port)
        logger.info("Environment: %s", config.server.environment)
        logger.info("Finvu Base URL: %s", config.finvu.base_url)
        yield
        logger.info("Shutting down: closing Finvu client and session store")
        await finvu_client.aclose()
        await session_cache.close()

    app = FastAPI(
        title="Finvu AA Consent Gateway",
        description="Generates and binds Account Aggregator consent requests for loan origination",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.session_cache = session_cache
    app.state.finvu_client = finvu_client
    app.state.consent_service = consent_service
    app.state.error_handler = ErrorHandler()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = round((time.time() - start) * 1000, 1)
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)
        return response

    @app.exception_handler(ConsentGatewayError)
    async def gateway_error_handler(request: Request, exc: ConsentGatewayError):
        status_code, payload = app.state.error_handler.handle_exception(exc, {"path": request.url.path})
        return JSONResponse(status_code=status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error_handler = app.state.error_handler
        message = error_handler.describe_request_errors(exc.errors())
        status_code, payload = error_handler.handle_exception(ValidationError(message), {"path": request.url.path})
        return JSONResponse(status_code=status_code, content=payload)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        status_code, payload = app.state.error_handler.handle_exception(exc, {"path": request.url.path})
        return JSONResponse(status_code=status_code, content=payload)

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Not Found", "message": f"Route {request.method} {request.url.path} not found"},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail), "message": str(exc.detail)})

    # Served at the root and under the prefix used by the loan-origination workflow
    app.include_router(consent_api)
    app.include_router(consent_api, prefix=ROUTE_PREFIX)

    @app.get("/", tags=["Health"])
    async def root():
        return {
            "service": SERVICE_NAME,
            "version": APP_VERSION,
            "status": "running",
            "endpoints": {
                "generate": f"POST {ROUTE_PREFIX}/consent/generate",
                "verify": f"POST {ROUTE_PREFIX}/consent/verify",
                "health": f"GET {ROUTE_PREFIX}/health",
            },
        }

    return app
