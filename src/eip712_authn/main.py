"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eip712_authn import __version__
from eip712_authn.api.v1 import api_router
from eip712_authn.core.config import get_settings
from eip712_authn.core.logging import configure_logging
from eip712_authn.services.auth import AuthError, AuthServer, get_auth_server

logger = logging.getLogger(__name__)

AUTH_ERROR_STATUS = {
    "invalid_message": status.HTTP_400_BAD_REQUEST,
    "invalid_token": status.HTTP_401_UNAUTHORIZED,
    "invalid_signature": status.HTTP_401_UNAUTHORIZED,
    "signature_mismatch": status.HTTP_401_UNAUTHORIZED,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and build the auth server before serving."""
    settings = get_settings()
    configure_logging(settings)

    auth_server = get_auth_server()
    logger.info(
        f"Serving challenges for {auth_server.app_name} v{auth_server.app_version}, "
        f"ttl {auth_server.default_ttl_seconds}s"
    )
    app.state.settings = settings

    yield


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Convert a failed verification into its HTTP response.

    A malformed envelope is the caller's fault (400); every other failure
    means the caller is not authenticated (401).
    """
    status_code = AUTH_ERROR_STATUS.get(exc.code, status.HTTP_401_UNAUTHORIZED)
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"error": exc.code, "message": exc.message}},
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="EIP-712 wallet authentication API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Browser wallets call the API cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_exception_handler(AuthError, auth_error_handler)

    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all application routes."""
    settings = get_settings()

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/health", tags=["System"])
    async def health_check(
        auth_server: Annotated[AuthServer, Depends(get_auth_server)],
    ):
        """Health check reporting the signing domain clients should expect."""
        return {
            "status": "healthy",
            "version": __version__,
            "domain": {
                "name": auth_server.app_name,
                "version": auth_server.app_version,
                "defaultChainId": settings.default_chain_id,
            },
            "challengeTtlSeconds": auth_server.default_ttl_seconds,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


app = create_app()
