"""
StreakGuard - Local Account API Server

FastAPI application guarding a single local account:
- Password login with failed-attempt lockout
- Biometric login
- Login streaks, points, badges and rank
- Engagement notifications
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file BEFORE other imports
load_dotenv()

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.loader import get_config
from src.api import include_routers
from src.api.dependencies import AppServices, build_services
from src.utils.response_models import error_response
from src.utils.structured_logger import clear_account, set_request_id, setup_structured_logging

logger = logging.getLogger(__name__)


def get_cors_origins() -> list:
    """Allowed CORS origins from environment, or local development defaults."""
    env_origins = os.getenv("CORS_ORIGINS", "")
    if env_origins:
        return [origin.strip() for origin in env_origins.split(",") if origin.strip()]

    return [
        "http://localhost:3000",
        "http://localhost:8081",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8081",
    ]


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built services (tests); built from config at startup otherwise
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler"""
        if getattr(app.state, "services", None) is None:
            config = get_config()
            setup_structured_logging(
                level=config.log_level,
                json_output=config.json_logs,
                service_name=config.service_name,
            )
            app.state.services = build_services(config)
        logger.info("Starting StreakGuard...")
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title="StreakGuard",
        description="Local account login guard with engagement streaks",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        """Tag every log line of a request with its request id"""
        request_id = request.headers.get("X-Request-ID") or os.urandom(8).hex()
        set_request_id(request_id)
        clear_account()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # ==================== Health Endpoints ====================

    @app.get("/")
    async def root():
        """Root endpoint - API info"""
        return {
            "name": "StreakGuard",
            "version": "1.0.0",
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint"""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    include_routers(app)

    # ==================== Error Handlers ====================

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict):
            content = error_response(exc.detail.get("error", "Request failed"), code=exc.detail.get("code"))
        else:
            content = error_response(str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler. Never echoes exception text."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error")
        )

    return app


app = create_app()


# ==================== Run Server ====================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    host = os.getenv("HOST", "127.0.0.1")

    logger.info(f"Starting server on {host}:{port}")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info"
    )
