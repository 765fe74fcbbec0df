"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from database.engine import init_db, close_db
from api.routes import admin, applications, health, jobs, uploads, users

# Import middleware components
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
    SessionAuthenticationMiddleware,
)

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="FormHire job board: postings, applications and admin review",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Setup error handlers (before middleware)
setup_error_handlers(app, debug=settings.debug)

# Add middleware. Each add wraps the previous one, so CORS ends up outermost
# and the session principal is resolved before the logging middleware runs.
# 1. Error handling middleware (catches anything the handlers above miss)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)

# 2. Structured logging middleware (logs all requests/responses)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    log_response_body=settings.log_response_body,
    max_body_size=settings.log_max_body_size,
)

# 3. Session authentication middleware (resolves the principal, never rejects)
app.add_middleware(
    SessionAuthenticationMiddleware,
    cookie_name=settings.session_cookie_name,
)

# 4. CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check routes
app.include_router(health.router, tags=["Health"])

# API routes
app.include_router(jobs.router)
app.include_router(applications.router)
app.include_router(users.router)
app.include_router(uploads.router)
app.include_router(admin.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
