"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health
from api.routes.v1 import (
    admin,
    applications,
    auth,
    interview_candidates,
    jobs,
)
from core.config import settings
from core.middleware import (
    AuthenticationMiddleware,
    ErrorHandlingMiddleware,
    StructuredLoggingMiddleware,
    setup_error_handlers,
    setup_logging,
)
from database.engine import close_db, init_db

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Careers site and hiring pipeline API",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

setup_error_handlers(app)

# Middleware added last runs first: authentication is innermost,
# error handling wraps everything below CORS.
app.add_middleware(
    AuthenticationMiddleware,
    jwt_secret=settings.JWT_SECRET,
    jwt_algorithm=settings.JWT_ALGORITHM,
)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    log_response_body=settings.log_response_body,
    max_body_size=settings.log_max_body_size,
)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check routes, at the root for probes and under the API prefix
app.include_router(health.router)
app.include_router(health.router, prefix=settings.api_v1_prefix)

# API v1 routes
for module in (auth, admin, applications, jobs, interview_candidates):
    app.include_router(module.router, prefix=settings.api_v1_prefix)


def main():
    """Run the development server."""
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
