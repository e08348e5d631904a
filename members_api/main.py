"""Members API - Main Application"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from members_api import __version__
from members_api.auth.jwt import AuthContext, get_auth_context
from members_api.config import settings
from members_api.routes import auth, members
from members_api.services.database_service import db_service
from members_api.services.negotiation import UTF8JSONResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def seed_initial_user():
    """Create the configured initial user if it is missing"""
    if not (settings.initial_username and settings.initial_password):
        return
    if db_service.get_user_by_username(settings.initial_username):
        return
    db_service.create_user(settings.initial_username, settings.initial_password)
    logger.info(f"Seeded initial user '{settings.initial_username}'")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Members API...")
    seed_initial_user()
    yield
    # Shutdown
    logger.info("Shutting down Members API...")
    db_service.close()


app = FastAPI(
    title=settings.app_name,
    description="Member management API with bearer-token authentication",
    version=__version__,
    default_response_class=UTF8JSONResponse,
    lifespan=lifespan
)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as a JSON object carrying a message"""
    return UTF8JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request body or parameter validation failure"""
    return UTF8JSONResponse(
        status_code=422,
        content={"message": "Validation failed", "errors": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return UTF8JSONResponse(
        status_code=500,
        content={"message": "Internal server error"}
    )


# Include routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(members.router, prefix="/members", tags=["Members"])


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "members-api",
        "version": __version__
    }


# Registered last: anything unmatched above lands here, and authentication is
# checked before the 404 so unauthenticated callers cannot probe for routes.
@app.api_route(
    "/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False
)
async def catch_all(path: str, auth: AuthContext = Depends(get_auth_context)):
    raise HTTPException(status_code=404, detail=f"/{path} not found")
