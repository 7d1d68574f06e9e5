"""Main FastAPI application entry point"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import logging

from atelier.api.admin import router as admin_router
from atelier.api.auth import router as auth_router
from atelier.api.chat import router as chat_router
from atelier.api.contact import router as contact_router
from atelier.api.files import router as files_router
from atelier.api.health import router as health_router, VERSION
from atelier.api.milestones import router as milestones_router
from atelier.api.notifications import router as notifications_router
from atelier.api.projects import router as projects_router
from atelier.api.errors import (
    AppError,
    app_error_handler,
    request_validation_error_handler,
    unhandled_error_handler,
)
from atelier.api.middleware import log_api_requests
from atelier.services.query_cache import INVALIDATE_HEADER
from atelier.services.redis_service import RedisService
from atelier.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title="Digitaal Atelier API",
    description="Backend API for the agency site: client dashboard, project approval and lead capture",
    version=VERSION,
)

# Error responses as RFC 7807 problem details
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.middleware("http")(log_api_requests)

# Configure CORS; the session cookie needs credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "If-None-Match"],
    expose_headers=["ETag", INVALIDATE_HEADER],
    max_age=3600,
)

# Include routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(milestones_router)
app.include_router(files_router)
app.include_router(notifications_router)
app.include_router(admin_router)
app.include_router(contact_router)
app.include_router(chat_router)


@app.on_event("shutdown")
async def close_connections():
    await RedisService.close()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Digitaal Atelier API",
        "version": VERSION,
        "status": "running",
    }
