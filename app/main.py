"""
Main application entry point.

This module initializes the FastAPI application and includes all routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import FieldWorkBookError
from app.core.logging import logger
from app.core.middleware import SecurityHeadersMiddleware, AuditMiddleware
from app.db.init_db import init_db
from app.routers.health import router as health_router
from app.routers.auth import router as auth_router
from app.routers.teams import router as teams_router
from app.routers.users import router as users_router
from app.routers.partners import router as partners_router
from app.routers.expenses import router as expenses_router, download_router
from app.routers.amount_requests import router as amount_requests_router
from app.routers.maintenance import router as maintenance_router
from app.routers.dashboard import router as dashboard_router
from app.routers.reports import router as reports_router
from app.routers.audit import router as audit_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Actions to run on application startup and shutdown."""
    logger.info(f"Starting {settings.api.title}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Database URL: {settings.database.url[:20]}...")
    await init_db()
    logger.info(f"API Docs available at: http://{settings.api.host}:{settings.api.port}/docs")
    yield
    logger.info(f"Shutting down {settings.api.title}")


app = FastAPI(
    title=settings.api.title,
    description=settings.api.description,
    version=settings.api.version,
    debug=settings.debug,
    lifespan=lifespan,
)


@app.exception_handler(FieldWorkBookError)
async def fieldworkbook_error_handler(request: Request, exc: FieldWorkBookError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_urls,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

prefix = settings.api.prefix

app.include_router(health_router, prefix=f"{prefix}/health", tags=["health"])
app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["authentication"])
app.include_router(teams_router, prefix=f"{prefix}/teams", tags=["teams"])
app.include_router(users_router, prefix=f"{prefix}/users", tags=["users"])
app.include_router(partners_router, prefix=f"{prefix}/partners", tags=["partners"])
app.include_router(expenses_router, prefix=f"{prefix}/expenses", tags=["expenses"])
app.include_router(download_router, prefix=f"{prefix}/download", tags=["expenses"])
app.include_router(amount_requests_router, prefix=f"{prefix}/amount-requests", tags=["amount-requests"])
app.include_router(maintenance_router, prefix=prefix, tags=["maintenance"])
app.include_router(dashboard_router, prefix=f"{prefix}/dashboard", tags=["dashboard"])
app.include_router(reports_router, prefix=f"{prefix}/partner-report", tags=["reports"])
app.include_router(audit_router, prefix=f"{prefix}/audit-logs", tags=["audit-logs"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.api.title,
        "version": settings.api.version,
        "docs": "/docs",
    }
