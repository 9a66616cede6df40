"""
Invoicing API - FastAPI Application
Main entry point with all routes configured.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from invoicing.config import settings
from invoicing.database import init_db
from invoicing.core.exceptions import InvoicingException, UnauthorizedError
from invoicing.schemas.common import HealthResponse

# Import all API routers
from invoicing.api import auth, me, organizations, admin, clients, invoices, subscription

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    yield
    # Shutdown


app = FastAPI(
    title="Invoicing API",
    description="Multi-tenant invoicing with role-based access and subscription plans",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvoicingException)
async def invoicing_exception_handler(request: Request, exc: InvoicingException):
    """Render domain errors as {"detail": message} with their status code."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


# Include all routers
app.include_router(auth.router)
app.include_router(me.router)
app.include_router(organizations.router)
app.include_router(admin.router)
app.include_router(clients.router)
app.include_router(invoices.router)
app.include_router(subscription.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "Invoicing API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "version": "1.0.0"
    }
