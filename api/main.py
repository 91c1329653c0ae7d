"""
Vehicles API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import __version__
from api.dependencies import close_car_service, get_car_service, get_settings
from api.models import ErrorResponse
from services.car_service import CarService

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_car_service()


# Create FastAPI application
app = FastAPI(
    title="Vehicles API",
    description="REST API for vehicle records enriched with price and address data",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS - Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for demo
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)


def _error_body(error: str, detail: str | None, status_code: int) -> dict:
    return ErrorResponse(error=error, detail=detail, status_code=status_code).model_dump()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and path parameters are a 400, not FastAPI's default 422."""
    messages = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    logger.info(f"Rejected request to {request.url.path}: {len(messages)} validation error(s)")
    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid request", "; ".join(messages), 400),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error = "Not found" if exc.status_code == 404 else "Request failed"
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error, str(exc.detail), exc.status_code),
    )


@app.get("/health", tags=["Health"])
def health_check(service: CarService = Depends(get_car_service)):
    """
    Health check endpoint.

    Returns the API status, version and enrichment counters. Downstream
    misses never fail a request, so the counters are where they show up.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "vehicles-api",
        "enrichment": service.enrichment_stats(),
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Vehicles API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import cars

app.include_router(cars.router, tags=["Cars"])
