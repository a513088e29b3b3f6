import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_admin.api.deps import get_http_session
from catalog_admin.api.v1 import admin_discounts
from catalog_admin.config import settings
from catalog_admin.middleware.security import SecurityHeadersMiddleware, TimingMiddleware

if not settings.DEBUG:
    from catalog_admin.utils.logging_config import setup_logging
    setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.APP_NAME} starting, catalog backend at {settings.API_BASE_URL}")
    yield
    get_http_session().close()
    get_http_session.cache_clear()


app = FastAPI(
    title=settings.APP_NAME,
    description="E-commerce catalog admin: product discounts and bulk discount batches",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TimingMiddleware)

# The admin dashboard is the only browser client in production
origins = ["*"]
if settings.ENVIRONMENT == "production":
    origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",") if origin.strip()]
    if not origins:
        logger.warning("ALLOWED_ORIGINS is empty, the admin dashboard will be blocked by CORS")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)


def _error_envelope(status_code: int, message: str, code: str, details: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "message": message, "error": {"code": code, "details": details}},
    )


def _field_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    # "body.discountPercentage" instead of pydantic's raw loc tuples and ctx objects
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in errors
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "VALIDATION_ERROR",
        _field_errors(exc.errors()),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "SERVER_ERROR",
        str(exc) if settings.DEBUG else "An error occurred",
    )


app.include_router(admin_discounts.router, prefix="/admin", tags=["Admin Discounts"])


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} is running",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "backend": settings.API_BASE_URL
    }
