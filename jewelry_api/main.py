# jewelry_api/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from jewelry_api.core.config import get_settings
from jewelry_api.core.errors import AppError
from jewelry_api.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from jewelry_api.models import admin as _admin_models  # noqa: F401
from jewelry_api.models import code_sequence as _code_sequence_models  # noqa: F401
from jewelry_api.models import expense as _expense_models  # noqa: F401
from jewelry_api.models import order as _order_models  # noqa: F401
from jewelry_api.models import product as _product_models  # noqa: F401

# Routers
from jewelry_api.routers.admin_auth import router as admin_auth_router
from jewelry_api.routers.admin_auth import service as auth_service
from jewelry_api.routers.admin_expenses import router as admin_expenses_router
from jewelry_api.routers.admin_orders import router as admin_orders_router
from jewelry_api.routers.admin_products import router as admin_products_router
from jewelry_api.routers.admin_stats import router as admin_stats_router
from jewelry_api.routers.orders import router as orders_router
from jewelry_api.routers.products import router as products_router
from jewelry_api.schemas.common import ERROR_RESPONSES

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("uvicorn")

HTTP_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT_EXCEEDED",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Create the bootstrap super admin if configured and missing.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception:
        logger.exception("Startup: DB connection FAILED")
        raise

    if settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD:
        with Session(engine) as session:
            auth_service.bootstrap_super_admin(
                session,
                settings.BOOTSTRAP_ADMIN_EMAIL,
                settings.BOOTSTRAP_ADMIN_PASSWORD,
                settings.BOOTSTRAP_ADMIN_NAME,
            )
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
)


# --- Error envelope ---


def _error(
    status_code: int,
    message: str,
    code: str,
    details=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = {"success": False, "error": message, "code": code}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_envelope(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(loc),
                "message": err.get("msg", "Invalid value"),
                "type": err.get("type", "value_error"),
            }
        )
    return _error(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        "VALIDATION_ERROR",
        details,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(
        exc.status_code,
        message,
        HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error(
        status.HTTP_409_CONFLICT,
        "Resource conflicts with existing data",
        "CONFLICT",
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error"
    if settings.is_development:
        message = f"{message}: {exc}"
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        message,
        "INTERNAL_SERVER_ERROR",
    )


# --- CORS configuration ---

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API prefix, e.g. /api
app.include_router(products_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
app.include_router(orders_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
app.include_router(admin_auth_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
app.include_router(admin_products_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
app.include_router(admin_orders_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
app.include_router(admin_expenses_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)
app.include_router(admin_stats_router, prefix=settings.API_PREFIX, responses=ERROR_RESPONSES)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "jewelry-api"}
