import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Register every table on Base before create_all
from . import models, models_invoice  # noqa: F401
from .auth import NOT_AUTHENTICATED
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.billing import rates_router, timesheets_router
from .domain.billing import router as billing_router
from .domain.bookings import assignments_router
from .domain.bookings import router as bookings_router
from .domain.clients import router as clients_router
from .domain.interpreters import router as interpreters_router
from .domain.users import router as users_router
from .errors import DomainError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Keep the certificate fetches out of the request log
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Interpreter booking API starting")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    except Exception as e:
        # Several workers race to create the schema on first boot
        if "already exists" not in str(e):
            logger.error(f"❌ Schema creation failed: {e}")
            raise
        logger.info("ℹ️ Schema already created by another worker")

    yield
    logger.info("Interpreter booking API shutting down")


app = FastAPI(title="Interpreter Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map typed service errors to their HTTP status"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} - {exc.error_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the raw ctx objects pydantic attaches"""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """A bad Authorization header is an authentication failure, not a 422"""
    errors = exc.errors()
    if any("authorization" in str(err.get("loc", "")).lower() for err in errors):
        logger.warning(f"🔒 {request.url.path}: missing or invalid Authorization header")
        return JSONResponse(status_code=401, content={"detail": NOT_AUTHENTICATED})

    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(exc), "error_code": "validation_error"},
    )


@app.middleware("http")
async def log_failures(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"❌ {request.method} {request.url.path} failed: {e}")
        raise


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

for router in (
    users_router,
    clients_router,
    interpreters_router,
    bookings_router,
    assignments_router,
    timesheets_router,
    rates_router,
    billing_router,
):
    app.include_router(router)


@app.get("/")
def root():
    return {"message": "Interpreter Booking API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
