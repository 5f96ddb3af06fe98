import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models_chat  # noqa: F401
from .config import ALLOWED_ORIGINS
from .database import Base, SessionLocal, engine
from .domain.chat.router import router as chat_router
from .domain.employees.router import router as employees_router
from .domain.invites.router import router as invites_router
from .domain.requests.router import router as requests_router
from .domain.schedules.router import router as schedules_router
from .domain.stores.router import router as stores_router
from .domain.timeclock.router import router as timeclock_router
from .exceptions import ShiftlyError
from .models import DEFAULT_ROLES, Role
from .redis_client import get_redis_client
from .routes.mailer import router as mailer_router
from .routes.queue import router as queue_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def seed_roles() -> None:
    """Insert the fixed role rows when missing"""
    db = SessionLocal()
    try:
        existing = {r.role_id for r in db.query(Role).all()}
        missing = [
            Role(role_id=role_id, role_name=name)
            for role_id, name in DEFAULT_ROLES.items()
            if role_id not in existing
        ]
        if missing:
            db.add_all(missing)
            db.commit()
            logger.info(f"Seeded roles: {', '.join(r.role_name for r in missing)}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        seed_roles()
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    try:
        get_redis_client()  # Connection test
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - chat queue and rate limiting unavailable: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Shiftly API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx can carry the raw exception object
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


@app.exception_handler(ShiftlyError)
async def shiftly_error_handler(request: Request, exc: ShiftlyError):
    logger.error(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(employees_router)
app.include_router(invites_router)
app.include_router(stores_router)
app.include_router(schedules_router)
app.include_router(timeclock_router)
app.include_router(requests_router)
app.include_router(chat_router)
app.include_router(mailer_router)
app.include_router(queue_router)


@app.get("/")
def root():
    return {"message": "Shiftly API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        client = get_redis_client()

        start_time = time.time()
        client.ping()
        response_time = (time.time() - start_time) * 1000

        info = client.info()
        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
                "connected_clients": info.get("connected_clients", 0),
            },
        }
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
