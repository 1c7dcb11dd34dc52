# app/main.py
import logging

from dotenv import load_dotenv

# Load .env before the settings object is built
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# SlowAPI (Rate Limiting)
from slowapi.errors import RateLimitExceeded

from .core.config import settings
from .core.bootstrap import bootstrap_system
from .core.rate_limit import limiter

# FastAPI Users imports
from .core.users import fastapi_users, auth_backend_jwt, auth_backend_cookie
from .schemas.user import UserRead, UserUpdate

# API Routers
from .api import health as health_api
from .api.setup import main as setup_main_api
from .api.admin import main as admin_main_api
from .api.clients import main as clients_main_api
from .api.payments import main as payments_main_api
from .api.dashboard import main as dashboard_main_api
from .api.ocr import main as ocr_main_api
from .api.users import main as users_main_api

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="PayTrack", version="1.0.0")


# --- Database Initialization ---
@app.on_event("startup")
def on_startup():
    """Create tables and, when configured, the first admin."""
    bootstrap_system()
    logger.info("✅ PayTrack started")


# --- SlowAPI ---
app.state.limiter = limiter


async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        content={"detail": f"Rate limit exceeded: {exc.detail}"}, status_code=429
    )


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)


# ============================================================================
# --- SECURITY: CORS ---
# ============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# --- SECURITY: TRUSTED HOSTS ---
# ============================================================================
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.hosts)


# ============================================================================
# --- SECURITY: HTTP HEADERS ---
# ============================================================================
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ============================================================================
# --- GLOBAL EXCEPTION HANDLER ---
# ============================================================================
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"❌ Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal database error"})


# ============================================================================
# --- ROUTERS INCLUSION ---
# ============================================================================

# 1. FastAPI Users Routers
app.include_router(
    fastapi_users.get_auth_router(auth_backend_jwt),
    prefix="/auth/jwt",
    tags=["Auth - JWT"],
)
app.include_router(
    fastapi_users.get_auth_router(auth_backend_cookie),
    prefix="/auth/cookie",
    tags=["Auth - Cookie"],
)

# Only the self-service /users/me routes. Accounts are created and deleted
# through the admin API so that deletes cascade to payments.
users_router = fastapi_users.get_users_router(UserRead, UserUpdate)
users_router.routes = [r for r in users_router.routes if r.name.endswith("current_user")]
app.include_router(users_router, prefix="/users", tags=["Users"])

# 2. Domain API Routers
app.include_router(health_api.router, prefix="/api")
app.include_router(setup_main_api.router, prefix="/api", tags=["Setup"])
app.include_router(admin_main_api.router, prefix="/api", tags=["Admin"])
app.include_router(clients_main_api.router, prefix="/api", tags=["Clients"])
app.include_router(payments_main_api.router, prefix="/api", tags=["Payments"])
app.include_router(dashboard_main_api.router, prefix="/api", tags=["Dashboard"])
app.include_router(ocr_main_api.router, prefix="/api", tags=["OCR"])
app.include_router(users_main_api.router, prefix="/api", tags=["Users"])
