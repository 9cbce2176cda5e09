import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .backend import BackendClient, create_http_client
from .config import ALLOWED_ORIGINS, ENVIRONMENT, SECURITY_HEADERS_ENABLED
from .domain.admin.router import router as admin_router
from .domain.booking.router import router as booking_router
from .domain.cms.router import router as cms_router
from .domain.customer_portal.router import router as customer_portal_router
from .domain.employee.router import router as employee_router
from .domain.manage.router import router as manage_router
from .errors import PortalError
from .query_cache import QueryCache
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application starting up ({ENVIRONMENT})...")
    http = create_http_client()
    app.state.query_cache = QueryCache()
    app.state.backend = BackendClient(http, app.state.query_cache)

    from .rate_limiter import get_redis_client

    if get_redis_client() is None:
        logger.info("Rate limiting running on in-memory windows")
    else:
        logger.info("Redis connection established")

    yield
    logger.info("Application shutting down...")
    await http.aclose()


app = FastAPI(title="Clean & Green Booking Portal", version="1.0.0", lifespan=lifespan)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    """Render every portal error as {detail, notice} with its status"""
    status = exc.status_code
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} - {status}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} - {status}: {exc.message}")
    return JSONResponse(status_code=status, content=exc.to_dict())


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(booking_router)
app.include_router(manage_router)
app.include_router(customer_portal_router)
app.include_router(admin_router)
app.include_router(employee_router)
app.include_router(cms_router)


@app.get("/")
def root():
    return {"message": "Clean & Green Booking Portal is running"}


@app.get("/health")
def health(request: Request):
    cache = getattr(request.app.state, "query_cache", None)
    return {"status": "healthy", "queryCache": cache.stats() if cache else None}
