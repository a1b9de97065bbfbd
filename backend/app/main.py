import sys
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.core.settings import get_settings

# Load and validate settings
try:
    settings = get_settings()
except ValueError as e:
    print(f"Configuration error: {e}", file=sys.stderr)
    sys.exit(1)

from backend.app.api import account, auth, public
from backend.app.core.database import get_record_store
from backend.app.core.limiter import limiter
from backend.app.core.logging import RequestContextMiddleware, setup_logging, get_logger
from backend.app.core.metrics import PrometheusMiddleware, get_metrics_response

# Initialize structured logging
# Use JSON format in production
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=settings.is_production
)

logger = get_logger(__name__)

logger.info(
    "Application configuration loaded",
    environment=settings.ENVIRONMENT,
    data_dir=settings.DATA_DIR,
    referral_bonus=str(settings.REFERRAL_BONUS),
)
if not settings.JWT_SECRET:
    logger.warning("JWT_SECRET is not set, using the development secret. Never run like this in production!")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - Startup: open the record store (creates empty collection files on first run)
    """
    logger.info("Application starting up", version="1.0.0")
    store = get_record_store()
    logger.info("Record store ready", store=type(store).__name__, data_dir=settings.DATA_DIR)
    yield
    logger.info("Application shutting down")


app = FastAPI(title="Referral Rewards Backend", lifespan=lifespan)

# Use shared limiter (routers use the same instance for @limiter.limit)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# Все ошибки отдаем клиенту в одном формате: {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Malformed request body", errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# CORS middleware - ДОЛЖЕН БЫТЬ ПЕРВЫМ (выполняется последним при ответе)
ALLOWED_ORIGINS = settings.allowed_origins_list
if not ALLOWED_ORIGINS:
    ALLOWED_ORIGINS = ["*"]
    logger.warning("CORS: Allowing all origins. Set ALLOWED_ORIGINS to restrict them.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Add Prometheus metrics middleware AFTER CORS (выполняется раньше при ответе)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestContextMiddleware)

# Подключаем роутеры (части нашего приложения)
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(account.router, prefix="/api", tags=["account"])
app.include_router(public.router, prefix="/api", tags=["public"])
app.include_router(public.redirect_router, tags=["public"])


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(openmetrics: bool = False):
    """
    Prometheus metrics endpoint.

    Args:
        openmetrics: If True, return OpenMetrics format
    """
    return get_metrics_response(openmetrics=openmetrics)


# Веб-клиент (index.html и т.д.) - монтируем последним, чтобы API имел приоритет
_static_dir = Path(settings.STATIC_DIR)
_static_dir.mkdir(parents=True, exist_ok=True)
app.mount("/", StaticFiles(directory=str(_static_dir), html=True), name="client")


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
