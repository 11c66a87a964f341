import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load .env from the project root (local development only)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
loaded = load_dotenv(dotenv_path=env_path)
if loaded:
    logger.info(f"Environment variables loaded from: {env_path}")
else:
    logger.warning(f"No .env file loaded from: {env_path}")

from .config import get_settings, clear_settings_cache
from .database import bootstrap_database
from .routers import stats, tracking
from .schemas.stats_schema import HealthOut
from .services.retention_service import retention_loop

clear_settings_cache()
app_settings = get_settings()

if not app_settings.salt:
    logger.warning("⚠️ SALT is not set; visitor fingerprints use an empty salt")
if not app_settings.api_key:
    logger.warning("⚠️ API_KEY is not set; /stats will reject every request")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Origin, X-Requested-With, Accept",
}

IDENTIFICATION_TEXT = "Visitor Stats Worker"


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    interval = get_settings().retention_sweep_interval_seconds
    if interval > 0:
        sweeper = asyncio.create_task(retention_loop(interval))
    yield
    if sweeper is not None:
        sweeper.cancel()


app = FastAPI(title=app_settings.app_name, version="0.1.0", redirect_slashes=False, lifespan=lifespan)


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    """Answers every preflight and puts permissive CORS headers on all responses."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    # Unknown paths just identify the service
    return PlainTextResponse(IDENTIFICATION_TEXT, status_code=200)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Runs outside the middleware stack, so CORS headers are added here
    logger.error(f"❌ Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse({"error": str(exc)}, status_code=500, headers=CORS_HEADERS)


# Create tables and the global_stats row (do not block startup on failure)
try:
    bootstrap_database()
except Exception as e:
    logger.error(f"❌ Error bootstrapping database: {str(e)}", exc_info=True)
    logger.warning("⚠️ Server will keep starting, but storage may be unavailable")

app.include_router(tracking.router)
app.include_router(stats.router)


@app.api_route("/health", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"], tags=["health"], response_model=HealthOut)
async def health():
    return HealthOut()


@app.api_route("/", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"], tags=["root"], response_class=PlainTextResponse)
async def root():
    return IDENTIFICATION_TEXT
