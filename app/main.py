# app/main.py
import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .api.v1.router import api_router
from .database import init_db, close_db, get_db_stats, check_db_health
from .exceptions import CatalogError
from .redis_client import redis_client, get_redis_stats

# ============================================================
# Setup Logging
# ============================================================
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================================
# Startup/Shutdown Events
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: one database engine and one Redis pool per process
    """
    # ✅ STARTUP
    logger.info(f"🚀 Starting {settings.APP_NAME}...")
    logger.info(f"🌐 Environment: {settings.ENVIRONMENT}")
    logger.info(f"🔒 Debug mode: {settings.DEBUG}")

    async def connect_redis():
        try:
            await redis_client.connect()
        except Exception as e:
            logger.error(f"❌ Redis connection failed: {e}")
            logger.warning("⚠️ API will continue without Redis caching")

    try:
        await asyncio.gather(init_db(), connect_redis())
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    logger.info("✅ Application startup complete!")

    yield  # Application runs

    # ❌ SHUTDOWN
    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")

    await asyncio.gather(
        close_db(),
        redis_client.disconnect(),
        return_exceptions=True,
    )

    logger.info("👋 Goodbye!")


# ============================================================
# Create FastAPI Application
# ============================================================

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Movie catalog API: movies, categories, seasons, episodes, users and messages",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# ============================================================
# Middleware Configuration
# ============================================================

# 1️⃣ CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

# 2️⃣ Request ID Middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next: Callable):
    """Add unique request ID for tracing"""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

# 3️⃣ Request Logging Middleware
@app.middleware("http")
async def log_requests(request: Request, call_next: Callable):
    """Log all requests with timing"""
    start_time = time.time()

    logger.info(f"➡️ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"⬅️ {request.method} {request.url.path} "
        f"[{response.status_code}] {duration:.3f}s"
    )

    response.headers["X-Process-Time"] = str(duration)
    return response

# 4️⃣ Security Headers Middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next: Callable):
    """Add security headers to all responses"""
    response = await call_next(request)

    if settings.HTTPS_ONLY:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    return response

# ============================================================
# API Routers
# ============================================================

app.include_router(api_router, prefix=settings.API_PREFIX)

# ============================================================
# Root Endpoints
# ============================================================

@app.get("/", tags=["Root"])
async def root() -> dict:
    """API information endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health"
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Fast health check endpoint for load balancers
    Returns immediately without checking dependencies
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health/detailed", tags=["Health"])
async def health_check_detailed() -> dict:
    """
    Detailed health check endpoint
    Checks database and Redis connectivity
    """
    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }

    db_healthy = await check_db_health()
    health_status["database"] = "connected" if db_healthy else "disconnected"
    if not db_healthy:
        health_status["status"] = "degraded"

    if redis_client.enabled:
        redis_healthy = await redis_client.ping()
        health_status["redis"] = "connected" if redis_healthy else "disconnected"
    else:
        health_status["redis"] = "disabled"

    return health_status


@app.get("/metrics", tags=["Monitoring"])
async def metrics() -> dict:
    """
    Database pool and Redis statistics
    """
    try:
        return {
            "database": await get_db_stats(),
            "redis": await get_redis_stats(),
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG
        }
    except Exception as e:
        logger.error(f"❌ Metrics error: {e}")
        return {
            "error": str(e),
            "environment": settings.ENVIRONMENT
        }

# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    """NotFound / InvalidArgument / Unavailable as {success: false, message}"""
    if exc.status_code >= 500:
        logger.error(f"❌ {type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Route-raised HTTPException in the same {success: false, message} body"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        f"❌ Unhandled exception [Request ID: {request_id}]: {str(exc)}",
        exc_info=True
    )

    # Hide internal errors in production
    error_detail = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": error_detail,
            "request_id": request_id
        }
    )


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    """Custom 404 handler for unknown routes"""
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "message": getattr(exc, "detail", None) or "Endpoint not found",
            "path": str(request.url.path)
        }
    )

# ============================================================
# Run Application
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
