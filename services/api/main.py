"""
The Poradas wedding site - Backend API
FastAPI over a content store (Firestore, SQLite or JSON files) and a blob
store (GCS or local disk) for guest stories, the guestbook, the photo album
and the visitor map.

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import contextvars
import logging
import os
import time
import uuid

from deps import Storage
from routers import admin as admin_router
from routers import album as album_router
from routers import guest_stories as guest_stories_router
from routers import guestbook as guestbook_router
from routers import map as map_router
from settings import get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)
request_start_time_var = contextvars.ContextVar('request_start_time', default=None)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0"

# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="The Poradas Wedding API",
    description="Guest stories, guestbook, photo album and visitor map",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Add request_id and timing to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    request_start_time_var.set(time.time())

    response = await call_next(request)

    latency = time.time() - request_start_time_var.get()
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({round(latency * 1000, 2)}ms) [{request_id}]"
    )

    response.headers["X-Request-ID"] = request_id
    return response


ALLOWED_ORIGINS = settings.get_origins_list()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR ENVELOPE
# ============================================================================

def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"message": message}},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    logger.warning(f"Validation failed for {request.method} {request.url.path}: {messages}")
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "Invalid request")


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/health")
async def health_check(storage: Storage):
    """Health check endpoint"""
    try:
        storage.ping()
        return {
            "status": "healthy",
            "backend": settings.storage_backend,
            "blobs": settings.blob_backend,
            "version": VERSION
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "backend": settings.storage_backend, "error": str(e)}
        )


@app.get("/healthz")
async def healthz():
    """
    Liveness check. Returns 200 while the process is up; touches no backend.
    """
    return {
        "status": "ok",
        "timestamp": time.time(),
        "version": VERSION
    }


@app.get("/readyz")
async def readyz(storage: Storage):
    """
    Readiness check. 200 when the content store answers, 503 otherwise.
    """
    try:
        storage.ping()
        return {
            "status": "ready",
            "backend": settings.storage_backend,
            "timestamp": time.time()
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "backend": settings.storage_backend,
                "error": str(e),
                "timestamp": time.time()
            }
        )


@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "message": "The Poradas Wedding API",
        "version": VERSION,
        "backend": settings.storage_backend,
        "status": "running",
        "docs": "/docs"
    }


app.include_router(guest_stories_router.router)
app.include_router(guestbook_router.router)
app.include_router(album_router.router)
app.include_router(map_router.router)
app.include_router(admin_router.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Wedding API starting up...")
    logger.info(f"Storage Backend: {settings.storage_backend.upper()}")
    logger.info(f"Blob Backend: {settings.blob_backend.upper()}")
    logger.info(f"Rate limit store: {settings.rate_limit_backend}")
    if not settings.admin_secret_key:
        logger.warning("ADMIN_SECRET_KEY is not set; admin endpoints will reject every request")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Wedding API shutting down...")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
