import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from config import settings
from db.init_db import init_db
from error_handler import APIError
from logging_config import setup_logging, get_logger
from routers import costing, food_safety, ingredients, units

setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    redirect_slashes=False,
)

init_db()

logger.info(f"CORS origins: {', '.join(settings.allowed_origins_list)}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with status and duration, and echoes X-Request-ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestTimingMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, error: Exception) -> JSONResponse:
    http_error = APIError.handle_generic_error(f"{request.method} {request.url.path}", error)
    return JSONResponse(status_code=http_error.status_code, content={"detail": http_error.detail})


app.include_router(units.router)
app.include_router(ingredients.router)
app.include_router(costing.router)
app.include_router(food_safety.router)


@app.get("/")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "service": settings.API_TITLE, "version": settings.API_VERSION}
