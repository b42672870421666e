import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from forum.api.api import api_router
from forum.core.config import get_settings
from forum.core.database import init_db
from forum.core.exceptions import ForumError, Internal, ServiceUnavailable, Unauthenticated
from forum.core.logging import configure_logging
from forum.core.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from forum.core.rate_limit import limiter

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    # Bearer tokens travel in headers, not cookies.
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "x-request-id"],
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()


@app.get("/health")
def health():
    return {"status": "ok"}


def _error_body(message: str, exc: BaseException | None = None) -> dict:
    body = {"detail": message}
    if settings.DEBUG and exc is not None:
        body["details"] = str(exc)
    return body


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    if isinstance(exc, Internal):
        logger.error("%s %s failed", request.method, request.url.path, exc_info=exc.__cause__ or exc)
        body = _error_body(exc.message, exc.__cause__)
    else:
        body = {"detail": exc.message}
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(p) for p in err["loc"][1:]) for err in exc.errors() if len(err["loc"]) > 1})
    message = "Invalid or missing fields: " + ", ".join(fields) if fields else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(PoolTimeoutError)
async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
    logger.warning("Connection pool exhausted on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=ServiceUnavailable.status_code, content={"detail": ServiceUnavailable.default_message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body(Internal.default_message, exc))


app.include_router(api_router, prefix=settings.API_V1_STR)
