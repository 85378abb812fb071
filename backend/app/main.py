import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slowapi.errors import RateLimitExceeded

from app.core.config import settings, require_jwt_secret
from app.core.errors import AppError
from app.core.rate_limit import limiter
from app.routes.auth import router as auth_router
from app.routes.tasks import router as tasks_router

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

require_jwt_secret()

app = FastAPI(title="Task Tracker", version=API_VERSION)
logger.info(
    "Startup config: ENV=%s ENABLE_RATE_LIMITING=%s session_days=%s",
    settings.ENV,
    settings.ENABLE_RATE_LIMITING,
    settings.SESSION_TOKEN_EXPIRE_DAYS,
)

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
    500: "INTERNAL_ERROR",
}


def _error_code(status_code: int) -> str:
    return _ERROR_CODE_BY_STATUS.get(int(status_code), "HTTP_ERROR")


def _error_response(status_code: int, error: str, message: str, details: dict | None = None, headers=None):
    payload: dict = {"error": error, "message": message}
    if details:
        payload["details"] = details
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):  # noqa: ARG001
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    if exc.status_code >= 500:
        # Never expose internals to the caller.
        return _error_response(exc.status_code, exc.error_code, "Internal server error")
    return _error_response(exc.status_code, exc.error_code, exc.message, exc.details, headers)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: HTTPException):  # noqa: ARG001
    detail = exc.detail
    message: str
    details: dict | None = None

    if isinstance(detail, str):
        message = detail
    elif isinstance(detail, dict):
        msg = detail.get("message")
        message = msg if isinstance(msg, str) and msg else "Request failed"
        det = detail.get("details")
        details = det if isinstance(det, dict) else None
    else:
        message = str(detail) if detail is not None else "Request failed"

    return _error_response(
        exc.status_code,
        _error_code(exc.status_code),
        message,
        details,
        getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    return _error_response(
        400,
        "VALIDATION_ERROR",
        "Invalid request payload",
        {"errors": _jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(500, "INTERNAL_ERROR", "Internal server error")


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # pydantic error entries may carry non-JSON values (e.g. exceptions in ctx).
    out: list[dict] = []
    for err in exc.errors():
        out.append(
            {
                "loc": list(err.get("loc", ())),
                "msg": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return out


if settings.ENABLE_RATE_LIMITING:
    app.state.limiter = limiter
    # Provide our standard error shape for rate limits, instead of slowapi's default.
    app.add_exception_handler(
        RateLimitExceeded,
        lambda request, exc: JSONResponse(  # noqa: ARG005
            status_code=429,
            content={"error": "RATE_LIMITED", "message": "Too many requests"},
        ),
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(tasks_router)


@app.get("/")
def api_info():
    return {
        "message": "Task Tracker API",
        "version": API_VERSION,
        "endpoints": {
            "auth": {
                "register": "POST /auth/register",
                "login": "POST /auth/login",
                "logout": "POST /auth/logout",
                "logoutAll": "POST /auth/logout-all",
                "profile": "GET|PATCH|DELETE /auth/me",
            },
            "tasks": {
                "create": "POST /tasks",
                "getAll": "GET /tasks",
                "getOne": "GET /tasks/{id}",
                "update": "PATCH /tasks/{id}",
                "delete": "DELETE /tasks/{id}",
            },
        },
    }


@app.get("/health")
def health_check():
    return {"status": "ok"}
