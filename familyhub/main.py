import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from familyhub.core.config import GetSettings
from familyhub.core.errors import DomainError
from familyhub.core.logging import setup_logging
from familyhub.core.migrations import RunMigrations
from familyhub.modules.allowance.router import router as allowance_router
from familyhub.modules.auth.router import router as auth_router
from familyhub.modules.chat.router import realtime_router
from familyhub.modules.chat.router import router as chat_router
from familyhub.modules.chores.router import router as chores_router
from familyhub.modules.core.router import router as core_router
from familyhub.modules.rewards.router import router as rewards_router

setup_logging()

logger = logging.getLogger("familyhub.request")
startup_logger = logging.getLogger("familyhub.startup")
settings = GetSettings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.RunMigrationsOnStartup:
        RunMigrations()
    startup_logger.info("startup complete env=%s", settings.Environment)
    yield


app = FastAPI(title="FamilyHub API", lifespan=lifespan)

if settings.AllowedOrigins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.AllowedOrigins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "API not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if not errors:
        return _error_response(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    if first.get("type") == "missing":
        message = "Missing required fields"
    return _error_response(400, f"{message}: {field}" if field else message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error %s %s", request.method, request.url.path)
    return _error_response(500, "Server internal error")


@app.middleware("http")
async def request_logger(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - start) * 1000)

    parts = [f"{request.method} {request.url.path}"]
    status = response.status_code
    if status >= 400:
        if status == 404:
            parts.append("ERROR: not found")
        elif status >= 500:
            parts.append("ERROR: server error")
        else:
            parts.append("ERROR: client error")
    parts.append(f"status={status}")
    parts.append(f"{duration_ms}ms")

    log_msg = " | ".join(parts)
    if status >= 500:
        logger.error(log_msg)
    elif status >= 400:
        logger.warning(log_msg)
    else:
        logger.info(log_msg)

    response.headers["X-Request-Id"] = request_id
    return response


app.include_router(core_router)
app.include_router(auth_router)
app.include_router(chores_router)
app.include_router(allowance_router)
app.include_router(rewards_router)
app.include_router(chat_router)
app.include_router(realtime_router)
