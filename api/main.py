"""FastAPI application entrypoint: staffdesk Employee API."""
from contextlib import asynccontextmanager

import uvicorn

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.database import init_db
from api.dependencies import get_notifier
from api.responses import failure
from api.routers import employees, health
from config import API_HOST, API_PORT, API_PREFIX, API_VERSION, AUTO_SEED_DB, CORS_ORIGINS
from errors import AppError
from helpers import format_validation_errors, validation_error_details
from logger_config import setup_logger

logger = setup_logger("api.startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    if AUTO_SEED_DB:
        from seed_employees import seed
        seed()

    notifier = app.dependency_overrides.get(get_notifier, get_notifier)()
    notifier.verify()
    yield


app = FastAPI(title="staffdesk Employee API", version=API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Disposition"],
)


# =====================================================================
# ERROR HANDLERS (every error leaves in the standard envelope)
# =====================================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return failure(exc.status_code, exc.message, exc.detail)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return failure(400, format_validation_errors(errors), validation_error_details(errors))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return failure(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return failure(500, "Internal Server Error", {"name": type(exc).__name__, "message": str(exc)})


app.include_router(health.router, prefix=API_PREFIX, tags=["health"])
app.include_router(employees.router, prefix=f"{API_PREFIX}/employees", tags=["employees"])


def run() -> None:
    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run()
