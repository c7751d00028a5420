"""FastAPI application: routers, CORS and error rendering."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from membership.api.members import router as members_router
from membership.api.notifications import router as notifications_router
from membership.api.payments import router as payments_router
from membership.api.reports import router as reports_router
from membership.config import settings
from membership.errors import AppError, ValidationFailedError, error_response

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    description="Membership dues ledger, statements and reports",
    version=settings.api_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors with their HTTP status."""
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed input as a 400 validation failure."""
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    error = ValidationFailedError(message or "Invalid request")
    logger.debug("%s %s invalid input: %s", request.method, request.url.path, error.message)
    return JSONResponse(status_code=error.http_status, content=error_response(error))


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


app.include_router(payments_router)
app.include_router(reports_router)
app.include_router(notifications_router)
app.include_router(members_router)


__all__ = ["app"]
