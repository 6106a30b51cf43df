from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from checkout.api.routes_notifications import router as notifications_router
from checkout.api.routes_partials import router as partials_router
from checkout.api.routes_payments import router as payments_router
from checkout.core.config import get_settings
from checkout.core.errors import CheckoutError
from checkout.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"ok": False, "message": "Bad request"})


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(payments_router)
app.include_router(notifications_router)
app.include_router(partials_router)
