"""SafeTrail FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from safetrail.api import auth, contacts, health, location, sos
from safetrail.core.config import settings
from safetrail.schemas.sos import SosFailureResponse
from safetrail.services.sos_service import SosDispatchError

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@app.exception_handler(SosDispatchError)
async def sos_dispatch_error_handler(request: Request, exc: SosDispatchError) -> JSONResponse:
    """Render dispatch guard/orchestration failures as a structured body."""
    logger.info("SOS request failed: %s (%s)", exc.code, exc.message)
    body = SosFailureResponse(message=exc.message, error=exc.code, event_recorded=exc.event_recorded)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True))


app.include_router(health.router)
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(contacts.router, prefix=settings.api_prefix)
app.include_router(sos.router, prefix=settings.api_prefix)
app.include_router(location.router, prefix=settings.api_prefix)
