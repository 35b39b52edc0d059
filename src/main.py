from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.planner import router as planner_router
from src.adapters.api.controllers.realtime import router as realtime_router
from src.adapters.config import reveal_errors
from src.domain.exceptions import GeocodingError, PlaceNotFound, UnknownStop

app = FastAPI(title="GTFS Trip Planner")
app.include_router(planner_router)
app.include_router(realtime_router)


@app.exception_handler(UnknownStop)
async def unknown_stop_handler(request: Request, exc: UnknownStop) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PlaceNotFound)
async def place_not_found_handler(
    request: Request, exc: PlaceNotFound
) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(GeocodingError)
async def geocoding_error_handler(
    request: Request, exc: GeocodingError
) -> JSONResponse:
    logging.getLogger("uvicorn.error").warning(
        "Place lookup failed: %s", exc, extra={"path": str(request.url.path)}
    )
    return JSONResponse(status_code=502, content={"detail": "lookup failed"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the frontend can display them.

    Starlette's default 500 handler may return plain text/HTML.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    # FeedLoadError is a RuntimeError: a missing dataset is reported as such.
    revealed = (FileNotFoundError, RuntimeError, ValueError)
    if reveal_errors() or isinstance(exc, revealed):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
