#!/usr/bin/env python3
"""
Main entrypoint for the subject attendance tracker.

Run with environment toggles to choose what is served:
 - ENABLE_BACKEND_WEB: mount & serve static frontend (defaults to true)
 - DATABASE_URL: keep subjects in this SQLAlchemy database (defaults to memory only)
 - ATTENDED_OVER_TOTAL: allow | reject | clamp attended counts above total

Examples:
    # Run API only, keeping subjects across restarts
    export ENABLE_BACKEND_WEB=false
    export DATABASE_URL=sqlite:///subjects.db
    python main.py
"""
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from bunktrack import __version__
from bunktrack.api.routes import router
from bunktrack.core import AppSettings, settings as default_settings
from bunktrack.engine.store import SubjectStore, create_store
from bunktrack.engine.stream import (
    REQUEST_ID_HEADER,
    app_logger,
    new_request_id,
    request_logging_context,
)

WEB_DIR = Path(__file__).resolve().parent / "frontend" / "web"


def _frontend_disabled() -> JSONResponse:
    return JSONResponse(
        content={
            "detail": "Frontend disabled. Set ENABLE_BACKEND_WEB=true to enable serving the web frontend."
        },
        status_code=404,
    )


def create_app(
    settings: Optional[AppSettings] = None, store: Optional[SubjectStore] = None
) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Subject Attendance Tracker",
        description="Track subjects and see how many classes you can bunk",
        version=__version__,
    )
    app.state.settings = settings
    app.state.store = store or create_store(
        policy=settings.ATTENDED_OVER_TOTAL, database_url=settings.DATABASE_URL
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        with request_logging_context(request_id):
            app_logger.debug(f"{request.method} {request.url.path}")
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        app_logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(router, prefix="/api")

    if settings.ENABLE_BACKEND_WEB and WEB_DIR.is_dir():
        app.mount("/", StaticFiles(directory=WEB_DIR, html=True), name="frontend")
    else:
        app_logger.info("Frontend static files mount disabled (ENABLE_BACKEND_WEB=false)")

        @app.get("/", include_in_schema=False)
        async def frontend_disabled_root():
            return _frontend_disabled()

    return app


app = create_app()


if __name__ == "__main__":
    if default_settings.ENABLE_BACKEND_WEB:
        print(f"Starting web + API server on port {default_settings.PORT}...")
    else:
        print(f"Starting API server (frontend disabled) on port {default_settings.PORT}...")
    uvicorn.run("main:app", host="0.0.0.0", port=default_settings.PORT, reload=default_settings.DEBUG)
