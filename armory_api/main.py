# armory_api/main.py
from __future__ import annotations

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from armory_api import models  # noqa: F401  (registers every table on Base.metadata)
from armory_api.db import healthcheck
from armory_api.errors import ArmoryError
from armory_api.routers.divisions import router as divisions_router
from armory_api.routers.soldiers import router as soldiers_router
from armory_api.routers.documents import router as documents_router
from armory_api.routers.armory import router as armory_router
from armory_api.storage import storage_root


def build_app() -> FastAPI:
    app = FastAPI(title="Armory API")

    # CORS (adjust origins as you need)
    frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[frontend_origin],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    @app.exception_handler(ArmoryError)
    async def armory_error_handler(request: Request, exc: ArmoryError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Health
    @app.get("/health")
    def health():
        return {"ok": True, **healthcheck()}

    app.include_router(divisions_router)
    app.include_router(soldiers_router)
    app.include_router(documents_router)
    app.include_router(armory_router)

    # Uploaded soldier documents
    root = storage_root()
    os.makedirs(root, exist_ok=True)
    app.mount(os.getenv("STORAGE_BASE_URL", "/files"), StaticFiles(directory=root), name="files")

    return app


app = build_app()
