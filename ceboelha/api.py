# -*- coding: utf-8 -*-
"""
Ceboelha API

Meal and symptom diary for people tracking gut-health triggers.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .app_db import init_app_db
from .auth.api import router as auth_router
from .config import settings
from .diary.api import router as diary_router
from .errors import register_error_handlers

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Ceboelha API",
    description="Meal and symptom diary",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.app_db_path)
    logger.info("Diary store ready at %s (env=%s, tz=%s)", settings.app_db_path, settings.env, settings.timezone_name)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.app_db_path)

app.include_router(auth_router)
app.include_router(diary_router)


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}
