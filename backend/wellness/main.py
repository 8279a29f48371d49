# /backend/wellness/main.py

from __future__ import annotations
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from wellness.config import CORS_ORIGINS, CREATE_TABLES_ON_STARTUP, configure_logging
from wellness.db import get_db, create_tables
from wellness.api.routers import activity, auth, coach, dashboard, journal, mood_logs, profile, therapy

logger = logging.getLogger("wellness.main")

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if CREATE_TABLES_ON_STARTUP:
        await create_tables()
        logger.info("Database tables ready")
    yield

app = FastAPI(
    title="Wellness API",
    lifespan=lifespan,
)

# CORS first so every router gets it
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(activity.router)
app.include_router(journal.router)
app.include_router(therapy.router)
app.include_router(mood_logs.router)
app.include_router(coach.router)
app.include_router(profile.router)


@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/db-health")
async def db_health(db: AsyncSession = Depends(get_db)):
    result = await db.execute(text("SELECT 1"))
    return {"db": "ok", "result": result.scalar_one()}
