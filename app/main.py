# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from apscheduler.schedulers.background import BackgroundScheduler

from app.models import database
from app.models import *  # registers all models

from app.routers import dashboard_router, habits_router, healthz_router
from app.utils.exceptions import HabitNotFoundError, HabitValidationError, StoreError
from app.utils.schedulers.habit_log_cleaner import clean_inactive_habit_logs
from app.utils.time_utils import APP_TIMEZONE

from app.utils.rate_limit_utils import limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")

# Create DB tables in one go
database.Base.metadata.create_all(bind=database.engine)

# Scheduler setup
scheduler = BackgroundScheduler(job_defaults={"misfire_grace_time": 60})


@asynccontextmanager
async def lifespan(app: FastAPI):
    if SCHEDULER_ENABLED:
        # 🕛 Clean logs of deactivated habits every day at 2 AM
        scheduler.add_job(clean_inactive_habit_logs, "cron", hour=2, minute=0, timezone=APP_TIMEZONE)
        scheduler.start()
        logger.info("⏰ Scheduler started")
    yield
    if scheduler.running:
        scheduler.shutdown()


# Create FastAPI app with lifespan
app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Focus Tracker API",
    description="Habit completion tracking and analytics backend",
    version="1.0"
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Include routers
app.include_router(habits_router.router)
app.include_router(dashboard_router.router)
app.include_router(healthz_router.router)


# ---------------------- ADDING EXCEPTION HANDLERS ----------------------
@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "message": "Too many requests. Please slow down."}
    )


@app.exception_handler(HabitNotFoundError)
async def habit_not_found_handler(request: Request, exc: HabitNotFoundError):
    return JSONResponse(status_code=404, content={"success": False, "message": exc.message})


@app.exception_handler(HabitValidationError)
async def habit_validation_handler(request: Request, exc: HabitValidationError):
    return JSONResponse(status_code=400, content={"success": False, "message": exc.message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"🛑 Store failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "message": "Failed to process request"})


@app.get("/")
def read_root():
    return {"message": "Welcome to Focus Tracker - habit analytics backend"}


@app.get("/health", tags=["Infra"])
def health_check():
    return {"status": "ok"}
