import logging
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from hexabets import load_settings
from hexabets.routers.crash import crash_router
from hexabets.routers.fairness import fairness_router
from hexabets.routers.games import game_router
from hexabets.shared_state import bet_service, commitments, crash_scheduler

scheduler = AsyncIOScheduler()
logging.basicConfig(level=load_settings.log_level)


@asynccontextmanager
async def lifespan(app):
    """Start the crash round loop and housekeeping jobs.
    This function is called to start the server.
    """
    logging.info(f"Published commitment: {commitments.get_commitment()}")
    crash_scheduler.start()

    # Idle mines boards are forfeited and idle session locks released
    scheduler.add_job(
        bet_service.evict_idle_sessions,
        "interval",
        minutes=load_settings.board_eviction_interval_minutes,
        args=[load_settings.board_ttl_minutes * 60],
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        await crash_scheduler.stop()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(fairness_router)
app.include_router(game_router)
app.include_router(crash_router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=load_settings.port)
