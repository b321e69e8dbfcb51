import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobscout.config import settings
from jobscout.database import AsyncSessionLocal, close_db, engine, init_db
from jobscout.health import check_database
from jobscout.routers import crawl, listings
from jobscout.services.browser import browser_manager
from jobscout.services.crawling import crawl_orchestrator

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("jobscout")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables and fail crawls abandoned by a previous process
    logger.info("Starting JobScout backend")
    await init_db()
    async with AsyncSessionLocal() as session:
        await crawl_orchestrator.cleanup_stuck_crawl_logs(session)
    logger.info("Database ready")
    yield
    # Shutdown: close the browser before the connection pool
    logger.info("Shutting down JobScout backend")
    await browser_manager.close()
    await close_db()
    logger.info("Browser and database connections closed")

app = FastAPI(
    title=settings.app_name,
    description="Job discovery and relevance scoring pipeline",
    version="0.1.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(crawl.router)
app.include_router(listings.router)


@app.get("/")
async def root():
    return {"message": "JobScout API - Ready"}


@app.get("/health")
async def health_check():
    """Report database connectivity and browser state."""
    database = await check_database(engine)

    return {
        "status": "healthy" if database.status == "connected" else "degraded",
        "dependencies": {
            "database": database.status,
            "browser": "running" if browser_manager.is_running else "idle",
        },
        "crawl_in_progress": crawl_orchestrator.lock.locked,
    }
