"""
Code Golf - Main FastAPI Application

Judges solutions, keeps the bytes and chars leaderboards, awards trophies.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .db import init_db
from .api import solution_router, catalogue_router
from .api.deps import announcer
from .config import LOG_LEVEL
from . import __version__

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Create app
app = FastAPI(
    title="Code Golf",
    description="Solve holes in as few bytes or chars as possible.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# Request timing middleware
@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.3f}s"
    return response


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        }
    )


# Include routers
app.include_router(solution_router)
app.include_router(catalogue_router)


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "Code Golf",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "solution": "/solution",
            "holes": "/holes",
            "langs": "/langs",
        },
    }


# Health check
@app.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    from datetime import datetime
    from sqlalchemy import text
    from .db import SessionLocal

    health_status = {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "announcer": "running" if announcer.running else "stopped",
    }

    # Check database connectivity
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["database"] = f"error: {str(e)}"

    return health_status


# Startup event
@app.on_event("startup")
async def startup():
    """Initialize database and start the record announcer."""
    init_db()
    await announcer.start()
    logger.info(f"Code Golf v{__version__} started")


@app.on_event("shutdown")
async def shutdown():
    await announcer.stop()


# For direct running
if __name__ == "__main__":
    import uvicorn
    from .config import API_HOST, API_PORT

    uvicorn.run(app, host=API_HOST, port=API_PORT)
