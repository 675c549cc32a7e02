"""
SongQueue API - FastAPI Application
Main application entry point
"""
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import asyncio

from songqueue.config import settings
from songqueue.database import init_db, get_db
from songqueue.exceptions import SongQueueError
from songqueue.schemas import SubmissionResponse
from songqueue.services import QueueManager, get_event_hub
from songqueue.api import auth, profiles, reviewers, submissions, queue, reviews, uploads

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler
    Runs on startup and shutdown
    """
    logger.info("Starting SongQueue API...")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down SongQueue API...")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Song submission queues for TikTok music reviewers",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SongQueueError)
async def songqueue_exception_handler(request: Request, exc: SongQueueError):
    """Map domain errors to their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# Include routers
app.include_router(auth.router, prefix=settings.API_V1_PREFIX)
app.include_router(profiles.router, prefix=settings.API_V1_PREFIX)
app.include_router(submissions.router, prefix=settings.API_V1_PREFIX)
app.include_router(queue.router, prefix=settings.API_V1_PREFIX)
app.include_router(reviews.router, prefix=settings.API_V1_PREFIX)
app.include_router(uploads.router, prefix=settings.API_V1_PREFIX)
app.include_router(reviewers.router, prefix=settings.API_V1_PREFIX)

# Uploaded artwork and audio
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


# WebSocket endpoint for live queue updates
@app.websocket("/ws/queue/{reviewer_id}")
async def websocket_queue_updates(websocket: WebSocket, reviewer_id: str, db: Session = Depends(get_db)):
    """
    WebSocket endpoint streaming changes to a reviewer's queue

    Sends a snapshot first, then one message per queue event. Each event has a
    sequence number; a client that sees a gap should reload the queue.

    Args:
        websocket: WebSocket connection
        reviewer_id: Reviewer whose queue is watched
    """
    await websocket.accept()
    hub = get_event_hub()
    events = hub.subscribe(reviewer_id)
    logger.info(f"WebSocket connected for reviewer queue: {reviewer_id}")

    try:
        try:
            sequence = hub.current_sequence(reviewer_id)
            pending = QueueManager(db).list_queue(reviewer_id)
            await websocket.send_json({
                "type": "snapshot",
                "reviewer_id": reviewer_id,
                "sequence": sequence,
                "submissions": [
                    SubmissionResponse.model_validate(s).model_dump(mode="json") for s in pending
                ]
            })
        finally:
            db.close()

        async def forward_events():
            while True:
                try:
                    event = await asyncio.wait_for(events.get(), timeout=30.0)
                    await websocket.send_json(event)
                except asyncio.TimeoutError:
                    # Send keepalive ping
                    await websocket.send_json({"type": "ping"})

        sender = asyncio.create_task(forward_events())
        try:
            # Client messages are ignored; reading them detects the disconnect
            while True:
                await websocket.receive_text()
        finally:
            sender.cancel()

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for reviewer queue: {reviewer_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        hub.unsubscribe(reviewer_id, events)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
        "redoc": "/redoc"
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "songqueue-api"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "songqueue.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
