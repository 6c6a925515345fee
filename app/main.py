"""
FastAPI Application Entry Point
===============================
Main application with lifecycle management, middleware, and route mounting.
"""

from contextlib import asynccontextmanager
from datetime import datetime
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.core.exceptions import ConversAIException
from app.core.session import ConversationSessionService
from app.api.routes import agents, conversation, health, livekit, realtime
from app.db.database import init_db, close_db
from app.db.repositories import AgentRepository, ConversationRepository
from app.services.audio import AudioStorage
from app.services.livekit import RoomService
from app.services.llm import LLMService
from app.services.tts import TTSService
from app.logging.agent_logger import AgentLogger

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME} Backend")
    logger.info("=" * 60)

    # ==================
    # STARTUP
    # ==================

    logger.info("Initializing agent logger...")
    app.state.agent_logger = AgentLogger(str(settings.AGENT_LOG_PATH))
    await app.state.agent_logger.log_system_event("Application starting", {
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    })

    logger.info("Initializing database...")
    await init_db()

    logger.info("Initializing LLM service...")
    app.state.llm_service = LLMService()
    await app.state.llm_service.initialize()

    logger.info("Initializing TTS service...")
    app.state.tts_service = TTSService()
    await app.state.tts_service.initialize()

    app.state.audio_storage = AudioStorage()
    app.state.room_service = RoomService()
    if not app.state.room_service.is_configured:
        logger.warning("LiveKit credentials missing; room endpoints will fail")

    app.state.session_service = ConversationSessionService(
        repository=ConversationRepository(),
        llm_service=app.state.llm_service,
        tts_service=app.state.tts_service,
        audio_storage=app.state.audio_storage,
        agent_repository=AgentRepository(),
        agent_logger=app.state.agent_logger
    )

    logger.info("=" * 60)
    logger.info(f"{settings.APP_NAME} Backend Ready!")
    logger.info(f"Server: http://{settings.HOST}:{settings.PORT}")
    logger.info(f"Docs: http://{settings.HOST}:{settings.PORT}/docs")
    logger.info("=" * 60)

    await app.state.agent_logger.log_system_event("Application started successfully", {
        "host": settings.HOST,
        "port": settings.PORT,
        "llm_provider": settings.LLM_PROVIDER
    })

    yield  # Application runs here

    # ==================
    # SHUTDOWN
    # ==================

    logger.info(f"Shutting down {settings.APP_NAME} Backend...")

    await app.state.agent_logger.log_system_event("Application shutting down", {})

    await app.state.llm_service.cleanup()
    await app.state.tts_service.cleanup()
    await app.state.agent_logger.close()

    await close_db()

    logger.info("Shutdown complete.")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## AI Customer Service Agents

    Scripted agent personas answering customer messages with spoken replies.

    ### Features:
    - 💬 Conversations with per-agent personas or the demo call simulator
    - 🔊 Speech synthesis for every agent reply
    - 🏷️ Automatic titles, sentiment and intent tracking
    - ⚡ Real-time chat over WebSocket
    - 🎧 LiveKit room tokens for live calls

    ### Turn:
    ```
    User message → Sentiment & Intents → LLM Reply → Title → TTS → Audio URL
    ```
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ==================
# MIDDLEWARE
# ==================

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    """Add request timing information to response headers."""
    start_time = datetime.now()
    response = await call_next(request)
    process_time = (datetime.now() - start_time).total_seconds() * 1000
    response.headers["X-Process-Time-Ms"] = f"{process_time:.2f}"
    return response


# ==================
# EXCEPTION HANDLERS
# ==================

@app.exception_handler(ConversAIException)
async def conversai_exception_handler(request: Request, exc: ConversAIException):
    """Handle custom ConversAI exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message} {exc.details}")
    else:
        logger.info(f"{exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests in the same shape as other client errors."""
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Invalid request",
            "details": {"errors": jsonable_encoder(exc.errors())}
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": str(exc) if settings.DEBUG else None
        }
    )


# ==================
# ROUTES
# ==================

app.include_router(health.router, tags=["Health"])
app.include_router(conversation.router, prefix="/api/conversations", tags=["Conversations"])
app.include_router(agents.router, prefix="/api/agents", tags=["Agents"])
app.include_router(livekit.router, prefix="/api/livekit", tags=["LiveKit"])
app.include_router(realtime.router, tags=["Realtime"])

# Synthesized and uploaded audio
settings.AUDIO_DIR.mkdir(parents=True, exist_ok=True)
app.mount(settings.AUDIO_URL_PREFIX, StaticFiles(directory=str(settings.AUDIO_DIR)), name="audio")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }


# ==================
# DEBUG ENDPOINTS
# ==================

if settings.DEBUG:
    @app.get("/debug/config")
    async def debug_config():
        """Debug endpoint to view configuration (DEBUG mode only)."""
        return {
            "environment": settings.ENVIRONMENT,
            "llm_provider": settings.LLM_PROVIDER,
            "llm_model": settings.LLM_MODEL_ID,
            "title_model": settings.TITLE_MODEL_ID,
            "tts_model": settings.TTS_MODEL_ID,
            "sentiment_strategy": settings.SENTIMENT_STRATEGY
        }
