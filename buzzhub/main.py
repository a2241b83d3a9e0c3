"""
FastAPI main application
LAN quiz buzzer: master console, participant buzzers, live push updates

Modular architecture with separated API routers in buzzhub/api/:
- events.py: Server-Sent Events stream
- quiz.py: Round control (open/close/reset/auto/playlist) and buzz/answer
- questions.py: Question bank CRUD
- chat.py: Chat messages
- health.py: Health check
- static.py: Front-end bundle (catch-all, registered last)

All routers access shared state via buzzhub.state and buzzhub.core.quiz.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from buzzhub import state
from buzzhub.config import VERSION, load_config
from buzzhub.core import question_store
from buzzhub.core import quiz as quiz_core
from buzzhub.models import AutoSettings

# Import all API routers
from buzzhub.api import chat, events, health, questions, quiz, static


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def configure(config_path=None) -> None:
    """Load config into global state and prepare the round and data store"""
    state.CONFIG = load_config(config_path)
    logging.getLogger().setLevel(state.CONFIG.log_level.upper())
    state.BROADCASTER.queue_size = state.CONFIG.client_queue_size
    question_store.ensure_data_store(state.CONFIG.questions_file)
    quiz_core.reset_all(AutoSettings(**state.CONFIG.auto.model_dump()))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    try:
        configure()
        count = len(question_store.load_questions(state.CONFIG.questions_file))
        logger.info(f"✅ Server started with {count} stored questions")
    except Exception as e:
        logger.error(f"❌ Failed to start: {e}")
        raise

    yield

    # Shutdown: end open streams and pending timers
    state.BROADCASTER.clear()
    quiz_core.reset_all()
    logger.info("🛑 Server shutting down")


# Create FastAPI app
app = FastAPI(
    title="buzzhub",
    description="Real-time quiz buzzer for local-network party games",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware (any device on the LAN)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# ==================== INCLUDE ROUTERS ====================

# Push stream (GET /events)
app.include_router(events.router)

# Round control and participant actions (/quiz/*)
app.include_router(quiz.router)

# Question bank (/questions)
app.include_router(questions.router)

# Chat (POST /chat)
app.include_router(chat.router)

# Health check (GET /health)
app.include_router(health.router)

# Front-end files (GET /*), must stay last
app.include_router(static.router)


# ==================== RUN SERVER ====================

def run() -> None:
    """Console entry point"""
    import uvicorn
    from buzzhub.services.lan import print_startup_info

    config = load_config()
    print_startup_info(config.port, show_qr=config.show_qr)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    run()
