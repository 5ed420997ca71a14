# casenotes/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from casenotes.api.api_router import api_router
from casenotes.core.config import settings
from casenotes.core.exceptions import register_exception_handlers
from casenotes.core.logging import configure_logging
from casenotes.db import init_db

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up: initializing DB...")
    init_db.init_db()
    logger.info("Startup complete")
    yield
    logger.info("Shutting down")


app = FastAPI(title="Case Notes Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}
