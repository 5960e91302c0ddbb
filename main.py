import argparse
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config, get_config_value
from routes import decks, cards, sessions, stats  # Import routers
from utils.errors import (
    CardNotFoundError,
    DeckNotFoundError,
    InvalidGradeError,
    SessionClosedError,
    SessionNotFoundError,
    StaleStateError,
)

logger = logging.getLogger("recallprep")

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init DB and config
    configure_logging(load_config()["logging"]["level"])  # Ensures config exists
    init_db()
    yield

app = FastAPI(
    title="RecallPrep",
    description="Spaced-repetition flashcard scheduling for exam preparation",
    lifespan=lifespan,
)

# Include routers
app.include_router(decks.router, prefix="/decks", tags=["decks"])
app.include_router(cards.router, prefix="/decks", tags=["cards"])  # /decks/{deck_id}/cards
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])

ERROR_STATUS = {
    InvalidGradeError: 422,
    SessionClosedError: 409,
    StaleStateError: 409,
    CardNotFoundError: 404,
    SessionNotFoundError: 404,
    DeckNotFoundError: 404,
}

def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def _make_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "error": type(exc).__name__},
        )
    return handler

for error_class, status_code in ERROR_STATUS.items():
    app.add_exception_handler(error_class, _make_handler(status_code))

@app.get("/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="RecallPrep App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    args = parser.parse_args()
    log_level = get_config_value("logging", "level", "INFO")  # Ensures config is copied if missing
    configure_logging(log_level)
    if args.init:
        init_db()
        logger.info("DB initialized and config copied to ~/.recallprep/")
        sys.exit(0)
    # Run server
    uvicorn.run("main:app", host=args.host, port=args.port, reload=args.dev, log_level=log_level.lower())
