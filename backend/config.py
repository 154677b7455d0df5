"""Centralized configuration: all env vars in one place."""
import os
import logging
from dotenv import load_dotenv

load_dotenv()

# --- Server ---
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "")

# --- WebSocket Security ---
WS_RATE_LIMIT_PER_SEC = 10  # max messages per second per client
MAX_WS_MESSAGE_SIZE = 4096  # bytes

# --- Room ---
MAX_PLAYERS = int(os.getenv("MAX_PLAYERS", "10"))
MIN_PLAYERS = 3  # quorum needed to start a round
MAX_NAME_LENGTH = 20

# --- Round ---
TIME_LIMIT = int(os.getenv("TIME_LIMIT", "60"))  # seconds
TICK_INTERVAL = float(os.getenv("TICK_INTERVAL", "1.0"))  # seconds per tick
MAX_ATTEMPTS = 3
POINTS_PER_WIN = int(os.getenv("POINTS_PER_WIN", "10"))
MAX_PROMPT_LENGTH = 500
MAX_ANSWER_LENGTH = 100

# --- Chat ---
MAX_CHAT_LENGTH = 500
SYSTEM_AUTHOR = "System"

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")  # empty = stdout only


def setup_logging():
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if LOG_FILE:
        handlers.append(logging.FileHandler(LOG_FILE))
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
