"""Configuration for Code Golf."""

import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("GOLF_DATA_DIR", BASE_DIR / "data"))
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'golf.db'}")
HOLES_DIR = Path(os.getenv("HOLES_DIR", DATA_DIR / "holes"))

# Judge limits
JUDGE_RUNNERS_DIR = Path(os.getenv("JUDGE_RUNNERS_DIR", "/langs"))
JUDGE_TIMEOUT_SECONDS = int(os.getenv("JUDGE_TIMEOUT", "7"))
JUDGE_MEMORY_MB = int(os.getenv("JUDGE_MEMORY_MB", "512"))
JUDGE_MAX_OUTPUT_BYTES = int(os.getenv("JUDGE_MAX_OUTPUT", str(128 * 1024)))  # 128KB

# 128 KiB, code must stay strictly below it because the runner needs a null terminator
MAX_CODE_BYTES = 128 * 1024

# Record announcements
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL", "")
ANNOUNCE_QUEUE_SIZE = int(os.getenv("ANNOUNCE_QUEUE_SIZE", "64"))
ANNOUNCE_TIMEOUT_SECONDS = int(os.getenv("ANNOUNCE_TIMEOUT", "10"))
SITE_URL = os.getenv("SITE_URL", "https://code.golf")

# Sessions
SESSION_COOKIE = os.getenv("SESSION_COOKIE", "__Host-session")

# How often a running judge checks whether the client went away
DISCONNECT_POLL_SECONDS = float(os.getenv("DISCONNECT_POLL_SECONDS", "0.5"))

# API
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
