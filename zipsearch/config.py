"""
Runtime configuration from environment variables.

.env.local (local dev) takes precedence over .env; both are optional and
override the process environment when present.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

env_local = PROJECT_ROOT / ".env.local"
env_file = PROJECT_ROOT / ".env"

if env_local.exists():
    load_dotenv(env_local, override=True)
elif env_file.exists():
    load_dotenv(env_file, override=True)

APP_VERSION = "0.1.0"

# Index blob loaded at startup when the app is launched directly by uvicorn
INDEX_PATH = os.getenv("ZIPSEARCH_INDEX_PATH")
STATIC_DIR = os.getenv("ZIPSEARCH_STATIC_DIR", "static")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "logs/zipsearch.log")
