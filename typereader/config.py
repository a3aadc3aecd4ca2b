from __future__ import annotations

import os
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _parse_csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Data directory: documents.json, dictionary.json, folders.json
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT / "data"))).resolve()

# CORS:
# - Default to a small allowlist (local dev). For production, set CORS_ORIGINS to your site origins.
#   Example:
#     CORS_ORIGINS=https://reader.example.com,https://yourdomain.com
DEFAULT_CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1",
    "http://127.0.0.1:3000",
]
CORS_ORIGINS = _parse_csv_env("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS

# Characters shown per reader page
PAGE_SIZE = max(1, _int_env("PAGE_SIZE", 400))

# --- Text extraction (OpenAI) ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
OPENAI_URL = os.getenv("OPENAI_URL", "https://api.openai.com/v1/responses")
EXTRACTION_TIMEOUT_S = _int_env("EXTRACTION_TIMEOUT_S", 120)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
