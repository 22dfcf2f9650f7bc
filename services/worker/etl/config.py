# services/worker/etl/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

DB_PATH = os.getenv("DB_PATH", "data/jobs.db")
DATABASE_URL = os.getenv("DATABASE_URL")

REMOTEOK_URL = os.getenv("REMOTEOK_URL", "https://remoteok.io/api")
REMOTEOK_TIMEOUT = float(os.getenv("REMOTEOK_TIMEOUT", "20"))

DEFAULT_KEYWORDS = ["flutter", "laravel", "golang", "go"]

# "substring" matches "go" inside "mango"; "word" needs word boundaries
KEYWORD_MATCH = os.getenv("KEYWORD_MATCH", "substring").strip().lower()

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:8080,http://localhost:5000",
    ).split(",")
    if o.strip()
]

RAW_DUMP = os.getenv("RAW_DUMP") == "1"


def parse_keywords(value: str | None) -> List[str]:
    """Comma-separated list -> ordered, lowercased, blank-free vocabulary."""
    if not value:
        return list(DEFAULT_KEYWORDS)
    out: List[str] = []
    for kw in value.split(","):
        kw = kw.strip().lower()
        if kw and kw not in out:
            out.append(kw)
    return out or list(DEFAULT_KEYWORDS)


JOB_KEYWORDS = parse_keywords(os.getenv("JOB_KEYWORDS"))


def database_url() -> str:
    if DATABASE_URL:
        return DATABASE_URL
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{DB_PATH}"
