# services/worker/etl/main.py
from __future__ import annotations

import json
import logging
import datetime as dt
from dataclasses import asdict
from pathlib import Path
from typing import List

from services.worker.etl.config import DB_PATH, JOB_KEYWORDS, KEYWORD_MATCH, RAW_DUMP, REMOTEOK_URL
from services.worker.etl.models import JobFilter, JobPosting
from services.worker.etl.pipeline import ingest
from services.worker.etl.sources.remoteok import fetch_jobs
from services.worker.etl.store import JobStore

# -----------------------
# Logging
# -----------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger("etl")


# -----------------------
# RAW dump helper (JSONL)
# -----------------------
def dump_jsonl(rows: List[JobPosting], name: str) -> Path:
    Path("data/raw").mkdir(parents=True, exist_ok=True)
    ts = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    path = Path(f"data/raw/{name}_{ts}.jsonl")
    with path.open("w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(asdict(r), ensure_ascii=False, default=str) + "\n")
    logger.info("RAW dump -> %s (%d records)", path, len(rows))
    return path


def main():
    logger.info("Start ingestion | DB_PATH=%s | feed=%s", DB_PATH, REMOTEOK_URL)
    logger.info("Vocabulary: %s (match=%s)", ", ".join(JOB_KEYWORDS), KEYWORD_MATCH)
    store = JobStore.from_url()

    rows = fetch_jobs()
    if RAW_DUMP:
        dump_jsonl(rows, "remoteok")

    report = ingest(store, fetch=lambda: rows)
    for err in report.errors:
        logger.warning("Save error: %s", err)

    total = store.count(JobFilter(only_matched=False))
    matched = store.count(JobFilter())
    logger.info("Store totals: jobs=%d, with keywords=%d", total, matched)
    logger.info("Ingestion finished")
    return report


if __name__ == "__main__":
    try:
        main()
    except Exception:
        logger.exception("Ingestion failed")
        raise
