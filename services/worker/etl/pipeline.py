# services/worker/etl/pipeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from services.worker.etl.clean import clean_description
from services.worker.etl.errors import DuplicateError, PersistenceError
from services.worker.etl.models import JobPosting
from services.worker.etl.nlp import classify
from services.worker.etl.sources.remoteok import fetch_jobs
from services.worker.etl.store import JobStore

logger = logging.getLogger("etl")

Fetcher = Callable[[], Sequence[JobPosting]]


@dataclass
class IngestionReport:
    scraped: int = 0  # postings left after keyword filtering
    saved: int = 0
    duplicates: int = 0
    errors: List[str] = field(default_factory=list)


def prepare(
    postings: Iterable[JobPosting],
    vocabulary: Optional[Iterable[str]] = None,
    mode: Optional[str] = None,
) -> List[JobPosting]:
    """Clean + classify every posting and keep only keyword matches."""
    vocab = list(vocabulary) if vocabulary is not None else None
    out: List[JobPosting] = []
    for p in postings:
        p.description = clean_description(p.description)
        classify(p, vocab, mode)
        if p.has_keywords:
            out.append(p)
    return out


def ingest(
    store: JobStore,
    fetch: Fetcher = fetch_jobs,
    vocabulary: Optional[Iterable[str]] = None,
    mode: Optional[str] = None,
) -> IngestionReport:
    """
    fetch -> clean -> classify -> filter -> persist.
    FetchError propagates (nothing is stored); per-record store failures
    are collected and the run carries on.
    """
    raw = fetch()
    logger.info("Fetched %d postings", len(raw))

    matched = prepare(raw, vocabulary, mode)
    logger.info("Keyword matches: %d (dropped %d)", len(matched), len(raw) - len(matched))

    report = IngestionReport(scraped=len(matched))
    for p in matched:
        try:
            store.create(p)
        except DuplicateError:
            logger.debug("Duplicate, skipped: %s", p.url)
            continue
        except PersistenceError as e:
            logger.warning("Could not save %s: %s", p.url, e)
            report.errors.append(str(e))
            continue
        report.saved += 1

    report.duplicates = report.scraped - report.saved - len(report.errors)
    logger.info(
        "Ingestion done | scraped=%d saved=%d duplicates=%d errors=%d",
        report.scraped, report.saved, report.duplicates, len(report.errors),
    )
    return report
