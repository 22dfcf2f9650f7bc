# services/worker/etl/sources/remoteok.py
from __future__ import annotations

from typing import List, Optional

import requests

from services.worker.etl.config import REMOTEOK_TIMEOUT, REMOTEOK_URL
from services.worker.etl.errors import FetchError
from services.worker.etl.models import JobPosting, Salary

SOURCE_NAME = "RemoteOK"
DETAIL_URL = "https://remoteok.io/remote-jobs/{slug}"

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept": "application/json",
}


def _text(rec: dict, key: str) -> str:
    """Scalar feed field -> stripped string; containers are a malformed feed."""
    val = rec.get(key)
    if val is None:
        return ""
    if isinstance(val, (dict, list)):
        raise FetchError(f"failed to parse JSON: field {key!r} is a {type(val).__name__}")
    return str(val).strip()


def _tags(rec: dict) -> List[str]:
    tags = rec.get("tags")
    if not isinstance(tags, list):
        return []
    return [str(t).strip() for t in tags if t is not None and str(t).strip()]


def _norm(rec: dict) -> Optional[JobPosting]:
    # the first element of the feed is a legal/metadata notice without an id
    job_id = _text(rec, "id")
    if not job_id:
        return None

    desc = _text(rec, "description")
    tags = _tags(rec)
    if tags:
        # widens the keyword match surface
        desc += " Technologies: " + ", ".join(tags)

    return JobPosting(
        title=_text(rec, "position"),
        company=_text(rec, "company"),
        description=desc,
        location=_text(rec, "location"),
        salary=Salary.parse(rec.get("salary_min")).display(),
        url=DETAIL_URL.format(slug=_text(rec, "slug") or job_id),
        source=SOURCE_NAME,
        remote=bool(rec.get("remote")),
    )


def fetch_jobs(url: str = REMOTEOK_URL, timeout: float = REMOTEOK_TIMEOUT) -> List[JobPosting]:
    """
    One GET against the RemoteOK feed -> unclassified JobPostings.
    Descriptions are returned raw (HTML); cleaning happens in the pipeline.
    Raises FetchError on transport, HTTP status or JSON problems.
    """
    try:
        resp = requests.get(url, headers=HEADERS, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"failed to fetch jobs: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise FetchError(f"failed to parse JSON: {e}") from e
    if not isinstance(data, list):
        raise FetchError(f"failed to parse JSON: expected an array, got {type(data).__name__}")

    out: List[JobPosting] = []
    for rec in data:
        if not isinstance(rec, dict):
            continue
        job = _norm(rec)
        if job is not None:
            out.append(job)
    return out
