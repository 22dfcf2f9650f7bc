import re
from typing import Iterable, List, Optional

from services.worker.etl.config import JOB_KEYWORDS, KEYWORD_MATCH
from services.worker.etl.models import JobPosting

MATCH_MODES = ("substring", "word")


def _word_pattern(kw: str) -> re.Pattern:
    return re.compile(rf"(?<![0-9a-z]){re.escape(kw)}(?![0-9a-z])")


def match_keywords(text: str, vocabulary: Iterable[str], mode: str = "substring") -> List[str]:
    """Vocabulary entries found in text, in vocabulary order, each at most once.

    "substring" is plain containment, so "go" also hits "mango" and "going".
    """
    if mode not in MATCH_MODES:
        raise ValueError(f"unknown keyword match mode: {mode!r}")
    t = (text or "").lower()
    found: List[str] = []
    seen = set()
    for kw in vocabulary:
        k = kw.lower()
        if not k or k in seen:
            continue
        hit = _word_pattern(k).search(t) if mode == "word" else k in t
        if hit:
            seen.add(k)
            found.append(kw)
    return found


def classify(
    posting: JobPosting,
    vocabulary: Optional[Iterable[str]] = None,
    mode: Optional[str] = None,
) -> JobPosting:
    """Recompute keywords/has_keywords from title, description and company."""
    text = f"{posting.title.lower()} {posting.description.lower()} {posting.company.lower()}"
    found = match_keywords(
        text,
        JOB_KEYWORDS if vocabulary is None else vocabulary,
        mode or KEYWORD_MATCH,
    )
    posting.has_keywords = bool(found)
    posting.keywords = ",".join(found)
    return posting
