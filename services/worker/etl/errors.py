# services/worker/etl/errors.py
from __future__ import annotations


class EtlError(Exception):
    """Base class for job-hunter errors."""


class FetchError(EtlError):
    """Feed could not be fetched or decoded. Fatal to a scrape run."""


class PersistenceError(EtlError):
    """A single record could not be stored."""


class DuplicateError(PersistenceError):
    """URL already stored. Counted, never reported as an error."""

    def __init__(self, url: str):
        super().__init__(f"duplicate url: {url}")
        self.url = url


class ValidationError(EtlError):
    """Malformed client input."""
