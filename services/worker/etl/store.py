# services/worker/etl/store.py
from __future__ import annotations

import datetime as dt
import string
from collections import Counter
from typing import List, Optional, Tuple

import pandas as pd
from sqlalchemy import and_, create_engine, func, insert, or_, select, true
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from services.worker.etl.config import database_url
from services.worker.etl.dedup import is_unique_violation
from services.worker.etl.errors import DuplicateError, PersistenceError
from services.worker.etl.models import JobFilter, JobPosting
from services.worker.etl.schema import jobs, metadata


def get_engine(url: Optional[str] = None) -> Engine:
    return create_engine(url or database_url(), future=True)


# sqlite lower() only folds ASCII; fold search text the same way
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _fold(s: str) -> str:
    return s.translate(_ASCII_LOWER)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def _where(f: JobFilter):
    clauses = []
    if f.only_matched:
        clauses.append(jobs.c.has_keywords == true())
    if f.location:
        clauses.append(func.lower(jobs.c.location).contains(_fold(f.location), autoescape=True))
    # every keyword must hit at least one of title/description/company
    for kw in f.keywords:
        kw = _fold(kw)
        clauses.append(
            or_(
                func.lower(jobs.c.title).contains(kw, autoescape=True),
                func.lower(jobs.c.description).contains(kw, autoescape=True),
                func.lower(jobs.c.company).contains(kw, autoescape=True),
            )
        )
    return and_(*clauses) if clauses else None


class JobStore:
    """Relational store for job postings (SQLAlchemy Core)."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "JobStore":
        store = cls(get_engine(url))
        store.init_schema()
        return store

    def init_schema(self) -> None:
        metadata.create_all(self.engine)

    def create(self, posting: JobPosting) -> int:
        """Insert one posting; assigns id and timestamps on success.

        Raises DuplicateError when the url is already stored and
        PersistenceError for any other database failure.
        """
        now = _utcnow()
        row = posting.to_row()
        row.update(created_at=now, updated_at=now)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(insert(jobs).values(**row))
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateError(posting.url) from e
            raise PersistenceError(str(e.orig or e)) from e
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

        posting.id = result.inserted_primary_key[0]
        posting.created_at = now
        posting.updated_at = now
        return posting.id

    def find_by_id(self, job_id: int) -> Optional[JobPosting]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(jobs).where(jobs.c.id == job_id)).mappings().first()
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
        return JobPosting.from_row(dict(row)) if row else None

    def find_page(self, f: JobFilter, limit: int, offset: int) -> List[JobPosting]:
        stmt = select(jobs)
        where = _where(f)
        if where is not None:
            stmt = stmt.where(where)
        stmt = stmt.order_by(jobs.c.created_at.desc(), jobs.c.id.desc()).limit(limit).offset(offset)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
        return [JobPosting.from_row(dict(r)) for r in rows]

    def count(self, f: JobFilter) -> int:
        stmt = select(func.count()).select_from(jobs)
        where = _where(f)
        if where is not None:
            stmt = stmt.where(where)
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    def keyword_counts(self, top: int = 10) -> List[Tuple[str, int]]:
        """Most common matched keywords across stored postings."""
        stmt = select(jobs.c.keywords).where(jobs.c.has_keywords == true())
        try:
            with self.engine.connect() as conn:
                df = pd.read_sql(stmt, conn)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
        c: Counter = Counter()
        for s in df["keywords"].dropna():
            for kw in s.split(","):
                if kw.strip():
                    c[kw.strip()] += 1
        return c.most_common(top)
