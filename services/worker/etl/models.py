# services/worker/etl/models.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional


class SalaryKind(str, Enum):
    ABSENT = "absent"
    NUMERIC = "numeric"
    TEXT = "text"


class Salary(NamedTuple):
    """Loosely-typed feed salary, tagged at the boundary."""

    kind: SalaryKind
    value: Any = None

    @classmethod
    def parse(cls, raw: Any) -> "Salary":
        # bool is an int subclass; a flag is not an amount
        if raw is None or isinstance(raw, bool):
            return cls(SalaryKind.ABSENT)
        if isinstance(raw, (int, float)):
            return cls(SalaryKind.NUMERIC, raw)
        if isinstance(raw, str):
            raw = raw.strip()
            return cls(SalaryKind.TEXT, raw) if raw else cls(SalaryKind.ABSENT)
        return cls(SalaryKind.TEXT, str(raw))

    def display(self) -> str:
        if self.kind is SalaryKind.ABSENT:
            return ""
        if self.kind is SalaryKind.NUMERIC:
            v = self.value
            if isinstance(v, float) and v.is_integer():
                return str(int(v))
            return str(v)
        return str(self.value)


@dataclass
class JobPosting:
    title: str
    company: str
    url: str
    description: str = ""
    location: str = ""
    salary: str = ""
    source: str = ""
    remote: bool = False
    # derived by nlp.classify
    keywords: str = ""
    has_keywords: bool = False
    # assigned by the store
    id: Optional[int] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @property
    def matched_keywords(self) -> List[str]:
        return [k for k in self.keywords.split(",") if k]

    def to_row(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "company": self.company,
            "description": self.description,
            "location": self.location,
            "salary": self.salary,
            "url": self.url,
            "source": self.source,
            "remote": self.remote,
            "keywords": self.keywords,
            "has_keywords": self.has_keywords,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "JobPosting":
        return cls(
            id=row["id"],
            title=row["title"],
            company=row["company"],
            description=row.get("description") or "",
            location=row.get("location") or "",
            salary=row.get("salary") or "",
            url=row["url"],
            source=row.get("source") or "",
            remote=bool(row.get("remote")),
            keywords=row.get("keywords") or "",
            has_keywords=bool(row.get("has_keywords")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class JobFilter:
    """Store query filter used by the listing, search and stats endpoints."""

    only_matched: bool = True
    keywords: List[str] = field(default_factory=list)
    location: str = ""
