# services/worker/etl/schema.py
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, MetaData, String, Table, Text

metadata = MetaData()

# only keyword-matched postings end up here; url is the natural key
jobs = Table(
    "jobs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String, nullable=False),
    Column("company", String, nullable=False),
    Column("description", Text),
    Column("location", String),
    Column("salary", String),
    Column("url", String, nullable=False, unique=True),
    Column("source", String),  # RemoteOK, ...
    Column("remote", Boolean, nullable=False, default=False),
    Column("keywords", String),  # comma-joined matches, vocabulary order
    Column("has_keywords", Boolean, nullable=False, default=False, index=True),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)
