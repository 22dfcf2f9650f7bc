import os
import logging
import datetime as dt
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from services.worker.etl.config import CORS_ORIGINS
from services.worker.etl.errors import FetchError, PersistenceError, ValidationError
from services.worker.etl.models import JobFilter, JobPosting
from services.worker.etl.pipeline import Fetcher, ingest
from services.worker.etl.sources.remoteok import fetch_jobs
from services.worker.etl.store import JobStore

logger = logging.getLogger("api")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_JOB_ID = 2**32 - 1
MAX_OFFSET = 2**63 - 1  # sqlite OFFSET is a signed 64-bit integer


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "store", None) is None:
        app.state.store = JobStore.from_url()
        logger.info("Store ready: %s", app.state.store.engine.url)
    yield


app = FastAPI(title="Job Hunter API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


def get_store(request: Request) -> JobStore:
    return request.app.state.store


def get_fetcher() -> Fetcher:
    return fetch_jobs


# ---------------
# Schemas
# ---------------
class JobOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    company: str
    description: str
    location: str
    salary: str
    url: str
    source: str
    remote: bool
    keywords: str
    has_keywords: bool = Field(alias="hasKeywords")
    created_at: Optional[dt.datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[dt.datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_posting(cls, p: JobPosting) -> "JobOut":
        return cls.model_validate(asdict(p))


class JobPage(BaseModel):
    jobs: List[JobOut]
    total: int
    page: int
    limit: int
    pages: int


class SearchRequest(BaseModel):
    keywords: List[str] = []
    location: str = ""
    page: int = 0
    limit: int = 0


class SearchPage(JobPage):
    model_config = ConfigDict(populate_by_name=True)

    search_params: SearchRequest = Field(alias="searchParams")


class ScrapeOut(BaseModel):
    message: str
    scraped: int
    saved: int
    duplicates: int
    time: dt.datetime
    errors: Optional[List[str]] = None


# ---------------
# Helpers
# ---------------
def normalize_paging(page: int, limit: int) -> tuple[int, int]:
    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1 or limit > MAX_LIMIT:
        limit = DEFAULT_LIMIT
    if (page - 1) * limit > MAX_OFFSET:
        raise ValidationError("Page out of range")
    return page, limit


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit


def parse_job_id(raw: str) -> int:
    if not (raw.isascii() and raw.isdigit()) or int(raw) > MAX_JOB_ID:
        raise ValidationError("Invalid job ID")
    return int(raw)


def _page(store: JobStore, f: JobFilter, page: int, limit: int) -> dict:
    total = store.count(f)
    jobs = store.find_page(f, limit=limit, offset=(page - 1) * limit)
    return {
        "jobs": [JobOut.from_posting(j) for j in jobs],
        "total": total,
        "page": page,
        "limit": limit,
        "pages": page_count(total, limit),
    }


# ---------------
# Error handlers
# ---------------
@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(PersistenceError)
async def _persistence_error(request: Request, exc: PersistenceError):
    logger.error("Store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ---------------
# Routes
# ---------------
@app.get("/health")
def health():
    return {
        "status": "ok",
        "message": "Job Hunter API is running",
        "time": dt.datetime.now(dt.timezone.utc),
    }


@app.get("/api/v1/jobs", response_model=JobPage)
def list_jobs(page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, store: JobStore = Depends(get_store)):
    page, limit = normalize_paging(page, limit)
    return _page(store, JobFilter(), page, limit)


@app.post("/api/v1/search", response_model=SearchPage)
def search_jobs(req: SearchRequest, store: JobStore = Depends(get_store)):
    req.page, req.limit = normalize_paging(req.page, req.limit)
    f = JobFilter(keywords=req.keywords, location=req.location)
    return SearchPage(**_page(store, f, req.page, req.limit), search_params=req)


@app.get("/api/v1/jobs/{job_id}")
def get_job(job_id: str, store: JobStore = Depends(get_store)):
    job = store.find_by_id(parse_job_id(job_id))
    if job is None:
        return JSONResponse(status_code=404, content={"error": "Job not found"})
    return {"job": JobOut.from_posting(job)}


@app.post("/api/v1/scrape", response_model=ScrapeOut, response_model_exclude_none=True)
def scrape_jobs(store: JobStore = Depends(get_store), fetch: Fetcher = Depends(get_fetcher)):
    try:
        report = ingest(store, fetch=fetch)
    except FetchError as e:
        logger.error("Scrape aborted: %s", e)
        return JSONResponse(status_code=500, content={"error": f"Failed to scrape jobs: {e}"})
    return ScrapeOut(
        message="Scraping completed",
        scraped=report.scraped,
        saved=report.saved,
        duplicates=report.duplicates,
        time=dt.datetime.now(dt.timezone.utc),
        errors=report.errors or None,
    )


@app.get("/api/v1/stats")
def stats(store: JobStore = Depends(get_store)):
    total = store.count(JobFilter(only_matched=False))
    with_keywords = store.count(JobFilter())
    # empty store reports 0% instead of NaN
    pct = with_keywords / total * 100 if total else 0.0
    return {
        "totalJobs": total,
        "jobsWithKeywords": with_keywords,
        "keywordsPercentage": pct,
        "lastUpdated": dt.datetime.now(dt.timezone.utc),
    }


@app.get("/api/v1/keywords/trending")
def trending_keywords(top: int = 10, store: JobStore = Depends(get_store)):
    return [{"keyword": k, "count": v} for k, v in store.keyword_counts(top)]


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8081"))
    uvicorn.run(app, host=host, port=port)
