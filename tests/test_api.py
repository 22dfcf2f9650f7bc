import pytest
from fastapi.testclient import TestClient

from services.api.app import app, get_fetcher, get_store, page_count
from services.worker.etl.errors import FetchError


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _seed(store, make_job, n, **kw):
    for i in range(n):
        store.create(make_job(url=f"https://x/{i}", title=f"Flutter {i}", has_keywords=True, keywords="flutter", **kw))


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert "time" in body and "message" in body


def test_page_count():
    assert page_count(45, 20) == 3
    assert page_count(0, 20) == 0
    assert page_count(40, 20) == 2


def test_list_jobs_pagination(client, store, make_job):
    _seed(store, make_job, 45)
    body = client.get("/api/v1/jobs", params={"page": 3, "limit": 20}).json()
    assert body["total"] == 45
    assert body["pages"] == 3
    assert body["page"] == 3
    assert len(body["jobs"]) == 5
    job = body["jobs"][0]
    assert job["hasKeywords"] is True
    assert job["keywords"] == "flutter"
    assert "createdAt" in job and "updatedAt" in job


def test_list_jobs_empty(client):
    body = client.get("/api/v1/jobs").json()
    assert body == {"jobs": [], "total": 0, "page": 1, "limit": 20, "pages": 0}


def test_list_jobs_out_of_range_paging_uses_defaults(client):
    body = client.get("/api/v1/jobs", params={"page": 0, "limit": 500}).json()
    assert (body["page"], body["limit"]) == (1, 20)


def test_list_jobs_non_numeric_paging_rejected(client):
    resp = client.get("/api/v1/jobs", params={"page": "abc"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_get_job(client, store, make_job):
    job = make_job(has_keywords=True, keywords="flutter")
    store.create(job)
    resp = client.get(f"/api/v1/jobs/{job.id}")
    assert resp.status_code == 200
    assert resp.json()["job"]["url"] == job.url


@pytest.mark.parametrize("raw", ["abc", "-1", "1.5", "99999999999"])
def test_get_job_invalid_id(client, raw):
    resp = client.get(f"/api/v1/jobs/{raw}")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid job ID"}


def test_get_job_missing(client):
    resp = client.get("/api/v1/jobs/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Job not found"}


def test_search_and_across_keywords(client, store, make_job):
    store.create(make_job(url="https://x/1", title="Flutter dev", location="Berlin",
                          has_keywords=True, keywords="flutter"))
    store.create(make_job(url="https://x/2", title="Flutter + Laravel", location="Remote",
                          has_keywords=True, keywords="flutter,laravel"))

    body = client.post("/api/v1/search", json={"keywords": ["flutter", "laravel"]}).json()
    assert [j["url"] for j in body["jobs"]] == ["https://x/2"]
    assert body["total"] == 1
    assert body["searchParams"] == {"keywords": ["flutter", "laravel"], "location": "", "page": 1, "limit": 20}

    body = client.post("/api/v1/search", json={"keywords": ["flutter"], "location": "berlin"}).json()
    assert [j["url"] for j in body["jobs"]] == ["https://x/1"]


def test_search_requires_json_body(client):
    assert client.post("/api/v1/search").status_code == 400


def test_scrape_runs_pipeline(client, make_job):
    feed = [
        make_job(url="https://x/1", title="Flutter dev"),
        make_job(url="https://x/2", title="Laravel dev"),
        make_job(url="https://x/3", title="Accountant", company="Numbers"),
    ]
    app.dependency_overrides[get_fetcher] = lambda: (lambda: feed)

    body = client.post("/api/v1/scrape").json()
    assert body["message"] == "Scraping completed"
    assert (body["scraped"], body["saved"], body["duplicates"]) == (2, 2, 0)
    assert "errors" not in body

    body = client.post("/api/v1/scrape").json()
    assert (body["scraped"], body["saved"], body["duplicates"]) == (2, 0, 2)


def test_scrape_fetch_failure(client):
    def broken():
        raise FetchError("failed to fetch jobs: timeout")

    app.dependency_overrides[get_fetcher] = lambda: broken
    resp = client.post("/api/v1/scrape")
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Failed to scrape jobs")


def test_stats_empty_store_is_zero_percent(client):
    body = client.get("/api/v1/stats").json()
    assert body["totalJobs"] == 0
    assert body["jobsWithKeywords"] == 0
    assert body["keywordsPercentage"] == 0.0
    assert "lastUpdated" in body


def test_stats_percentage(client, store, make_job):
    store.create(make_job(url="https://x/1", has_keywords=True, keywords="flutter"))
    store.create(make_job(url="https://x/2", title="Accountant"))
    body = client.get("/api/v1/stats").json()
    assert body["keywordsPercentage"] == 50.0


def test_trending_keywords(client, store, make_job):
    store.create(make_job(url="https://x/1", has_keywords=True, keywords="flutter,go"))
    store.create(make_job(url="https://x/2", has_keywords=True, keywords="go"))
    body = client.get("/api/v1/keywords/trending", params={"top": 1}).json()
    assert body == [{"keyword": "go", "count": 2}]


def test_oversized_page_rejected(client):
    resp = client.get("/api/v1/jobs", params={"page": 10**19})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Page out of range"}

    resp = client.post("/api/v1/search", json={"keywords": ["flutter"], "page": 10**19})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Page out of range"}
