import pytest

from services.worker.etl.models import JobPosting
from services.worker.etl.store import JobStore


@pytest.fixture
def store(tmp_path):
    return JobStore.from_url(f"sqlite:///{tmp_path / 'jobs.db'}")


@pytest.fixture
def make_job():
    def _make(url="https://remoteok.io/remote-jobs/1", title="Flutter Developer",
              company="ACME", description="", **kw):
        return JobPosting(title=title, company=company, url=url, description=description, **kw)
    return _make
