import logging
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

import pytest
from fastapi.testclient import TestClient

from contact_extractor.api import create_app
from contact_extractor.config import ExtractorConfig
from contact_extractor.errors import FetchError
from contact_extractor.jobs import InMemoryJobStore
from contact_extractor.pipeline import JobRunner


class DictFetcher:
    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages

    def fetch(self, url: str) -> str:
        if url not in self.pages:
            raise FetchError(f"unreachable {url}")
        return self.pages[url]


class DeferredExecutor:
    def __init__(self) -> None:
        self.pending: list[tuple[Future[Any], Callable[..., Any], tuple[Any, ...]]] = []

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future[Any]:
        future: Future[Any] = Future()
        self.pending.append((future, fn, args))
        return future

    def run_all(self) -> None:
        while self.pending:
            future, fn, args = self.pending.pop(0)
            future.set_result(fn(*args))

    def shutdown(self, wait: bool = True) -> None:
        return None


@pytest.fixture
def executor() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture
def store() -> InMemoryJobStore:
    return InMemoryJobStore()


@pytest.fixture
def client(executor: DeferredExecutor, store: InMemoryJobStore) -> TestClient:
    config = ExtractorConfig(max_retries=1, politeness_delay=0, retry_base_delay=0)
    runner = JobRunner(
        store=store,
        fetcher=DictFetcher({"a.com": "<p>x@a.com</p>", "b.com": "<p>nothing</p>"}),
        config=config,
        logger=logging.getLogger("test"),
        executor=executor,  # type: ignore[arg-type]
        sleep_fn=lambda _seconds: None,
    )
    return TestClient(create_app(config, runner=runner, logger=logging.getLogger("test")))


def test_submit_requires_urls(client: TestClient, store: InMemoryJobStore) -> None:
    for body in ({"urls": []}, {}, {"urls": "a.com"}, {"urls": ["  "]}):
        response = client.post("/api/extract", json=body)
        assert response.status_code == 400
        assert "error" in response.json()
    assert store.active_count() == 0


def test_submit_rejects_non_json_body(client: TestClient) -> None:
    response = client.post(
        "/api/extract", content=b"not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


def test_submit_caps_batch(client: TestClient, store: InMemoryJobStore) -> None:
    urls = [f"u{i}.com" for i in range(8)]
    response = client.post("/api/extract", json={"urls": urls})
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["limited"]
    assert payload["message"]
    assert store.get(payload["jobId"]).urls == urls[:5]


def test_submit_without_cap_returns_null_limited(client: TestClient) -> None:
    payload = client.post("/api/extract", json={"urls": ["a.com"]}).json()
    assert payload["limited"] is None


def test_job_status_before_and_after_completion(
    client: TestClient, executor: DeferredExecutor
) -> None:
    job_id = client.post("/api/extract", json={"urls": ["a.com", "b.com"]}).json()["jobId"]

    running = client.get(f"/api/job/{job_id}").json()
    assert running["status"] == "running"
    assert running["processed"] < running["total"]
    assert running["progress"] == 0

    executor.run_all()
    first = client.get(f"/api/job/{job_id}").json()
    second = client.get(f"/api/job/{job_id}").json()
    assert first["status"] == "completed"
    assert first["processed"] == first["total"] == 2
    assert first["progress"] == 100
    assert first["successCount"] == 1
    assert first["results"] == [{"url": "a.com", "email": "x@a.com"}]
    assert first["results"] == second["results"]


def test_unknown_job_returns_404(client: TestClient) -> None:
    client.post("/api/extract", json={"urls": ["a.com"]})
    response = client.get("/api/job/unknown-id")
    assert response.status_code == 404
    assert response.json() == {"error": "Job not found"}
    assert client.get("/api/job/unknown-id/download").status_code == 404


def test_download_requires_completed_job(client: TestClient, executor: DeferredExecutor) -> None:
    job_id = client.post("/api/extract", json={"urls": ["a.com"]}).json()["jobId"]
    assert client.get(f"/api/job/{job_id}/download").status_code == 404

    executor.run_all()
    response = client.get(f"/api/job/{job_id}/download")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == "attachment; filename=contacts.csv"
    assert response.text == "URL,Email\na.com,x@a.com"


def test_failing_url_does_not_block_completion(
    client: TestClient, executor: DeferredExecutor
) -> None:
    job_id = client.post("/api/extract", json={"urls": ["down.com", "a.com"]}).json()["jobId"]
    executor.run_all()
    payload = client.get(f"/api/job/{job_id}").json()
    assert payload["status"] == "completed"
    assert payload["results"] == [{"url": "a.com", "email": "x@a.com"}]


def test_submit_unexpected_error_returns_500(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def explode(_urls: list[str]) -> None:
        raise RuntimeError("executor is gone")

    runner = client.app.state.runner  # type: ignore[attr-defined]
    monkeypatch.setattr(runner, "submit", explode)
    response = client.post("/api/extract", json={"urls": ["a.com"]})
    assert response.status_code == 500
    assert response.json() == {"error": "executor is gone"}


def test_health(client: TestClient) -> None:
    payload = client.get("/health").json()
    assert payload["status"] == "OK"
    assert payload["timestamp"].endswith("Z")
    assert payload["activeJobs"] == 0


def test_submit_error_after_job_start_returns_json_500(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    runner = client.app.state.runner  # type: ignore[attr-defined]
    monkeypatch.setattr(runner, "submit", lambda _urls: object())
    response = client.post("/api/extract", json={"urls": ["a.com"]})
    assert response.status_code == 500
    assert "job" in response.json()["error"]
