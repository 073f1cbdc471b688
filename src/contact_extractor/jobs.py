"""In-memory job registry."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from threading import Lock
from typing import Any

from .errors import JobNotReadyError, JobStateError, RegistryLookupError
from .models import ContactRecord, Job, JobStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    """Render a UTC timestamp as ISO-8601 with a trailing Z."""
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def job_to_dict(job: Job) -> dict[str, Any]:
    """Serialize a job record to the API's JSON shape."""
    return {
        "id": job.id,
        "status": job.status.value,
        "urls": list(job.urls),
        "results": [{"url": item.url, "email": item.email} for item in job.results],
        "processed": job.processed,
        "total": job.total,
        "successCount": job.success_count,
        "startTime": format_timestamp(job.start_time),
        "endTime": format_timestamp(job.end_time),
        "progress": job.progress,
    }


class InMemoryJobStore:
    """Lock-guarded job map; lives for the lifetime of the process."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = Lock()
        self._last_id = 0

    def _next_id(self) -> str:
        candidate = max(time.time_ns() // 1_000_000, self._last_id + 1)
        self._last_id = candidate
        return str(candidate)

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise RegistryLookupError(f"Job not found: {job_id}")
        return job

    def create(self, urls: list[str]) -> Job:
        with self._lock:
            job = Job(id=self._next_id(), urls=list(urls), start_time=_utcnow())
            self._jobs[job.id] = job
            return job

    def get(self, job_id: str) -> Job:
        with self._lock:
            return self._require(job_id)

    def record_progress(self, job_id: str, url: str, emails: list[str]) -> None:
        with self._lock:
            job = self._require(job_id)
            if job.status is JobStatus.COMPLETED:
                raise JobStateError(f"Job {job_id} is already completed")
            if job.processed >= job.total:
                raise JobStateError(f"Job {job_id} has no URLs left to process")
            job.results.extend(ContactRecord(url=url, email=email) for email in emails)
            if emails:
                job.success_count += 1
            job.processed += 1

    def complete(self, job_id: str) -> None:
        with self._lock:
            job = self._require(job_id)
            if job.status is JobStatus.COMPLETED:
                raise JobStateError(f"Job {job_id} is already completed")
            job.status = JobStatus.COMPLETED
            job.end_time = _utcnow()

    def snapshot(self, job_id: str) -> dict[str, Any]:
        with self._lock:
            return job_to_dict(self._require(job_id))

    def completed_results(self, job_id: str) -> list[ContactRecord]:
        """Return a completed job's records or raise JobNotReadyError."""
        with self._lock:
            job = self._require(job_id)
            if job.status is not JobStatus.COMPLETED:
                raise JobNotReadyError(f"Job {job_id} is not completed")
            return list(job.results)

    def active_count(self) -> int:
        with self._lock:
            return sum(1 for job in self._jobs.values() if job.status is JobStatus.RUNNING)
