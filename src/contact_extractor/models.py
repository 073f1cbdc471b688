"""Protocols and lightweight model types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class JobStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ContactRecord:
    """One address discovered on one source URL."""

    url: str
    email: str


@dataclass
class Job:
    """State of one submitted extraction batch."""

    id: str
    urls: list[str]
    start_time: datetime
    status: JobStatus = JobStatus.RUNNING
    results: list[ContactRecord] = field(default_factory=list)
    processed: int = 0
    success_count: int = 0
    end_time: datetime | None = None

    @property
    def total(self) -> int:
        return len(self.urls)

    @property
    def progress(self) -> int:
        if not self.total:
            return 0
        return round(self.processed / self.total * 100)


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of accepting a batch: the created job and an optional cap notice."""

    job: Job
    limited: str | None = None


class Fetcher(Protocol):
    """Contract for HTML fetchers."""

    def fetch(self, url: str) -> str:
        """Return HTML content for a URL or raise FetchError."""


class JobStore(Protocol):
    """Contract for the job registry shared by the API and the runner."""

    def create(self, urls: list[str]) -> Job:
        """Register a new running job."""

    def get(self, job_id: str) -> Job:
        """Return the live job record or raise RegistryLookupError."""

    def record_progress(self, job_id: str, url: str, emails: list[str]) -> None:
        """Append one URL's results and advance the counters."""

    def complete(self, job_id: str) -> None:
        """Mark the job completed."""

    def snapshot(self, job_id: str) -> dict[str, Any]:
        """Return a JSON-ready copy of the job."""

    def completed_results(self, job_id: str) -> list[ContactRecord]:
        """Return a completed job's records or raise JobNotReadyError."""

    def active_count(self) -> int:
        """Return the number of running jobs."""
