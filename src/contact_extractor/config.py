"""Runtime configuration model."""

from __future__ import annotations

from dataclasses import dataclass

from .validation import validate_runtime_constraints

VERSION = "1.0.0"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3100
DEFAULT_WORKERS = 4
DEFAULT_MAX_URLS_PER_JOB = 5
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 1.0
DEFAULT_POLITENESS_DELAY = 0.5


@dataclass(frozen=True)
class ExtractorConfig:
    """Validated configuration shared by the API, the runner and the CLI."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    workers: int = DEFAULT_WORKERS
    max_urls_per_job: int = DEFAULT_MAX_URLS_PER_JOB
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY
    politeness_delay: float = DEFAULT_POLITENESS_DELAY
    show_progress: bool = False

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            port=self.port,
            workers=self.workers,
            max_urls_per_job=self.max_urls_per_job,
            max_retries=self.max_retries,
            retry_base_delay=self.retry_base_delay,
            politeness_delay=self.politeness_delay,
        )
