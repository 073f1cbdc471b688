"""Core orchestration pipeline."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from threading import Lock

from tqdm import tqdm

from .config import ExtractorConfig
from .errors import FetchError
from .extraction import extract_contacts
from .models import Fetcher, JobStore, SubmissionResult
from .validation import cap_url_batch

SleepFn = Callable[[float], None]


def fetch_and_extract(
    url: str,
    *,
    fetcher: Fetcher,
    max_retries: int,
    retry_base_delay: float,
    sleep_fn: SleepFn,
    logger: logging.Logger,
) -> list[str]:
    """Fetch and extract one URL, retrying failed fetches with a growing delay.

    Attempt ``n`` that fails is followed by a pause of ``retry_base_delay * n``
    unless it was the last one. Exhausting every attempt yields an empty list.
    """
    for attempt in range(1, max_retries + 1):
        try:
            html = fetcher.fetch(url)
        except FetchError as exc:
            logger.warning("Attempt %d/%d failed for %s: %s", attempt, max_retries, url, exc)
            if attempt < max_retries:
                sleep_fn(retry_base_delay * attempt)
            continue
        emails = extract_contacts(html)
        logger.info("Found %d email addresses on %s", len(emails), url)
        return emails
    logger.warning("Giving up on %s after %d attempts", url, max_retries)
    return []


def run_job(
    job_id: str,
    *,
    store: JobStore,
    fetcher: Fetcher,
    config: ExtractorConfig,
    sleep_fn: SleepFn = time.sleep,
    logger: logging.Logger,
) -> None:
    """Process a job's URLs in order and mark it completed."""
    urls = list(store.get(job_id).urls)
    iterator = urls
    if config.show_progress:
        iterator = tqdm(urls, desc=f"job {job_id}")
    for index, url in enumerate(iterator):
        if index:
            sleep_fn(config.politeness_delay)
        try:
            emails = fetch_and_extract(
                url,
                fetcher=fetcher,
                max_retries=config.max_retries,
                retry_base_delay=config.retry_base_delay,
                sleep_fn=sleep_fn,
                logger=logger,
            )
        except Exception:
            logger.exception("Unexpected failure while processing %s", url)
            emails = []
        if not emails:
            logger.info("No contacts found on %s", url)
        store.record_progress(job_id, url, emails)
        logger.info("Processed %d/%d URLs for job %s", index + 1, len(urls), job_id)
    store.complete(job_id)
    snapshot = store.snapshot(job_id)
    logger.info(
        "Job %s completed: %d contacts from %d sites",
        job_id,
        len(snapshot["results"]),
        snapshot["successCount"],
    )


class JobRunner:
    """Accepts URL batches and runs each job as one background task."""

    def __init__(
        self,
        *,
        store: JobStore,
        fetcher: Fetcher,
        config: ExtractorConfig,
        logger: logging.Logger,
        executor: Executor | None = None,
        sleep_fn: SleepFn = time.sleep,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._config = config
        self._logger = logger
        self._executor = executor or ThreadPoolExecutor(
            max_workers=config.workers, thread_name_prefix="extract-job"
        )
        self._sleep_fn = sleep_fn
        self._handles: dict[str, Future[None]] = {}
        self._lock = Lock()

    @property
    def store(self) -> JobStore:
        return self._store

    def _run(self, job_id: str) -> None:
        try:
            run_job(
                job_id,
                store=self._store,
                fetcher=self._fetcher,
                config=self._config,
                sleep_fn=self._sleep_fn,
                logger=self._logger,
            )
        except Exception:
            self._logger.exception("Background job %s crashed", job_id)

    def submit(self, urls: list[str]) -> SubmissionResult:
        """Create a job for the first ``max_urls_per_job`` URLs and start it."""
        accepted, limited = cap_url_batch(urls, self._config.max_urls_per_job)
        if limited:
            self._logger.info(limited)
        job = self._store.create(accepted)
        self._logger.info("Started job %s with %d URLs", job.id, job.total)
        future = self._executor.submit(self._run, job.id)
        with self._lock:
            self._handles[job.id] = future
        future.add_done_callback(lambda _done: self._forget(job.id))
        return SubmissionResult(job=job, limited=limited)

    def _forget(self, job_id: str) -> None:
        with self._lock:
            self._handles.pop(job_id, None)

    def handle(self, job_id: str) -> Future[None] | None:
        """Return the background task of a job that is still queued or running."""
        with self._lock:
            return self._handles.get(job_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
