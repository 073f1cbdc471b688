"""FastAPI application exposing job submission, status and CSV download.

Endpoints:

``POST /api/extract``
    Accepts ``{"urls": [...]}``, starts a background job and returns its id.
``GET /api/job/{job_id}``
    Current job record with a derived ``progress`` percentage.
``GET /api/job/{job_id}/download``
    ``URL,Email`` CSV of a completed job.
``GET /health``
    Liveness check.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import VERSION, ExtractorConfig
from .errors import JobNotReadyError, RegistryLookupError, ValidationError
from .fetchers import StrategyFetcher
from .io_csv import render_contacts_csv
from .jobs import InMemoryJobStore, format_timestamp
from .logging_utils import get_logger
from .pipeline import JobRunner
from .validation import validate_url_batch


def build_runner(config: ExtractorConfig, logger: logging.Logger) -> JobRunner:
    """Wire the default in-memory store and strategy fetcher into a runner."""
    return JobRunner(
        store=InMemoryJobStore(),
        fetcher=StrategyFetcher(logger=logger),
        config=config,
        logger=logger,
    )


def create_app(
    config: ExtractorConfig | None = None,
    *,
    runner: JobRunner | None = None,
    logger: logging.Logger | None = None,
) -> FastAPI:
    """Build the application; tests inject their own runner."""
    config = config or ExtractorConfig()
    logger = logger or get_logger()
    runner = runner or build_runner(config, logger)
    store = runner.store

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        runner.shutdown(wait=False)

    application = FastAPI(title="Contact Extractor", version=VERSION, lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.state.runner = runner

    @application.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=400)

    @application.exception_handler(RegistryLookupError)
    async def lookup_error_handler(_request: Request, _exc: RegistryLookupError) -> JSONResponse:
        return JSONResponse({"error": "Job not found"}, status_code=404)

    @application.exception_handler(JobNotReadyError)
    async def not_ready_handler(_request: Request, _exc: JobNotReadyError) -> JSONResponse:
        return JSONResponse({"error": "Job not found or not completed"}, status_code=404)

    @application.post("/api/extract")
    async def submit_extraction(request: Request) -> JSONResponse:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValidationError("URLs are required") from exc
        urls = validate_url_batch(payload.get("urls") if isinstance(payload, dict) else None)
        try:
            submission = runner.submit(urls)
            return JSONResponse(
                {
                    "success": True,
                    "jobId": submission.job.id,
                    "message": f"Extraction started for {submission.job.total} URLs",
                    "limited": submission.limited,
                }
            )
        except Exception as exc:
            logger.exception("Failed to start extraction")
            return JSONResponse({"error": str(exc)}, status_code=500)

    @application.get("/api/job/{job_id}")
    def job_status(job_id: str) -> JSONResponse:
        return JSONResponse(store.snapshot(job_id))

    @application.get("/api/job/{job_id}/download")
    def download_results(job_id: str) -> Response:
        try:
            records = store.completed_results(job_id)
        except RegistryLookupError as exc:
            raise JobNotReadyError(str(exc)) from exc
        return Response(
            content=render_contacts_csv(records),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=contacts.csv"},
        )

    @application.get("/health")
    def health() -> JSONResponse:
        return JSONResponse(
            {
                "status": "OK",
                "timestamp": format_timestamp(datetime.now(timezone.utc)),
                "activeJobs": store.active_count(),
                "version": VERSION,
            }
        )

    return application
