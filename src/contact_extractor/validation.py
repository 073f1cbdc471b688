"""Validation and runtime guardrails."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .errors import ConfigError, ValidationError


def validate_url_batch(urls: Any) -> list[str]:
    """Return the cleaned URL list of a submission or raise ValidationError."""
    if not urls or not isinstance(urls, list):
        raise ValidationError("URLs are required")
    cleaned: list[str] = []
    for value in urls:
        if not isinstance(value, str):
            raise ValidationError("URLs must be strings")
        value = value.strip()
        if value:
            cleaned.append(value)
    if not cleaned:
        raise ValidationError("URLs are required")
    return cleaned


def cap_url_batch(urls: list[str], limit: int) -> tuple[list[str], str | None]:
    """Keep the first ``limit`` URLs and describe what was dropped, if anything."""
    if len(urls) <= limit:
        return list(urls), None
    message = (
        f"Only the first {limit} of {len(urls)} URLs will be processed; "
        f"{len(urls) - limit} were skipped."
    )
    return list(urls[:limit]), message


def load_lines_from_file(path: str) -> list[str]:
    """Load non-empty lines from a UTF-8 text file."""
    content = Path(path).read_text(encoding="utf-8")
    return [line.strip() for line in content.splitlines() if line.strip()]


def validate_runtime_constraints(
    *,
    port: int,
    workers: int,
    max_urls_per_job: int,
    max_retries: int,
    retry_base_delay: float,
    politeness_delay: float,
) -> None:
    """Validate CLI/runtime configuration and raise ConfigError on invalid values."""
    if not 0 < port < 65536:
        raise ConfigError("--port must be between 1 and 65535.")
    if workers < 1:
        raise ConfigError("--workers must be >= 1.")
    if max_urls_per_job < 1:
        raise ConfigError("--max-urls must be >= 1.")
    if max_retries < 1:
        raise ConfigError("--max-retries must be >= 1.")
    if retry_base_delay < 0 or politeness_delay < 0:
        raise ConfigError("--retry-base-delay and --politeness-delay must be >= 0.")
