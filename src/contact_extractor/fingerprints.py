"""Email fingerprint matching and false-positive filtering."""

from __future__ import annotations

import re

EMAIL_REGEX = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")
PLACEHOLDER_DOMAINS = frozenset(
    {"example.com", "test.com", "domain.com", "localhost", "127.0.0.1"}
)
MIN_LENGTH = 5
MAX_LENGTH = 100


def match_fingerprints(text: str | None) -> list[str]:
    """Return every email-like token in scan order, case preserved."""
    return [match.group(0) for match in EMAIL_REGEX.finditer(text or "")]


def normalize_candidate(candidate: str) -> str:
    """Trim and lower-case a raw candidate."""
    return candidate.strip().lower()


def _is_placeholder(domain: str) -> bool:
    return any(
        domain == placeholder or domain.endswith("." + placeholder)
        for placeholder in PLACEHOLDER_DOMAINS
    )


def is_acceptable(candidate: str) -> bool:
    """Return False for candidates that are too short, too long or placeholders."""
    value = normalize_candidate(candidate)
    if len(value) <= MIN_LENGTH or len(value) >= MAX_LENGTH:
        return False
    if "@" not in value:
        return False
    domain = value.split("@", maxsplit=1)[1]
    if "." not in domain:
        return False
    return not _is_placeholder(domain)
