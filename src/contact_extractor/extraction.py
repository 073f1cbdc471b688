"""Contact extraction over a parsed HTML document."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from .fingerprints import is_acceptable, match_fingerprints, normalize_candidate

EMAIL_DATA_ATTRIBUTES = ("data-email", "data-mail")
BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "td", "th", "tr", "ul",
]
DESCRIPTION_META = (
    {"name": "description"},
    {"property": "og:description"},
    {"name": "og:description"},
)


def parse_document(markup: str) -> BeautifulSoup:
    """Parse raw markup without executing anything."""
    return BeautifulSoup(markup or "", "html.parser")


def _element_text_candidates(element: Tag) -> list[str]:
    found = match_fingerprints(element.get_text(" "))
    # Joined text catches addresses split across inline tags; skipped when a
    # block boundary inside would glue unrelated lines together.
    if element.find(BLOCK_TAGS) is None:
        found.extend(match_fingerprints(element.get_text()))
    return found


def _text_candidates(soup: BeautifulSoup) -> list[str]:
    # The document itself first so text outside any tag is not missed.
    found: list[str] = _element_text_candidates(soup)
    for element in soup.find_all(True):
        found.extend(_element_text_candidates(element))
    return found


def _mailto_candidates(soup: BeautifulSoup) -> list[str]:
    found: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href.lower().startswith("mailto:"):
            continue
        address = href.split(":", maxsplit=1)[1].split("?", maxsplit=1)[0].strip()
        found.extend(match_fingerprints(address))
    return found


def _attribute_candidates(soup: BeautifulSoup) -> list[str]:
    found: list[str] = []
    for attribute in EMAIL_DATA_ATTRIBUTES:
        for element in soup.find_all(attrs={attribute: True}):
            found.extend(match_fingerprints(str(element.get(attribute))))
    return found


def _metadata_candidates(soup: BeautifulSoup) -> list[str]:
    found: list[str] = []
    if soup.title is not None:
        found.extend(match_fingerprints(soup.title.get_text()))
    for attrs in DESCRIPTION_META:
        for meta in soup.find_all("meta", attrs=attrs):
            found.extend(match_fingerprints(str(meta.get("content", ""))))
    return found


def extract_contacts(document: BeautifulSoup | str) -> list[str]:
    """Return unique, normalized emails found on a page in discovery order.

    Scans element text, ``mailto:`` links, ``data-email``/``data-mail``
    attributes, then the title and description meta tags. Raw candidates are
    deduplicated before filtering so each distinct string is checked once.
    """
    soup = document if isinstance(document, BeautifulSoup) else parse_document(document)
    raw: list[str] = []
    for scanner in (
        _text_candidates,
        _mailto_candidates,
        _attribute_candidates,
        _metadata_candidates,
    ):
        raw.extend(scanner(soup))

    emails: list[str] = []
    seen: set[str] = set()
    for candidate in dict.fromkeys(raw):
        if not is_acceptable(candidate):
            continue
        email = normalize_candidate(candidate)
        if email in seen:
            continue
        seen.add(email)
        emails.append(email)
    return emails
