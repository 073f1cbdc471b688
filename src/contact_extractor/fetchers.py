"""Multi-strategy HTTP page fetcher."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from requests import Session
from requests.exceptions import RequestException

from .errors import FetchError

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)


@dataclass(frozen=True)
class RequestStrategy:
    """One request configuration tried while fetching a page."""

    name: str
    timeout: float
    max_redirects: int
    accepted_status: range
    headers: Mapping[str, str] = field(default_factory=dict)

    def accepts(self, status_code: int) -> bool:
        return status_code in self.accepted_status


# Most header-complete first. The browser strategy only accepts 2xx while the
# fallbacks also take 3xx responses.
DEFAULT_STRATEGIES = (
    RequestStrategy(
        name="browser",
        timeout=10.0,
        max_redirects=5,
        accepted_status=range(200, 300),
        headers={
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        },
    ),
    RequestStrategy(
        name="basic",
        timeout=15.0,
        max_redirects=3,
        accepted_status=range(200, 400),
        headers={"Accept": "text/html,*/*;q=0.8"},
    ),
    RequestStrategy(
        name="minimal",
        timeout=20.0,
        max_redirects=10,
        accepted_status=range(200, 400),
    ),
)

SessionFactory = Callable[[RequestStrategy], Session]


def normalize_url(url: str) -> str:
    """Prepend https:// when the URL carries no HTTP scheme."""
    value = url.strip()
    if value.lower().startswith(("http://", "https://")):
        return value
    return "https://" + value


def make_strategy_session(strategy: RequestStrategy) -> Session:
    """Create a requests session honoring the strategy's redirect limit."""
    session = Session()
    session.max_redirects = strategy.max_redirects
    return session


class StrategyFetcher:
    """Fetch raw markup, falling back through request strategies in order."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        strategies: tuple[RequestStrategy, ...] = DEFAULT_STRATEGIES,
        user_agents: tuple[str, ...] = USER_AGENTS,
        session_factory: SessionFactory = make_strategy_session,
        rng: random.Random | None = None,
    ) -> None:
        if not strategies:
            raise ValueError("At least one request strategy is required.")
        self._logger = logger
        self._strategies = strategies
        self._user_agents = user_agents
        self._session_factory = session_factory
        self._rng = rng or random.Random()

    def _attempt(self, url: str, strategy: RequestStrategy) -> str:
        headers = dict(strategy.headers)
        headers["User-Agent"] = self._rng.choice(self._user_agents)
        with self._session_factory(strategy) as session:
            response = session.get(url, headers=headers, timeout=strategy.timeout)
        if not strategy.accepts(response.status_code):
            raise FetchError(f"{strategy.name} strategy got HTTP {response.status_code}")
        return str(response.text)

    def fetch(self, url: str) -> str:
        target = normalize_url(url)
        last_error: Exception | None = None
        for index, strategy in enumerate(self._strategies, start=1):
            self._logger.debug(
                "Fetching %s with %s strategy (%d/%d)",
                target,
                strategy.name,
                index,
                len(self._strategies),
            )
            try:
                html = self._attempt(target, strategy)
            except (RequestException, FetchError) as exc:
                self._logger.debug("%s strategy failed for %s: %s", strategy.name, target, exc)
                last_error = exc
                continue
            self._logger.info("Fetched %s with %s strategy", target, strategy.name)
            return html
        raise FetchError(f"All strategies failed for {target}: {last_error}") from last_error
