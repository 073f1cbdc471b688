import logging
import os

import pytest

from contact_extractor.fetchers import StrategyFetcher

requires_live = pytest.mark.skipif(
    os.getenv("RUN_LIVE_INTEGRATION") != "1",
    reason="Set RUN_LIVE_INTEGRATION=1 to execute live integration tests.",
)


@requires_live
def test_live_fetch_smoke() -> None:
    fetcher = StrategyFetcher(logger=logging.getLogger("test"))
    html = fetcher.fetch("www.python.org")
    assert "<html" in html.lower()
