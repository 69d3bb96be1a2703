# File: tests/conftest.py
import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import pytest

from pagewalker.config import CrawlerConfig
from pagewalker.crawler.models import FetchResult
from pagewalker.logger import LOGGER_NAME


class FakeFetcher:
    """
    In-memory stand-in for Fetcher.

    *pages* maps URL -> HTML body, *robots* maps domain -> robots.txt text.
    Anything else answers like a 404. Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        robots: Optional[Dict[str, str]] = None,
        latency: float = 0.0,
    ) -> None:
        self.pages = dict(pages or {})
        self.robots = dict(robots or {})
        self.latency = latency
        self.calls: List[Tuple[str, str]] = []

    async def fetch(self, url: str, accept: str = "text/html") -> FetchResult:
        self.calls.append((url, accept))
        if self.latency:
            await asyncio.sleep(self.latency)
        if url.endswith("/robots.txt"):
            domain = url.split("://", 1)[1].split("/", 1)[0]
            if domain in self.robots:
                return FetchResult.success(url, self.robots[domain])
            return FetchResult.failed(url, "HTTP 404")
        if url in self.pages:
            return FetchResult.success(url, self.pages[url])
        return FetchResult.failed(url, "HTTP 404")

    @property
    def page_calls(self) -> List[str]:
        return [url for url, _ in self.calls if not url.endswith("/robots.txt")]

    @property
    def robots_calls(self) -> List[str]:
        return [url for url, _ in self.calls if url.endswith("/robots.txt")]


def html(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head><title>t</title></head><body>{anchors}</body></html>"


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """Config without politeness delay so scheduler tests run instantly."""
    return CrawlerConfig(user_agent="TestAgent/1.0", delay=0.0, connect_timeout=2.0)


@pytest.fixture(autouse=True)
def reset_logger():
    """Undo handlers installed by CLI tests so later tests log normally."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)
