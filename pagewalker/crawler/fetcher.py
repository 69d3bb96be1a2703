"""
Fetcher module: content-type gated HTTP retrieval.
"""
from __future__ import annotations

import asyncio
import logging

from aiohttp import ClientError, ClientSession, ClientTimeout

from pagewalker.config import CrawlerConfig
from pagewalker.crawler.models import FetchResult

HTML = "text/html"
PLAIN_TEXT = "text/plain"

logger = logging.getLogger("PageWalker")


def create_session(config: CrawlerConfig) -> ClientSession:
    """Client session carrying the crawler identity and the connect timeout."""
    return ClientSession(
        timeout=ClientTimeout(total=None, sock_connect=config.connect_timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class Fetcher:
    """Fetches one URL at a time; never touches crawler state."""

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(self, url: str, accept: str = HTML) -> FetchResult:
        """
        Retrieve *url* as text if the server offers the *accept* media type.

        With ``head_preflight`` enabled a HEAD request is sent first and a
        missing or mismatching Content-Type stops the fetch before GET.
        """
        headers = {"Accept": accept}
        try:
            if self.config.head_preflight:
                async with self.session.head(url, headers=headers, allow_redirects=True) as resp:
                    mime = _media_type(resp.headers.get("Content-Type"))
                if not mime.startswith(accept):
                    return FetchResult.filtered(url, f"HEAD content-type {mime or 'missing'!r}")

            async with self.session.get(url, headers=headers) as resp:
                if resp.status >= 400:
                    return FetchResult.failed(url, f"HTTP {resp.status}")
                mime = _media_type(resp.headers.get("Content-Type"))
                if mime and not mime.startswith(accept):
                    return FetchResult.filtered(url, f"GET content-type {mime!r}")
                text = await resp.text()
        except (ClientError, asyncio.TimeoutError) as exc:
            logger.debug("Fetch error %s: %r", url, exc)
            return FetchResult.failed(url, f"{type(exc).__name__}: {exc}")
        except (UnicodeDecodeError, LookupError) as exc:
            return FetchResult.failed(url, f"undecodable body: {exc}")
        return FetchResult.success(url, text)
