# File: pagewalker/engine.py
"""pagewalker.engine: entry points that run a whole crawl for the CLI and for embedding programs."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from pagewalker.config import CrawlerConfig, load_config
from pagewalker.crawler.models import CrawlStats
from pagewalker.crawler.scheduler import PageHook, Scheduler
from pagewalker.logger import logger

__all__ = ["Engine", "start_crawl"]


async def start_crawl(
    config: CrawlerConfig,
    seeds: Iterable[str],
    hook: Optional[PageHook] = None,
) -> CrawlStats:
    """Open a scheduler, crawl from *seeds* and return the final stats."""
    async with Scheduler(config, hook=hook) as scheduler:
        return await scheduler.run(seeds)


class Engine:
    """Facade for the CLI and tests: config loading and a blocking crawl run."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlerConfig:
        return load_config(path)

    def __init__(self, config: CrawlerConfig) -> None:
        self.config = config

    def crawl(self, seeds: Iterable[str], hook: Optional[PageHook] = None) -> CrawlStats:
        """Run the crawl on a fresh event loop and block until it terminates."""
        try:
            return asyncio.run(start_crawl(self.config, list(seeds), hook))
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
