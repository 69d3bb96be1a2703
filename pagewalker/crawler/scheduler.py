from __future__ import annotations

import asyncio
import inspect
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union
from urllib.parse import urlsplit

from aiohttp import ClientSession

from pagewalker.config import CrawlerConfig, Discipline
from pagewalker.crawler.budget import DomainBudget
from pagewalker.crawler.fetcher import HTML, Fetcher, create_session
from pagewalker.crawler.frontier import DomainStack, Frontier
from pagewalker.crawler.link_extractor import extract_links
from pagewalker.crawler.models import CrawlStats, Dispatch, DomainState, Outcome, Page
from pagewalker.crawler.normalizer import canonicalize_seed, domain_of
from pagewalker.crawler.robots import RobotsPolicyCache

__all__ = ("Scheduler", "CrawlState", "PageHook")

PageHook = Callable[[Page], Union[Awaitable[None], None]]


class CrawlState(str, Enum):
    INIT = "init"
    RUNNING = "running"
    TERMINATED = "terminated"


def _robots_path(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path or "/"
    return f"{path}?{parts.query}" if parts.query else path


class Scheduler:
    """
    Breadth-first crawl driver owning the frontier, visited set and domain states.

    The primary discipline takes the domain at the head of the frontier, pulls
    all of its queued URLs into a stack and drains that stack newest-first
    before moving on; same-domain discoveries join the open stack. The FIFO
    fallback processes one URL at a time in discovery order.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        hook: Optional[PageHook] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.config = config
        self.hook = hook
        self.logger = logging.getLogger("PageWalker")
        self.state = CrawlState.INIT
        self.visited: Set[str] = set()
        self.frontier = Frontier()
        self.domains: Dict[str, DomainState] = {}
        self.stats = CrawlStats()
        self.budget = DomainBudget(config.domain_budget)
        self.fetcher = fetcher
        self.robots: Optional[RobotsPolicyCache] = None if fetcher is None else RobotsPolicyCache(fetcher, config)
        self.session: Optional[ClientSession] = None
        self._open: Dict[str, DomainStack] = {}
        self._in_flight = 0
        self._changed = asyncio.Event()

    async def __aenter__(self) -> Scheduler:
        if self.fetcher is None:
            self.session = create_session(self.config)
            self.fetcher = Fetcher(self.session, self.config)
            self.robots = RobotsPolicyCache(self.fetcher, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def domain_state(self, domain: str) -> DomainState:
        state = self.domains.get(domain)
        if state is None:
            state = self.domains[domain] = DomainState(domain)
            self.stats.domains += 1
        return state

    async def run(self, seeds: Iterable[str]) -> CrawlStats:
        """Crawl from *seeds* until the frontier is empty or max_pages is reached."""
        if self.fetcher is None or self.robots is None:
            raise RuntimeError("Scheduler used outside of 'async with'")
        if self.state is not CrawlState.INIT:
            raise RuntimeError("a Scheduler can only run once")
        start = time.monotonic()
        self.logger.info("Crawl started (%s, robots %s)", self.config.discipline.value, self.config.robots_mode.value)

        await self._init(seeds)
        self.state = CrawlState.RUNNING
        if self.config.discipline is Discipline.FIFO:
            await self._run_fifo()
        else:
            await self._run_batched()
        self.state = CrawlState.TERMINATED

        duration = time.monotonic() - start
        self.logger.info(
            "Finished: %d pages from %d domains in %.2f s (%d failed, %d filtered, %d denied by robots.txt, %d over budget)",
            self.stats.fetched, self.stats.domains, duration, self.stats.failed,
            self.stats.filtered, self.stats.robots_denied, self.stats.budget_exceeded,
        )
        if self.frontier:
            self.logger.info("Stopped at max_pages with %d URLs still queued", len(self.frontier))
        return self.stats

    async def _init(self, seeds: Iterable[str]) -> None:
        for raw in seeds:
            seed = canonicalize_seed(raw)
            if seed is None:
                self.logger.warning("Skipping invalid seed %r", raw)
                continue
            if self._ceiling_reached():
                break
            dispatch = await self._process(seed, self.domain_state(domain_of(seed)))
            if dispatch not in (Dispatch.FETCHED, Dispatch.SKIPPED):
                self.logger.warning("Seed %s not crawled: %s", seed, dispatch.value)

    async def _run_fifo(self) -> None:
        while self.frontier and not self._ceiling_reached():
            url = self.frontier.pop()
            await self._process(url, self.domain_state(domain_of(url)))

    async def _run_batched(self) -> None:
        workers = [asyncio.create_task(self._batch_worker()) for _ in range(self.config.concurrency)]
        try:
            await asyncio.gather(*workers)
        finally:
            for w in workers:
                w.cancel()

    async def _batch_worker(self) -> None:
        while not self._ceiling_reached():
            domain = self.frontier.head_domain(exclude=self._open)
            if domain is None:
                # other workers may still discover work
                if not self._open:
                    break
                self._changed.clear()
                await self._changed.wait()
                continue
            await self._drain(domain)
        self._changed.set()

    async def _drain(self, domain: str) -> None:
        stack = DomainStack(domain, self.frontier.take_domain(domain))
        self._open[domain] = stack
        state = self.domain_state(domain)
        self.logger.debug("Batch %s: %d queued URLs", domain, len(stack))
        try:
            await self.robots.resolve(state)  # type: ignore[union-attr]
            while stack and not self._ceiling_reached():
                await self._process(stack.pop(), state)
        finally:
            del self._open[domain]
            self._changed.set()

    def _settle(self, dispatch: Dispatch) -> Dispatch:
        self.stats.count(dispatch)
        return dispatch

    async def _process(self, url: str, state: DomainState) -> Dispatch:
        """Decide and carry out what happens to one URL."""
        if url in self.visited:
            return Dispatch.SKIPPED
        # settled URLs go into visited so rediscovery cannot requeue them
        if self.budget.exhausted(state):
            self.visited.add(url)
            return self._settle(Dispatch.BUDGET_EXCEEDED)
        policy = await self.robots.resolve(state)  # type: ignore[union-attr]
        if policy is None:
            self.visited.add(url)
            return self._settle(Dispatch.DOMAIN_FAILED)
        if not policy.allowed(_robots_path(url)):
            self.visited.add(url)
            self.logger.debug("Disallowed by robots.txt: %s", url)
            return self._settle(Dispatch.ROBOTS_DENIED)
        if not await self._await_capacity() or url in self.visited:
            return Dispatch.SKIPPED

        self.visited.add(url)
        self._in_flight += 1
        try:
            result = await self.fetcher.fetch(url, HTML)  # type: ignore[union-attr]
        finally:
            self._in_flight -= 1
            self._changed.set()

        if not result.ok or result.body is None:
            self.logger.debug("Not fetched %s: %s", url, result.reason)
            dispatch = self._settle(Dispatch.FILTERED if result.outcome is Outcome.FILTERED else Dispatch.FAILED)
            await self._pause()
            return dispatch

        self.budget.record(state)
        self._settle(Dispatch.FETCHED)
        document, links = extract_links(result.body, url, extended=self.config.extended_links)
        self._route(links)
        page = Page(
            url=url,
            domain=state.domain,
            seq=self.stats.fetched,
            domain_seq=state.fetched,
            body=result.body,
            document=document,
        )
        self.logger.info("[%d|%d] %s %s", page.seq, page.domain_seq, page.domain, _robots_path(url))
        await self._deliver(page)
        await self._pause()
        return Dispatch.FETCHED

    def _route(self, links: List[str]) -> None:
        """Queue undiscovered links: open domain stacks first, the frontier otherwise."""
        for link in links:
            if link in self.visited:
                continue
            stack = self._open.get(domain_of(link))
            if stack is not None:
                stack.push(link)
            else:
                self.frontier.push(link)
        if links:
            self._changed.set()

    async def _deliver(self, page: Page) -> None:
        if self.hook is None:
            return
        try:
            res = self.hook(page)
            if inspect.isawaitable(res):
                await res
        except Exception:
            self.logger.exception("Processing hook failed for %s", page.url)

    async def _pause(self) -> None:
        if self.config.delay > 0:
            await asyncio.sleep(self.config.delay)

    def _ceiling_reached(self) -> bool:
        return self.stats.fetched >= self.config.max_pages

    async def _await_capacity(self) -> bool:
        """
        Wait until one more fetch fits under max_pages.

        In-flight fetches may still fail, so a full count only means the
        ceiling is reached once nothing is in flight. Returns False then.
        """
        while self.stats.fetched + self._in_flight >= self.config.max_pages:
            if not self._in_flight:
                return False
            self._changed.clear()
            await self._changed.wait()
        return True
