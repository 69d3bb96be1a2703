"""pagewalker.crawler: frontier, scheduler and the per-page components they drive."""

from pagewalker.crawler.models import CrawlStats, Dispatch, DomainState, FetchResult, Outcome, Page
from pagewalker.crawler.scheduler import CrawlState, PageHook, Scheduler

__all__ = [
    "CrawlState",
    "CrawlStats",
    "Dispatch",
    "DomainState",
    "FetchResult",
    "Outcome",
    "Page",
    "PageHook",
    "Scheduler",
]
