"""
Data models for the PageWalker crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from pagewalker.crawler.robots import RobotsPolicy


class Outcome(str, Enum):
    """Result kind of a single fetch or parse step."""

    SUCCESS = "success"
    FILTERED = "filtered"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Outcome of one Fetcher call; body is set only on success."""

    url: str
    outcome: Outcome
    body: Optional[str] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def success(cls, url: str, body: str) -> FetchResult:
        return cls(url, Outcome.SUCCESS, body)

    @classmethod
    def filtered(cls, url: str, reason: str) -> FetchResult:
        return cls(url, Outcome.FILTERED, None, reason)

    @classmethod
    def failed(cls, url: str, reason: str) -> FetchResult:
        return cls(url, Outcome.FAILED, None, reason)


class Dispatch(str, Enum):
    """What the scheduler did with one unit of work."""

    FETCHED = "fetched"
    FAILED = "failed"
    FILTERED = "filtered"
    ROBOTS_DENIED = "robots_denied"
    BUDGET_EXCEEDED = "budget_exceeded"
    DOMAIN_FAILED = "domain_failed"
    SKIPPED = "skipped"


@dataclass(slots=True)
class DomainState:
    """Per-domain crawl state, created on first sight and kept for the run."""

    domain: str
    policy: Optional[RobotsPolicy] = None
    failed: bool = False
    fetched: int = 0

    @property
    def resolved(self) -> bool:
        return self.failed or self.policy is not None


@dataclass(slots=True)
class CrawlStats:
    """Running totals for one crawl."""

    fetched: int = 0
    failed: int = 0
    filtered: int = 0
    robots_denied: int = 0
    budget_exceeded: int = 0
    domain_failed: int = 0
    domains: int = 0

    def count(self, dispatch: Dispatch) -> None:
        if dispatch is Dispatch.FETCHED:
            self.fetched += 1
        elif dispatch is Dispatch.FAILED:
            self.failed += 1
        elif dispatch is Dispatch.FILTERED:
            self.filtered += 1
        elif dispatch is Dispatch.ROBOTS_DENIED:
            self.robots_denied += 1
        elif dispatch is Dispatch.BUDGET_EXCEEDED:
            self.budget_exceeded += 1
        elif dispatch is Dispatch.DOMAIN_FAILED:
            self.domain_failed += 1

    def as_dict(self) -> dict[str, int]:
        return {
            "fetched": self.fetched,
            "failed": self.failed,
            "filtered": self.filtered,
            "robots_denied": self.robots_denied,
            "budget_exceeded": self.budget_exceeded,
            "domain_failed": self.domain_failed,
            "domains": self.domains,
        }


@dataclass(slots=True)
class Page:
    """A successfully fetched document as handed to the processing hook."""

    url: str
    domain: str
    seq: int
    domain_seq: int
    body: str
    document: Any = field(default=None, repr=False)
