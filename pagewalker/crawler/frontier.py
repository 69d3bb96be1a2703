"""
Pending-work structures: the main Frontier and the transient per-domain stack.
"""
from __future__ import annotations

from collections import deque
from typing import Collection, Deque, Iterator, List, Optional, Set, Tuple

from pagewalker.crawler.normalizer import domain_of

__all__ = ("Frontier", "DomainStack")


class Frontier:
    """
    FIFO queue of canonical URLs awaiting fetch.

    A URL already waiting in the queue is not queued a second time. Whether a
    URL was fetched before is the scheduler's business.
    """

    def __init__(self) -> None:
        self._queue: Deque[Tuple[str, str]] = deque()
        self._queued: Set[str] = set()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __contains__(self, url: object) -> bool:
        return url in self._queued

    def __iter__(self) -> Iterator[str]:
        return (url for _, url in self._queue)

    def push(self, url: str) -> bool:
        """Append *url*; returns False when it was already queued."""
        if url in self._queued:
            return False
        self._queued.add(url)
        self._queue.append((domain_of(url), url))
        return True

    def pop(self) -> str:
        """Remove and return the oldest URL (IndexError when empty)."""
        _, url = self._queue.popleft()
        self._queued.discard(url)
        return url

    def head_domain(self, exclude: Collection[str] = ()) -> Optional[str]:
        """Domain of the oldest queued URL whose domain is not in *exclude*."""
        for domain, _ in self._queue:
            if domain not in exclude:
                return domain
        return None

    def take_domain(self, domain: str) -> List[str]:
        """Remove every queued URL of *domain*, oldest first."""
        taken: List[str] = []
        kept: Deque[Tuple[str, str]] = deque()
        for item in self._queue:
            if item[0] == domain:
                taken.append(item[1])
                self._queued.discard(item[1])
            else:
                kept.append(item)
        self._queue = kept
        return taken


class DomainStack:
    """
    Open batch of one domain's URLs, drained newest-first.

    Same-domain links found while draining are pushed back here, which makes
    the walk depth-first within the domain.
    """

    def __init__(self, domain: str, urls: Collection[str] = ()) -> None:
        self.domain = domain
        self._stack: List[str] = []
        self._members: Set[str] = set()
        for url in urls:
            self.push(url)

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)

    def __contains__(self, url: object) -> bool:
        return url in self._members

    def push(self, url: str) -> bool:
        if url in self._members:
            return False
        self._members.add(url)
        self._stack.append(url)
        return True

    def pop(self) -> str:
        url = self._stack.pop()
        self._members.discard(url)
        return url
