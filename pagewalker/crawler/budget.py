"""
Per-domain fetch budget.
"""
from __future__ import annotations

from pagewalker.crawler.models import DomainState


class DomainBudget:
    """Caps the number of successful fetches per domain."""

    def __init__(self, ceiling: int) -> None:
        if ceiling < 1:
            raise ValueError("domain budget must be >= 1")
        self.ceiling = ceiling

    def exhausted(self, state: DomainState) -> bool:
        return state.fetched >= self.ceiling

    def record(self, state: DomainState) -> None:
        """Count one successful fetch under *state*'s domain."""
        state.fetched += 1
