"""
robots.txt policies and their per-domain cache.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Dict, List, Optional, Tuple

from pagewalker.config import CrawlerConfig, RobotsMode
from pagewalker.crawler.fetcher import PLAIN_TEXT, Fetcher
from pagewalker.crawler.models import DomainState

__all__ = ("RobotsPolicy", "RobotsPolicyCache", "product_token")

logger = logging.getLogger("PageWalker")

_Rule = Tuple[bool, str]


def product_token(user_agent: str) -> str:
    """'PageWalker/0.1 (+https://x)' -> 'pagewalker'."""
    parts = user_agent.split("/", 1)[0].split()
    return parts[0].lower() if parts else ""


class RobotsPolicy:
    """
    Compiled allow/disallow rules for a single user-agent (RFC 9309).

    Longest matching rule wins, Allow wins a tie. Crawl-delay and unknown
    directives are ignored.
    """
    _WILDCARD_RE = re.compile(r"[*$]")

    def __init__(self, rules: List[_Rule], permissive: bool = False) -> None:
        self._rules = tuple(rules)
        self.permissive = permissive
        self._regex_cache: Dict[str, re.Pattern[str]] = {}

    @classmethod
    def allow_all(cls) -> RobotsPolicy:
        return cls([], permissive=True)

    @classmethod
    def parse(cls, text: str, user_agent: str) -> RobotsPolicy:
        token = product_token(user_agent)
        groups: List[Tuple[List[str], List[_Rule]]] = []
        agents: List[str] = []
        rules: List[_Rule] = []
        in_rules = False
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, val = line.partition(":")
            key = key.strip().lower()
            val = val.strip()
            if key == "user-agent":
                # a user-agent line after rules opens a new group
                if in_rules:
                    groups.append((agents, rules))
                    agents, rules, in_rules = [], [], False
                agents.append(val.lower())
            elif key in ("allow", "disallow"):
                in_rules = True
                # empty Disallow allows everything
                if not val:
                    continue
                rules.append((key == "allow", val))
        if agents:
            groups.append((agents, rules))

        specific: List[_Rule] = []
        wildcard: List[_Rule] = []
        matched = False
        for group_agents, group_rules in groups:
            if token and any(a != "*" and product_token(a) == token for a in group_agents):
                matched = True
                specific.extend(group_rules)
            elif "*" in group_agents:
                wildcard.extend(group_rules)
        return cls(specific if matched else wildcard)

    def allowed(self, path: str) -> bool:
        """Whether the crawler may fetch *path* (URL path, optionally with query)."""
        if self.permissive or path == "/robots.txt":
            return True
        path = path or "/"
        best_len = -1
        allow = True
        for is_allow, pattern in self._rules:
            if not self._match_path(path, pattern):
                continue
            length = self._rule_len(pattern)
            if length > best_len or (length == best_len and is_allow and not allow):
                best_len = length
                allow = is_allow
        return allow

    def _match_path(self, path: str, pattern: str) -> bool:
        if pattern not in self._regex_cache:
            anchored = pattern.endswith("$")
            body = pattern[:-1] if anchored else pattern
            esc = re.escape(body).replace(r"\*", ".*")
            self._regex_cache[pattern] = re.compile(f"^{esc}$" if anchored else f"^{esc}")
        return bool(self._regex_cache[pattern].match(path))

    @classmethod
    def _rule_len(cls, pattern: str) -> int:
        return len(cls._WILDCARD_RE.sub("", pattern))

    def __repr__(self) -> str:
        if self.permissive:
            return "RobotsPolicy(allow_all)"
        return f"RobotsPolicy({len(self._rules)} rules)"


class RobotsPolicyCache:
    """Resolves each domain's robots.txt once per run."""

    def __init__(self, fetcher: Fetcher, config: CrawlerConfig) -> None:
        self.fetcher = fetcher
        self.config = config
        self._locks: Dict[str, asyncio.Lock] = {}

    @staticmethod
    def robots_url(domain: str) -> str:
        return f"https://{domain}/robots.txt"

    async def resolve(self, state: DomainState) -> Optional[RobotsPolicy]:
        """
        Return the policy of *state*'s domain, fetching robots.txt on first use.

        None means the domain failed to resolve in strict mode and must not
        be crawled.
        """
        if state.resolved:
            return state.policy
        lock = self._locks.setdefault(state.domain, asyncio.Lock())
        async with lock:
            if state.resolved:
                return state.policy
            url = self.robots_url(state.domain)
            result = await self.fetcher.fetch(url, PLAIN_TEXT)
            if result.ok and result.body is not None:
                state.policy = RobotsPolicy.parse(result.body, self.config.user_agent)
                logger.debug("robots.txt %s -> %r", url, state.policy)
            elif self.config.robots_mode is RobotsMode.STRICT:
                state.failed = True
                logger.warning("robots.txt %s unavailable (%s); skipping domain", url, result.reason)
            else:
                state.policy = RobotsPolicy.allow_all()
                logger.debug("robots.txt %s unavailable (%s); allowing all", url, result.reason)
        return state.policy
