# File: tests/test_robots.py
import asyncio

import pytest
from conftest import FakeFetcher

from pagewalker.config import CrawlerConfig, RobotsMode
from pagewalker.crawler.models import DomainState
from pagewalker.crawler.robots import RobotsPolicy, RobotsPolicyCache, product_token

UA = "TestAgent/1.0"


def test_product_token():
    assert product_token("TestAgent/1.0 (+https://example.org)") == "testagent"
    assert product_token("pagewalker") == "pagewalker"
    assert product_token("") == ""


def test_disallow_prefix():
    policy = RobotsPolicy.parse("User-agent: *\nDisallow: /private", UA)
    assert not policy.allowed("/private")
    assert not policy.allowed("/private/page")
    assert policy.allowed("/public")
    assert policy.allowed("/")


def test_empty_disallow_allows_everything():
    policy = RobotsPolicy.parse("User-agent: *\nDisallow:", UA)
    assert policy.allowed("/anything")


def test_specific_group_overrides_wildcard():
    text = (
        "User-agent: *\n"
        "Disallow: /\n"
        "\n"
        "User-agent: testagent\n"
        "Disallow: /secret\n"
    )
    policy = RobotsPolicy.parse(text, UA)
    assert policy.allowed("/open")
    assert not policy.allowed("/secret/x")


def test_other_agents_are_ignored():
    policy = RobotsPolicy.parse("User-agent: OtherBot\nDisallow: /", UA)
    assert policy.allowed("/page")


def test_groups_for_same_agent_are_merged():
    text = (
        "User-agent: TestAgent\n"
        "Disallow: /a\n"
        "User-agent: Somebody\n"
        "Disallow: /c\n"
        "\n"
        "User-agent: testagent/2.0\n"
        "Disallow: /b\n"
    )
    policy = RobotsPolicy.parse(text, UA)
    assert not policy.allowed("/a")
    assert not policy.allowed("/b")
    assert policy.allowed("/c")
    assert policy.allowed("/d")


def test_longest_match_and_allow_ties():
    text = (
        "User-agent: *\n"
        "Disallow: /docs\n"
        "Allow: /docs/public\n"
        "Disallow: /tie\n"
        "Allow: /tie\n"
    )
    policy = RobotsPolicy.parse(text, UA)
    assert not policy.allowed("/docs/internal")
    assert policy.allowed("/docs/public/index.html")
    assert policy.allowed("/tie")


def test_wildcards_and_anchor():
    text = "User-agent: *\nDisallow: /*.pdf$\nDisallow: /tmp*/cache\n"
    policy = RobotsPolicy.parse(text, UA)
    assert not policy.allowed("/files/report.pdf")
    assert policy.allowed("/files/report.pdf.html")
    assert not policy.allowed("/tmp123/cache/x")


def test_comments_crawl_delay_and_unknown_directives_ignored():
    text = (
        "# robots\n"
        "User-agent: * # everyone\n"
        "Crawl-delay: 10\n"
        "Sitemap: https://a.example/sitemap.xml\n"
        "Disallow: /private # keep out\n"
    )
    policy = RobotsPolicy.parse(text, UA)
    assert not policy.allowed("/private")
    assert policy.allowed("/other")


def test_robots_txt_always_allowed():
    policy = RobotsPolicy.parse("User-agent: *\nDisallow: /", UA)
    assert policy.allowed("/robots.txt")
    assert not policy.allowed("/index.html")


def test_allow_all_sentinel():
    policy = RobotsPolicy.allow_all()
    assert policy.permissive
    assert policy.allowed("/private")


@pytest.mark.asyncio()
async def test_cache_fetches_once_per_domain():
    fetcher = FakeFetcher(robots={"a.example": "User-agent: *\nDisallow: /private"})
    cache = RobotsPolicyCache(fetcher, CrawlerConfig(user_agent=UA))
    state = DomainState("a.example")

    first = await cache.resolve(state)
    second = await cache.resolve(state)

    assert first is second
    assert fetcher.calls == [("https://a.example/robots.txt", "text/plain")]
    assert not first.allowed("/private")


@pytest.mark.asyncio()
async def test_cache_permissive_on_failure():
    fetcher = FakeFetcher()
    cache = RobotsPolicyCache(fetcher, CrawlerConfig(user_agent=UA))
    state = DomainState("down.example")

    policy = await cache.resolve(state)

    assert policy is not None and policy.permissive
    assert not state.failed


@pytest.mark.asyncio()
async def test_cache_strict_on_failure():
    fetcher = FakeFetcher()
    cache = RobotsPolicyCache(fetcher, CrawlerConfig(user_agent=UA, robots_mode=RobotsMode.STRICT))
    state = DomainState("down.example")

    assert await cache.resolve(state) is None
    assert state.failed
    assert await cache.resolve(state) is None
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio()
async def test_concurrent_resolvers_share_one_fetch():
    fetcher = FakeFetcher(robots={"a.example": "User-agent: *\nDisallow:"}, latency=0.05)
    cache = RobotsPolicyCache(fetcher, CrawlerConfig(user_agent=UA))
    state = DomainState("a.example")

    policies = await asyncio.gather(*(cache.resolve(state) for _ in range(5)))

    assert len(fetcher.calls) == 1
    assert all(p is policies[0] for p in policies)
