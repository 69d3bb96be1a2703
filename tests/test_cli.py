# File: tests/test_cli.py
"""CLI tests (`pagewalker.cli`) using click.testing.CliRunner.
They cover `crawl`, `config`, `--version` and startup error handling.
"""
import json

import pytest
import pagewalker.cli as cli_module
from click.testing import CliRunner
from pagewalker.cli import cli
from pagewalker.config import Discipline, RobotsMode
from pagewalker.crawler.models import CrawlStats, Page


@pytest.fixture(autouse=True)
def patch_start_crawl(monkeypatch):
    """Replace start_crawl so no network is touched; remembers its arguments."""
    calls = {}

    async def fake_crawl(cfg, seeds, hook=None):
        calls["config"] = cfg
        calls["seeds"] = list(seeds)
        if hook is not None:
            hook(Page(url=seeds[0], domain="example.com", seq=1, domain_seq=1, body="<html></html>"))
        return CrawlStats(fetched=1, domains=1)

    monkeypatch.setattr(cli_module, "start_crawl", fake_crawl)
    return calls


@pytest.fixture()
def seeds_file(tmp_path):
    path = tmp_path / "seeds.txt"
    path.write_text("https://example.com/\n\nnot a url\nhttps://example.org/start\n", encoding="utf-8")
    return path


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "PageWalker" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "crawler.yaml"
    cfg_file.write_text("domain_budget: 12\nuser_agent: Agent/1.0\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["domain_budget"] == 12
    assert data["user_agent"] == "Agent/1.0"
    assert data["discipline"] == "domain-batched"


def test_bad_config_exits(tmp_path):
    cfg_file = tmp_path / "crawler.json"
    cfg_file.write_text(json.dumps({"domain_budget": -1}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Failed to load configuration" in result.output


def test_crawl_requires_seed_argument(patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl"])
    assert result.exit_code == 2
    assert "config" not in patch_start_crawl


def test_crawl_unreadable_seed_file(tmp_path, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", str(tmp_path / "missing.txt")])
    assert result.exit_code == 1
    assert "Cannot read seeds" in result.output
    assert "config" not in patch_start_crawl


def test_crawl_passes_seeds_and_overrides(seeds_file, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["crawl", str(seeds_file), "--limit", "5", "--budget", "3", "--delay", "0", "--fifo", "--strict-robots"],
    )
    assert result.exit_code == 0, result.output
    assert "Fetched 1 pages from 1 domains" in result.output

    cfg = patch_start_crawl["config"]
    assert cfg.max_pages == 5
    assert cfg.domain_budget == 3
    assert cfg.delay == 0
    assert cfg.discipline is Discipline.FIFO
    assert cfg.robots_mode is RobotsMode.STRICT
    assert patch_start_crawl["seeds"] == ["https://example.com/", "https://example.org/start"]


def test_crawl_invalid_override(seeds_file, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", str(seeds_file), "--budget", "0"])
    assert result.exit_code == 1
    assert "Invalid option" in result.output
    assert "config" not in patch_start_crawl


def test_crawl_json_report(tmp_path, seeds_file):
    out = tmp_path / "reports" / "crawl.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", str(seeds_file), "--json", str(out), "--pretty"])
    assert result.exit_code == 0, result.output
    assert out.exists()

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["summary"]["fetched"] == 1
    assert data["pages"] == [
        {"seq": 1, "domain_seq": 1, "domain": "example.com", "url": "https://example.com/", "length": 13}
    ]


def test_crawl_failure_is_reported(monkeypatch, seeds_file):
    async def broken(cfg, seeds, hook=None):
        raise RuntimeError("event loop exploded")

    monkeypatch.setattr(cli_module, "start_crawl", broken)
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", str(seeds_file)])
    assert result.exit_code == 1
    assert "Crawl failed" in result.output
