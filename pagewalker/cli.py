#!/usr/bin/env python3
"""
Command line entry point of the PageWalker crawler.

Commands:
  crawl SEEDS_FILE   Crawl breadth-first from the URLs listed in SEEDS_FILE
  config             Print the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Rotating log file (console only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --limit INT         Stop after this many fetched pages (overrides max_pages)
  --budget INT        Pages per domain (overrides domain_budget)
  --delay SEC         Politeness delay between fetches
  --concurrency INT   Domain batches crawled in parallel
  --fifo              Use the global FIFO discipline instead of domain batches
  --strict-robots     Skip domains whose robots.txt cannot be fetched
  --json PATH         Write a JSON report of fetched pages
  --pretty            Indent the JSON report

Example:
  pagewalker --log-level DEBUG crawl seeds.txt --limit 100 --json report.json
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from pagewalker import __version__
from pagewalker.config import CrawlerConfig, Discipline, RobotsMode, load_config
from pagewalker.engine import start_crawl
from pagewalker.logger import DEFAULT_FORMAT, init_logging
from pagewalker.report.json_report import PageRecorder, render_json
from pagewalker.seeds import load_seeds

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PageWalker, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stdout only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Format string for log records'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """PageWalker command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


def _override(cfg: CrawlerConfig, **changes) -> CrawlerConfig:
    updates = {k: v for k, v in changes.items() if v is not None}
    if not updates:
        return cfg
    return CrawlerConfig(**{**cfg.model_dump(), **updates})


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('seeds_file', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--limit', '-l', 'limit', type=int, default=None, help='Stop after this many fetched pages')
@click.option('--budget', '-b', 'budget', type=int, default=None, help='Maximum pages fetched per domain')
@click.option('--delay', '-d', 'delay', type=float, default=None, help='Delay between fetches (seconds)')
@click.option('--concurrency', 'concurrency', type=int, default=None, help='Domain batches crawled in parallel')
@click.option('--fifo', is_flag=True, help='Global FIFO scheduling instead of domain batches')
@click.option('--strict-robots', is_flag=True, help='Skip domains whose robots.txt is unavailable')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Write a JSON report of fetched pages'
)
@click.option('--pretty', is_flag=True, help='Indent the JSON report (2 spaces)')
@click.pass_context
def crawl(ctx, seeds_file, limit, budget, delay, concurrency, fifo, strict_robots, json_output, pretty):
    """Crawl from the seed URLs listed in SEEDS_FILE, one per line."""
    try:
        cfg = _override(
            ctx.obj['config'],
            max_pages=limit,
            domain_budget=budget,
            delay=delay,
            concurrency=concurrency,
            discipline=Discipline.FIFO if fifo else None,
            robots_mode=RobotsMode.STRICT if strict_robots else None,
        )
    except ValidationError as e:
        print_error(f'Invalid option: {e}')

    try:
        seeds = load_seeds(seeds_file)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        print_error(f'Cannot read seeds: {e}')

    recorder = PageRecorder() if json_output else None
    click.echo(f'Crawling from {len(seeds)} seed(s)')
    try:
        stats = asyncio.run(start_crawl(cfg, seeds, recorder))
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    click.echo(f'Fetched {stats.fetched} pages from {stats.domains} domains')

    if recorder is not None:
        try:
            saved = render_json(recorder.records, json_output, stats, pretty=pretty)
            click.echo(f'JSON report: {saved}')
        except OSError as e:
            print_error(f'Failed to write JSON report: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
