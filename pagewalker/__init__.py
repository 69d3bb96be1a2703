"""
PageWalker package initializer.
Defines the package version and exposes the crawl entry points.
"""
__version__ = "0.1.0"

from pagewalker.config import CrawlerConfig, load_config
from pagewalker.engine import Engine, start_crawl

__all__ = ["__version__", "CrawlerConfig", "Engine", "load_config", "start_crawl"]
