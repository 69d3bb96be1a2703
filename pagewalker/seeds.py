"""pagewalker.seeds: reading the seed list a crawl starts from."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from pagewalker.crawler.normalizer import canonicalize_seed
from pagewalker.logger import logger

__all__ = ("load_seeds", "parse_seeds")


def parse_seeds(text: str, source: str = "<seeds>") -> List[str]:
    """One absolute URL per line; blanks and '#' comments are ignored, bad lines logged and skipped."""
    seeds: List[str] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        seed = canonicalize_seed(line)
        if seed is None:
            logger.warning("%s:%d: not an absolute http(s) URL: %r", source, lineno, line)
            continue
        seeds.append(seed)
    unique = list(dict.fromkeys(seeds))
    if len(unique) != len(seeds):
        logger.debug("Removed %d duplicate seeds", len(seeds) - len(unique))
    return unique


def load_seeds(path: Union[str, Path]) -> List[str]:
    """Read a newline-delimited seed file; raise if it is missing or yields nothing."""
    p = Path(path).expanduser()
    if not p.is_file():
        logger.error("Seed file not found: %s", p)
        raise FileNotFoundError(f"Seed file not found: {p}")
    seeds = parse_seeds(p.read_text(encoding="utf-8"), str(p))
    if not seeds:
        raise ValueError(f"No valid seed URLs in {p}")
    logger.debug("Loaded %d seeds from %s", len(seeds), p)
    return seeds
