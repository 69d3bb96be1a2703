"""
Link extraction for PageWalker.
"""
from __future__ import annotations

from typing import List, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from pagewalker.crawler.normalizer import normalize_link

_ANCHORS = ["a"]
_EXTENDED = ["a", "area", "link"]


def extract_links(body: str, source: str, *, extended: bool = False) -> Tuple[BeautifulSoup, List[str]]:
    """
    Parse *body* and collect canonical links found inside the document body.

    Returns the parsed document together with the links in document order.
    Duplicates are kept; the caller decides what has been seen already.
    Stylesheet references and hrefs the normalizer rejects are skipped.
    """
    soup = BeautifulSoup(body, "html.parser")
    scope = soup.body or soup
    links: List[str] = []
    for tag in scope.find_all(_EXTENDED if extended else _ANCHORS, href=True):
        if not isinstance(tag, Tag):
            continue
        if _is_stylesheet(tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        link = normalize_link(href_val, source)
        if link is not None:
            links.append(link)
    return soup, links


def _is_stylesheet(tag: Tag) -> bool:
    rel = tag.get("rel")
    if rel is None:
        return False
    values = rel if isinstance(rel, list) else str(rel).split()
    return any(v.lower() == "stylesheet" for v in values)
