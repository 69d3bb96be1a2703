# pagewalker/report/json_report.py
"""
JSON crawl report for PageWalker.

``PageRecorder`` is a processing hook that keeps a small record per fetched
page; ``render_json`` writes those records together with the run summary.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pagewalker.crawler.models import CrawlStats, Page


class PageRecorder:
    """Hook collecting ``url/domain/seq/domain_seq/length`` per page, optionally chaining to another hook."""

    def __init__(self, forward=None) -> None:
        self.records: List[Dict[str, Any]] = []
        self._forward = forward

    def __call__(self, page: Page):
        self.records.append(
            {
                "seq": page.seq,
                "domain_seq": page.domain_seq,
                "domain": page.domain,
                "url": page.url,
                "length": len(page.body),
            }
        )
        if self._forward is not None:
            return self._forward(page)
        return None


def render_json(
    records: Sequence[Dict[str, Any]],
    output_path: Path | str,
    stats: Optional[CrawlStats] = None,
    *,
    pretty: bool = True,
) -> Path:
    """
    Save the crawl report as JSON at *output_path*.

    :param records: page records as produced by :class:`PageRecorder`
    :param output_path: path of the JSON file; parent directories are created
    :param stats: final crawl stats for the ``summary`` section
    :return: Path of the written file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "summary": stats.as_dict() if stats is not None else {"fetched": len(records)},
        "pages": list(records),
    }

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output
