"""pagewalker.report: recording fetched pages and writing the JSON crawl report."""

from pagewalker.report.json_report import PageRecorder, render_json

__all__ = ["PageRecorder", "render_json"]
