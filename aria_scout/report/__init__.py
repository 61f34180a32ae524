# File: aria_scout/report/__init__.py
"""aria_scout.report: JSON and HTML report renderers used by the CLI."""

from aria_scout.report.html_report import render_html
from aria_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
