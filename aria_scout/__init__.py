# aria_scout/__init__.py
"""
aria_scout package initializer.
Defines package version and exposes the scan and crawl entry points.
"""
__version__ = "0.1.0"

from aria_scout.crawler import AsyncCrawler, crawl_site
from aria_scout.scanner import scan_page

__all__ = ["__version__", "AsyncCrawler", "crawl_site", "scan_page"]
