"""aria_scout.crawler: bounded breadth-first accessibility crawl."""

from aria_scout.crawler.crawler import AsyncCrawler, CrawlProgress, crawl_site
from aria_scout.crawler.link_extractor import extract_links, filter_links, is_crawlable, normalize_url

__all__ = [
    "AsyncCrawler",
    "CrawlProgress",
    "crawl_site",
    "extract_links",
    "filter_links",
    "is_crawlable",
    "normalize_url",
]
