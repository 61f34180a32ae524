# aria_scout/crawler/crawler.py
from __future__ import annotations

import asyncio
import time
from collections import deque
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Callable, Collection, Deque, List, Literal, Optional, Sequence, Set, Tuple
from urllib.parse import urlparse

from aria_scout.aggregator import build_crawl_summary
from aria_scout.axe import RuleEngine
from aria_scout.browser import launch_browser, navigate, open_page
from aria_scout.config import CrawlConfig
from aria_scout.crawler.link_extractor import extract_links, filter_links, normalize_url
from aria_scout.errors import ConfigurationError
from aria_scout.logger import logger
from aria_scout.models import CrawlResult, PageEntry
from aria_scout.rules.custom import CUSTOM_RULES, CustomRule
from aria_scout.scanner import default_engine, inspect_page

__all__ = ("CrawlProgress", "AsyncCrawler", "crawl_site")

ProgressStatus = Literal["scanning", "done", "error"]
Launcher = Callable[[CrawlConfig], AsyncContextManager[Any]]


@dataclass(frozen=True, slots=True)
class CrawlProgress:
    """Progress event: *current* pages started out of an estimated *total*."""
    url: str
    current: int
    total: int
    status: ProgressStatus


ProgressCallback = Callable[[CrawlProgress], None]


class AsyncCrawler:
    """
    Breadth-first accessibility crawler.

    Pages are scanned in batches of at most ``concurrency``; a batch completes
    before the next one is drawn from the frontier.  One browser serves the
    whole crawl and every page gets its own context.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        engine: Optional[RuleEngine] = None,
        launcher: Launcher = launch_browser,
        on_progress: Optional[ProgressCallback] = None,
        rules: Sequence[CustomRule] = CUSTOM_RULES,
        exclude_rules: Collection[str] = (),
    ) -> None:
        self.config = config
        self.engine = engine or default_engine(config)
        self.rules = rules
        self.exclude_rules = tuple(exclude_rules)
        self.on_progress = on_progress
        self.browser: Any = None
        self.visited: Set[str] = set()
        self.peak_in_flight = 0
        self._launcher = launcher
        self._stack: Optional[AsyncExitStack] = None
        self._in_flight = 0
        self._started = 0

    async def __aenter__(self) -> AsyncCrawler:
        stack = AsyncExitStack()
        try:
            self.browser = await stack.enter_async_context(self._launcher(self.config))
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        stack, self._stack = self._stack, None
        self.browser = None
        if stack is not None:
            await stack.__aexit__(exc_type, exc, tb)

    async def crawl(self, start_url: Optional[str] = None) -> CrawlResult:
        if self.browser is None:
            raise RuntimeError("Browser not initialized; use 'async with AsyncCrawler(...)'")
        raw_start = start_url or (str(self.config.start_url) if self.config.start_url else None)
        if not raw_start:
            raise ConfigurationError("No start URL given for the crawl")

        root = normalize_url(raw_start)
        base_host = urlparse(root).netloc
        max_pages = self.config.max_pages
        logger.info(
            "Crawl start: %s (depth %d, max %d pages, concurrency %d)",
            root, self.config.max_depth, max_pages, self.config.concurrency,
        )
        started = time.monotonic()

        self.visited = set()
        self._started = 0
        self.peak_in_flight = 0
        frontier: Deque[Tuple[str, int]] = deque([(root, 0)])
        queued: Set[str] = {root}
        pages: List[PageEntry] = []

        while frontier and len(self.visited) < max_pages:
            room = min(self.config.concurrency, max_pages - len(self.visited))
            batch: List[Tuple[str, int]] = []
            while frontier and len(batch) < room:
                url, depth = frontier.popleft()
                if url in self.visited:
                    continue
                self.visited.add(url)
                batch.append((url, depth))
            if not batch:
                continue

            total = min(len(self.visited) + len(frontier), max_pages)
            outcomes = await asyncio.gather(*(self._visit(url, depth, total, pages) for url, depth in batch))

            for (url, depth), links in zip(batch, outcomes):
                if depth >= self.config.max_depth:
                    continue
                fresh = filter_links(
                    links,
                    base_host=base_host,
                    same_domain=self.config.same_domain,
                    exclude_patterns=self.config.exclude_patterns,
                    seen=queued,
                )
                for link in fresh:
                    queued.add(link)
                    frontier.append((link, depth + 1))
                if fresh:
                    logger.debug("%s: %d new link(s) at depth %d", url, len(fresh), depth + 1)

        summary = build_crawl_summary(pages)
        duration = round((time.monotonic() - started) * 1000, 1)
        logger.info(
            "Crawl finished: %d page(s), %d error(s), %d violation(s) in %.2f s",
            summary.total_pages, summary.error_pages, summary.total_violations, duration / 1000,
        )
        return CrawlResult(start_url=root, pages=tuple(pages), duration=duration, summary=summary)

    async def _visit(self, url: str, depth: int, total: int, pages: List[PageEntry]) -> List[str]:
        """Scan one page, append its entry to *pages*; return its outgoing links."""
        self._started += 1
        current = self._started
        self._in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self._in_flight)
        self._report(CrawlProgress(url, current, total, "scanning"))
        try:
            started = time.monotonic()
            async with open_page(self.browser, self.config) as page:
                await navigate(page, url, self.config)
                result, snapshot = await inspect_page(
                    page,
                    engine=self.engine,
                    rules=self.rules,
                    exclude_rules=self.exclude_rules,
                    started=started,
                )
            links = extract_links(snapshot) if depth < self.config.max_depth else []
        except Exception as exc:
            logger.warning("Page failed: %s: %s", url, exc)
            pages.append(PageEntry(url=url, status="error", error=str(exc) or type(exc).__name__))
            self._report(CrawlProgress(url, current, total, "error"))
            return []
        finally:
            self._in_flight -= 1
        pages.append(PageEntry(url=url, status="success", scan_result=result))
        self._report(CrawlProgress(url, current, total, "done"))
        return links

    def _report(self, event: CrawlProgress) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(event)
        except Exception as exc:
            logger.warning("Progress callback failed on %s: %s", event.url, exc)


async def crawl_site(
    start_url: Optional[str] = None,
    config: Optional[CrawlConfig] = None,
    *,
    engine: Optional[RuleEngine] = None,
    launcher: Launcher = launch_browser,
    on_progress: Optional[ProgressCallback] = None,
    exclude_rules: Collection[str] = (),
) -> CrawlResult:
    """Launch a browser, crawl from *start_url* and close the browser."""
    config = config or CrawlConfig()
    async with AsyncCrawler(
        config, engine=engine, launcher=launcher, on_progress=on_progress, exclude_rules=exclude_rules
    ) as crawler:
        return await crawler.crawl(start_url)
