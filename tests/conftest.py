# File: tests/conftest.py
"""
Shared fixtures: an in-memory "site" served through fake playwright
browser/context/page objects, and a scripted rule engine.  The fakes follow
the playwright call shapes the code uses, so no real browser is needed.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional, Set, Union

import pytest
from playwright.async_api import Error as PlaywrightError

from aria_scout.aggregator import build_crawl_summary
from aria_scout.browser import COMPUTED_STYLES_SCRIPT, CSS_RULES_SCRIPT
from aria_scout.config import CrawlConfig, ScanConfig
from aria_scout.mapper import merge_findings
from aria_scout.models import CrawlResult, EngineResults, PageEntry, RawFinding, RawNode, ScanResult

#: page behaviour: HTML text, an exception to raise from goto, or "hang"
Behaviour = Union[str, BaseException]

CLEAN_HTML = """<!DOCTYPE html>
<html lang="ko">
<head><title>접근성 점검 테스트</title></head>
<body>
  <a href="#main">본문 바로가기</a>
  <main id="main">
    <h1>제목</h1>
    <h2>소제목</h2>
    <p><a href="/about">회사 소개 페이지</a></p>
  </main>
</body>
</html>
"""

MISSING_ALT_HTML = """<html lang="ko"><head><title>img</title></head>
<body><img src="logo.png"></body></html>"""


class FakePage:
    def __init__(self, site: "FakeSite", context: "FakeContext") -> None:
        self.site = site
        self.context = context
        self.url = "about:blank"

    async def goto(self, url: str, timeout: Optional[float] = None, wait_until: Optional[str] = None) -> None:
        self.site.navigations.append(url)
        behaviour = self.site.pages.get(url)
        if behaviour is None:
            raise self.site.missing_error(url)
        if isinstance(behaviour, BaseException):
            raise behaviour
        if behaviour == "hang":
            await asyncio.sleep(3600)
        if self.site.delay:
            await asyncio.sleep(self.site.delay)
        self.url = url

    async def content(self) -> str:
        if self.url in self.site.lost_context:
            raise PlaywrightError("Execution context was destroyed, most likely because of a navigation")
        behaviour = self.site.pages.get(self.url)
        return behaviour if isinstance(behaviour, str) else "<html></html>"

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == CSS_RULES_SCRIPT:
            return list(self.site.css_rules.get(self.url, []))
        if script == COMPUTED_STYLES_SCRIPT:
            return list(self.site.computed_styles.get(self.url, []))
        raise AssertionError("unexpected evaluate() call in fake page")


class FakeContext:
    def __init__(self, browser: "FakeBrowser", **options: Any) -> None:
        self.browser = browser
        self.options = options
        self.closed = False
        self.pages: List[FakePage] = []

    async def new_page(self) -> FakePage:
        page = FakePage(self.browser.site, self)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True
        self.browser.open_contexts -= 1


class FakeBrowser:
    def __init__(self, site: "FakeSite") -> None:
        self.site = site
        self.contexts: List[FakeContext] = []
        self.open_contexts = 0
        self.close_count = 0

    async def new_context(self, **options: Any) -> FakeContext:
        ctx = FakeContext(self, **options)
        self.contexts.append(ctx)
        self.open_contexts += 1
        return ctx

    async def close(self) -> None:
        self.close_count += 1


class FakeSite:
    """URL -> behaviour map plus navigation bookkeeping."""

    def __init__(self, pages: Optional[Dict[str, Behaviour]] = None, delay: float = 0.0) -> None:
        self.pages: Dict[str, Behaviour] = dict(pages or {})
        self.css_rules: Dict[str, List[Dict[str, Any]]] = {}
        self.computed_styles: Dict[str, List[Dict[str, Any]]] = {}
        #: URLs whose page navigates away before a snapshot can be taken
        self.lost_context: Set[str] = set()
        self.navigations: List[str] = []
        self.delay = delay
        self.browsers: List[FakeBrowser] = []

    @staticmethod
    def missing_error(url: str) -> BaseException:
        return PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")

    def launcher(self) -> Callable[[Any], Any]:
        @asynccontextmanager
        async def launch(config: Any):
            browser = FakeBrowser(self)
            self.browsers.append(browser)
            try:
                yield browser
            finally:
                await browser.close()

        return launch


class FakeEngine:
    """Rule engine returning scripted results per URL (empty results by default)."""

    def __init__(self, results: Optional[Dict[str, EngineResults]] = None, delay: float = 0.0) -> None:
        self.results = dict(results or {})
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.peak = 0

    async def run(self, page: Any) -> EngineResults:
        self.calls.append(page.url)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self.results.get(page.url, EngineResults())
        finally:
            self.in_flight -= 1


def finding(rule_id: str, impact: Optional[str] = "serious", nodes: int = 1) -> RawFinding:
    return RawFinding(
        rule_id=rule_id,
        impact=impact,
        description=f"{rule_id} description",
        nodes=tuple(RawNode(f"<el{i}>", (f"#el{i}",), f"Fix {rule_id}") for i in range(nodes)),
    )


@pytest.fixture()
def fake_site() -> FakeSite:
    return FakeSite()


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def scan_config() -> ScanConfig:
    return ScanConfig(timeout=500)


@pytest.fixture()
def crawl_config() -> CrawlConfig:
    return CrawlConfig(timeout=500, max_depth=3, max_pages=10, concurrency=3)


def make_scan_result(
    url: str = "http://example.com",
    engine: Optional[EngineResults] = None,
    rule_results: Any = (),
    rule_errors: Any = (),
) -> ScanResult:
    """A ScanResult built through the real mapper, without a browser."""
    mapped = merge_findings(engine or EngineResults(), list(rule_results))
    return ScanResult(
        url=url,
        timestamp="2026-01-05T09:30:00.000Z",
        duration=12.5,
        violations=mapped.violations,
        passes=mapped.passes,
        incomplete=mapped.incomplete,
        inapplicable=mapped.inapplicable,
        summary=mapped.summary,
        rule_errors=tuple(rule_errors),
    )


def make_crawl_result(start_url: str = "http://example.com") -> CrawlResult:
    """Two successful pages sharing a 5.1.1 failure plus one failed page."""
    pages = (
        PageEntry(
            url=start_url,
            status="success",
            scan_result=make_scan_result(
                start_url,
                EngineResults(violations=(finding("image-alt", "critical"), finding("color-contrast", "serious"))),
            ),
        ),
        PageEntry(
            url=f"{start_url}/about",
            status="success",
            scan_result=make_scan_result(f"{start_url}/about", EngineResults(violations=(finding("image-alt"),))),
        ),
        PageEntry(url=f"{start_url}/down", status="error", error="Failed to load: net::ERR_FAILED"),
    )
    return CrawlResult(start_url=start_url, pages=pages, duration=321.0, summary=build_crawl_summary(pages))
