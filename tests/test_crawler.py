# File: tests/test_crawler.py
# Crawl orchestration against an in-memory site served through fake browsers
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import List

import pytest

from aria_scout import browser as browser_module
from aria_scout.config import CrawlConfig
from aria_scout.crawler import AsyncCrawler, CrawlProgress, crawl_site
from aria_scout.crawler.link_extractor import extract_links, filter_links, is_crawlable, normalize_url
from aria_scout.errors import BrowserLaunchError
from aria_scout.parser import PageSnapshot

from conftest import FakeEngine, FakeSite

ROOT = "http://example.com"


def links_page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">page {i}</a>' for i, h in enumerate(hrefs))
    return f'<html lang="ko"><head><title>t</title></head><body>{anchors}</body></html>'


async def run_crawl(site: FakeSite, config: CrawlConfig, engine: FakeEngine | None = None, **kwargs):
    return await crawl_site(ROOT, config, engine=engine or FakeEngine(), launcher=site.launcher(), **kwargs)


# --------------------------------------------------------------------------- #
#                               Link extraction                               #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("HTTP://Example.COM/Path/?q=1#frag", "http://example.com/Path?q=1"),
        ("http://example.com/", "http://example.com"),
        ("https://example.com/a/b/", "https://example.com/a/b"),
        ("http://example.com/a#top", "http://example.com/a"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_extract_links_resolves_relative_and_base():
    snapshot = PageSnapshot.from_html(
        "http://example.com/dir/page",
        '<a href="other">o</a><a href="/abs#x">a</a><a href="">empty</a><a>no href</a>',
    )
    assert extract_links(snapshot) == ["http://example.com/dir/other", "http://example.com/abs"]

    with_base = PageSnapshot.from_html(
        "http://example.com/dir/page",
        '<head><base href="http://example.com/root/"></head><a href="x">x</a>',
    )
    assert extract_links(with_base) == ["http://example.com/root/x"]


@pytest.mark.parametrize(
    "url,same_domain,patterns,ok",
    [
        ("http://example.com/a", True, (), True),
        ("http://other.com/a", True, (), False),
        ("http://other.com/a", False, (), True),
        ("mailto:me@example.com", False, (), False),
        ("javascript:void(0)", False, (), False),
        ("http://example.com/file.PDF", True, (), False),
        ("http://example.com/img/logo.svg", True, (), False),
        ("http://example.com/admin/x", True, ("/admin",), False),
    ],
)
def test_is_crawlable(url, same_domain, patterns, ok):
    assert is_crawlable(url, base_host="example.com", same_domain=same_domain, exclude_patterns=patterns) is ok


def test_filter_links_dedup_and_seen():
    links = ["http://example.com/a", "http://example.com/b", "http://example.com/a", "http://example.com/c"]
    assert filter_links(links, base_host="example.com", seen={"http://example.com/b"}) == [
        "http://example.com/a",
        "http://example.com/c",
    ]


# --------------------------------------------------------------------------- #
#                                  Crawling                                   #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_same_domain_crawl_skips_external(crawl_config):
    site = FakeSite(
        {
            ROOT: links_page("/about", "http://external.org/x"),
            f"{ROOT}/about": links_page(),
        }
    )
    result = await run_crawl(site, crawl_config)

    assert result.pages_scanned == 2
    assert {p.url for p in result.pages} == {ROOT, f"{ROOT}/about"}
    assert all(p.status == "success" for p in result.pages)
    assert not any("external.org" in url for url in site.navigations)
    assert result.summary.total_pages == 2
    assert result.summary.success_pages == 2


@pytest.mark.asyncio()
async def test_timed_out_page_becomes_error_entry(monkeypatch):
    monkeypatch.setattr(browser_module, "NAVIGATION_GRACE", 0.05)
    site = FakeSite(
        {
            ROOT: links_page("/a", "/slow", "/b"),
            f"{ROOT}/a": links_page(),
            f"{ROOT}/slow": "hang",
            f"{ROOT}/b": links_page(),
        }
    )
    config = CrawlConfig(timeout=50, max_pages=10, concurrency=3)
    result = await run_crawl(site, config)

    by_url = {p.url: p for p in result.pages}
    assert len(by_url) == 4
    slow = by_url[f"{ROOT}/slow"]
    assert slow.status == "error"
    assert slow.error and "timed out" in slow.error
    assert slow.scan_result is None
    for url in (ROOT, f"{ROOT}/a", f"{ROOT}/b"):
        assert by_url[url].status == "success"
        assert by_url[url].scan_result is not None
    assert result.summary.error_pages == 1
    assert result.summary.success_pages == 3
    assert all(b.open_contexts == 0 for b in site.browsers)


@pytest.mark.asyncio()
async def test_navigation_error_does_not_abort_crawl(crawl_config):
    site = FakeSite({ROOT: links_page("/missing", "/ok"), f"{ROOT}/ok": links_page()})
    result = await run_crawl(site, crawl_config)
    statuses = {p.url: p.status for p in result.pages}
    assert statuses == {ROOT: "success", f"{ROOT}/missing": "error", f"{ROOT}/ok": "success"}


@pytest.mark.asyncio()
async def test_max_pages_bound():
    site = FakeSite({ROOT: links_page(*[f"/p{i}" for i in range(20)])})
    for i in range(20):
        site.pages[f"{ROOT}/p{i}"] = links_page()
    config = CrawlConfig(timeout=500, max_pages=5, concurrency=3)

    async with AsyncCrawler(config, engine=FakeEngine(), launcher=site.launcher()) as crawler:
        result = await crawler.crawl(ROOT)
        assert len(crawler.visited) <= 5

    assert result.pages_scanned == 5
    assert len(site.navigations) == 5


@pytest.mark.asyncio()
async def test_no_url_enqueued_twice():
    site = FakeSite(
        {
            ROOT: links_page("/a", "/b", "/a#x", "/a/"),
            f"{ROOT}/a": links_page("/", "/b", "/a"),
            f"{ROOT}/b": links_page("/a", ROOT),
        }
    )
    result = await run_crawl(site, CrawlConfig(timeout=500, max_pages=50))
    assert sorted(site.navigations) == sorted(set(site.navigations))
    assert result.pages_scanned == 3


@pytest.mark.asyncio()
async def test_depth_limit():
    site = FakeSite(
        {
            ROOT: links_page("/a"),
            f"{ROOT}/a": links_page("/a/b"),
            f"{ROOT}/a/b": links_page(),
        }
    )
    result = await run_crawl(site, CrawlConfig(timeout=500, max_depth=1))
    assert {p.url for p in result.pages} == {ROOT, f"{ROOT}/a"}


@pytest.mark.asyncio()
async def test_concurrency_bound():
    site = FakeSite({ROOT: links_page(*[f"/p{i}" for i in range(10)])})
    for i in range(10):
        site.pages[f"{ROOT}/p{i}"] = links_page()
    engine = FakeEngine(delay=0.01)
    config = CrawlConfig(timeout=500, max_pages=50, concurrency=3)

    async with AsyncCrawler(config, engine=engine, launcher=site.launcher()) as crawler:
        result = await crawler.crawl(ROOT)
        peak = crawler.peak_in_flight

    assert result.pages_scanned == 11
    assert peak == 3
    assert engine.peak <= 3


@pytest.mark.asyncio()
async def test_browser_closed_exactly_once(crawl_config):
    site = FakeSite({ROOT: links_page("/a"), f"{ROOT}/a": links_page()})
    await run_crawl(site, crawl_config)
    assert len(site.browsers) == 1
    assert site.browsers[0].close_count == 1
    assert all(ctx.closed for ctx in site.browsers[0].contexts)
    assert len(site.browsers[0].contexts) == 2


@pytest.mark.asyncio()
async def test_launch_failure_is_fatal(crawl_config):
    @asynccontextmanager
    async def broken_launcher(config):
        raise BrowserLaunchError("no chromium")
        yield  # pragma: no cover

    with pytest.raises(BrowserLaunchError):
        await crawl_site(ROOT, crawl_config, engine=FakeEngine(), launcher=broken_launcher)


@pytest.mark.asyncio()
async def test_crawl_requires_context_manager(crawl_config):
    crawler = AsyncCrawler(crawl_config, engine=FakeEngine())
    with pytest.raises(RuntimeError):
        await crawler.crawl(ROOT)


@pytest.mark.asyncio()
async def test_progress_events_and_failing_callback(crawl_config):
    site = FakeSite({ROOT: links_page("/a", "/gone"), f"{ROOT}/a": links_page()})
    events: List[CrawlProgress] = []

    def on_progress(event: CrawlProgress) -> None:
        events.append(event)
        raise RuntimeError("observer bug")

    result = await run_crawl(site, crawl_config, on_progress=on_progress)

    assert result.pages_scanned == 3
    statuses = [(e.url, e.status) for e in events]
    assert (ROOT, "scanning") in statuses
    assert (ROOT, "done") in statuses
    assert (f"{ROOT}/gone", "error") in statuses
    assert all(1 <= e.current <= e.total <= crawl_config.max_pages for e in events)


@pytest.mark.asyncio()
async def test_exclude_patterns(crawl_config):
    site = FakeSite(
        {
            ROOT: links_page("/docs", "/logout", "/files/report.pdf"),
            f"{ROOT}/docs": links_page(),
            f"{ROOT}/logout": links_page(),
        }
    )
    config = crawl_config.model_copy(update={"exclude_patterns": ("logout",)})
    result = await run_crawl(site, config)
    assert {p.url for p in result.pages} == {ROOT, f"{ROOT}/docs"}


class DomRewritingEngine(FakeEngine):
    """Engine that swaps the page markup while it runs, as injected scripts can."""

    def __init__(self, site: FakeSite, rewrites: dict) -> None:
        super().__init__()
        self.site = site
        self.rewrites = rewrites

    async def run(self, page):
        if page.url in self.rewrites:
            self.site.pages[page.url] = self.rewrites[page.url]
        return await super().run(page)


@pytest.mark.asyncio()
async def test_links_come_from_dom_after_engine_run(crawl_config):
    site = FakeSite(
        {
            ROOT: links_page("/before"),
            f"{ROOT}/before": links_page(),
            f"{ROOT}/after": links_page(),
        }
    )
    engine = DomRewritingEngine(site, {ROOT: links_page("/after")})
    result = await run_crawl(site, crawl_config, engine)
    assert {p.url for p in result.pages} == {ROOT, f"{ROOT}/after"}


@pytest.mark.asyncio()
async def test_lost_context_during_capture_becomes_error_entry(crawl_config):
    site = FakeSite({ROOT: links_page("/jump", "/ok"), f"{ROOT}/jump": links_page(), f"{ROOT}/ok": links_page()})
    site.lost_context.add(f"{ROOT}/jump")
    result = await run_crawl(site, crawl_config)
    entries = {p.url: p for p in result.pages}
    assert entries[f"{ROOT}/ok"].status == "success"
    jumped = entries[f"{ROOT}/jump"]
    assert jumped.status == "error"
    assert "Execution context was destroyed" in jumped.error
    assert jumped.error.startswith(f"Failed to load {ROOT}/jump")
    assert all(b.open_contexts == 0 for b in site.browsers)
