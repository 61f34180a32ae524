# aria_scout/axe.py
"""
axe-core adapter.

Loads the axe-core bundle, injects it into a playwright page and runs it,
returning the four classified result lists as :class:`EngineResults`.

The bundle is resolved in this order: an explicit local file, the user cache,
then a download from the configured CDN URL (stored in the cache for later
runs).  The source is read once per engine instance and shared by all pages
of a crawl.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Error as PlaywrightError

from aria_scout.config import AXE_CDN_URL
from aria_scout.errors import EngineInjectionError
from aria_scout.logger import logger
from aria_scout.models import EngineResults

__all__ = ["RuleEngine", "AxeEngine", "AXE_RUN_SCRIPT", "AXE_TAGS", "DEFAULT_CACHE_PATH"]

AXE_TAGS = ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa", "wcag22aa", "best-practice")

DEFAULT_CACHE_PATH = Path.home() / ".cache" / "aria_scout" / "axe.min.js"

AXE_RUN_SCRIPT = """
(tags) => {
    if (!window.axe || !window.axe.run) {
        throw new Error('axe-core is not loaded');
    }
    return window.axe.run(document, {
        runOnly: { type: 'tag', values: tags },
        resultTypes: ['violations', 'passes', 'incomplete', 'inapplicable'],
    });
}
"""


class RuleEngine(Protocol):
    """Anything that can evaluate a page and classify its findings like axe-core."""

    async def run(self, page: Any) -> EngineResults: ...


class AxeEngine:
    """Runs axe-core inside playwright pages."""

    def __init__(
        self,
        source_path: Optional[Path] = None,
        source_url: str = AXE_CDN_URL,
        cache_path: Path = DEFAULT_CACHE_PATH,
        download_timeout: float = 30.0,
    ) -> None:
        self.source_path = source_path
        self.source_url = source_url
        self.cache_path = cache_path
        self.download_timeout = download_timeout
        self._source: Optional[str] = None
        self._lock = asyncio.Lock()

    async def load_source(self) -> str:
        """Return the axe-core bundle, reading or downloading it on first use."""
        async with self._lock:
            if self._source is None:
                self._source = await self._resolve_source()
            return self._source

    async def _resolve_source(self) -> str:
        if self.source_path is not None:
            try:
                return self.source_path.read_text(encoding="utf-8")
            except OSError as exc:
                raise EngineInjectionError(f"Cannot read axe-core from {self.source_path}: {exc}") from exc

        if self.cache_path.is_file():
            logger.debug("Using cached axe-core: %s", self.cache_path)
            return self.cache_path.read_text(encoding="utf-8")

        logger.info("Downloading axe-core from %s", self.source_url)
        try:
            async with ClientSession(timeout=ClientTimeout(total=self.download_timeout)) as session:
                async with session.get(self.source_url) as resp:
                    if resp.status != 200:
                        raise EngineInjectionError(
                            f"axe-core download failed: HTTP {resp.status} from {self.source_url}"
                        )
                    text = await resp.text()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise EngineInjectionError(f"axe-core download failed: {exc}") from exc

        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not cache axe-core at %s: %s", self.cache_path, exc)
        return text

    async def run(self, page: Any) -> EngineResults:
        source = await self.load_source()
        try:
            await page.evaluate(source)
            raw = await page.evaluate(AXE_RUN_SCRIPT, list(AXE_TAGS))
        except PlaywrightError as exc:
            raise EngineInjectionError(f"axe-core failed on {page.url}: {exc}") from exc
        if not isinstance(raw, dict):
            raise EngineInjectionError(f"Unexpected axe-core result type: {type(raw).__name__}")
        results = EngineResults.from_axe(raw)
        logger.debug(
            "axe-core on %s: %d violations, %d passes, %d incomplete, %d inapplicable",
            page.url,
            len(results.violations),
            len(results.passes),
            len(results.incomplete),
            len(results.inapplicable),
        )
        return results
