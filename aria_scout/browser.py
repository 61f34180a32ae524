# aria_scout/browser.py
"""
Playwright helpers shared by single-page scans and crawl workers.

* :func:`launch_browser` owns one browser process and closes it on exit.
* :func:`open_page` gives every URL its own browser context, closed on every
  exit path; contexts are never reused across URLs.
* :func:`navigate` applies the per-page timeout and turns failures into
  :class:`~aria_scout.errors.NavigationError`.
* :func:`capture_snapshot` freezes the DOM, readable CSS and computed animation
  styles for custom rules.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from aria_scout.config import ScanConfig
from aria_scout.errors import BrowserLaunchError, NavigationError
from aria_scout.logger import logger
from aria_scout.parser import ComputedStyle, CssRule, PageSnapshot

__all__ = [
    "launch_browser",
    "open_page",
    "navigate",
    "capture_snapshot",
    "CSS_RULES_SCRIPT",
    "COMPUTED_STYLES_SCRIPT",
]

#: extra seconds granted on top of the navigation timeout before giving up
NAVIGATION_GRACE = 1.0

LAUNCH_ARGS = ("--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage")

# Cross-origin sheets throw on cssRules access and are skipped.
CSS_RULES_SCRIPT = """
() => {
    const out = [];
    const walk = (rules) => {
        for (const rule of Array.from(rules)) {
            if (rule instanceof CSSStyleRule) {
                const declarations = {};
                for (let i = 0; i < rule.style.length; i++) {
                    const prop = rule.style[i];
                    declarations[prop] = rule.style.getPropertyValue(prop);
                }
                out.push({ selector: rule.selectorText, declarations });
            } else if (rule.cssRules && !(rule instanceof CSSKeyframesRule)) {
                walk(rule.cssRules);
            }
        }
    };
    for (const sheet of Array.from(document.styleSheets)) {
        let rules = null;
        try {
            rules = sheet.cssRules;
        } catch (e) {
            continue;
        }
        if (rules) walk(rules);
    }
    return out;
}
"""

# Only elements with an animation or blinking text are returned.
COMPUTED_STYLES_SCRIPT = """
() => {
    const out = [];
    for (const el of Array.from(document.querySelectorAll("*"))) {
        const cs = window.getComputedStyle(el);
        const name = cs.animationName || "none";
        const decoration = cs.textDecorationLine || cs.textDecoration || "none";
        const animated = name.split(",").some((n) => n.trim() !== "none");
        if (!animated && !decoration.includes("blink")) continue;
        out.push({
            selector: el.id ? "#" + el.id : el.tagName.toLowerCase(),
            html: el.outerHTML.slice(0, 300),
            animation_name: name,
            animation_duration: cs.animationDuration || "0s",
            text_decoration_line: decoration,
        });
    }
    return out;
}
"""


@asynccontextmanager
async def launch_browser(config: ScanConfig) -> AsyncIterator[Any]:
    """Start chromium for one scan or crawl call and close it exactly once."""
    try:
        playwright = await async_playwright().start()
    except PlaywrightError as exc:
        raise BrowserLaunchError(f"Could not start playwright: {_reason(exc)}") from exc
    try:
        try:
            browser = await playwright.chromium.launch(
                headless=config.headless,
                args=[*LAUNCH_ARGS, f"--lang={config.locale}"],
            )
        except PlaywrightError as exc:
            raise BrowserLaunchError(f"Could not launch chromium: {exc}") from exc
        logger.debug("Browser launched (headless=%s)", config.headless)
        try:
            yield browser
        finally:
            await browser.close()
            logger.debug("Browser closed")
    finally:
        await playwright.stop()


@asynccontextmanager
async def open_page(browser: Any, config: ScanConfig) -> AsyncIterator[Any]:
    """Open a page in a fresh, isolated browser context."""
    context = await browser.new_context(
        viewport={"width": config.viewport.width, "height": config.viewport.height},
        locale=config.locale,
    )
    try:
        page = await context.new_page()
        yield page
    finally:
        await context.close()


def _reason(exc: BaseException) -> str:
    return str(exc).splitlines()[0] if str(exc) else type(exc).__name__


async def navigate(page: Any, url: str, config: ScanConfig) -> None:
    """Load *url*; raise :class:`NavigationError` on timeout or network failure."""
    hard_limit = config.timeout / 1000 + NAVIGATION_GRACE
    try:
        await asyncio.wait_for(
            page.goto(url, timeout=config.timeout, wait_until=config.wait_until),
            timeout=hard_limit,
        )
    except asyncio.TimeoutError as exc:
        raise NavigationError(url, f"timed out after {config.timeout:g} ms") from exc
    except PlaywrightError as exc:
        raise NavigationError(url, _reason(exc)) from exc


async def capture_snapshot(page: Any) -> PageSnapshot:
    """Freeze the current DOM, its CSS rules and the computed animation styles.

    A page that navigates away meanwhile (a script redirect, for example)
    raises :class:`NavigationError`.
    """
    try:
        html = await page.content()
        raw_rules = await page.evaluate(CSS_RULES_SCRIPT)
        raw_styles = await page.evaluate(COMPUTED_STYLES_SCRIPT)
    except PlaywrightError as exc:
        raise NavigationError(page.url, f"page changed during capture: {_reason(exc)}") from exc
    rules = tuple(
        CssRule(str(r.get("selector", "")), {str(k).lower(): str(v) for k, v in (r.get("declarations") or {}).items()})
        for r in raw_rules or ()
        if r.get("selector")
    )
    styles = tuple(
        ComputedStyle(
            selector=str(s.get("selector", "")),
            html=str(s.get("html", "")),
            animation_name=str(s.get("animation_name") or "none"),
            animation_duration=str(s.get("animation_duration") or "0s"),
            text_decoration_line=str(s.get("text_decoration_line") or "none"),
        )
        for s in raw_styles or ()
    )
    return PageSnapshot(url=page.url, html=html, css_rules=rules, computed_styles=styles)
