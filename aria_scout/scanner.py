"""
Single-page accessibility scan.

Runs axe-core and the custom rules against one loaded page and merges both
into a :class:`~aria_scout.models.ScanResult`.  A failing custom rule never
fails the scan: it is logged and recorded in ``ScanResult.rule_errors``.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Collection, Iterable, List, Optional, Sequence, Tuple, Union

from aria_scout.axe import AxeEngine, RuleEngine
from aria_scout.browser import capture_snapshot, launch_browser, navigate, open_page
from aria_scout.config import ScanConfig
from aria_scout.errors import RuleExecutionError
from aria_scout.logger import logger
from aria_scout.mapper import merge_findings
from aria_scout.models import RuleError, ScanResult
from aria_scout.parser import PageSnapshot
from aria_scout.rules.custom import CUSTOM_RULES, CustomRule, RuleResult

__all__ = ["RuleOutcome", "run_custom_rules", "inspect_page", "evaluate_page", "scan_page", "default_engine"]


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """Either the result of one custom rule or the error it raised."""

    rule_id: str
    result: Optional[RuleResult] = None
    error: Optional[RuleExecutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_custom_rules(snapshot: PageSnapshot, rules: Iterable[CustomRule] = CUSTOM_RULES) -> List[RuleOutcome]:
    """Run every rule on *snapshot*; one rule raising does not affect the others."""
    outcomes: List[RuleOutcome] = []
    for rule in rules:
        try:
            outcomes.append(RuleOutcome(rule.id, result=rule.execute(snapshot)))
        except Exception as exc:
            error = RuleExecutionError(rule.id, exc)
            logger.warning("%s (%s)", error, snapshot.url)
            outcomes.append(RuleOutcome(rule.id, error=error))
    return outcomes


def default_engine(config: ScanConfig) -> AxeEngine:
    return AxeEngine(source_path=config.axe_source, source_url=config.axe_url)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def inspect_page(
    page: Any,
    *,
    engine: RuleEngine,
    rules: Sequence[CustomRule] = CUSTOM_RULES,
    exclude_rules: Collection[str] = (),
    started: Optional[float] = None,
) -> Tuple[ScanResult, PageSnapshot]:
    """Scan an already loaded *page*; also return the snapshot the rules saw.

    axe-core runs first and the snapshot is taken afterwards, so custom rules
    and link extraction see the same DOM for a scan and a crawled page.
    *started* is a ``time.monotonic()`` reading taken before navigation so the
    reported duration covers the whole scan; it defaults to now.
    """
    started = time.monotonic() if started is None else started
    timestamp = _now_iso()

    engine_results = await engine.run(page)
    snapshot = await capture_snapshot(page)
    outcomes = run_custom_rules(snapshot, rules)

    mapped = merge_findings(
        engine_results,
        (o.result for o in outcomes if o.result is not None),
        exclude_rules=exclude_rules,
    )
    duration = round((time.monotonic() - started) * 1000, 1)
    result = ScanResult(
        url=page.url,
        timestamp=timestamp,
        duration=duration,
        violations=mapped.violations,
        passes=mapped.passes,
        incomplete=mapped.incomplete,
        inapplicable=mapped.inapplicable,
        summary=mapped.summary,
        rule_errors=tuple(RuleError(o.rule_id, str(o.error)) for o in outcomes if o.error is not None),
    )
    logger.info(
        "Scanned %s: %d violation(s), compliance %.1f%% in %.0f ms",
        result.url,
        len(result.violations),
        result.summary.compliance_rate,
        duration,
    )
    return result, snapshot


async def evaluate_page(
    page: Any,
    *,
    engine: RuleEngine,
    rules: Sequence[CustomRule] = CUSTOM_RULES,
    exclude_rules: Collection[str] = (),
    started: Optional[float] = None,
) -> ScanResult:
    """Scan an already loaded *page* (see :func:`inspect_page`)."""
    result, _ = await inspect_page(page, engine=engine, rules=rules, exclude_rules=exclude_rules, started=started)
    return result


async def _scan_url(
    browser: Any,
    url: str,
    config: ScanConfig,
    engine: RuleEngine,
    rules: Sequence[CustomRule],
    exclude_rules: Collection[str],
    started: float,
) -> ScanResult:
    async with open_page(browser, config) as page:
        await navigate(page, url, config)
        return await evaluate_page(page, engine=engine, rules=rules, exclude_rules=exclude_rules, started=started)


async def scan_page(
    target: Union[str, Any],
    config: Optional[ScanConfig] = None,
    *,
    engine: Optional[RuleEngine] = None,
    rules: Sequence[CustomRule] = CUSTOM_RULES,
    browser: Any = None,
    exclude_rules: Collection[str] = (),
) -> ScanResult:
    """
    Scan one page for KWCAG 2.2 compliance.

    Parameters
    ----------
    target : str | playwright Page
        A URL to load, or a page that is already loaded.
    config : ScanConfig, optional
        Navigation and browser settings; defaults apply when omitted.
    engine : RuleEngine, optional
        Engine producing axe-style results; axe-core by default.
    rules : sequence of CustomRule
        Custom rules to run after the engine.
    browser : playwright Browser, optional
        Reused instead of launching one when *target* is a URL.
    exclude_rules : collection of str
        axe or custom rule ids whose findings are ignored.

    Raises
    ------
    BrowserLaunchError
        No browser was given and chromium could not be started.
    NavigationError
        The URL did not load within the timeout, or the page navigated away
        while its snapshot was taken.
    EngineInjectionError
        axe-core could not be injected or run.
    """
    config = config or ScanConfig()
    engine = engine or default_engine(config)
    started = time.monotonic()

    if not isinstance(target, str):
        return await evaluate_page(target, engine=engine, rules=rules, exclude_rules=exclude_rules, started=started)

    logger.info("Scanning %s", target)
    if browser is not None:
        return await _scan_url(browser, target, config, engine, rules, exclude_rules, started)
    async with launch_browser(config) as own_browser:
        return await _scan_url(own_browser, target, config, engine, rules, exclude_rules, started)
