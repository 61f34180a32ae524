# File: aria_scout/aggregator.py
"""aria_scout.aggregator: crawl-level totals over per-page scan results."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Set, Tuple

from aria_scout.models import CrawlResult, CrawlSummary, PageEntry


def build_crawl_summary(pages: Iterable[PageEntry]) -> CrawlSummary:
    """Page counts, total violations and the number of distinct failed items."""
    entries = list(pages)
    total_violations = 0
    violated: Set[str] = set()
    for entry in entries:
        if entry.scan_result is None:
            continue
        total_violations += len(entry.scan_result.violations)
        violated.update(v.item_id for v in entry.scan_result.violations)
    return CrawlSummary(
        total_pages=len(entries),
        success_pages=sum(1 for e in entries if e.status == "success"),
        error_pages=sum(1 for e in entries if e.status == "error"),
        total_violations=total_violations,
        unique_violated_items=len(violated),
    )


def violations_by_item(result: CrawlResult) -> List[Tuple[str, int]]:
    """(item id, number of pages failing it), most widespread first."""
    counts: Counter[str] = Counter()
    for entry in result.pages:
        if entry.scan_result is not None:
            counts.update(set(entry.scan_result.failed_items))
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def average_compliance(result: CrawlResult) -> float:
    rates = [e.scan_result.summary.compliance_rate for e in result.pages if e.scan_result is not None]
    return round(sum(rates) / len(rates), 1) if rates else 0.0


def pages_by_status(result: CrawlResult) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {"success": [], "error": []}
    for entry in result.pages:
        grouped.setdefault(entry.status, []).append(entry.url)
    return grouped


__all__ = ["build_crawl_summary", "violations_by_item", "average_compliance", "pages_by_status"]
