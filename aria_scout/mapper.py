# File: aria_scout/mapper.py
"""aria_scout.mapper: from axe-core findings and custom rule results to catalog verdicts.

Each catalog item ends in exactly one state, resolved item by item with the
precedence ``fail > incomplete > pass > unknown``:

* any mapped violation fails the item, whatever else was reported for it;
* an axe "incomplete" result makes it incomplete unless it failed;
* a pass signal (axe pass or passing custom rule) counts only for items that
  are neither failed nor incomplete.

Items with only "inapplicable" signals are reported as inapplicable.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Collection, Dict, Iterable, List, Literal, Optional, Set, Tuple

from aria_scout.logger import logger
from aria_scout.models import (
    EngineResults,
    PrincipleStats,
    RawFinding,
    Severity,
    Summary,
    Violation,
    ViolationNode,
)
from aria_scout.rules.catalog import CATALOG, TOTAL_ITEMS, get_item, item_for_axe_rule, sorted_item_ids
from aria_scout.rules.custom.base import RuleResult

__all__ = [
    "ItemStatus",
    "MappedFindings",
    "impact_to_severity",
    "map_engine_violation",
    "map_rule_result",
    "resolve_statuses",
    "build_summary",
    "merge_findings",
]

ItemStatus = Literal["fail", "incomplete", "pass", "unknown"]

_IMPACT_SEVERITY: Dict[str, Severity] = {
    "critical": "error",
    "serious": "error",
    "moderate": "warning",
    "minor": "info",
}


def impact_to_severity(impact: Optional[str]) -> Severity:
    """Map an axe impact to a severity; unknown or missing impacts count as warnings."""
    return _IMPACT_SEVERITY.get(impact or "", "warning")


def map_engine_violation(finding: RawFinding) -> Optional[Violation]:
    """Translate one axe violation; ``None`` when the rule is outside the catalog."""
    item = item_for_axe_rule(finding.rule_id)
    if item is None:
        return None
    return Violation(
        item_id=item.id,
        item_name=item.name,
        principle=item.principle,
        principle_name=item.principle_name,
        severity=impact_to_severity(finding.impact),
        rule_id=finding.rule_id,
        description=finding.description,
        impact=finding.impact or "unknown",
        nodes=tuple(ViolationNode(n.html, n.target, n.failure_summary) for n in finding.nodes),
    )


def map_rule_result(result: RuleResult) -> Optional[Violation]:
    """Translate a failing custom rule result; passing results map to ``None``."""
    if result.passed or not result.findings:
        return None
    item = get_item(result.item_id)
    if item is None:
        logger.warning("Custom rule %s reports unknown catalog item %s", result.rule_id, result.item_id)
        return None
    return Violation(
        item_id=item.id,
        item_name=item.name,
        principle=item.principle,
        principle_name=item.principle_name,
        severity=result.severity,  # type: ignore[arg-type]
        rule_id=result.rule_id,
        description=item.description,
        impact="serious" if result.severity == "error" else "moderate",
        nodes=tuple(ViolationNode(f.html, (f.selector,), f.message) for f in result.findings),
    )


def resolve_statuses(
    failed: AbstractSet[str],
    incomplete: AbstractSet[str],
    passed: AbstractSet[str],
) -> Dict[str, ItemStatus]:
    """Final state of every catalog item, keyed in lexicographic id order."""
    statuses: Dict[str, ItemStatus] = {}
    for item_id in sorted_item_ids():
        if item_id in failed:
            statuses[item_id] = "fail"
        elif item_id in incomplete:
            statuses[item_id] = "incomplete"
        elif item_id in passed:
            statuses[item_id] = "pass"
        else:
            statuses[item_id] = "unknown"
    return statuses


def build_summary(statuses: Dict[str, ItemStatus]) -> Summary:
    by_principle: Dict[int, List[int]] = {p: [0, 0, 0] for p in (1, 2, 3, 4)}
    for item in sorted(CATALOG, key=lambda i: i.id):
        counts = by_principle[item.principle]
        counts[0] += 1
        status = statuses.get(item.id, "unknown")
        if status == "pass":
            counts[1] += 1
        elif status == "fail":
            counts[2] += 1

    pass_count = sum(1 for s in statuses.values() if s == "pass")
    fail_count = sum(1 for s in statuses.values() if s == "fail")
    incomplete_count = sum(1 for s in statuses.values() if s == "incomplete")
    rate = max(0, pass_count) / TOTAL_ITEMS * 100 if TOTAL_ITEMS else 0.0

    return Summary(
        total_items=TOTAL_ITEMS,
        pass_count=pass_count,
        fail_count=fail_count,
        incomplete_count=incomplete_count,
        compliance_rate=min(100.0, max(0.0, rate)),
        by_principle={p: PrincipleStats(*c) for p, c in by_principle.items()},
    )


@dataclass(frozen=True)
class MappedFindings:
    """Everything the scanner needs to assemble a :class:`~aria_scout.models.ScanResult`."""

    violations: Tuple[Violation, ...]
    passes: Tuple[str, ...]
    incomplete: Tuple[str, ...]
    inapplicable: Tuple[str, ...]
    summary: Summary
    statuses: Dict[str, ItemStatus] = field(default_factory=dict)


def _item_ids(findings: Iterable[RawFinding], excluded: Collection[str]) -> Set[str]:
    ids: Set[str] = set()
    for finding in findings:
        if finding.rule_id in excluded:
            continue
        item = item_for_axe_rule(finding.rule_id)
        if item is not None:
            ids.add(item.id)
    return ids


def merge_findings(
    engine: EngineResults,
    rule_results: Iterable[RuleResult],
    *,
    exclude_rules: Collection[str] = (),
) -> MappedFindings:
    """Merge both result streams into violations, item sets and a summary.

    Findings of rules listed in *exclude_rules* (axe or custom ids) are ignored
    entirely, as if the rule had not run.
    """
    excluded = frozenset(exclude_rules)
    violations: List[Violation] = []
    dropped = 0
    for finding in engine.violations:
        if finding.rule_id in excluded:
            continue
        mapped = map_engine_violation(finding)
        if mapped is None:
            dropped += 1
            continue
        violations.append(mapped)
    if dropped:
        logger.debug("Dropped %d axe violation(s) outside the catalog", dropped)

    passed = _item_ids(engine.passes, excluded)
    incomplete = _item_ids(engine.incomplete, excluded)
    inapplicable = _item_ids(engine.inapplicable, excluded)

    for result in rule_results:
        if result.rule_id in excluded:
            continue
        if result.passed:
            passed.add(result.item_id)
            continue
        mapped = map_rule_result(result)
        if mapped is not None:
            violations.append(mapped)

    failed = {v.item_id for v in violations}
    statuses = resolve_statuses(failed, incomplete, passed)

    def _with(status: ItemStatus) -> Tuple[str, ...]:
        return tuple(i for i, s in statuses.items() if s == status)

    return MappedFindings(
        violations=tuple(violations),
        passes=_with("pass"),
        incomplete=_with("incomplete"),
        inapplicable=tuple(i for i in sorted(inapplicable) if statuses.get(i) == "unknown"),
        summary=build_summary(statuses),
        statuses=statuses,
    )
