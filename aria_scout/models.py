# aria_scout/models.py
"""
Immutable result records produced by the scanner and the crawler.

Every record converts to plain JSON-compatible dicts with ``to_dict()`` and
back with ``from_dict()``; the round trip reproduces an equal value, which
the result store and the JSON report rely on.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

Severity = Literal["error", "warning", "info"]
RuleSeverity = Literal["error", "warning", "info", "pass"]
PageStatus = Literal["success", "error"]

SEVERITY_PRIORITY: Dict[str, int] = {"pass": 0, "info": 1, "warning": 2, "error": 3}


@dataclass(frozen=True, slots=True)
class RawNode:
    html: str
    target: Tuple[str, ...] = ()
    failure_summary: str = ""


@dataclass(frozen=True, slots=True)
class RawFinding:
    """One rule outcome as reported by axe-core, before catalog mapping."""

    rule_id: str
    impact: Optional[str] = None
    description: str = ""
    nodes: Tuple[RawNode, ...] = ()

    @classmethod
    def from_axe(cls, data: Mapping[str, Any]) -> RawFinding:
        nodes = []
        for node in data.get("nodes") or ():
            # axe targets are strings, or lists of strings for shadow DOM / frames
            target = tuple(
                " >>> ".join(map(str, t)) if isinstance(t, list) else str(t) for t in node.get("target") or ()
            )
            nodes.append(RawNode(str(node.get("html", "")), target, node.get("failureSummary") or ""))
        return cls(
            rule_id=str(data["id"]),
            impact=data.get("impact"),
            description=data.get("description") or data.get("help") or "",
            nodes=tuple(nodes),
        )


@dataclass(frozen=True, slots=True)
class EngineResults:
    """The four classified lists axe-core returns for one document."""

    violations: Tuple[RawFinding, ...] = ()
    passes: Tuple[RawFinding, ...] = ()
    incomplete: Tuple[RawFinding, ...] = ()
    inapplicable: Tuple[RawFinding, ...] = ()

    @classmethod
    def from_axe(cls, data: Mapping[str, Any]) -> EngineResults:
        return cls(
            **{
                key: tuple(RawFinding.from_axe(item) for item in data.get(key) or ())
                for key in ("violations", "passes", "incomplete", "inapplicable")
            }
        )


@dataclass(frozen=True, slots=True)
class ViolationNode:
    """One offending element: an HTML excerpt, its selector path and a message."""

    html: str
    target: Tuple[str, ...]
    failure_summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"html": self.html, "target": list(self.target), "failure_summary": self.failure_summary}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ViolationNode:
        return cls(
            html=data["html"],
            target=tuple(data.get("target", ())),
            failure_summary=data.get("failure_summary", ""),
        )


@dataclass(frozen=True, slots=True)
class Violation:
    """A failed catalog item with the evidence nodes of one source rule."""

    item_id: str
    item_name: str
    principle: int
    principle_name: str
    severity: Severity
    rule_id: str
    description: str
    impact: str
    nodes: Tuple[ViolationNode, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "principle": self.principle,
            "principle_name": self.principle_name,
            "severity": self.severity,
            "rule_id": self.rule_id,
            "description": self.description,
            "impact": self.impact,
            "nodes": [n.to_dict() for n in self.nodes],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Violation:
        return cls(
            item_id=data["item_id"],
            item_name=data["item_name"],
            principle=int(data["principle"]),
            principle_name=data["principle_name"],
            severity=data["severity"],
            rule_id=data["rule_id"],
            description=data["description"],
            impact=data["impact"],
            nodes=tuple(ViolationNode.from_dict(n) for n in data.get("nodes", ())),
        )


@dataclass(frozen=True, slots=True)
class PrincipleStats:
    total: int = 0
    passed: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "pass": self.passed, "fail": self.failed}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PrincipleStats:
        return cls(total=int(data["total"]), passed=int(data["pass"]), failed=int(data["fail"]))


@dataclass(frozen=True, slots=True)
class Summary:
    """Compliance figures over the whole 33-item catalog."""

    total_items: int
    pass_count: int
    fail_count: int
    incomplete_count: int
    compliance_rate: float
    by_principle: Mapping[int, PrincipleStats]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_items": self.total_items,
            "pass_count": self.pass_count,
            "fail_count": self.fail_count,
            "incomplete_count": self.incomplete_count,
            "compliance_rate": self.compliance_rate,
            # JSON object keys are strings; from_dict turns them back into ints
            "by_principle": {str(p): s.to_dict() for p, s in sorted(self.by_principle.items())},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Summary:
        return cls(
            total_items=int(data["total_items"]),
            pass_count=int(data["pass_count"]),
            fail_count=int(data["fail_count"]),
            incomplete_count=int(data["incomplete_count"]),
            compliance_rate=float(data["compliance_rate"]),
            by_principle={int(p): PrincipleStats.from_dict(s) for p, s in data["by_principle"].items()},
        )


@dataclass(frozen=True, slots=True)
class RuleError:
    """A custom rule that raised during a scan; the scan completed without it."""

    rule_id: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"rule_id": self.rule_id, "message": self.message}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleError:
        return cls(rule_id=data["rule_id"], message=data["message"])


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of scanning one page."""

    url: str
    timestamp: str
    duration: float
    violations: Tuple[Violation, ...]
    passes: Tuple[str, ...]
    incomplete: Tuple[str, ...]
    inapplicable: Tuple[str, ...]
    summary: Summary
    rule_errors: Tuple[RuleError, ...] = ()

    @property
    def failed_items(self) -> Tuple[str, ...]:
        return tuple(sorted({v.item_id for v in self.violations}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "duration": self.duration,
            "violations": [v.to_dict() for v in self.violations],
            "passes": list(self.passes),
            "incomplete": list(self.incomplete),
            "inapplicable": list(self.inapplicable),
            "summary": self.summary.to_dict(),
            "rule_errors": [e.to_dict() for e in self.rule_errors],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScanResult:
        return cls(
            url=data["url"],
            timestamp=data["timestamp"],
            duration=float(data["duration"]),
            violations=tuple(Violation.from_dict(v) for v in data.get("violations", ())),
            passes=tuple(data.get("passes", ())),
            incomplete=tuple(data.get("incomplete", ())),
            inapplicable=tuple(data.get("inapplicable", ())),
            summary=Summary.from_dict(data["summary"]),
            rule_errors=tuple(RuleError.from_dict(e) for e in data.get("rule_errors", ())),
        )

    def to_json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    @classmethod
    def from_json(cls, text: str) -> ScanResult:
        return cls.from_dict(json.loads(text))


@dataclass(frozen=True, slots=True)
class PageEntry:
    """One crawled page: either a scan result or the error that stopped it."""

    url: str
    status: PageStatus
    scan_result: Optional[ScanResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "scan_result": self.scan_result.to_dict() if self.scan_result else None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PageEntry:
        raw = data.get("scan_result")
        return cls(
            url=data["url"],
            status=data["status"],
            scan_result=ScanResult.from_dict(raw) if raw else None,
            error=data.get("error"),
        )


@dataclass(frozen=True, slots=True)
class CrawlSummary:
    total_pages: int = 0
    success_pages: int = 0
    error_pages: int = 0
    total_violations: int = 0
    unique_violated_items: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_pages": self.total_pages,
            "success_pages": self.success_pages,
            "error_pages": self.error_pages,
            "total_violations": self.total_violations,
            "unique_violated_items": self.unique_violated_items,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CrawlSummary:
        return cls(**{k: int(data[k]) for k in cls.__dataclass_fields__})


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Outcome of one crawl; pages are in completion order."""

    start_url: str
    pages: Tuple[PageEntry, ...]
    duration: float
    summary: CrawlSummary = field(default_factory=CrawlSummary)

    @property
    def pages_scanned(self) -> int:
        return len(self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_url": self.start_url,
            "pages_scanned": self.pages_scanned,
            "pages": [p.to_dict() for p in self.pages],
            "duration": self.duration,
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CrawlResult:
        return cls(
            start_url=data["start_url"],
            pages=tuple(PageEntry.from_dict(p) for p in data.get("pages", ())),
            duration=float(data["duration"]),
            summary=CrawlSummary.from_dict(data["summary"]),
        )

    def to_json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    @classmethod
    def from_json(cls, text: str) -> CrawlResult:
        return cls.from_dict(json.loads(text))


__all__ = [
    "Severity",
    "RuleSeverity",
    "PageStatus",
    "SEVERITY_PRIORITY",
    "RawNode",
    "RawFinding",
    "EngineResults",
    "ViolationNode",
    "Violation",
    "PrincipleStats",
    "Summary",
    "RuleError",
    "ScanResult",
    "PageEntry",
    "CrawlSummary",
    "CrawlResult",
]
