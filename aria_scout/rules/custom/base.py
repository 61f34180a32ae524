# aria_scout/rules/custom/base.py
"""
Common shape of the custom page-inspection rules.

A rule inspects a :class:`~aria_scout.parser.PageSnapshot` and reports zero or
more findings; it passes iff it reports none.  Rules are stateless, never
modify the snapshot and do not depend on each other.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, List, Tuple

from aria_scout.models import RuleSeverity, Severity
from aria_scout.parser import PageSnapshot


@dataclass(frozen=True, slots=True)
class Finding:
    """One offending element found by a custom rule."""

    html: str
    selector: str
    message: str


@dataclass(frozen=True, slots=True)
class RuleResult:
    rule_id: str
    item_id: str
    severity: RuleSeverity
    findings: Tuple[Finding, ...] = ()

    @property
    def passed(self) -> bool:
        return self.severity == "pass"


class CustomRule(ABC):
    """Base class: subclasses set the class attributes and implement :meth:`inspect`."""

    id: ClassVar[str]
    item_id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str]
    #: severity reported when the rule finds anything
    severity: ClassVar[Severity] = "error"

    @abstractmethod
    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        """Return the findings for *snapshot*; an empty list means pass."""

    def execute(self, snapshot: PageSnapshot) -> RuleResult:
        findings = tuple(self.inspect(snapshot))
        return RuleResult(
            rule_id=self.id,
            item_id=self.item_id,
            severity=self.severity if findings else "pass",
            findings=findings,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} -> {self.item_id}>"
