# aria_scout/rules/custom/table_structure.py
from __future__ import annotations

from typing import List

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding

_LAYOUT_ROLES = frozenset({"presentation", "none"})


class TableStructureRule(CustomRule):
    """Data tables (tables with header cells) need a caption and scoped headers."""

    id = "table-structure"
    item_id = "5.3.1"
    name = "표의 구성"
    description = "데이터 테이블에는 caption, th, scope 등을 제공하여 이해하기 쉽게 구성해야 한다."
    severity = "warning"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        for table in snapshot.select("table"):
            if table.get("role") in _LAYOUT_ROLES:
                continue
            headers = table.find_all("th")
            if not headers:
                continue

            caption = table.find("caption")
            if caption is None or not caption.get_text(strip=True):
                findings.append(
                    Finding(
                        html=excerpt(table),
                        selector="table",
                        message="데이터 테이블에 caption 요소가 없습니다.",
                    )
                )
            for th in headers:
                if not th.get("scope"):
                    findings.append(
                        Finding(html=excerpt(th, 200), selector="th", message="th 요소에 scope 속성이 없습니다.")
                    )
        return findings
