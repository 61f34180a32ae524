# aria_scout/rules/custom/page_title.py
from __future__ import annotations

from typing import List

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding


class PageTitleRule(CustomRule):
    """Document and frame titles, plus headings that skip a level."""

    id = "page-title"
    item_id = "6.4.2"
    name = "제목 제공"
    description = "페이지에는 적절한 제목을 제공해야 한다."
    severity = "error"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        if not snapshot.title:
            findings.append(
                Finding(
                    html="<title></title>",
                    selector="head > title",
                    message="페이지에 제목(title)이 없거나 비어 있습니다.",
                )
            )

        for iframe in snapshot.select("iframe"):
            if not str(iframe.get("title", "")).strip():
                findings.append(
                    Finding(html=excerpt(iframe), selector="iframe", message="iframe에 title 속성이 없습니다.")
                )

        prev_level = 0
        for heading in snapshot.select("h1, h2, h3, h4, h5, h6"):
            level = int(heading.name[1])
            if prev_level > 0 and level > prev_level + 1:
                findings.append(
                    Finding(
                        html=excerpt(heading),
                        selector=heading.name,
                        message=f"제목 수준이 h{prev_level}에서 h{level}로 건너뛰었습니다.",
                    )
                )
            prev_level = level
        return findings
