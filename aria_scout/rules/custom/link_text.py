# aria_scout/rules/custom/link_text.py
from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding

VAGUE_LINK_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^여기$"),
    re.compile(r"^클릭$"),
    re.compile(r"^여기를?\s*클릭"),
    re.compile(r"^click\s*here$", re.I),
    re.compile(r"^here$", re.I),
    re.compile(r"^more$", re.I),
    re.compile(r"^더\s*보기$"),
    re.compile(r"^자세히$"),
    re.compile(r"^read\s*more$", re.I),
    re.compile(r"^링크$"),
    re.compile(r"^link$", re.I),
    re.compile(r"^바로\s*가기$"),
    re.compile(r"^>+$"),
    re.compile(r"^\.+$"),
)


class LinkTextRule(CustomRule):
    """Link text has to describe where the link goes."""

    id = "link-text"
    item_id = "6.4.3"
    name = "적절한 링크 텍스트"
    description = "링크 텍스트는 용도나 목적을 이해할 수 있도록 제공해야 한다."
    severity = "warning"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        for link in snapshot.select("a[href]"):
            text = link.get_text(strip=True) or str(link.get("aria-label", "")).strip()
            if not text:
                # empty links are axe-core's link-name territory
                continue
            if any(pattern.search(text) for pattern in VAGUE_LINK_PATTERNS):
                findings.append(
                    Finding(
                        html=excerpt(link, 200),
                        selector=f'a[href="{link.get("href")}"]',
                        message=f'링크 텍스트 "{text}"이(가) 목적을 설명하지 않습니다.',
                    )
                )
        return findings
