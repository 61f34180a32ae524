# aria_scout/rules/custom/skip_nav.py
from __future__ import annotations

from typing import List

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding

_MAIN_IDS = frozenset({"main", "content", "main-content"})


class SkipNavRule(CustomRule):
    """A page with a main landmark needs an in-page link that jumps to it."""

    id = "skip-nav"
    item_id = "6.4.1"
    name = "반복 영역 건너뛰기"
    description = "페이지 시작 부분에 본문 영역으로 건너뛸 수 있는 링크를 제공해야 한다."
    severity = "error"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        if self._has_skip_link(snapshot):
            return []
        has_main = bool(snapshot.select("main") or snapshot.select("[role='main']"))
        if not has_main:
            return []
        return [
            Finding(
                html=excerpt(snapshot.root or snapshot.soup, 200),
                selector="html",
                message="본문으로 건너뛰는 링크가 페이지 시작 부분에 없습니다.",
            )
        ]

    @staticmethod
    def _has_skip_link(snapshot: PageSnapshot) -> bool:
        for link in snapshot.select("a[href]"):
            href = str(link.get("href", ""))
            if not href.startswith("#") or len(href) == 1:
                continue
            target_id = href[1:]
            target = snapshot.soup.find(id=target_id)
            if target is None:
                continue
            if target.name == "main" or target.get("role") == "main" or target_id in _MAIN_IDS:
                return True
        return False
