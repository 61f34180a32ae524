# aria_scout/rules/custom/auto_play.py
from __future__ import annotations

from typing import List

from aria_scout.parser import PageSnapshot, build_selector, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding


class AutoPlayRule(CustomRule):
    """Media must not start playing sound on its own."""

    id = "auto-play"
    item_id = "5.4.2"
    name = "자동 재생 금지"
    description = "자동으로 소리가 재생되는 미디어 요소가 없어야 한다."
    severity = "error"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        for media in snapshot.select("video[autoplay], audio[autoplay]"):
            if media.has_attr("muted"):
                continue
            findings.append(
                Finding(
                    html=excerpt(media),
                    selector=build_selector(media),
                    message=f"{media.name} 요소에 autoplay 속성이 있으며 muted가 아닙니다.",
                )
            )
        for iframe in snapshot.select("iframe"):
            src = str(iframe.get("src", ""))
            if "autoplay=1" in src or "autoplay=true" in src:
                findings.append(
                    Finding(
                        html=excerpt(iframe),
                        selector=build_selector(iframe),
                        message="iframe에 자동 재생이 설정된 미디어가 포함되어 있습니다.",
                    )
                )
        return findings
