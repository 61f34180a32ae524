# aria_scout/rules/custom/blink_flash.py
from __future__ import annotations

from typing import List

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding

MIN_FLASH_HZ = 3.0
MAX_FLASH_HZ = 50.0


class BlinkFlashRule(CustomRule):
    """Flag content that blinks or flashes 3 to 50 times per second.

    Animations are judged on the element's computed style, so a rule that is
    overridden later in the cascade does not count.
    """

    id = "blink-flash"
    item_id = "6.3.1"
    name = "깜빡임과 번쩍임 사용 제한"
    description = "초당 3~50회 주기로 깜빡이거나 번쩍이는 콘텐츠를 제공하지 않아야 한다."
    severity = "error"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        for tag_name in ("blink", "marquee"):
            for el in snapshot.select(tag_name):
                findings.append(
                    Finding(
                        html=excerpt(el),
                        selector=tag_name,
                        message=f"사용 중단된 <{tag_name}> 요소가 사용되었습니다.",
                    )
                )

        for style in snapshot.computed_styles or ():
            for anim_name, duration in style.animations():
                if duration > 0 and MIN_FLASH_HZ <= 1 / duration <= MAX_FLASH_HZ:
                    findings.append(
                        Finding(
                            html=style.html,
                            selector=style.selector,
                            message=(
                                f'CSS 애니메이션 "{anim_name}"의 주기({duration:g}s)가 '
                                "초당 3~50회 범위에 해당합니다."
                            ),
                        )
                    )
                    break
            if style.blinks:
                findings.append(
                    Finding(
                        html=style.html,
                        selector=style.selector,
                        message="text-decoration: blink 스타일이 사용되었습니다.",
                    )
                )
        return findings
