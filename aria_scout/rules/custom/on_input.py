# aria_scout/rules/custom/on_input.py
from __future__ import annotations

from typing import List, Tuple

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding

_SELECT_TRIGGERS: Tuple[str, ...] = ("submit", "location", "href", "navigate")
_INPUT_TRIGGERS: Tuple[str, ...] = ("submit", "location", "window.open")
_INPUT_EVENTS: Tuple[str, ...] = ("onchange", "onfocus", "onblur")


class OnInputRule(CustomRule):
    """Changing or focusing a control must not submit, navigate or open windows."""

    id = "on-input"
    item_id = "7.2.1"
    name = "사용자 요구에 따른 실행"
    description = "select 등의 onchange 이벤트에서 자동 submit/navigation이 실행되지 않아야 한다."
    severity = "error"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        for select in snapshot.select("select[onchange]"):
            handler = str(select.get("onchange", ""))
            if any(trigger in handler for trigger in _SELECT_TRIGGERS):
                findings.append(
                    Finding(
                        html=excerpt(select),
                        selector="select[onchange]",
                        message="select의 onchange에서 자동 submit 또는 페이지 이동이 발생합니다.",
                    )
                )

        for field in snapshot.select("input[onchange], input[onfocus], input[onblur]"):
            for event in _INPUT_EVENTS:
                handler = str(field.get(event, ""))
                if any(trigger in handler for trigger in _INPUT_TRIGGERS):
                    findings.append(
                        Finding(
                            html=excerpt(field),
                            selector=f"input[{event}]",
                            message=f"input의 {event}에서 자동 submit 또는 새 창이 열립니다.",
                        )
                    )
        return findings
