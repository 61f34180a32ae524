# aria_scout/rules/custom/focus_visible.py
from __future__ import annotations

from typing import List, Mapping

from aria_scout.parser import PageSnapshot, excerpt
from aria_scout.rules.custom.base import CustomRule, Finding

INTERACTIVE_SELECTOR = ", ".join(
    (
        "a[href]",
        "button",
        "input",
        "select",
        "textarea",
        "[tabindex]",
        "[role='button']",
        "[role='link']",
        "[role='checkbox']",
        "[role='radio']",
    )
)


def _removes_outline(declarations: Mapping[str, str]) -> bool:
    outline = declarations.get("outline", "").strip().lower()
    if outline in ("none", "0", "0px"):
        return True
    if declarations.get("outline-style", "").strip().lower() == "none":
        return True
    return declarations.get("outline-width", "").strip().lower() in ("0", "0px")


def _has_substitute(declarations: Mapping[str, str]) -> bool:
    return any(
        prop == "box-shadow" or prop.startswith("border")
        for prop, value in declarations.items()
        if value.strip().lower() not in ("none", "0", "initial", "unset")
    )


class FocusVisibleRule(CustomRule):
    """Keyboard focus must stay visible and follow a logical order."""

    id = "focus-visible"
    item_id = "6.1.2"
    name = "초점 이동과 표시"
    description = "키보드 초점이 시각적으로 구별될 수 있어야 한다."
    severity = "warning"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        findings: List[Finding] = []
        for rule in snapshot.css_rules:
            if ":focus" not in rule.selector:
                continue
            if _removes_outline(rule.declarations) and not _has_substitute(rule.declarations):
                findings.append(
                    Finding(
                        html=f"<style>{rule.selector} {{ outline: none; }}</style>",
                        selector="style",
                        message=":focus에서 outline: none이 설정되어 있으며, 대체 포커스 표시가 없습니다.",
                    )
                )
                # one report per page is enough to fail the item
                break

        for el in snapshot.select(INTERACTIVE_SELECTOR):
            tabindex = str(el.get("tabindex", "")).strip()
            if _positive_int(tabindex):
                findings.append(
                    Finding(
                        html=excerpt(el, 200),
                        selector=el.name,
                        message=f'tabindex="{tabindex}" (양수)는 논리적 초점 순서를 방해할 수 있습니다.',
                    )
                )
        return findings


def _positive_int(value: str) -> bool:
    try:
        return int(value) > 0
    except ValueError:
        return False
