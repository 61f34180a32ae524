# aria_scout/rules/custom/__init__.py
"""The nine custom rules, each backing exactly one catalog item."""
from __future__ import annotations

from typing import Optional, Tuple

from aria_scout.rules.custom.auto_play import AutoPlayRule
from aria_scout.rules.custom.base import CustomRule, Finding, RuleResult
from aria_scout.rules.custom.blink_flash import BlinkFlashRule
from aria_scout.rules.custom.focus_visible import FocusVisibleRule
from aria_scout.rules.custom.lang_attr import LangAttrRule
from aria_scout.rules.custom.link_text import LinkTextRule
from aria_scout.rules.custom.on_input import OnInputRule
from aria_scout.rules.custom.page_title import PageTitleRule
from aria_scout.rules.custom.skip_nav import SkipNavRule
from aria_scout.rules.custom.table_structure import TableStructureRule

CUSTOM_RULES: Tuple[CustomRule, ...] = (
    SkipNavRule(),
    AutoPlayRule(),
    BlinkFlashRule(),
    PageTitleRule(),
    TableStructureRule(),
    LangAttrRule(),
    LinkTextRule(),
    OnInputRule(),
    FocusVisibleRule(),
)


def get_rule(rule_id: str) -> Optional[CustomRule]:
    return next((rule for rule in CUSTOM_RULES if rule.id == rule_id), None)


def rules_for_item(item_id: str) -> Tuple[CustomRule, ...]:
    return tuple(rule for rule in CUSTOM_RULES if rule.item_id == item_id)


__all__ = [
    "CUSTOM_RULES",
    "CustomRule",
    "Finding",
    "RuleResult",
    "AutoPlayRule",
    "BlinkFlashRule",
    "FocusVisibleRule",
    "LangAttrRule",
    "LinkTextRule",
    "OnInputRule",
    "PageTitleRule",
    "SkipNavRule",
    "TableStructureRule",
    "get_rule",
    "rules_for_item",
]
