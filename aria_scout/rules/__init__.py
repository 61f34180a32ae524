"""aria_scout.rules: the KWCAG 2.2 catalog and the custom rule set."""

from aria_scout.rules.catalog import (
    CATALOG,
    PRINCIPLE_ITEM_COUNTS,
    PRINCIPLE_NAMES,
    TOTAL_ITEMS,
    CatalogItem,
    all_axe_rule_ids,
    get_item,
    item_for_axe_rule,
    items_by_principle,
    sorted_item_ids,
)
from aria_scout.rules.custom import CUSTOM_RULES, CustomRule, get_rule, rules_for_item

__all__ = [
    "CATALOG",
    "CUSTOM_RULES",
    "PRINCIPLE_ITEM_COUNTS",
    "PRINCIPLE_NAMES",
    "TOTAL_ITEMS",
    "CatalogItem",
    "CustomRule",
    "all_axe_rule_ids",
    "get_item",
    "get_rule",
    "item_for_axe_rule",
    "items_by_principle",
    "rules_for_item",
    "sorted_item_ids",
]
