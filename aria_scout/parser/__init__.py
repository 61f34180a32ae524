"""aria_scout.parser: page snapshot and CSS reading used by custom rules."""

from aria_scout.parser.css_parser import ComputedStyle, CssRule, parse_declarations, parse_stylesheet
from aria_scout.parser.html_parser import PageSnapshot, build_selector, excerpt

__all__ = [
    "ComputedStyle",
    "CssRule",
    "PageSnapshot",
    "build_selector",
    "excerpt",
    "parse_declarations",
    "parse_stylesheet",
]
