"""Read-only page snapshot consumed by the custom rules.

A snapshot freezes what the checks need from a live page: the final URL, the
serialized DOM, the flattened CSS rules of every readable stylesheet and the
computed animation and text-decoration values of the elements that have any.  It
can be captured from a browser page (see :func:`aria_scout.browser.capture_snapshot`)
or built straight from markup with :meth:`PageSnapshot.from_html`, which is
how the test-suite exercises the rules without a browser.

The parsed tree is shared by all rules of one scan, so rules must only read
from it.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag
from soupsieve import SelectorSyntaxError

from aria_scout.parser.css_parser import (
    ComputedStyle,
    CssRule,
    expand_cascaded,
    is_cascaded,
    parse_declarations,
    parse_stylesheet,
    specificity,
    split_selector_list,
)

__all__: Sequence[str] = ("PageSnapshot", "build_selector", "excerpt")

DEFAULT_EXCERPT = 300


@dataclass(frozen=True)
class PageSnapshot:
    """Frozen view of one page."""

    url: str
    html: str
    css_rules: tuple[CssRule, ...] = ()
    #: styles the browser computed; approximated from *css_rules* when ``None``
    computed_styles: tuple[ComputedStyle, ...] | None = None
    soup: BeautifulSoup = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "soup", BeautifulSoup(self.html, "html.parser"))
        if self.computed_styles is None:
            object.__setattr__(self, "computed_styles", self._cascade_styles())

    @classmethod
    def from_html(cls, url: str, html: str) -> PageSnapshot:
        """Build a snapshot from raw markup, reading rules from ``<style>`` blocks."""
        soup = BeautifulSoup(html, "html.parser")
        rules: list[CssRule] = []
        for style in soup.find_all("style"):
            rules.extend(parse_stylesheet(style.get_text()))
        return cls(url=url, html=html, css_rules=tuple(rules))

    # Convenience helpers ---------------------------------------------------
    @property
    def root(self) -> Tag | None:
        root = self.soup.find("html")
        return root if isinstance(root, Tag) else None

    @property
    def title(self) -> str:
        tag = self.soup.find("title")
        return tag.get_text(strip=True) if isinstance(tag, Tag) else ""

    def select(self, selector: str) -> list[Tag]:
        """CSS-select elements; selectors soupsieve cannot evaluate match nothing."""
        try:
            return [t for t in self.soup.select(selector) if isinstance(t, Tag)]
        except (SelectorSyntaxError, NotImplementedError):
            return []

    def elements(self) -> Iterable[Tag]:
        return (t for t in self.soup.find_all(True) if isinstance(t, Tag))

    def inline_style(self, tag: Tag) -> dict[str, str]:
        style = tag.get("style")
        return parse_declarations(style) if isinstance(style, str) else {}

    def _cascade_styles(self) -> tuple[ComputedStyle, ...]:
        """Resolve animation and text-decoration per element from markup alone.

        Only rules that set those properties are matched.  Each value goes to
        the declaration with the highest (inline, specificity, source order)
        rank.  Elements left without an animation or blink are dropped.
        """
        resolved: dict[int, dict[str, tuple[tuple[int, ...], str]]] = {}

        def apply(el: Tag, rank: tuple[int, ...], values: dict[str, str]) -> None:
            props = resolved.setdefault(id(el), {})
            for prop, value in values.items():
                current = props.get(prop)
                if current is None or rank > current[0]:
                    props[prop] = (rank, value)

        for index, rule in enumerate(self.css_rules):
            if not is_cascaded(rule.declarations):
                continue
            values = expand_cascaded(rule.declarations)
            for part in split_selector_list(rule.selector):
                rank = (0, *specificity(part), index)
                for el in self.select(part):
                    apply(el, rank, values)
        for el in self.select("[style]"):
            declarations = self.inline_style(el)
            if is_cascaded(declarations):
                apply(el, (1, 0, 0, 0, 0), expand_cascaded(declarations))

        styles: list[ComputedStyle] = []
        for el in self.elements():
            props = resolved.get(id(el))
            if not props:
                continue
            style = ComputedStyle(
                selector=build_selector(el),
                html=excerpt(el),
                **{prop.replace("-", "_"): value for prop, (_, value) in props.items()},
            )
            if style.animations() or style.blinks:
                styles.append(style)
        return tuple(styles)


def excerpt(tag: Any, limit: int = DEFAULT_EXCERPT) -> str:
    """Outer HTML of *tag* truncated to *limit* characters."""
    return str(tag)[:limit]


def build_selector(tag: Tag) -> str:
    """Best-effort selector: ``#id``, ``parent > tag`` or ``tag:nth-of-type(n)``."""
    tag_id = tag.get("id")
    if isinstance(tag_id, str) and tag_id:
        return f"#{tag_id}"
    name = tag.name
    parent = tag.parent
    if not isinstance(parent, Tag) or parent.name == "[document]":
        return name
    siblings = [c for c in parent.find_all(name, recursive=False)]
    if len(siblings) == 1:
        return f"{parent.name} > {name}"
    index = next(i for i, sib in enumerate(siblings, start=1) if sib is tag)
    return f"{name}:nth-of-type({index})"
