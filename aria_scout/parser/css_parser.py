# aria_scout/parser/css_parser.py
"""
Minimal CSS reader for custom rules.

Only what the checks need: flat style rules (selector + declarations),
descending into grouping at-rules such as ``@media``.  Keyframes, font faces
and other at-rules are skipped.  Values are kept as authored; only the
animation and text-decoration shorthands are expanded, for the cascade that
:class:`~aria_scout.parser.PageSnapshot` approximates when no browser computed
the styles.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

__all__: Sequence[str] = (
    "CssRule",
    "ComputedStyle",
    "parse_stylesheet",
    "parse_declarations",
    "parse_time",
    "animation_timings",
    "split_selector_list",
    "specificity",
    "is_cascaded",
    "expand_cascaded",
)

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.I)
_TIME_RE = re.compile(r"^(-?\d*\.?\d+)(ms|s)$", re.I)
_GROUPING_AT_RULES = frozenset({"media", "supports", "layer", "container", "document", "scope"})


@dataclass(frozen=True, slots=True)
class CssRule:
    selector: str
    declarations: Mapping[str, str] = field(default_factory=dict)

    def get(self, prop: str) -> Optional[str]:
        return self.declarations.get(prop)


@dataclass(frozen=True, slots=True)
class ComputedStyle:
    """Resolved animation and text-decoration values of one element.

    Values are longhands as ``getComputedStyle`` reports them, so multiple
    animations are comma separated.
    """

    selector: str
    html: str
    animation_name: str = "none"
    animation_duration: str = "0s"
    text_decoration_line: str = "none"

    def animations(self) -> List[Tuple[str, float]]:
        timings = animation_timings(
            {"animation-name": self.animation_name, "animation-duration": self.animation_duration}
        )
        return [(name, duration) for name, duration in timings if name.lower() != "none"]

    @property
    def blinks(self) -> bool:
        return "blink" in self.text_decoration_line.lower()


def _matching_brace(text: str, open_idx: int) -> int:
    depth = 0
    for idx in range(open_idx, len(text)):
        ch = text[idx]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return idx
    return len(text)


def _split_top_level(text: str, sep: str) -> List[str]:
    """Split on *sep* outside parentheses and quotes (``url(data:...;...)`` etc.)."""
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    start = 0
    for idx, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == sep and depth == 0:
            parts.append(text[start:idx])
            start = idx + 1
    parts.append(text[start:])
    return parts


def parse_declarations(text: str) -> Dict[str, str]:
    """Parse ``prop: value; ...`` (a rule body or a ``style`` attribute)."""
    result: Dict[str, str] = {}
    for chunk in _split_top_level(_COMMENT_RE.sub("", text or ""), ";"):
        prop, sep, value = chunk.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        value = _IMPORTANT_RE.sub("", value.strip())
        if prop and value:
            result[prop] = value
    return result


def _parse_block(text: str, out: List[CssRule]) -> None:
    pos = 0
    while pos < len(text):
        open_idx = text.find("{", pos)
        if open_idx == -1:
            break
        close_idx = _matching_brace(text, open_idx)
        # statements such as "@import url(x);" can precede the prelude
        prelude = text[pos:open_idx].rsplit(";", 1)[-1].strip()
        body = text[open_idx + 1:close_idx]
        if prelude.startswith("@"):
            name = prelude[1:].split(None, 1)[0].lower() if len(prelude) > 1 else ""
            if name in _GROUPING_AT_RULES:
                _parse_block(body, out)
        elif prelude:
            out.append(CssRule(prelude, parse_declarations(body)))
        pos = close_idx + 1


def parse_stylesheet(text: str) -> List[CssRule]:
    rules: List[CssRule] = []
    _parse_block(_COMMENT_RE.sub("", text or ""), rules)
    return rules


def parse_time(value: str) -> Optional[float]:
    """CSS ``<time>`` to seconds; ``None`` when *value* is not a time."""
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    number = float(match.group(1))
    return number / 1000 if match.group(2).lower() == "ms" else number


def animation_timings(declarations: Mapping[str, str]) -> List[Tuple[str, float]]:
    """Return ``(animation-name, duration-seconds)`` pairs declared in a block.

    Longhands (what a browser reports) take precedence over the ``animation``
    shorthand.  In the shorthand the first time value is the duration and the
    first token that is not a keyword, number or time is the name.
    """
    names = declarations.get("animation-name")
    durations = declarations.get("animation-duration")
    if names is not None or durations is not None:
        name_list = [n.strip() for n in _split_top_level(names or "none", ",")]
        dur_list = [parse_time(d) or 0.0 for d in _split_top_level(durations or "0s", ",")]
        return [(name, dur_list[i % len(dur_list)]) for i, name in enumerate(name_list)]

    shorthand = declarations.get("animation")
    if not shorthand:
        return []
    timings: List[Tuple[str, float]] = []
    for layer in _split_top_level(shorthand, ","):
        name, duration = "none", 0.0
        seen_time = False
        for token in layer.split():
            seconds = parse_time(token)
            if seconds is not None:
                if not seen_time:
                    duration, seen_time = seconds, True
                continue
            if token.lower() in _ANIMATION_KEYWORDS or _is_number(token) or "(" in token:
                continue
            if name == "none":
                name = token
        timings.append((name, duration))
    return timings


_ANIMATION_KEYWORDS = frozenset(
    {
        "infinite", "normal", "reverse", "alternate", "alternate-reverse", "none", "forwards",
        "backwards", "both", "running", "paused", "linear", "ease", "ease-in", "ease-out",
        "ease-in-out", "step-start", "step-end", "initial", "inherit", "unset",
    }
)


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


# Cascade helpers -----------------------------------------------------------
_ATTRIBUTE_RE = re.compile(r"\[[^\]]*\]")
_ARGUMENTS_RE = re.compile(r"\([^)]*\)")
_PSEUDO_ELEMENT_RE = re.compile(r"::[\w-]+")
_ID_RE = re.compile(r"#[\w-]+")
_CLASS_RE = re.compile(r"\.[\w-]+|:[\w-]+")
_TYPE_RE = re.compile(r"(?:^|[\s>+~])([a-zA-Z][\w-]*)")

#: longhands that :class:`ComputedStyle` carries
CASCADED_PROPERTIES = ("animation-name", "animation-duration", "text-decoration-line")


def split_selector_list(selector: str) -> List[str]:
    return [part.strip() for part in _split_top_level(selector, ",") if part.strip()]


def specificity(selector: str) -> Tuple[int, int, int]:
    """``(ids, classes, types)`` of one complex selector.

    Attributes and pseudo-classes count as classes, pseudo-elements as types.
    Arguments of functional pseudo-classes are ignored.
    """
    rest = _ARGUMENTS_RE.sub("", selector)
    attributes = len(_ATTRIBUTE_RE.findall(rest))
    rest = _ATTRIBUTE_RE.sub("", rest)
    pseudo_elements = len(_PSEUDO_ELEMENT_RE.findall(rest))
    rest = _PSEUDO_ELEMENT_RE.sub("", rest)
    ids = len(_ID_RE.findall(rest))
    rest = _ID_RE.sub("", rest)
    classes = len(_CLASS_RE.findall(rest)) + attributes
    rest = _CLASS_RE.sub("", rest)
    return ids, classes, len(_TYPE_RE.findall(rest)) + pseudo_elements


def is_cascaded(declarations: Mapping[str, str]) -> bool:
    """True when a block sets animation or text-decoration values."""
    return any(prop.startswith(("animation", "text-decoration")) for prop in declarations)


def expand_cascaded(declarations: Mapping[str, str]) -> Dict[str, str]:
    """Map a declaration block onto :data:`CASCADED_PROPERTIES`.

    Shorthands reset every longhand they cover; later declarations in the
    block win.
    """
    out: Dict[str, str] = {}
    for prop, value in declarations.items():
        if prop == "animation":
            timings = animation_timings({"animation": value})
            out["animation-name"] = ", ".join(name for name, _ in timings) or "none"
            out["animation-duration"] = ", ".join(f"{seconds:g}s" for _, seconds in timings) or "0s"
        elif prop == "text-decoration":
            out["text-decoration-line"] = value
        elif prop in CASCADED_PROPERTIES:
            out[prop] = value
    return out
