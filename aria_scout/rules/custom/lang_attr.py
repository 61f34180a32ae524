# aria_scout/rules/custom/lang_attr.py
from __future__ import annotations

import re
from typing import List

from aria_scout.parser import PageSnapshot
from aria_scout.rules.custom.base import CustomRule, Finding

VALID_LANG_CODES = frozenset(
    {
        "ko", "en", "ja", "zh", "zh-cn", "zh-tw", "fr", "de", "es",
        "pt", "it", "ru", "ar", "hi", "th", "vi", "id", "ms",
        "ko-kr", "en-us", "en-gb", "ja-jp", "zh-hans", "zh-hant",
    }
)
_LANG_SHAPE_RE = re.compile(r"^[a-z]{2,3}(-[a-z]{2,})?$")


class LangAttrRule(CustomRule):
    """The root element must declare a plausible primary language."""

    id = "lang-attr"
    item_id = "7.1.1"
    name = "기본 언어 표시"
    description = "HTML 문서의 기본 언어를 lang 속성으로 명시해야 한다."
    severity = "error"

    def inspect(self, snapshot: PageSnapshot) -> List[Finding]:
        root = snapshot.root
        attrs = dict(root.attrs) if root is not None else {}
        lang = str(attrs.get("lang", "")).strip().lower()

        if not lang:
            rendered = "".join(f' {k}="{_attr_text(v)}"' for k, v in attrs.items())
            return [Finding(html=f"<html{rendered}>", selector="html", message="html 요소에 lang 속성이 없습니다.")]

        if lang in VALID_LANG_CODES or lang.split("-", 1)[0] in VALID_LANG_CODES:
            return []
        if _LANG_SHAPE_RE.match(lang):
            return []
        return [
            Finding(
                html=f'<html lang="{lang}">',
                selector="html",
                message=f'lang 속성값 "{lang}"이(가) 유효한 언어 코드가 아닙니다.',
            )
        ]


def _attr_text(value: object) -> str:
    # bs4 returns multi-valued attributes such as class as lists
    return " ".join(value) if isinstance(value, list) else str(value)
