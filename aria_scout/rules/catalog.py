# aria_scout/rules/catalog.py
"""
KWCAG 2.2 inspection catalog: 33 items in 4 principles.

Each item lists the axe-core rule ids whose findings count towards it and,
where one exists, the id of the custom rule backing it.  An axe rule id maps
to at most one item; axe rules that appear nowhere in the table are outside
the guideline and their findings are dropped by the mapper.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Optional, Tuple, Union

Level = Literal["A", "AA", "AAA"]
AutoCheck = Union[bool, Literal["partial"]]

PRINCIPLE_NAMES: Mapping[int, str] = MappingProxyType(
    {
        1: "인식의 용이성",
        2: "운용의 용이성",
        3: "이해의 용이성",
        4: "견고성",
    }
)

PRINCIPLE_ITEM_COUNTS: Mapping[int, int] = MappingProxyType({1: 9, 2: 15, 3: 7, 4: 2})


@dataclass(frozen=True, slots=True)
class CatalogItem:
    id: str
    name: str
    name_en: str
    principle: int
    level: Level
    axe_rules: Tuple[str, ...]
    custom_rule: Optional[str]
    description: str
    auto: AutoCheck

    @property
    def principle_name(self) -> str:
        return PRINCIPLE_NAMES[self.principle]


def _item(
    id: str,
    name: str,
    name_en: str,
    level: Level,
    description: str,
    axe_rules: Tuple[str, ...] = (),
    custom_rule: Optional[str] = None,
    auto: AutoCheck = False,
) -> CatalogItem:
    # KWCAG numbers principles 5..8; internally they are 1..4
    principle = int(id.split(".", 1)[0]) - 4
    return CatalogItem(id, name, name_en, principle, level, axe_rules, custom_rule, description, auto)


CATALOG: Tuple[CatalogItem, ...] = (
    # ---- 1. 인식의 용이성 (perceivable) --------------------------------------
    _item(
        "5.1.1", "적절한 대체 텍스트 제공", "Appropriate text alternatives", "A",
        "텍스트 아닌 콘텐츠는 그 의미나 용도를 인식할 수 있도록 대체 텍스트를 제공해야 한다.",
        ("image-alt", "input-image-alt", "area-alt", "object-alt", "svg-img-alt", "role-img-alt",
         "image-redundant-alt"),
        auto=True,
    ),
    _item(
        "5.2.1", "자막 제공", "Captions", "A",
        "멀티미디어 콘텐츠에는 자막, 대본 또는 수어를 제공해야 한다.",
        ("video-caption", "audio-caption"),
        auto="partial",
    ),
    _item(
        "5.3.1", "표의 구성", "Table structure", "A",
        "표는 이해하기 쉽게 구성해야 한다.",
        ("td-headers-attr", "th-has-data-cells", "td-has-header", "scope-attr-valid",
         "table-duplicate-name", "table-fake-caption"),
        custom_rule="table-structure",
        auto=True,
    ),
    _item(
        "5.3.2", "콘텐츠의 선형 구조", "Linear content structure", "A",
        "콘텐츠는 논리적인 순서로 제공해야 한다.",
        ("list", "listitem", "definition-list", "dlitem"),
        auto="partial",
    ),
    _item(
        "5.3.3", "명확한 지시사항 제공", "Clear instructions", "A",
        "지시사항은 모양, 크기, 위치, 방향, 색, 소리 등에 관계없이 인식될 수 있어야 한다.",
    ),
    _item(
        "5.4.1", "색에 무관한 콘텐츠 인식", "Use of color", "A",
        "콘텐츠는 색에 관계없이 인식될 수 있어야 한다.",
        ("link-in-text-block",),
        auto="partial",
    ),
    _item(
        "5.4.2", "자동 재생 금지", "No autoplay", "A",
        "자동으로 소리가 재생되지 않아야 한다.",
        ("no-autoplay-audio",),
        custom_rule="auto-play",
        auto=True,
    ),
    _item(
        "5.4.3", "텍스트 콘텐츠의 명도 대비", "Text contrast", "AA",
        "텍스트 콘텐츠와 배경 간의 명도 대비는 4.5 대 1 이상이어야 한다.",
        ("color-contrast", "color-contrast-enhanced"),
        auto=True,
    ),
    _item(
        "5.4.4", "콘텐츠 간의 구분", "Distinguishable content", "AA",
        "이웃한 콘텐츠는 구별될 수 있어야 한다.",
        ("meta-viewport", "meta-viewport-large"),
        auto="partial",
    ),
    # ---- 2. 운용의 용이성 (operable) -----------------------------------------
    _item(
        "6.1.1", "키보드 사용 보장", "Keyboard accessible", "A",
        "모든 기능은 키보드만으로도 사용할 수 있어야 한다.",
        ("scrollable-region-focusable", "frame-focusable-content", "server-side-image-map"),
        auto="partial",
    ),
    _item(
        "6.1.2", "초점 이동과 표시", "Focus order and visibility", "AA",
        "키보드에 의한 초점은 논리적으로 이동해야 하며, 시각적으로 구별할 수 있어야 한다.",
        ("tabindex", "focus-order-semantics"),
        custom_rule="focus-visible",
        auto=True,
    ),
    _item(
        "6.1.3", "조작 가능", "Operable targets", "AA",
        "사용자 입력 및 컨트롤은 조작 가능하도록 제공되어야 한다.",
        ("target-size",),
        auto="partial",
    ),
    _item(
        "6.1.4", "문자 단축키", "Character key shortcuts", "A",
        "문자 단축키는 오동작으로 인한 오류를 방지하여야 한다.",
        ("accesskeys",),
        auto="partial",
    ),
    _item(
        "6.2.1", "응답시간 조절", "Adjustable timing", "A",
        "시간제한이 있는 콘텐츠는 응답시간을 조절할 수 있어야 한다.",
        ("meta-refresh", "meta-refresh-no-exceptions"),
        auto="partial",
    ),
    _item(
        "6.2.2", "정지 기능 제공", "Pause, stop, hide", "A",
        "자동으로 변경되는 콘텐츠는 움직임을 제어할 수 있어야 한다.",
        ("blink", "marquee"),
        auto="partial",
    ),
    _item(
        "6.3.1", "깜빡임과 번쩍임 사용 제한", "Three flashes", "A",
        "초당 3~50회 주기로 깜빡이거나 번쩍이는 콘텐츠를 제공하지 않아야 한다.",
        custom_rule="blink-flash",
        auto=True,
    ),
    _item(
        "6.4.1", "반복 영역 건너뛰기", "Bypass blocks", "A",
        "콘텐츠의 반복되는 영역은 건너뛸 수 있어야 한다.",
        ("bypass", "skip-link"),
        custom_rule="skip-nav",
        auto=True,
    ),
    _item(
        "6.4.2", "제목 제공", "Page titled", "A",
        "페이지, 프레임, 콘텐츠 블록에는 적절한 제목을 제공해야 한다.",
        ("document-title", "frame-title", "frame-title-unique", "page-has-heading-one",
         "heading-order", "empty-heading"),
        custom_rule="page-title",
        auto=True,
    ),
    _item(
        "6.4.3", "적절한 링크 텍스트", "Link purpose", "A",
        "링크 텍스트는 용도나 목적을 이해할 수 있도록 제공해야 한다.",
        ("link-name", "identical-links-same-purpose"),
        custom_rule="link-text",
        auto=True,
    ),
    _item(
        "6.4.4", "고정된 참조 위치 정보", "Fixed reference locations", "AA",
        "전자출판문서 형식의 웹 페이지는 각 페이지로 이동할 수 있는 기능이 있어야 하고, "
        "서식이나 플랫폼에 상관없이 참조 위치 정보를 일관되게 제공·유지해야 한다.",
    ),
    _item(
        "6.5.1", "단일 포인터 입력 지원", "Pointer gestures", "A",
        "다중 포인터 또는 경로기반 동작을 통한 입력은 단일 포인터 입력으로도 조작할 수 있어야 한다.",
    ),
    _item(
        "6.5.2", "포인터 입력 취소", "Pointer cancellation", "A",
        "단일 포인터 입력으로 실행되는 기능은 취소할 수 있어야 한다.",
    ),
    _item(
        "6.5.3", "레이블과 네임", "Label in name", "A",
        "텍스트 또는 텍스트 이미지가 포함된 레이블이 있는 사용자 인터페이스 구성요소는 "
        "네임에 시각적으로 표시되는 해당 텍스트를 포함해야 한다.",
        ("label-content-name-mismatch",),
        auto="partial",
    ),
    _item(
        "6.5.4", "동작기반 작동", "Motion actuation", "A",
        "동작기반으로 작동하는 기능은 사용자 인터페이스 구성요소로 조작할 수 있고, "
        "동작기반 기능을 비활성화할 수 있어야 한다.",
    ),
    # ---- 3. 이해의 용이성 (understandable) -----------------------------------
    _item(
        "7.1.1", "기본 언어 표시", "Language of page", "A",
        "주로 사용하는 언어를 명시해야 한다.",
        ("html-has-lang", "html-lang-valid", "html-xml-lang-mismatch", "valid-lang"),
        custom_rule="lang-attr",
        auto=True,
    ),
    _item(
        "7.2.1", "사용자 요구에 따른 실행", "On input", "A",
        "사용자가 의도하지 않은 기능(새 창, 초점에 의한 맥락 변화 등)은 실행되지 않아야 한다.",
        custom_rule="on-input",
        auto=True,
    ),
    _item(
        "7.2.2", "찾기 쉬운 도움 정보", "Consistent help", "A",
        "도움 정보가 제공되는 경우, 각 페이지에서 동일한 상대적인 순서로 접근할 수 있어야 한다.",
    ),
    _item(
        "7.3.1", "오류 정정", "Error correction", "A",
        "입력 오류를 정정할 수 있는 방법을 제공해야 한다.",
    ),
    _item(
        "7.3.2", "레이블 제공", "Labels", "A",
        "사용자 입력에는 대응하는 레이블을 제공해야 한다.",
        ("label", "select-name", "form-field-multiple-labels", "label-title-only", "input-button-name"),
        auto=True,
    ),
    _item(
        "7.3.3", "접근 가능한 인증", "Accessible authentication", "AA",
        "인증 과정은 인지 기능 테스트에만 의존해서는 안 된다.",
    ),
    _item(
        "7.3.4", "반복 입력 정보", "Redundant entry", "A",
        "반복되는 입력 정보는 자동 입력 또는 선택 입력할 수 있어야 한다.",
        ("autocomplete-valid",),
        auto="partial",
    ),
    # ---- 4. 견고성 (robust) ---------------------------------------------------
    _item(
        "8.1.1", "마크업 오류 방지", "Parsing", "A",
        "마크업 언어의 요소는 열고 닫음, 중첩 관계 및 속성 선언에 오류가 없어야 한다.",
        ("duplicate-id", "duplicate-id-active", "duplicate-id-aria"),
        auto=True,
    ),
    _item(
        "8.2.1", "웹 애플리케이션 접근성 준수", "Name, role, value", "A",
        "콘텐츠에 포함된 웹 애플리케이션은 접근성이 있어야 한다.",
        ("aria-allowed-attr", "aria-allowed-role", "aria-command-name", "aria-dialog-name",
         "aria-hidden-body", "aria-hidden-focus", "aria-input-field-name", "aria-meter-name",
         "aria-progressbar-name", "aria-required-attr", "aria-required-children",
         "aria-required-parent", "aria-roles", "aria-text", "aria-toggle-field-name",
         "aria-tooltip-name", "aria-valid-attr", "aria-valid-attr-value", "button-name",
         "nested-interactive", "presentation-role-conflict"),
        auto=True,
    ),
)

_BY_ID: Mapping[str, CatalogItem] = MappingProxyType({item.id: item for item in CATALOG})


def _build_axe_index() -> Mapping[str, CatalogItem]:
    index: Dict[str, CatalogItem] = {}
    for item in CATALOG:
        for rule_id in item.axe_rules:
            if rule_id in index:
                raise RuntimeError(
                    f"axe rule {rule_id!r} mapped to both {index[rule_id].id} and {item.id}"
                )
            index[rule_id] = item
    return MappingProxyType(index)


_BY_AXE_RULE = _build_axe_index()

TOTAL_ITEMS: int = len(CATALOG)


def get_item(item_id: str) -> Optional[CatalogItem]:
    return _BY_ID.get(item_id)


def items_by_principle(principle: int) -> Tuple[CatalogItem, ...]:
    return tuple(item for item in CATALOG if item.principle == principle)


def item_for_axe_rule(rule_id: str) -> Optional[CatalogItem]:
    """Return the catalog item an axe-core rule counts towards, if any."""
    return _BY_AXE_RULE.get(rule_id)


def all_axe_rule_ids() -> Tuple[str, ...]:
    return tuple(_BY_AXE_RULE)


def sorted_item_ids() -> Tuple[str, ...]:
    """Catalog ids in lexicographic order, the iteration order of every summary."""
    return tuple(sorted(_BY_ID))


__all__ = [
    "Level",
    "CatalogItem",
    "CATALOG",
    "PRINCIPLE_NAMES",
    "PRINCIPLE_ITEM_COUNTS",
    "TOTAL_ITEMS",
    "get_item",
    "items_by_principle",
    "item_for_axe_rule",
    "all_axe_rule_ids",
    "sorted_item_ids",
]
