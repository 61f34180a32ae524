# aria_scout/output.py
"""Terminal rendering of scan results and the rule catalog for the CLI."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import click
from rich.box import SIMPLE_HEAD
from rich.console import Console
from rich.table import Table
from rich.text import Text

from aria_scout.models import SEVERITY_PRIORITY, CrawlResult, ScanResult, Violation
from aria_scout.report.html_report import group_violations
from aria_scout.rules.catalog import CATALOG, PRINCIPLE_NAMES, CatalogItem

SEVERITY_COLORS = {"error": "red", "warning": "yellow", "info": "blue", "pass": "green"}
SEVERITY_LABELS = {"error": "오류", "warning": "경고", "info": "정보", "pass": "통과"}


#: wide enough that catalog names never wrap
TABLE_WIDTH = 160


def format_table(head: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Plain-text table; rich measures Hangul as two terminal cells."""
    table = Table(box=SIMPLE_HEAD, show_edge=False, pad_edge=False)
    for title in head:
        table.add_column(Text(title), no_wrap=True)
    for row in rows:
        table.add_row(*(Text(cell) for cell in row))
    console = Console(width=TABLE_WIDTH, color_system=None, highlight=False)
    with console.capture() as capture:
        console.print(table)
    return "\n".join(line.rstrip() for line in capture.get().splitlines() if line.strip())


def rate_color(rate: float) -> str:
    return "green" if rate >= 80 else "yellow" if rate >= 60 else "red"


def format_scan_result(result: ScanResult) -> str:
    lines: List[str] = [
        "",
        click.style("ARIA - KWCAG 2.2 웹 접근성 점검 결과", bold=True),
        click.style(f"Target: {result.url}", dim=True),
        click.style(f"Time: {result.duration / 1000:.1f}s", dim=True),
        "",
        click.style("=== 요약 ===", bold=True),
    ]
    summary = result.summary
    rate = click.style(f"{summary.compliance_rate:.1f}%", fg=rate_color(summary.compliance_rate))
    lines.append(f"전체 준수율: {rate} ({summary.pass_count}/{summary.total_items} 항목 통과)")
    if summary.incomplete_count:
        lines.append(f"수동 확인 필요: {summary.incomplete_count} 항목")
    lines.append("")

    for num, name in PRINCIPLE_NAMES.items():
        stats = summary.by_principle.get(num)
        if stats is None:
            continue
        p_rate = f"{stats.passed / stats.total * 100:.1f}%" if stats.total else "N/A"
        lines.append(f"  {name}: {click.style(f'{stats.passed}/{stats.total}', bold=True)} ({p_rate})")
    lines.append("")

    if not result.violations:
        lines.append(click.style("위반 항목 없음", fg="green"))
    else:
        groups = group_violations(list(result.violations))
        lines.append(click.style(f"=== 위반 항목 ({len(groups)}건) ===", bold=True))
        lines.append(
            format_table(
                ["KWCAG", "항목명", "심각도", "위반 수"],
                [[g.item_id, g.item_name, SEVERITY_LABELS[g.severity], str(len(g.nodes))] for g in groups],
            )
        )

    for err in result.rule_errors:
        lines.append(click.style(f"규칙 실행 실패: {err.rule_id}: {err.message}", fg="yellow"))
    return "\n".join(lines)


def format_violation_detail(violation: Violation, max_nodes: int = 5) -> str:
    color = SEVERITY_COLORS.get(violation.severity)
    lines = [
        click.style(f"[{violation.item_id}] {violation.item_name} - {violation.rule_id}", fg=color),
        f"  {violation.description}",
    ]
    for node in violation.nodes[:max_nodes]:
        lines.append(f"  > {' '.join(node.target)}")
        lines.append(f"    {node.html[:120]}")
        if node.failure_summary:
            lines.append(f"    {node.failure_summary.splitlines()[0]}")
    if len(violation.nodes) > max_nodes:
        lines.append(f"  ... 외 {len(violation.nodes) - max_nodes}건")
    return "\n".join(lines)


def sort_violations(violations: Iterable[Violation]) -> List[Violation]:
    """Most severe first, then by catalog item."""
    return sorted(violations, key=lambda v: (-SEVERITY_PRIORITY[v.severity], v.item_id, v.rule_id))


def format_crawl_result(result: CrawlResult) -> str:
    s = result.summary
    lines = [
        click.style(f"\nCrawl complete: {result.pages_scanned} pages in {result.duration / 1000:.1f}s", bold=True),
        f"Violations: {s.total_violations} total, {s.unique_violated_items} unique KWCAG items",
        "",
    ]
    for entry in result.pages:
        if entry.scan_result is not None:
            lines.append(format_scan_result(entry.scan_result))
        else:
            lines.append(click.style(f"Error: {entry.url} - {entry.error}", fg="red"))
    return "\n".join(lines)


def format_rules_list(items: Iterable[CatalogItem] = CATALOG, principle: Optional[int] = None) -> str:
    lines: List[str] = []
    items = list(items)
    for num, name in PRINCIPLE_NAMES.items():
        if principle is not None and num != principle:
            continue
        selected = sorted((i for i in items if i.principle == num), key=lambda i: i.id)
        if not selected:
            continue
        lines.append(click.style(f"{num}. {name}", bold=True))
        lines.append(
            format_table(
                ["번호", "검사항목", "수준", "자동"],
                [[i.id, i.name, i.level, {True: "O", "partial": "△"}.get(i.auto, "-")] for i in selected],
            )
        )
        lines.append("")
    return "\n".join(lines).rstrip()
