# File: aria_scout/report/html_report.py
"""aria_scout.report.html_report: HTML report rendering with Jinja2."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader, PackageLoader, TemplateError, select_autoescape

from aria_scout.aggregator import average_compliance, pages_by_status, violations_by_item
from aria_scout.errors import RenderError
from aria_scout.logger import logger
from aria_scout.models import SEVERITY_PRIORITY, CrawlResult, ScanResult, Violation, ViolationNode
from aria_scout.rules.catalog import CATALOG, PRINCIPLE_NAMES, get_item

TEMPLATE_NAME = "report.html.j2"


@dataclass(frozen=True)
class ViolationGroup:
    """All violations of one catalog item on one page, merged for display."""

    item_id: str
    item_name: str
    severity: str
    rule_ids: List[str]
    nodes: List[ViolationNode]


def group_violations(violations: List[Violation]) -> List[ViolationGroup]:
    """Merge violations per item; the most severe source rule sets the group severity."""
    groups: Dict[str, Dict[str, Any]] = {}
    for v in violations:
        g = groups.setdefault(
            v.item_id,
            {"item_name": v.item_name, "severity": v.severity, "rule_ids": [], "nodes": []},
        )
        if SEVERITY_PRIORITY[v.severity] > SEVERITY_PRIORITY[g["severity"]]:
            g["severity"] = v.severity
        if v.rule_id not in g["rule_ids"]:
            g["rule_ids"].append(v.rule_id)
        g["nodes"].extend(v.nodes)
    return [ViolationGroup(item_id=k, **groups[k]) for k in sorted(groups)]


def _checklist(result: ScanResult) -> List[Dict[str, Any]]:
    failed = set(result.failed_items)
    passed = set(result.passes)
    incomplete = set(result.incomplete)
    rows = []
    for item in sorted(CATALOG, key=lambda i: i.id):
        if item.id in failed:
            status = "fail"
        elif item.id in incomplete:
            status = "incomplete"
        elif item.id in passed:
            status = "pass"
        else:
            status = "unknown"
        rows.append({"item": item, "status": status})
    return rows


def _scan_context(result: ScanResult) -> Dict[str, Any]:
    return {
        "kind": "scan",
        "result": result,
        "groups": group_violations(list(result.violations)),
        "checklist": _checklist(result),
        "principle_names": PRINCIPLE_NAMES,
    }


def _crawl_context(result: CrawlResult) -> Dict[str, Any]:
    top_items = [
        {"item": get_item(item_id), "item_id": item_id, "pages": count}
        for item_id, count in violations_by_item(result)
    ]
    return {
        "kind": "crawl",
        "result": result,
        "average_compliance": average_compliance(result),
        "top_items": top_items,
        "error_urls": pages_by_status(result).get("error", []),
    }


def _environment(template_dir: Optional[Union[Path, str]]) -> Environment:
    loader = (
        FileSystemLoader(str(template_dir))
        if template_dir is not None
        else PackageLoader("aria_scout.report", "templates")
    )
    return Environment(loader=loader, autoescape=select_autoescape(["html", "xml", "j2"]))


def render_html(
    result: Union[ScanResult, CrawlResult],
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Render *result* through ``report.html.j2`` and save it to *output_path*.

    Args:
        result: ScanResult or CrawlResult.
        output_path: path of the resulting HTML file.
        template_dir: directory holding a replacement ``report.html.j2``;
            the packaged template is used by default.

    Returns:
        Path of the saved HTML file.

    Raises:
        RenderError: the template failed or the file could not be written.

    Example:
    ```python
    from aria_scout.report.html_report import render_html
    html_path = render_html(result, 'reports/report.html')
    ```
    """
    output = Path(output_path)
    context = _scan_context(result) if isinstance(result, ScanResult) else _crawl_context(result)
    try:
        template = _environment(template_dir).get_template(TEMPLATE_NAME)
        html_content = template.render(**context)
    except TemplateError as exc:
        raise RenderError(f"Cannot render HTML report: {exc}") from exc

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html_content, encoding="utf-8")
    except OSError as exc:
        raise RenderError(f"Cannot write HTML report {output}: {exc}") from exc
    logger.info("HTML report saved to %s", output)
    return output
