# File: tests/test_report.py
import json

import pytest

from aria_scout.aggregator import average_compliance, build_crawl_summary, pages_by_status, violations_by_item
from aria_scout.errors import RenderError
from aria_scout.models import EngineResults, RawFinding, RawNode, ScanResult
from aria_scout.report import render_html, render_json
from aria_scout.report.html_report import group_violations
from aria_scout.rules.custom import Finding, RuleResult

from conftest import finding, make_crawl_result, make_scan_result

SCRIPTED_ALT = RawFinding(
    rule_id="image-alt",
    impact="critical",
    description="Images must have alternate text",
    nodes=(RawNode('<img onerror="x">', ("img",), "Add alt"),),
)


def test_crawl_summary_and_aggregates():
    crawl = make_crawl_result()
    assert crawl.summary.total_pages == 3
    assert crawl.summary.success_pages == 2
    assert crawl.summary.error_pages == 1
    assert crawl.summary.total_violations == 3
    assert crawl.summary.unique_violated_items == 2
    assert violations_by_item(crawl) == [("5.1.1", 2), ("5.4.3", 1)]
    assert pages_by_status(crawl)["error"] == ["http://example.com/down"]
    assert 0 < average_compliance(crawl) <= 100
    assert build_crawl_summary([]).total_pages == 0


def test_group_violations_takes_highest_severity():
    rule = RuleResult("lang-attr", "7.1.1", "warning", (Finding("<html>", "html", "odd"),))
    engine = EngineResults(violations=(finding("html-has-lang", "serious", nodes=2),))
    result = make_scan_result(engine=engine, rule_results=[rule])
    groups = group_violations(list(result.violations))
    assert len(groups) == 1
    assert groups[0].item_id == "7.1.1"
    assert groups[0].severity == "error"
    assert groups[0].rule_ids == ["html-has-lang", "lang-attr"]
    assert len(groups[0].nodes) == 3


def test_render_json_scan(tmp_path):
    result = make_scan_result(engine=EngineResults(violations=(finding("image-alt"),)))
    path = render_json(result, tmp_path / "out" / "report.json")
    assert path.exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["violations"][0]["item_name"] == "적절한 대체 텍스트 제공"
    assert ScanResult.from_dict(data) == result


def test_render_json_unwritable(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(RenderError):
        render_json(make_scan_result(), blocker / "report.json")


def test_render_html_scan(tmp_path):
    result = make_scan_result(
        engine=EngineResults(violations=(SCRIPTED_ALT,)),
    )
    html = render_html(result, tmp_path / "report.html").read_text(encoding="utf-8")
    assert "http://example.com" in html
    assert "5.1.1" in html
    assert "적절한 대체 텍스트 제공" in html
    # node excerpts are escaped
    assert "<img onerror" not in html
    assert "&lt;img onerror" in html
    # every catalog item appears in the checklist
    assert "8.2.1" in html and "6.4.1" in html


def test_render_html_crawl(tmp_path):
    html = render_html(make_crawl_result(), tmp_path / "crawl.html").read_text(encoding="utf-8")
    assert "http://example.com/about" in html
    assert "http://example.com/down" in html
    assert "5.4.3" in html


def test_render_html_custom_template(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "report.html.j2").write_text(
        "{{ kind }}|{{ result.url }}|{{ groups | length }}", encoding="utf-8"
    )
    result = make_scan_result(engine=EngineResults(violations=(finding("image-alt"),)))
    out = render_html(result, tmp_path / "r.html", template_dir=templates)
    assert out.read_text(encoding="utf-8") == "scan|http://example.com|1"


def test_render_html_template_error(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "report.html.j2").write_text("{% if %}", encoding="utf-8")
    with pytest.raises(RenderError):
        render_html(make_scan_result(), tmp_path / "r.html", template_dir=templates)


def test_render_html_missing_template(tmp_path):
    with pytest.raises(RenderError):
        render_html(make_scan_result(), tmp_path / "r.html", template_dir=tmp_path / "nowhere")

