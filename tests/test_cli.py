# File: tests/test_cli.py
"""CLI tests through click.testing.CliRunner.

Scanning and crawling are replaced with canned results, so the commands run
without a browser.
"""
import json

import pytest
from click.testing import CliRunner

import aria_scout.cli as cli_module
from aria_scout import __version__
from aria_scout.cli import cli
from aria_scout.errors import NavigationError
from aria_scout.models import EngineResults
from aria_scout.store import ResultStore

from conftest import FakeEngine, FakeSite, finding, make_crawl_result, make_scan_result

URL = "https://example.com"


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every command in an empty directory so no stray .ariarc file is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def scan_calls(monkeypatch):
    """Replace scan_page with a fake returning two violations."""
    calls = []

    async def fake_scan(url, config, **kwargs):
        calls.append((url, config, kwargs))
        return make_scan_result(
            url,
            EngineResults(violations=(finding("image-alt", "critical"), finding("color-contrast", "moderate"))),
        )

    monkeypatch.setattr(cli_module, "scan_page", fake_scan)
    return calls


@pytest.fixture()
def crawl_calls(monkeypatch):
    calls = []

    async def fake_crawl(url, config, **kwargs):
        calls.append((url, config, kwargs))
        return make_crawl_result(url)

    monkeypatch.setattr(cli_module, "crawl_site", fake_crawl)
    return calls


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_show_config_reads_file(isolated_cwd):
    (isolated_cwd / ".ariarc.yaml").write_text("crawl:\n  max_pages: 7\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["config"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["crawl"]["max_pages"] == 7
    assert data["scan"]["locale"] == "ko-KR"


def test_invalid_config_file(isolated_cwd):
    bad = isolated_cwd / "bad.yaml"
    bad.write_text("scan:\n  timeout: -5\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(bad), "config"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_scan_prints_summary(scan_calls):
    result = CliRunner().invoke(cli, ["scan", URL, "--timeout", "5000", "--no-headless"])
    assert result.exit_code == 0, result.output
    assert "5.1.1" in result.output
    assert "전체 준수율" in result.output
    url, config, kwargs = scan_calls[0]
    assert url == URL
    assert config.timeout == 5000
    assert config.headless is False
    assert kwargs["exclude_rules"] == ()


def test_scan_verbose_details(scan_calls):
    result = CliRunner().invoke(cli, ["scan", URL, "--verbose"])
    assert result.exit_code == 0
    assert "상세 위반 내용" in result.output
    assert "image-alt" in result.output


def test_scan_invalid_url(scan_calls):
    result = CliRunner().invoke(cli, ["scan", "not-a-url"])
    assert result.exit_code == 1
    assert "Invalid URL" in result.output
    assert scan_calls == []


def test_scan_failure_exits_1(monkeypatch):
    async def failing_scan(url, config, **kwargs):
        raise NavigationError(url, "net::ERR_NAME_NOT_RESOLVED")

    monkeypatch.setattr(cli_module, "scan_page", failing_scan)
    result = CliRunner().invoke(cli, ["scan", URL])
    assert result.exit_code == 1
    assert "Scan failed" in result.output


def test_scan_lost_page_context_reports_failure(monkeypatch):
    import aria_scout.scanner as scanner_module

    site = FakeSite({URL: "<html lang=\"ko\"><title>t</title></html>"})
    site.lost_context.add(URL)
    monkeypatch.setattr(scanner_module, "launch_browser", site.launcher())
    monkeypatch.setattr(scanner_module, "default_engine", lambda config: FakeEngine())

    result = CliRunner().invoke(cli, ["scan", URL])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Scan failed" in result.output
    assert "Execution context was destroyed" in result.output
    assert site.browsers[0].close_count == 1


@pytest.mark.parametrize("threshold,code", [("1", 1), ("2", 0), ("5", 0)])
def test_scan_ci_threshold(scan_calls, threshold, code):
    result = CliRunner().invoke(cli, ["scan", URL, "--ci", "--threshold", threshold])
    assert result.exit_code == code
    if code:
        assert "CI check failed: 2 violations (threshold: 1)" in result.output


def test_scan_ci_threshold_from_config(scan_calls, isolated_cwd):
    (isolated_cwd / ".ariarc.yaml").write_text("ci_threshold: 1\n", encoding="utf-8")
    assert CliRunner().invoke(cli, ["scan", URL, "--ci"]).exit_code == 1


def test_scan_without_ci_never_fails_on_violations(scan_calls):
    assert CliRunner().invoke(cli, ["scan", URL]).exit_code == 0


def test_scan_writes_reports_and_db(scan_calls, isolated_cwd):
    result = CliRunner().invoke(
        cli,
        ["scan", URL, "-o", "out/r.json", "--html", "out/r.html", "--db", "scans.db"],
    )
    assert result.exit_code == 0, result.output
    data = json.loads((isolated_cwd / "out" / "r.json").read_text(encoding="utf-8"))
    assert data["url"] == URL
    assert "<html" in (isolated_cwd / "out" / "r.html").read_text(encoding="utf-8")
    assert "scan ID: 1" in result.output
    with ResultStore(isolated_cwd / "scans.db") as store:
        assert store.get_scan(1).url == URL


def test_crawl_passes_overrides(crawl_calls, isolated_cwd):
    result = CliRunner().invoke(
        cli,
        ["crawl", URL, "-d", "1", "-m", "4", "-c", "2", "--any-domain", "-x", "/logout", "-x", "/admin", "-q",
         "--db", "c.db"],
    )
    assert result.exit_code == 0, result.output
    url, config, kwargs = crawl_calls[0]
    assert url == URL
    assert config.max_depth == 1
    assert config.max_pages == 4
    assert config.concurrency == 2
    assert config.same_domain is False
    assert config.exclude_patterns == ("/logout", "/admin")
    assert kwargs["on_progress"] is None
    assert "Crawl complete: 3 pages" in result.output
    with ResultStore(isolated_cwd / "c.db") as store:
        assert store.get_crawl(1).pages_scanned == 3
        assert len(store.list_scans()) == 2


def test_crawl_defaults_from_config(crawl_calls):
    result = CliRunner().invoke(cli, ["crawl", URL])
    assert result.exit_code == 0, result.output
    _, config, kwargs = crawl_calls[0]
    assert config.max_pages == 50
    assert kwargs["on_progress"] is cli_module._echo_progress


def test_report_from_db(isolated_cwd):
    with ResultStore(isolated_cwd / "aria-scan.db") as store:
        store.save_scan(make_scan_result("http://old.example"))
        store.save_scan(make_scan_result("http://new.example"))

    result = CliRunner().invoke(cli, ["report", "-f", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads((isolated_cwd / "aria-report.json").read_text(encoding="utf-8"))
    assert data["url"] == "http://new.example"

    result = CliRunner().invoke(cli, ["report", "-f", "html", "--scan-id", "1", "-o", "old.html"])
    assert result.exit_code == 0, result.output
    assert "http://old.example" in (isolated_cwd / "old.html").read_text(encoding="utf-8")


def test_report_crawl_from_db(isolated_cwd):
    with ResultStore(isolated_cwd / "aria-scan.db") as store:
        crawl_id = store.save_crawl(make_crawl_result())
    result = CliRunner().invoke(cli, ["report", "-f", "json", "--crawl-id", str(crawl_id), "-o", "crawl.json"])
    assert result.exit_code == 0, result.output
    assert json.loads((isolated_cwd / "crawl.json").read_text(encoding="utf-8"))["pages_scanned"] == 3


def test_report_errors(isolated_cwd):
    runner = CliRunner()
    result = runner.invoke(cli, ["report", "--db", "missing.db"])
    assert result.exit_code == 1
    assert "Database not found" in result.output

    ResultStore(isolated_cwd / "empty.db").close()
    result = runner.invoke(cli, ["report", "--db", "empty.db"])
    assert result.exit_code == 1
    assert "No scan results found in database" in result.output

    result = runner.invoke(cli, ["report", "--db", "empty.db", "--scan-id", "9"])
    assert result.exit_code == 1
    assert "Scan ID 9 not found" in result.output


def test_rules_list():
    result = CliRunner().invoke(cli, ["rules", "list"])
    assert result.exit_code == 0
    assert "33" in result.output
    assert "5.1.1" in result.output and "8.2.1" in result.output


def test_rules_list_by_principle():
    result = CliRunner().invoke(cli, ["rules", "list", "-p", "4"])
    assert result.exit_code == 0
    assert "8.1.1" in result.output
    assert "5.1.1" not in result.output


def test_rules_list_bad_principle():
    result = CliRunner().invoke(cli, ["rules", "list", "-p", "9"])
    assert result.exit_code == 2
