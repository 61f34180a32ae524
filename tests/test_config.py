# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from aria_scout.config import CrawlConfig, ProjectConfig, ScanConfig, find_config_file, load_config, validate_url
from aria_scout.errors import ConfigurationError


def test_defaults():
    cfg = ProjectConfig()
    assert cfg.scan.timeout == 30_000
    assert cfg.scan.locale == "ko-KR"
    assert cfg.crawl.max_depth == 3
    assert cfg.crawl.max_pages == 50
    assert cfg.crawl.concurrency == 3
    assert cfg.crawl.same_domain is True
    assert cfg.report.format == "html"
    assert cfg.ci_threshold == 0


def test_load_yaml(tmp_path):
    path = tmp_path / ".ariarc.yaml"
    path.write_text(
        """
scan:
  timeout: 10000
  viewport: {width: 800, height: 600}
crawl:
  max_pages: 5
  exclude_patterns: /logout
exclude_rules: [color-contrast]
ci_threshold: 2
""",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.scan.timeout == 10000
    assert cfg.scan.viewport.width == 800
    assert cfg.crawl.max_pages == 5
    assert cfg.crawl.exclude_patterns == ("/logout",)
    assert cfg.exclude_rules == ("color-contrast",)
    assert cfg.ci_threshold == 2


def test_load_json(tmp_path):
    path = tmp_path / "aria.json"
    path.write_text(json.dumps({"report": {"format": "json", "db_path": "x.db"}}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.report.format == "json"
    assert cfg.report.db_path == Path("x.db")


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ProjectConfig()


def test_discovery_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert find_config_file() is None
    assert load_config() == ProjectConfig()
    (tmp_path / ".ariarc.json").write_text('{"ci_threshold": 4}', encoding="utf-8")
    assert find_config_file() == tmp_path / ".ariarc.json"
    assert load_config().ci_threshold == 4


@pytest.mark.parametrize(
    "name,content",
    [
        ("bad.yaml", "scan: [unclosed"),
        ("bad.json", "{not json"),
        ("list.yaml", "- a\n- b\n"),
        ("unknown.yaml", "nonsense_key: 1\n"),
        ("range.yaml", "crawl:\n  concurrency: 0\n"),
        ("wait.yaml", "scan:\n  wait_until: whenever\n"),
        ("conf.toml", "x = 1"),
    ],
)
def test_invalid_config(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_validate_url():
    assert validate_url("https://example.com/a") == "https://example.com/a"
    for bad in ("example.com", "ftp://example.com", "not a url", ""):
        with pytest.raises(ConfigurationError):
            validate_url(bad)


def test_models_are_frozen():
    cfg = ScanConfig()
    with pytest.raises(ValidationError):
        cfg.timeout = 1  # type: ignore[misc]
    updated = CrawlConfig().model_copy(update={"max_pages": 7})
    assert updated.max_pages == 7
