"""
Configuration models for scans, crawls and reports, and the project config
file loader (``.ariarc.yaml`` / ``.ariarc.yml`` / ``.ariarc.json``).

Pydantic describes the schema and validates the data; every validation or
parsing problem surfaces as :class:`~aria_scout.errors.ConfigurationError`.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal, Optional, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from aria_scout.errors import ConfigurationError

AXE_CDN_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

WaitUntil = Literal["load", "domcontentloaded", "networkidle"]


class Viewport(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(1280, gt=0)
    height: int = Field(720, gt=0)


class ScanConfig(BaseModel):
    """Settings for loading and scanning one page."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(30_000, gt=0, description="Navigation timeout (milliseconds).")
    wait_until: WaitUntil = Field("load", description="Navigation wait condition.")
    viewport: Viewport = Field(default_factory=Viewport)
    headless: bool = Field(True, description="Run the browser without a window.")
    locale: str = Field("ko-KR", min_length=2, description="Browser context locale.")
    axe_source: Optional[Path] = Field(None, description="Local axe.min.js to inject instead of downloading.")
    axe_url: str = Field(AXE_CDN_URL, description="Where axe.min.js is downloaded from when not cached.")


class CrawlConfig(ScanConfig):
    """Crawl bounds on top of the per-page scan settings."""

    start_url: Optional[HttpUrl] = Field(None, description="Root URL of the crawl.")
    max_depth: int = Field(3, ge=0, description="Maximum link depth from the start URL.")
    max_pages: int = Field(50, ge=1, description="Hard limit on pages visited.")
    concurrency: int = Field(3, ge=1, description="Pages scanned in parallel.")
    same_domain: bool = Field(True, description="Follow links on the start host only.")
    exclude_patterns: Tuple[str, ...] = Field((), description="Skip URLs containing any of these.")

    @field_validator("exclude_patterns", mode="before")
    @classmethod
    def _coerce_patterns(cls, v: Any) -> Any:
        if isinstance(v, str):
            return (v,)
        return v


class ReportConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    format: Literal["json", "html"] = "html"
    output: Optional[Path] = None
    db_path: Path = Path("aria-scan.db")


class ProjectConfig(BaseModel):
    """Contents of a project config file; every section is optional."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    scan: ScanConfig = Field(default_factory=ScanConfig)
    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    exclude_rules: Tuple[str, ...] = Field((), description="axe or custom rule ids to ignore.")
    ci_threshold: int = Field(0, ge=0, description="Violations tolerated by scan --ci.")


CONFIG_FILES: Tuple[str, ...] = (".ariarc.yaml", ".ariarc.yml", ".ariarc.json")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def find_config_file(directory: Union[str, Path, None] = None) -> Optional[Path]:
    base = Path(directory) if directory is not None else Path.cwd()
    for name in CONFIG_FILES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Union[str, Path, None] = None) -> ProjectConfig:
    """
    Read a YAML or JSON project config and return a validated ProjectConfig.

    Without *path* the working directory is searched for ``CONFIG_FILES``;
    when none exists the defaults are returned.  An explicit path that does not
    exist is an error.
    """
    if path is None:
        found = find_config_file()
        if found is None:
            return ProjectConfig()
        path_obj = found
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise ConfigurationError(f"Config file not found: {path_obj}")

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigurationError(f"Unsupported config format: {suffix}")

    try:
        return ProjectConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path_obj}:\n{exc}") from exc


def validate_url(url: str) -> str:
    """Check that *url* is an absolute http(s) URL; return it unchanged."""
    try:
        CrawlConfig(start_url=url)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid URL: {url!r}") from exc
    return url


__all__ = [
    "AXE_CDN_URL",
    "CONFIG_FILES",
    "CrawlConfig",
    "ProjectConfig",
    "ReportConfig",
    "ScanConfig",
    "Viewport",
    "find_config_file",
    "load_config",
    "validate_url",
]
