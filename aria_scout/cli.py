#!/usr/bin/env python3
"""
Command line entry point of the aria_scout KWCAG 2.2 checker.

Commands:
  scan URL      Scan a single page and print the compliance summary
  crawl URL     Crawl a site and scan every page found
  report        Render a stored scan (or crawl) as JSON or HTML
  rules list    List the 33 KWCAG 2.2 inspection items
  config        Show the effective configuration

Global options:
  --config PATH       Project config file (default: .ariarc.yaml/.yml/.json if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file (rotated)
  --log-format FORMAT Logging format string

Example:
  aria scan https://example.com --ci --threshold 5
  aria crawl https://example.com -d 2 -m 20 --html site.html
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from aria_scout import __version__
from aria_scout.config import ProjectConfig, load_config, validate_url
from aria_scout.crawler import CrawlProgress, crawl_site
from aria_scout.errors import AriaError, ConfigurationError
from aria_scout.logger import init_logging
from aria_scout.output import (
    format_crawl_result,
    format_rules_list,
    format_scan_result,
    format_violation_detail,
    sort_violations,
)
from aria_scout.report import render_html, render_json
from aria_scout.rules.catalog import PRINCIPLE_NAMES, TOTAL_ITEMS
from aria_scout.scanner import scan_page
from aria_scout.store import ResultStore

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
OUTPUT_PATH = click.Path(writable=True, dir_okay=False, path_type=Path)


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _project(ctx: click.Context) -> ProjectConfig:
    return ctx.obj['config']


def _overrides(**values):
    return {k: v for k, v in values.items() if v is not None}


def _save_reports(result, json_output, html_output, template_dir):
    if json_output:
        try:
            saved_json = render_json(result, json_output)
        except AriaError as e:
            print_error(f'Failed to save JSON: {e}')
        click.echo(f'\nResults saved to: {saved_json}')
    if html_output:
        try:
            saved_html = render_html(result, html_output, template_dir)
        except AriaError as e:
            print_error(f'Failed to save HTML: {e}')
        click.echo(f'HTML report: {saved_html}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='aria_scout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Project config file (YAML or JSON).'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Also write logs to this file'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """ARIA - KWCAG 2.2 web accessibility checker."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except ConfigurationError as e:
        print_error(f'Configuration error: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--output', '-o', 'json_output', default=None, type=OUTPUT_PATH, help='Save results to file (JSON)')
@click.option('--html', 'html_output', default=None, type=OUTPUT_PATH, help='Save an HTML report')
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with a custom report.html.j2'
)
@click.option('--db', 'db_path', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='SQLite database to store the result in')
@click.option('--timeout', type=click.IntRange(min=1), default=None, help='Page load timeout (ms)')
@click.option('--headless/--no-headless', default=None, help='Run the browser without a window')
@click.option('--verbose', is_flag=True, help='Show detailed violation information')
@click.option('--ci', is_flag=True, help='Exit with status 1 when violations exceed the threshold')
@click.option('--threshold', type=click.IntRange(min=0), default=None, help='Violations allowed in CI mode')
@click.pass_context
def scan(ctx, url, json_output, html_output, template_dir, db_path, timeout, headless, verbose, ci, threshold):
    """Scan a single page for KWCAG 2.2 accessibility issues."""
    project = _project(ctx)
    try:
        validate_url(url)
    except ConfigurationError as e:
        print_error(str(e))
    scan_cfg = project.scan.model_copy(update=_overrides(timeout=timeout, headless=headless))

    click.echo(f'Scanning {url} ...', err=True)
    try:
        result = asyncio.run(scan_page(url, scan_cfg, exclude_rules=project.exclude_rules))
    except AriaError as e:
        print_error(f'Scan failed: {e}')

    click.echo(format_scan_result(result))
    if verbose and result.violations:
        click.echo('\n=== 상세 위반 내용 ===\n')
        for violation in sort_violations(result.violations):
            click.echo(format_violation_detail(violation) + '\n')

    _save_reports(result, json_output, html_output, template_dir)

    if db_path:
        try:
            with ResultStore(db_path) as store:
                scan_id = store.save_scan(result)
        except AriaError as e:
            print_error(f'Failed to store result: {e}')
        click.echo(f'\nStored in DB (scan ID: {scan_id})')

    if ci:
        limit = project.ci_threshold if threshold is None else threshold
        count = len(result.violations)
        if count > limit:
            click.secho(f'\nCI check failed: {count} violations (threshold: {limit})', fg='red', err=True)
            sys.exit(1)


def _echo_progress(info: CrawlProgress) -> None:
    click.echo(f'[{info.current}/{info.total}] {info.status}: {info.url}', err=True)


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--depth', '-d', 'max_depth', type=click.IntRange(min=0), default=None, help='Maximum crawl depth')
@click.option('--max-pages', '-m', 'max_pages', type=click.IntRange(min=1), default=None, help='Maximum pages to scan')
@click.option('--concurrency', '-c', type=click.IntRange(min=1), default=None, help='Pages scanned in parallel')
@click.option('--same-domain/--any-domain', 'same_domain', default=None, help='Follow links on the start host only')
@click.option('--exclude', '-x', 'exclude_patterns', multiple=True, help='Skip URLs containing this text')
@click.option('--timeout', type=click.IntRange(min=1), default=None, help='Page load timeout (ms)')
@click.option('--headless/--no-headless', default=None, help='Run the browser without a window')
@click.option('--output', '-o', 'json_output', default=None, type=OUTPUT_PATH, help='Save results to file (JSON)')
@click.option('--html', 'html_output', default=None, type=OUTPUT_PATH, help='Save an HTML report')
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with a custom report.html.j2'
)
@click.option('--db', 'db_path', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='SQLite database to store the result in')
@click.option('--quiet', '-q', is_flag=True, help='Do not print progress')
@click.pass_context
def crawl(ctx, url, max_depth, max_pages, concurrency, same_domain, exclude_patterns, timeout, headless,
          json_output, html_output, template_dir, db_path, quiet):
    """Crawl a website and scan all pages for accessibility issues."""
    project = _project(ctx)
    try:
        validate_url(url)
    except ConfigurationError as e:
        print_error(str(e))
    crawl_cfg = project.crawl.model_copy(update=_overrides(
        max_depth=max_depth,
        max_pages=max_pages,
        concurrency=concurrency,
        same_domain=same_domain,
        exclude_patterns=tuple(exclude_patterns) or None,
        timeout=timeout,
        headless=headless,
    ))

    try:
        result = asyncio.run(crawl_site(
            url,
            crawl_cfg,
            on_progress=None if quiet else _echo_progress,
            exclude_rules=project.exclude_rules,
        ))
    except AriaError as e:
        print_error(f'Crawl failed: {e}')

    click.echo(format_crawl_result(result))
    _save_reports(result, json_output, html_output, template_dir)

    if db_path:
        try:
            with ResultStore(db_path) as store:
                crawl_id = store.save_crawl(result)
                for entry in result.pages:
                    if entry.scan_result is not None:
                        store.save_scan(entry.scan_result)
        except AriaError as e:
            print_error(f'Failed to store result: {e}')
        click.echo(f'\nStored in DB (crawl ID: {crawl_id})')


@cli.command('report', context_settings=CONTEXT_SETTINGS)
@click.option('--format', '-f', 'fmt', type=click.Choice(['json', 'html']), default=None, help='Report format')
@click.option('--output', '-o', 'output', default=None, type=OUTPUT_PATH, help='Output file path')
@click.option('--db', 'db_path', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='SQLite database path')
@click.option('--scan-id', type=int, default=None, help='Scan to report (default: latest)')
@click.option('--crawl-id', type=int, default=None, help='Report a stored crawl instead of a scan')
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with a custom report.html.j2'
)
@click.pass_context
def report(ctx, fmt, output, db_path, scan_id, crawl_id, template_dir):
    """Generate a report from stored scan results."""
    settings = _project(ctx).report
    fmt = fmt or settings.format
    db_path = db_path or settings.db_path
    output = output or settings.output or Path(f'aria-report.{fmt}')

    if not Path(db_path).is_file():
        print_error(f'Database not found: {db_path}')
    try:
        with ResultStore(db_path) as store:
            if crawl_id is not None:
                result = store.get_crawl(crawl_id)
                missing = f'Crawl ID {crawl_id} not found'
            else:
                if scan_id is None:
                    scan_id = store.latest_scan_id()
                    if scan_id is None:
                        print_error('No scan results found in database')
                result = store.get_scan(scan_id)
                missing = f'Scan ID {scan_id} not found'
    except AriaError as e:
        print_error(f'Failed to read results: {e}')
    if result is None:
        print_error(missing)

    try:
        saved = render_json(result, output) if fmt == 'json' else render_html(result, output, template_dir)
    except AriaError as e:
        print_error(f'Report generation failed: {e}')
    click.echo(f'Report generated: {saved}')


@cli.group('rules', context_settings=CONTEXT_SETTINGS)
def rules():
    """View KWCAG 2.2 rules and mappings."""


@rules.command('list', context_settings=CONTEXT_SETTINGS)
@click.option('--principle', '-p', type=click.IntRange(1, 4), default=None, help='Filter by principle number (1-4)')
def rules_list(principle):
    """List all KWCAG 2.2 inspection items."""
    if principle is not None:
        click.echo(f'\nKWCAG 2.2 - 원칙 {principle}: {PRINCIPLE_NAMES[principle]}\n')
    else:
        click.echo(f'\nKWCAG 2.2 - 전체 {TOTAL_ITEMS}개 검사항목\n')
    click.echo(format_rules_list(principle=principle))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = _project(ctx)
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
