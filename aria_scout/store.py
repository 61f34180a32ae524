# aria_scout/store.py
"""
SQLite persistence for scan and crawl results.

Each result is stored whole as JSON next to a few indexed columns; scan
violations are additionally exploded into their own table so they can be
queried per catalog item across scans.
"""
from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from aria_scout.errors import PersistenceError
from aria_scout.logger import logger
from aria_scout.models import CrawlResult, ScanResult

__all__ = ["ResultStore", "StoredScan", "StoredViolation", "SCHEMA"]

SCHEMA = """
CREATE TABLE IF NOT EXISTS scans (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    duration REAL NOT NULL,
    compliance_rate REAL NOT NULL,
    violation_count INTEGER NOT NULL,
    pass_count INTEGER NOT NULL,
    result_json TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS violations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    scan_id INTEGER NOT NULL REFERENCES scans(id) ON DELETE CASCADE,
    item_id TEXT NOT NULL,
    item_name TEXT NOT NULL,
    severity TEXT NOT NULL,
    rule_id TEXT NOT NULL,
    description TEXT NOT NULL,
    impact TEXT NOT NULL,
    node_count INTEGER NOT NULL,
    nodes_json TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS crawls (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    start_url TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    duration REAL NOT NULL,
    pages_scanned INTEGER NOT NULL,
    total_violations INTEGER NOT NULL,
    unique_violated_items INTEGER NOT NULL,
    result_json TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_violations_scan ON violations(scan_id);
CREATE INDEX IF NOT EXISTS idx_violations_item ON violations(item_id);
CREATE INDEX IF NOT EXISTS idx_scans_url ON scans(url);
"""


@dataclass(frozen=True, slots=True)
class StoredScan:
    """Listing row for one saved scan."""
    id: int
    url: str
    timestamp: str
    duration: float
    compliance_rate: float
    violation_count: int
    pass_count: int


@dataclass(frozen=True, slots=True)
class StoredViolation:
    id: int
    scan_id: int
    item_id: str
    item_name: str
    severity: str
    rule_id: str
    description: str
    impact: str
    node_count: int
    nodes_json: str

    @property
    def nodes(self) -> list:
        return json.loads(self.nodes_json)


_VIOLATION_COLUMNS = (
    "id, scan_id, item_id, item_name, severity, rule_id, description, impact, node_count, nodes_json"
)


class ResultStore:
    """
    Thin wrapper over one SQLite database file.

    Usable as a context manager; every sqlite error surfaces as
    :class:`PersistenceError`.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = str(path)
        on_disk = self.path != ":memory:"
        try:
            if on_disk:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            if on_disk:
                self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.executescript(SCHEMA)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Cannot open result store {path}: {exc}") from exc
        logger.debug("Result store opened: %s", self.path)

    def __enter__(self) -> ResultStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    # Writes ----------------------------------------------------------------
    def save_scan(self, result: ScanResult) -> int:
        """Store *result* and its violations atomically; return the scan id."""
        try:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO scans (url, timestamp, duration, compliance_rate, violation_count, pass_count, result_json) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        result.url,
                        result.timestamp,
                        result.duration,
                        result.summary.compliance_rate,
                        len(result.violations),
                        result.summary.pass_count,
                        result.to_json(),
                    ),
                )
                scan_id = int(cur.lastrowid)
                self._conn.executemany(
                    "INSERT INTO violations (scan_id, item_id, item_name, severity, rule_id, description, impact, "
                    "node_count, nodes_json) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    [
                        (
                            scan_id,
                            v.item_id,
                            v.item_name,
                            v.severity,
                            v.rule_id,
                            v.description,
                            v.impact,
                            len(v.nodes),
                            json.dumps([n.to_dict() for n in v.nodes], ensure_ascii=False),
                        )
                        for v in result.violations
                    ],
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot save scan of {result.url}: {exc}") from exc
        logger.debug("Saved scan #%d (%s)", scan_id, result.url)
        return scan_id

    def save_crawl(self, result: CrawlResult) -> int:
        try:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO crawls (start_url, timestamp, duration, pages_scanned, total_violations, "
                    "unique_violated_items, result_json) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        result.start_url,
                        datetime.now(timezone.utc).isoformat(),
                        result.duration,
                        result.pages_scanned,
                        result.summary.total_violations,
                        result.summary.unique_violated_items,
                        result.to_json(),
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot save crawl of {result.start_url}: {exc}") from exc
        crawl_id = int(cur.lastrowid)
        logger.debug("Saved crawl #%d (%s)", crawl_id, result.start_url)
        return crawl_id

    # Reads -----------------------------------------------------------------
    def _fetch_json(self, table: str, row_id: int) -> Optional[str]:
        try:
            row = self._conn.execute(f"SELECT result_json FROM {table} WHERE id = ?", (row_id,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read {table} #{row_id}: {exc}") from exc
        return row["result_json"] if row else None

    def get_scan(self, scan_id: int) -> Optional[ScanResult]:
        raw = self._fetch_json("scans", scan_id)
        if raw is None:
            return None
        try:
            return ScanResult.from_json(raw)
        except (ValueError, KeyError, TypeError) as exc:
            raise PersistenceError(f"Corrupt scan #{scan_id}: {exc}") from exc

    def get_crawl(self, crawl_id: int) -> Optional[CrawlResult]:
        raw = self._fetch_json("crawls", crawl_id)
        if raw is None:
            return None
        try:
            return CrawlResult.from_json(raw)
        except (ValueError, KeyError, TypeError) as exc:
            raise PersistenceError(f"Corrupt crawl #{crawl_id}: {exc}") from exc

    def list_scans(self, limit: int = 50) -> List[StoredScan]:
        """Most recent scans first."""
        try:
            rows = self._conn.execute(
                "SELECT id, url, timestamp, duration, compliance_rate, violation_count, pass_count "
                "FROM scans ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot list scans: {exc}") from exc
        return [StoredScan(**dict(row)) for row in rows]

    def latest_scan_id(self) -> Optional[int]:
        scans = self.list_scans(limit=1)
        return scans[0].id if scans else None

    def violations_for_scan(self, scan_id: int) -> List[StoredViolation]:
        return self._violations(f"SELECT {_VIOLATION_COLUMNS} FROM violations WHERE scan_id = ? ORDER BY item_id, id", scan_id)

    def violations_for_item(self, item_id: str) -> List[StoredViolation]:
        """Violations of one catalog item across all scans, newest scan first."""
        return self._violations(
            f"SELECT {_VIOLATION_COLUMNS} FROM violations WHERE item_id = ? ORDER BY scan_id DESC, id", item_id
        )

    def _violations(self, query: str, param: Union[int, str]) -> List[StoredViolation]:
        try:
            rows = self._conn.execute(query, (param,)).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read violations: {exc}") from exc
        return [StoredViolation(**dict(row)) for row in rows]
