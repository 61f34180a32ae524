# aria_scout/report/json_report.py

"""
JSON report: the full scan or crawl result serialized to a file.

The file holds exactly ``result.to_dict()``, so
``ScanResult.from_json(path.read_text())`` reads it back.
"""
import json
from pathlib import Path
from typing import Union

from aria_scout.errors import RenderError
from aria_scout.logger import logger
from aria_scout.models import CrawlResult, ScanResult


def render_json(result: Union[ScanResult, CrawlResult], output_path: Union[Path, str]) -> Path:
    """
    Write *result* as pretty-printed UTF-8 JSON to *output_path*.

    :param result: ScanResult or CrawlResult
    :param output_path: path of the JSON file; parent directories are created
    :return: Path of the written file
    :raises RenderError: the file could not be written
    """
    output = Path(output_path)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
    except OSError as exc:
        raise RenderError(f"Cannot write JSON report {output}: {exc}") from exc
    logger.info("JSON report saved to %s", output)
    return output
