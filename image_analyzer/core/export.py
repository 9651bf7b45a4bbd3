from __future__ import annotations

import json
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence, Tuple

from image_analyzer.core.models import AnalysisResult

CSV_FILENAME = "image_analysis_results.csv"
CSV_MIME = "text/csv"
XLSX_FILENAME = "image_analysis_results.xlsx"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
JSON_FILENAME = "image_analysis_results.json"
JSON_MIME = "application/json"

# (header label, result attribute). The description column is labelled
# "descriptors" in exported files; downstream sheets rely on that header.
_BASE_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("filename", "filename"),
    ("title", "title"),
    ("keywords", "keywords"),
)
_DESCRIPTION_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("filename", "filename"),
    ("title", "title"),
    ("descriptors", "description"),
    ("keywords", "keywords"),
)


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    mime: str
    data: bytes


def csv_columns(include_description: bool) -> List[Tuple[str, str]]:
    return list(_DESCRIPTION_COLUMNS if include_description else _BASE_COLUMNS)


def _cell(result: AnalysisResult, key: str) -> str:
    value = getattr(result, key)
    return "" if value is None else str(value)


def records_for_export(results: Sequence[AnalysisResult], include_description: bool) -> List[Dict[str, Any]]:
    cols = csv_columns(include_description)
    return [{label: _cell(r, key) for label, key in cols} for r in results]


def to_csv_text(results: Sequence[AnalysisResult], include_description: bool) -> str:
    """Serialize results as header plus one quoted row per result.

    Values are wrapped in double quotes as-is; embedded quotes and commas are
    not escaped.
    """
    cols = csv_columns(include_description)
    lines = [",".join(label for label, _ in cols)]
    for r in results:
        lines.append(",".join(f'"{_cell(r, key)}"' for _, key in cols))
    return "\n".join(lines)


def export_csv(results: Sequence[AnalysisResult], include_description: bool) -> Optional[ExportArtifact]:
    if not results:
        return None
    text = to_csv_text(results, include_description)
    return ExportArtifact(filename=CSV_FILENAME, mime=CSV_MIME, data=text.encode("utf-8"))


def to_json_bytes(results: Sequence[AnalysisResult], include_description: bool) -> bytes:
    records = records_for_export(results, include_description)
    return json.dumps(records, ensure_ascii=False, indent=2).encode("utf-8")


def to_xlsx_bytes(results: Sequence[AnalysisResult], include_description: bool) -> bytes:
    from openpyxl import Workbook

    cols = csv_columns(include_description)
    wb = Workbook()
    ws = wb.active
    ws.title = "Results"
    ws.append([label for label, _ in cols])
    for r in results:
        ws.append([_cell(r, key) for _, key in cols])
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_xlsx(results: Sequence[AnalysisResult], include_description: bool) -> Optional[ExportArtifact]:
    if not results:
        return None
    return ExportArtifact(XLSX_FILENAME, XLSX_MIME, to_xlsx_bytes(results, include_description))


def export_json(results: Sequence[AnalysisResult], include_description: bool) -> Optional[ExportArtifact]:
    if not results:
        return None
    return ExportArtifact(JSON_FILENAME, JSON_MIME, to_json_bytes(results, include_description))
