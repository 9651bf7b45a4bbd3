from __future__ import annotations

from textwrap import dedent
from typing import Any, Dict, List, Sequence

import pandas as pd
import streamlit as st

from image_analyzer.core.models import AnalysisResult, AnalysisStatus

_STATUS_STYLE = {
    AnalysisStatus.PENDING: ("#6b7280", "Pending"),
    AnalysisStatus.PROCESSING: ("#f59e0b", "Processing"),
    AnalysisStatus.COMPLETED: ("#10b981", "Done"),
    AnalysisStatus.ERROR: ("#ef4444", "Error"),
}


def _render_html(html: str) -> None:
    st.html(dedent(html))


def status_label(status: AnalysisStatus) -> str:
    return _STATUS_STYLE[status][1]


def status_badge(status: AnalysisStatus) -> str:
    color, label = _STATUS_STYLE[status]
    return (
        f"<span style='display:inline-block;background:{color};color:white;"
        f"border-radius:9999px;padding:2px 8px;font-size:0.75rem;'>{label}</span>"
    )


def results_frame(results: Sequence[AnalysisResult], include_description: bool) -> pd.DataFrame:
    """Table shown under "Analysis results"; one row per result plus a status column."""
    rows: List[Dict[str, Any]] = []
    for r in results:
        row: Dict[str, Any] = {"File": r.filename, "SEO title": r.title}
        if include_description:
            row["Description"] = r.description or ""
        row["Keywords"] = r.keywords
        row["Status"] = status_label(r.status)
        rows.append(row)
    return pd.DataFrame(rows)


def status_summary(results: Sequence[AnalysisResult]) -> None:
    counts: Dict[AnalysisStatus, int] = {}
    for r in results:
        counts[r.status] = counts.get(r.status, 0) + 1
    badges = " ".join(f"{status_badge(s)} {n}" for s, n in counts.items())
    _render_html(f"<div style='margin:6px 0;'>{badges}</div>")


def error(msg: str) -> None:
    st.error(msg)


def info(msg: str) -> None:
    st.info(msg)
