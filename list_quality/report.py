"""Export a :class:`CleaningAnalysis` for offline review."""
from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Dict, List

import pandas as pd

from .models import CleaningAnalysis

_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
_ISSUE_COLUMNS = ["lead_id", "lead_name", "field_name", "current_value", "issue_kind", "suggested_fix", "fix_is_valid"]
_DUPLICATE_COLUMNS = ["field_kind", "canonical_value", "count", "retained_id", "removable_ids"]


def summary_row(analysis: CleaningAnalysis) -> Dict[str, object]:
    return {
        "list_id": analysis.list_id or "",
        "total_leads": analysis.total_leads,
        "quality_score": analysis.quality_score,
        "duplicate_phones": analysis.duplicate_phones,
        "duplicate_emails": analysis.duplicate_emails,
        "invalid_phones": analysis.invalid_phones,
        "invalid_emails": analysis.invalid_emails,
        "missing_phones": analysis.missing_phones,
        "missing_emails": analysis.missing_emails,
        "missing_names": analysis.missing_names,
        "missing_companies": analysis.missing_companies,
        "missing_contact": analysis.missing_contact,
    }


def analysis_frames(analysis: CleaningAnalysis) -> Dict[str, pd.DataFrame]:
    """Return one frame per report sheet, covering every issue and group."""

    issues = [asdict(issue) for issue in analysis.phone_issues]
    email_issues = [asdict(issue) for issue in analysis.email_issues]
    duplicates: List[Dict[str, object]] = [
        {
            "field_kind": group.field_kind,
            "canonical_value": group.canonical_value,
            "count": group.count,
            "retained_id": group.retained_id,
            "removable_ids": ", ".join(group.removable_ids),
        }
        for group in analysis.duplicate_groups
    ]
    return {
        "summary": pd.DataFrame([summary_row(analysis)]),
        "phone_issues": pd.DataFrame(issues, columns=_ISSUE_COLUMNS),
        "email_issues": pd.DataFrame(email_issues, columns=_ISSUE_COLUMNS),
        "duplicates": pd.DataFrame(duplicates, columns=_DUPLICATE_COLUMNS),
    }


def export_analysis(path: str | Path, analysis: CleaningAnalysis) -> Path:
    """Write the analysis to CSV (summary only) or an Excel workbook (all sheets)."""

    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    frames = analysis_frames(analysis)

    suffix = destination.suffix.lower()
    if suffix == ".csv":
        frames["summary"].to_csv(destination, index=False)
        return destination
    if suffix in _EXCEL_SUFFIXES:
        with pd.ExcelWriter(destination, engine="openpyxl") as writer:
            for sheet_name, frame in frames.items():
                frame.to_excel(writer, sheet_name=sheet_name, index=False)
        return destination
    raise ValueError(f"Unsupported report format '{destination.suffix}'. Use CSV or Excel spreadsheet")


__all__ = ["analysis_frames", "export_analysis", "summary_row"]
