"""Tests for the analysis report export."""
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from list_quality.analysis import analyze_leads
from list_quality.models import Lead
from list_quality.report import export_analysis


@pytest.fixture
def analysis():
    leads = [
        Lead(id="a", name="Ada", phone="5551234567", email="ada@example.com"),
        Lead(id="b", name="Bea", phone="555-123-4567", email="bad-email"),
        Lead(id="c", name="", phone="12345"),
    ]
    return analyze_leads(leads, list_id="list-1")


def test_csv_export_contains_summary(tmp_path: Path, analysis) -> None:
    path = export_analysis(tmp_path / "reports" / "quality.csv", analysis)

    frame = pd.read_csv(path)
    assert len(frame) == 1
    row = frame.iloc[0]
    assert row["list_id"] == "list-1"
    assert row["total_leads"] == 3
    assert row["duplicate_phones"] == 1
    assert row["quality_score"] == analysis.quality_score


def test_excel_export_contains_every_sheet(tmp_path: Path, analysis) -> None:
    pytest.importorskip("openpyxl")
    path = export_analysis(tmp_path / "quality.xlsx", analysis)

    sheets = pd.read_excel(path, sheet_name=None)
    assert set(sheets) == {"summary", "phone_issues", "email_issues", "duplicates"}
    assert len(sheets["phone_issues"]) == len(analysis.phone_issues)
    assert list(sheets["email_issues"]["lead_id"]) == ["b"]
    duplicates = sheets["duplicates"]
    assert list(duplicates["retained_id"]) == ["a"]
    assert list(duplicates["removable_ids"]) == ["b"]


def test_unsupported_suffix(tmp_path: Path, analysis) -> None:
    with pytest.raises(ValueError, match="Unsupported report format"):
        export_analysis(tmp_path / "quality.txt", analysis)
