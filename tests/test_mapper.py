"""
Ensure the measurement mapper enforces required columns and reports row errors.
"""

import math

import pandas as pd
from stairval.notepad import create_notepad

from MP16.mapper import MeasurementMapper


def test_missing_required_columns_errors():
    note = create_notepad("measurements")
    df = pd.DataFrame({"signal_id": ["s1"], "device": ["DEV"]})
    records = MeasurementMapper().map_table(df, note)
    assert records == []
    assert note.has_errors(include_subsections=True)
    assert "point_tag" in " ".join(str(e) for e in note.errors())


def test_rows_are_mapped_in_table_order():
    note = create_notepad("measurements")
    df = pd.DataFrame(
        {
            "signal_id": [" s2 ", "s1"],
            "point_tag": ["GPA_CANE_RIVER_2-VA", "GPA_GRAND_GULF_1-IA"],
            "alternate_tag": [None, "GGULF1"],
            "device": ["DEV", ""],
            "phase": [math.nan, "A"],
        }
    )
    records = MeasurementMapper().map_table(df, note)
    assert not note.has_errors(include_subsections=True)
    assert [r.signal_id for r in records] == ["s2", "s1"]
    assert records[0].alternate_tag is None
    assert records[0].phase is None
    assert records[1].device is None
    assert records[1].alternate_tag == "GGULF1"
    assert records[0].signal_type is None


def test_row_without_signal_id_is_skipped_with_error():
    note = create_notepad("measurements")
    df = pd.DataFrame({"signal_id": [None, "s2"], "point_tag": ["A", "B"]})
    records = MeasurementMapper(source_name="export.csv").map_table(df, note)
    assert [r.signal_id for r in records] == ["s2"]
    assert note.has_errors(include_subsections=True)
    assert "row 1" in " ".join(str(e) for e in note.errors())


def test_missing_point_tag_becomes_empty_string():
    note = create_notepad("measurements")
    df = pd.DataFrame({"signal_id": ["s1"], "point_tag": [None]})
    records = MeasurementMapper().map_table(df, note)
    assert records[0].point_tag == ""


def test_to_text_normalization():
    assert MeasurementMapper._to_text(None) is None
    assert MeasurementMapper._to_text(math.nan) is None
    assert MeasurementMapper._to_text(pd.NA) is None
    assert MeasurementMapper._to_text("   ") is None
    assert MeasurementMapper._to_text(2.0) == "2"
    assert MeasurementMapper._to_text(" VPHM ") == "VPHM"
