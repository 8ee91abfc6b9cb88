import sqlite3

import pytest
from stairval.notepad import create_notepad

from MP16.planner import IdentifierUpdate
from MP16.store import MeasurementStore, MeasurementStoreError


def _alternate_tags(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return dict(conn.execute("SELECT SignalID, AlternateTag FROM Measurement").fetchall())
    finally:
        conn.close()


def test_load_records_reads_active_measurements(measurement_db):
    note = create_notepad("measurements")
    records = MeasurementStore(measurement_db).load_records(note)
    assert not note.has_errors(include_subsections=True)
    assert len(records) == 7
    by_id = {r.signal_id: r for r in records}
    assert by_id["sig-1"].phasor_label == "BOGALUSA_LN_A"
    assert by_id["sig-1"].alternate_tag is None
    assert by_id["sig-3"].alternate_tag is None
    assert by_id["sig-5"].alternate_tag == "GSLNALDN"
    assert by_id["sig-4"].signal_type == "FREQ"


def test_disabled_measurements_are_not_read(measurement_db):
    conn = sqlite3.connect(measurement_db)
    conn.execute("UPDATE Measurement SET Enabled = 0 WHERE SignalID = 'sig-7'")
    conn.commit()
    conn.close()
    records = MeasurementStore(measurement_db).load_records(create_notepad("measurements"))
    assert "sig-7" not in {r.signal_id for r in records}


def test_persist_only_fills_empty_values(measurement_db):
    store = MeasurementStore(measurement_db)
    written = store.persist_identifiers(
        [
            IdentifierUpdate("sig-1", "ADMSCREEK1"),
            IdentifierUpdate("sig-3", "ADMSCREEK1"),
            IdentifierUpdate("sig-5", "SHOULD_NOT_LAND"),
        ]
    )
    assert written == 2
    tags = _alternate_tags(measurement_db)
    assert tags["sig-1"] == "ADMSCREEK1"
    assert tags["sig-3"] == "ADMSCREEK1"
    assert tags["sig-5"] == "GSLNALDN"


def test_persist_is_idempotent(measurement_db):
    store = MeasurementStore(measurement_db)
    assert store.persist_identifiers([IdentifierUpdate("sig-1", "FIRST")]) == 1
    assert store.persist_identifiers([IdentifierUpdate("sig-1", "SECOND")]) == 0
    assert _alternate_tags(measurement_db)["sig-1"] == "FIRST"


def test_persist_nothing(measurement_db):
    assert MeasurementStore(measurement_db).persist_identifiers([]) == 0


def test_missing_database(tmp_path):
    store = MeasurementStore(tmp_path / "absent.db")
    with pytest.raises(MeasurementStoreError):
        store.load_records(create_notepad("measurements"))


def test_database_without_view(tmp_path):
    db_path = tmp_path / "empty.db"
    sqlite3.connect(db_path).close()
    with pytest.raises(MeasurementStoreError):
        MeasurementStore(db_path).load_records(create_notepad("measurements"))


def test_failed_write_raises_store_error(tmp_path):
    db_path = tmp_path / "no_table.db"
    sqlite3.connect(db_path).close()
    with pytest.raises(MeasurementStoreError):
        MeasurementStore(db_path).persist_identifiers([IdentifierUpdate("sig-1", "X")])
