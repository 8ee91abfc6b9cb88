import sqlite3

import pytest

from MP16.measurement import MeasurementRecord

MEASUREMENT_COLUMNS = (
    "SignalID",
    "PointTag",
    "AlternateTag",
    "Device",
    "Description",
    "SignalType",
    "EngineeringUnits",
    "Phase",
    "PhasorType",
    "PhasorLabel",
)

# SignalID, PointTag, AlternateTag, Device, Description, SignalType, EngineeringUnits, Phase, PhasorType, PhasorLabel
SAMPLE_ROWS = [
    ("sig-1", "GPA_ADAMS_CREEK_1-BOGALUSA_A_VM", None, "ADAMS_CREEK_1_D_EPN6", "ADAMS_CREEK_1_D_EPN6 BOGALUSA A Voltage Magnitude",
     "VPHM", "Volts", "A", "V", "BOGALUSA_LN_A"),
    ("sig-2", "GPA_ADAMS_CREEK_1-BOGALUSA_A_VA", None, "ADAMS_CREEK_1_D_EPN6", "ADAMS_CREEK_1_D_EPN6 BOGALUSA A Voltage Angle",
     "VPHA", "Degrees", "A", "V", "BOGALUSA_LN_A"),
    ("sig-3", "GPA_ADAMS_CREEK_1-BOGALUSA_B_VM", "", "ADAMS_CREEK_1_D_EPN6", "ADAMS_CREEK_1_D_EPN6 BOGALUSA A Voltage Magnitude",
     "VPHM", "Volts", "A", "V", "BOGALUSA_LN_B"),
    ("sig-4", "GPA_ADAMS_CREEK_1-FQ", None, "ADAMS_CREEK_1_D_EPN6", "ADAMS_CREEK_1_D_EPN6 Frequency",
     "FREQ", "Hz", None, None, None),
    ("sig-5", "GPA_GOSLIN_ALDEN-VA", "GSLNALDN", "GOSLIN_ALDEN_P_NNN4", "GOSLIN_ALDEN_P_NNN4 LINE1 A Voltage Magnitude",
     "VPHM", "Volts", "A", "V", "LINE1_VA"),
    ("sig-6", "GPA_VERY_LONG_EXISTING-VA", "THIS_NAME_IS_TOO_LONG", "LONG_D_EPN1", "LONG_D_EPN1 X A Voltage Magnitude",
     "VPHM", "Volts", "A", "V", "X_VA"),
    ("sig-7", "GPA_1-IA", None, "NOISE_D_EPN1", "NOISE_D_EPN1 Current",
     "IPHM", "Amps", "A", "I", "NOISE_IA"),
]


@pytest.fixture
def measurement_db(tmp_path) -> str:
    """
    A configuration database with a Measurement table and an ActiveMeasurement view.
    """
    db_path = tmp_path / "openPG.db"
    conn = sqlite3.connect(db_path)
    conn.execute(
        "CREATE TABLE Measurement ("
        + ", ".join(f"{column} TEXT" for column in MEASUREMENT_COLUMNS)
        + ", Enabled INTEGER NOT NULL DEFAULT 1)"
    )
    conn.execute(
        "CREATE VIEW ActiveMeasurement AS SELECT "
        + ", ".join(MEASUREMENT_COLUMNS)
        + " FROM Measurement WHERE Enabled = 1"
    )
    conn.executemany(
        f"INSERT INTO Measurement ({', '.join(MEASUREMENT_COLUMNS)}) VALUES ({', '.join('?' * len(MEASUREMENT_COLUMNS))})",
        SAMPLE_ROWS,
    )
    conn.commit()
    conn.close()
    return str(db_path)


@pytest.fixture
def measurement_csv(tmp_path) -> str:
    """
    The same measurements as a CSV export with the store's column headers.
    """
    path = tmp_path / "measurements.csv"
    lines = [",".join(MEASUREMENT_COLUMNS)]
    for row in SAMPLE_ROWS:
        lines.append(",".join("" if value is None else value for value in row))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def make_record(signal_id: str, point_tag: str = "GPA_ADAMS_CREEK_1-X", **kwargs) -> MeasurementRecord:
    return MeasurementRecord(signal_id=signal_id, point_tag=point_tag, **kwargs)


@pytest.fixture
def record_factory():
    return make_record
