import pathlib

import pandas as pd

# Columns that need renaming → canonical MeasurementRecord fields
RENAME_MAP = {
    # identity columns
    "signalid": "signal_id",
    "id": "signal_id",
    "pointtag": "point_tag",
    "tag": "point_tag",
    # naming columns
    "alternatetag": "alternate_tag",
    "measurement_point": "alternate_tag",
    "measurementpoint": "alternate_tag",
    "acronym": "device",
    "device_acronym": "device",
    "deviceacronym": "device",
    # signal columns
    "signaltype": "signal_type",
    "signal_acronym": "signal_type",
    "engineeringunits": "engineering_units",
    "units": "engineering_units",
    "phasortype": "phasor_type",
    "phasorlabel": "phasor_label",
    "label": "phasor_label",
}

# Worksheet names tried, in order, before falling back to the first sheet
MEASUREMENT_SHEET_NAMES = ("measurements", "measurement", "activemeasurement", "active_measurement")


class MeasurementLoadError(RuntimeError):
    """Raised when a measurement table cannot be read."""


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """
    CLEAN & NORMALIZE headers:
      - strip, drop any "(…)" note, spaces → underscore, drop colons
      - CamelCase → snake_case, lowercase
      - apply renames from RENAME_MAP
    """
    df = df.copy()
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)"
        .str.replace(r"\s+", "_", regex=True)  # spaces → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.replace(r"(?<=[a-z0-9])(?=[A-Z])", "_", regex=True)  # SignalID → Signal_ID
        .str.lower()
    )

    # apply specific renames (e.g. "acronym" → "device"), never clobbering a canonical column
    return df.rename(
        columns={
            orig: target
            for orig, target in RENAME_MAP.items()
            if orig in df.columns and target not in df.columns
        }
    )


def _pick_sheet(excel: pd.ExcelFile) -> str:
    by_lower = {str(name).strip().lower(): name for name in excel.sheet_names}
    for candidate in MEASUREMENT_SHEET_NAMES:
        if candidate in by_lower:
            return by_lower[candidate]
    return excel.sheet_names[0]


def load_measurement_table(path: str | pathlib.Path) -> pd.DataFrame:
    """
    Read a measurement export into a DataFrame with canonical column names.

    `.csv` files are read with pandas; `.xlsx` workbooks with openpyxl, using the
    sheet named like "Measurements" or else the first sheet. Every cell is read
    as text so GUIDs and unit numbers keep their exact spelling.
    """
    path = pathlib.Path(path)
    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
        elif suffix in (".xlsx", ".xlsm"):
            excel = pd.ExcelFile(path, engine="openpyxl")
            df = pd.read_excel(
                excel,
                sheet_name=_pick_sheet(excel),
                header=0,
                dtype=str,
                keep_default_na=False,
                na_values=[""],
                engine="openpyxl",
            )
        else:
            raise MeasurementLoadError(f"Unsupported measurement file type {path.suffix!r} ({path})")
    except (OSError, ValueError) as exc:
        raise MeasurementLoadError(f"Could not read measurements from {path}: {exc}") from exc

    return normalize_headers(df)
