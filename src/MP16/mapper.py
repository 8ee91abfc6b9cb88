import abc
import typing

import pandas as pd

from stairval.notepad import Notepad

from .measurement import MeasurementRecord

# Minimal required columns (after renaming) to map a measurement table
MEASUREMENT_KEY_COLUMNS = {"signal_id", "point_tag"}

# Optional columns copied onto the record when present
MEASUREMENT_OPTIONAL_COLUMNS = (
    "alternate_tag",
    "device",
    "description",
    "signal_type",
    "engineering_units",
    "phase",
    "phasor_type",
    "phasor_label",
)


class TableMapper(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def map_table(self, df: pd.DataFrame, notepad: Notepad) -> typing.Sequence[MeasurementRecord]:
        # return measurement records, one per usable row
        raise NotImplementedError


class MeasurementMapper(TableMapper):
    def __init__(self, source_name: str = "measurements"):
        """
        `source_name` prefixes every notepad message, e.g. a file name or table name.
        """
        self.source_name = source_name

    def map_table(self, df: pd.DataFrame, notepad: Notepad) -> list[MeasurementRecord]:
        """
        Process:
        1) check the key columns are present
        2) parse each row into a MeasurementRecord
        3) return the records in table order
        """
        missing = sorted(MEASUREMENT_KEY_COLUMNS - set(df.columns))
        if missing:
            notepad.add_error(f"Source {self.source_name!r}: missing required column(s) {', '.join(missing)}")
            return []

        records: list[MeasurementRecord] = []
        for position, (_, row) in enumerate(df.iterrows(), start=1):
            record = self.parse_measurement_row(row, position, self.source_name, notepad)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _to_text(value: typing.Any) -> typing.Optional[str]:
        """
        Cell normalization:
        - None, NaN, pandas NA and whitespace-only strings -> None
        - whole floats lose their '.0' (spreadsheets turn unit numbers into floats)
        - everything else is trimmed text
        """
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        s = str(value).strip()
        return s or None

    @staticmethod
    def parse_measurement_row(
        row: pd.Series, position: int, source_name: str, notepad: Notepad
    ) -> typing.Optional[MeasurementRecord]:
        """
        Parse a single row into a MeasurementRecord.
        Returns None (after noting an error) when the row has no signal id.
        """
        signal_id = MeasurementMapper._to_text(row.get("signal_id"))
        if signal_id is None:
            notepad.add_error(f"Source {source_name!r}: row {position} has no signal ID")
            return None

        optional = {column: MeasurementMapper._to_text(row.get(column)) for column in MEASUREMENT_OPTIONAL_COLUMNS}
        try:
            return MeasurementRecord(
                signal_id=signal_id,
                point_tag=MeasurementMapper._to_text(row.get("point_tag")) or "",
                **optional,
            )
        except (ValueError, TypeError) as e:
            notepad.add_error(f"Source {source_name!r}: row {position}: {e}")
            return None
