"""
SQLite access to the measurement configuration store.

Records are read from the ActiveMeasurement view (or table); generated
measurement points are written back to Measurement.AlternateTag, only where
that field is still empty.
"""

import logging
import pathlib
import sqlite3
import typing

import pandas as pd

from stairval.notepad import Notepad

from .loader import normalize_headers
from .mapper import MeasurementMapper
from .measurement import MeasurementRecord
from .planner import IdentifierUpdate

logger = logging.getLogger(__name__)

SOURCE_VIEW = "ActiveMeasurement"

SELECT_MEASUREMENTS = f"""
    SELECT SignalID, PointTag, AlternateTag, Device, Description, SignalType,
           EngineeringUnits, Phase, PhasorType, PhasorLabel
    FROM {SOURCE_VIEW}
"""

# Never overwrite a value set since the records were read
UPDATE_ALTERNATE_TAG = (
    "UPDATE Measurement SET AlternateTag = ? "
    "WHERE SignalID = ? AND (AlternateTag IS NULL OR AlternateTag = '')"
)


class MeasurementStoreError(RuntimeError):
    """Raised when the measurement store cannot be read or written."""


class MeasurementStore:
    def __init__(self, db_path: str | pathlib.Path):
        self.db_path = pathlib.Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.is_file():
            raise MeasurementStoreError(f"Database file not found: {self.db_path}")
        try:
            return sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise MeasurementStoreError(f"Could not open database {self.db_path}: {exc}") from exc

    def read_table(self) -> pd.DataFrame:
        conn = self._connect()
        try:
            df = pd.read_sql_query(SELECT_MEASUREMENTS, conn)
        except (sqlite3.Error, pd.errors.DatabaseError) as exc:
            raise MeasurementStoreError(f"Could not query {SOURCE_VIEW} in {self.db_path}: {exc}") from exc
        finally:
            conn.close()
        logger.info("Read %d rows from %s in %s", len(df), SOURCE_VIEW, self.db_path)
        return normalize_headers(df)

    def load_records(self, notepad: Notepad) -> list[MeasurementRecord]:
        """Read and map every active measurement; row issues go to `notepad`."""
        mapper = MeasurementMapper(source_name=f"{self.db_path.name}:{SOURCE_VIEW}")
        return mapper.map_table(self.read_table(), notepad)

    def persist_identifiers(self, updates: typing.Iterable[IdentifierUpdate]) -> int:
        """
        Write generated measurement points back, one statement per update and a
        single commit. Returns the number of rows actually changed.
        """
        updates = list(updates)
        if not updates:
            return 0

        conn = self._connect()
        written = 0
        try:
            for update in updates:
                cursor = conn.execute(UPDATE_ALTERNATE_TAG, (update.identifier, update.signal_id))
                written += max(cursor.rowcount, 0)
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise MeasurementStoreError(f"Could not persist measurement points to {self.db_path}: {exc}") from exc
        finally:
            conn.close()

        logger.info("Persisted %d of %d generated measurement points", written, len(updates))
        return written
