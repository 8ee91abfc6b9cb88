"""
Signal mapping export.

Runs the full pipeline over a batch of records: plan, optionally persist the
generated measurement points, assemble rows, and report summary counts.
"""

import logging
import pathlib
import typing

from dataclasses import asdict, dataclass, field

import pandas as pd

from stairval.notepad import Notepad

from .assembler import assemble_rows
from .final_row import FinalRow
from .measurement import MeasurementRecord
from .planner import build_assignment_plan
from .settings import ExportSettings
from .store import MeasurementStore

logger = logging.getLogger(__name__)

CSV_COLUMNS = {
    "device": "DeviceAcronym",
    "description": "Description",
    "identifier": "MeasurementPoint",
    "quantity": "Quantity",
}


@dataclass
class ExportResult:
    """
    Summary of one export run.

    Attributes:
        total_loaded: Records read from the source.
        exported: Rows emitted.
        excluded_too_long: Records skipped because their measurement point is over-long.
        identifiers_generated: New measurement points generated this run.
        identifiers_persisted: Generated measurement points written back to the store.
        rows: The emitted rows.
    """

    total_loaded: int
    exported: int
    excluded_too_long: int
    identifiers_generated: int
    identifiers_persisted: int
    rows: list[FinalRow] = field(default_factory=list)


def export_measurement_points(
    records: typing.Sequence[MeasurementRecord],
    settings: ExportSettings,
    *,
    notepad: Notepad,
    store: typing.Optional[MeasurementStore] = None,
) -> ExportResult:
    plan = build_assignment_plan(records, settings.prefixes)

    for record in plan.records:
        if plan.is_excluded(record.signal_id):
            notepad.add_warning(
                f"Signal {record.signal_id}: measurement point {record.alternate_tag.strip()!r} "
                f"is longer than 16 characters and was not exported"
            )

    persisted = 0
    if settings.persist_identifiers:
        if store is None:
            notepad.add_warning("Persisting measurement points needs a database source; nothing was written")
        else:
            persisted = store.persist_identifiers(plan.updates)

    rows = assemble_rows(None, plan, map_power_quantities=settings.map_power_quantities)

    return ExportResult(
        total_loaded=len(records),
        exported=len(rows),
        excluded_too_long=len(plan.excluded_signal_ids),
        identifiers_generated=len(plan.generated),
        identifiers_persisted=persisted,
        rows=rows,
    )


def write_rows_csv(rows: typing.Iterable[FinalRow], path: str | pathlib.Path) -> pathlib.Path:
    """Write rows as UTF-8 CSV (no BOM) with the signal mapping header."""
    path = pathlib.Path(path)
    df = pd.DataFrame([asdict(row) for row in rows], columns=list(CSV_COLUMNS))
    df = df.rename(columns=CSV_COLUMNS).fillna("")
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info("Wrote %d rows to %s", len(df), path)
    return path
