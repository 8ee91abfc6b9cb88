"""
Measurement domain model.

Defines the MeasurementRecord dataclass for one active measurement signal as
read from the configuration store or a spreadsheet export.
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class MeasurementRecord:
    """
    Represents a single measurement signal and its naming metadata.

    Attributes:
        signal_id: Opaque, stable signal key (usually a GUID string).
        point_tag: Full point tag, e.g. 'ACME_GRAND_GULF_1-IA'.
        alternate_tag: Measurement point already assigned to the signal, if any.
        device: Device acronym, e.g. 'GRAND_GULF_1_D_EPN8'.
        description: Free-text description of the signal.
        signal_type: Signal type code (VPHM, VPHA, IPHM, IPHA, FREQ, DFDT, CALC, ...).
        engineering_units: Engineering units of the value.
        phase: Phase code (A, B, C, 0, +, -, 1, 2).
        phasor_type: 'V' for voltage or 'I' for current phasors.
        phasor_label: Phasor label, usually naming the line (e.g. 'BOGALUSA_LN_A').
    """

    signal_id: str
    point_tag: str
    alternate_tag: Optional[str] = None
    device: Optional[str] = None
    description: Optional[str] = None
    signal_type: Optional[str] = None
    engineering_units: Optional[str] = None
    phase: Optional[str] = None
    phasor_type: Optional[str] = None
    phasor_label: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.signal_id, str) or not self.signal_id.strip():
            raise ValueError(f"Invalid signal ID: {self.signal_id!r}")
        if not isinstance(self.point_tag, str):
            raise ValueError(f"point_tag must be a string, got {type(self.point_tag).__name__}")

    @property
    def has_alternate_tag(self) -> bool:
        return bool(self.alternate_tag and self.alternate_tag.strip())

    def with_identifier(self, identifier: str) -> "MeasurementRecord":
        """Return a copy of this record carrying a newly assigned measurement point."""
        return replace(self, alternate_tag=identifier)
