"""
Quantity descriptors for measurement point rows.

Maps a measurement's signal type, phase and description to the quantity
column of the signal mapping export, e.g. 'PhaseA.Voltage.Magnitude'.
"""

import typing

from .measurement import MeasurementRecord

FREQUENCY = "Frequency"
FREQUENCY_DXDT = "Frequency.DxDt"

# Phase codes: 1 = positive sequence, 2 = negative sequence
PHASE_MAP = {
    "A": "A",
    "B": "B",
    "C": "C",
    "0": "0",
    "+": "1",
    "1": "1",
    "-": "2",
    "2": "2",
}

# Description fragments hinting at the phase when the phase column is empty
PHASE_HINTS: typing.Tuple[typing.Tuple[str, typing.Tuple[str, ...]], ...] = (
    ("A", (" A ", "_A_", "_A-")),
    ("B", (" B ", "_B_", "_B-")),
    ("C", (" C ", "_C_", "_C-")),
    ("0", (" 0 ", "_0_", "_0-", "ZERO")),
    ("1", (" + ", "_+_", "_+-", "POS")),
    ("2", (" - ", "_-_", "_--", "NEG")),
)

PHASOR_QUANTITIES = {
    "VPHM": "Voltage.Magnitude",
    "VPHA": "Voltage.Angle",
    "IPHM": "Current.Magnitude",
    "IPHA": "Current.Angle",
}

PHASE_POWER_QUANTITIES = (
    ("APPARENT POWER", "Power.Apparent"),
    ("REACTIVE POWER", "Power.Reactive"),
    ("ACTIVE POWER", "Power.Real"),
)

# Order matters: "3-PHASE MVAR" and "3-PHASE MVA" both contain "3-PHASE MV"
THREE_PHASE_POWER_QUANTITIES = (
    ("3-PHASE MVAR", "ThreePhase.Power.Reactive"),
    ("3-PHASE MVA", "ThreePhase.Power.Apparent"),
    ("3-PHASE MW", "ThreePhase.Power.Real"),
)


def normalize_phase(phase: typing.Optional[str]) -> typing.Optional[str]:
    if phase is None:
        return None
    return PHASE_MAP.get(phase.strip().upper())


def phase_from_description(description: typing.Optional[str]) -> typing.Optional[str]:
    text = (description or "").upper()
    for phase, hints in PHASE_HINTS:
        if any(hint in text for hint in hints):
            return phase
    return None


def map_quantity(record: MeasurementRecord, *, map_power_quantities: bool = False) -> typing.Optional[str]:
    """
    Return the quantity descriptor for a record, or None when it has no mapping.

    Power quantities are only mapped when `map_power_quantities` is set.
    """
    signal_type = (record.signal_type or "").strip().upper()

    if signal_type == "FREQ":
        return FREQUENCY
    if signal_type == "DFDT":
        return FREQUENCY_DXDT

    phase = normalize_phase(record.phase) or phase_from_description(record.description)

    if signal_type in PHASOR_QUANTITIES and phase is not None:
        return f"Phase{phase}.{PHASOR_QUANTITIES[signal_type]}"

    if map_power_quantities:
        description = (record.description or "").upper()
        if phase is not None:
            for marker, quantity in PHASE_POWER_QUANTITIES:
                if marker in description:
                    return f"Phase{phase}.{quantity}"
        for marker, quantity in THREE_PHASE_POWER_QUANTITIES:
            if marker in description:
                return quantity

    return None
