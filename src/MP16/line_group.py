"""
Line grouping.

All measurements of the same physical phasor or line must converge on one
measurement point. This module derives the grouping key for a measurement and
the helpers it relies on: PMU device detection, phase-suffix stripping and
line-name extraction from free-text descriptions.
"""

import re
import typing

from .measurement import MeasurementRecord
from .tokens import is_frequency_type, is_phase_or_signal_indicator, is_phasor_type

PMU_MARKER = "_P_"

# Device acronyms like GOSLIN_ALDEN_P_NNN4: marker, three letters, one digit, end
_PMU_SUFFIX = re.compile(r"^[A-Za-z]{3}[0-9]$")

PHASE_SUFFIXES = ("IA", "IB", "IC", "I1", "I2", "I0", "VA", "VB", "VC", "V1", "V2", "V0")

POWER_CALCULATION_MARKER = "-MW_"
CALCULATED_VALUE_MARKER = " Calculated Value:"

_CALCULATED_VALUE_HINTS = ("-MW_", "CALCULATED VALUE:", "POWER CALCULATION", "3-PHASE")


def is_pmu_device(device: typing.Optional[str]) -> bool:
    """
    Single-line PMU devices end in _P_ followed by exactly three letters and a digit.
    """
    if not device or not device.strip():
        return False
    index = device.upper().find(PMU_MARKER)
    if index < 0:
        return False
    return bool(_PMU_SUFFIX.match(device[index + len(PMU_MARKER):]))


def extract_pmu_base_name(device: typing.Optional[str]) -> typing.Optional[str]:
    """
    Station portion of a PMU device acronym: "GOSLIN_ALDEN_P_NNN4" -> "GOSLIN_ALDEN".
    """
    if not device or not device.strip():
        return None
    index = device.upper().find(PMU_MARKER)
    return device[:index] if index > 0 else None


def strip_phase_suffix(label: str) -> str:
    """
    Remove a trailing phase code and the underscores before it.

    "AUTOTRAN_1____IA" -> "AUTOTRAN_1", "230_NORREL_LN_IB" -> "230_NORREL_LN".
    "BOGALUSA_LN_A" is untouched: a bare letter is a line suffix, not a phase.
    """
    if not label or not label.strip():
        return label

    upper = label.upper()
    for suffix in PHASE_SUFFIXES:
        if not upper.endswith(suffix):
            continue
        suffix_start = len(label) - len(suffix)
        underscore_start = suffix_start
        while underscore_start > 0 and label[underscore_start - 1] == "_":
            underscore_start -= 1
        if underscore_start < suffix_start:
            return label[:underscore_start]

    return label


def _line_after_power_marker(description: str) -> typing.Optional[str]:
    # "DEVICE-MW_A-WPEC Active Power Calculation" -> "WPEC"
    index = description.upper().find(POWER_CALCULATION_MARKER)
    if index < 0:
        return None
    start = index + len(POWER_CALCULATION_MARKER) + 1  # marker plus the phase character
    if start < len(description) and description[start] == "-":
        start += 1
    if start >= len(description):
        return None
    end = description.find(" ", start)
    if end < 0:
        end = len(description)
    line_name = description[start:end].strip()
    return line_name if len(line_name) >= 2 else None


def _line_before_calculated_value(description: str) -> typing.Optional[str]:
    # "DEVICE WPEC Calculated Value: 3-Phase MW" -> "WPEC"
    index = description.upper().find(CALCULATED_VALUE_MARKER.upper())
    if index <= 0:
        return None
    first_space = description.find(" ")
    if first_space <= 0 or first_space >= index:
        return None
    middle = description[first_space + 1:index].strip()
    return middle if len(middle) >= 2 else None


def _line_after_device_token(description: str) -> typing.Optional[str]:
    # "RAY_BRASWELL_2_D_EPN6 EAST_BUS A Voltage Magnitude" -> "EAST_BUS"
    index = description.find(" ")
    if index <= 0 or index >= len(description) - 1:
        return None
    tokens = description[index + 1:].split()
    if not tokens:
        return None

    candidate = tokens[0]
    if not is_phase_or_signal_indicator(candidate) and len(candidate) >= 2:
        return candidate

    # A short first token may be the first half of a two-word name ("EL DORADO")
    if len(tokens) <= 1 or len(candidate) >= 3:
        return None
    if is_phase_or_signal_indicator(tokens[1]):
        return None
    return f"{candidate}_{tokens[1]}"


def extract_line_name_from_description(description: typing.Optional[str]) -> typing.Optional[str]:
    """
    Pull a line name out of a measurement description.

    Patterns are tried in order: text after a power calculation marker, text
    between the device token and "Calculated Value:", then the first token
    after the device token.
    """
    if not description or not description.strip():
        return None
    return (
        _line_after_power_marker(description)
        or _line_before_calculated_value(description)
        or _line_after_device_token(description)
    )


def extract_canonical_line_name(record: MeasurementRecord) -> typing.Optional[str]:
    """
    Line name of a measurement with the phase suffix removed.

    Phasors use their label; everything else falls back to the description.
    """
    if is_phasor_type(record.signal_type):
        label = (record.phasor_label or "").strip()
        if label:
            return strip_phase_suffix(label)

    extracted = extract_line_name_from_description(record.description)
    return strip_phase_suffix(extracted) if extracted else None


def is_calculated_value(record: MeasurementRecord) -> bool:
    description = (record.description or "").upper()
    return any(hint in description for hint in _CALCULATED_VALUE_HINTS)


def line_group_key(record: MeasurementRecord) -> str:
    """
    Grouping key; measurements with equal keys share one measurement point.

    Priority: single-line PMU device, phasor label, description line name
    (in the PHASOR namespace so calculated values join their phasor), the
    frequency family, then a per-signal fallback.
    """
    device = record.device or ""

    if is_pmu_device(device):
        return f"{device}|PMU"

    if is_phasor_type(record.signal_type):
        label = (record.phasor_label or "").strip()
        if label:
            return f"{device}|PHASOR|{strip_phase_suffix(label)}"

    line_name = extract_line_name_from_description(record.description)
    if line_name:
        return f"{device}|PHASOR|{strip_phase_suffix(line_name)}"

    if is_frequency_type(record.signal_type):
        return f"{device}|FREQ"

    return f"{device}|{record.signal_id}"
