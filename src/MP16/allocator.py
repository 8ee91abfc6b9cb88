"""
Measurement point allocation.

Turns a base identifier (station name) plus an optional line name into the
final measurement point, splitting the 16-character budget between the two:

    STATION_LINE     e.g. ADMSCRK1_WPC
    STATION_LINE_X   e.g. ADMSCRK1_BGLS_A  (X = line suffix after "LN")

Single-line PMU devices skip line naming and use their station name.
"""

import logging
import typing

from .compress import clean_identifier, compress_preserving_keyword, compress_word, normalize_alphanumeric
from .line_group import extract_canonical_line_name, extract_pmu_base_name, is_pmu_device
from .measurement import MeasurementRecord
from .uniqueness import MAX_IDENTIFIER_LENGTH, UsedIdentifiers, make_unique

logger = logging.getLogger(__name__)

MIN_BASE_LENGTH = 4
MIN_LINE_LENGTH = 3

LINE_TYPE_MARKER = "LN"


def split_line_suffix(normalized_line: str) -> typing.Tuple[str, typing.Optional[str]]:
    """
    Detect a segment suffix attached after the last "LN" marker.

    "BOGALUSALNA" -> ("BOGALUSA", "A"); with more than one character after the
    marker only the last one becomes the suffix: "CYPRESSLN12" -> ("CYPRESSLN1", "2").
    """
    index = normalized_line.upper().rfind(LINE_TYPE_MARKER)
    if index < 0 or index + len(LINE_TYPE_MARKER) >= len(normalized_line):
        return normalized_line, None

    after_marker = normalized_line[index + len(LINE_TYPE_MARKER):]
    if len(after_marker) == 1:
        return normalized_line[:index], after_marker

    last = after_marker[-1]
    if last.isalnum():
        return normalized_line[:-1], last
    return normalized_line, None


def _fit_segments(base: str, line: str, available: int) -> typing.Tuple[str, str]:
    # Line gets what is left after the base floor, but never less than its own floor
    line_length = min(len(line), available - MIN_BASE_LENGTH)
    base_length = available - line_length
    if line_length < MIN_LINE_LENGTH and len(line) >= MIN_LINE_LENGTH:
        line_length = MIN_LINE_LENGTH
        base_length = available - line_length

    base_length = min(base_length, len(base))
    line_length = min(line_length, len(line))

    final_base = base
    if len(base) > base_length:
        final_base = compress_word(base)[:base_length]

    return final_base, line[:line_length]


def _assemble(base: str, line: str, suffix: typing.Optional[str]) -> str:
    return f"{base}_{line}_{suffix}" if suffix else f"{base}_{line}"


def build_identifier_with_line(base: str, line_name: str) -> str:
    """
    Combine a station base and a line name within the 16-character budget.

    The line is compressed with the unit keyword preserved, the base is
    compressed before it is truncated, and a detected line suffix is kept
    verbatim at the end. If the result is still too long the base is shortened,
    never below its floor; in that case the over-length result is returned and
    the caller clamps it.
    """
    normalized_line = normalize_alphanumeric(line_name)
    if not normalized_line:
        return base

    line_base, suffix = split_line_suffix(normalized_line)
    if not line_base:
        line_base, suffix = normalized_line, None
    compressed_line = compress_preserving_keyword(line_base)

    fixed = 1 + (1 + len(suffix) if suffix else 0)
    final_base, final_line = _fit_segments(base, compressed_line, MAX_IDENTIFIER_LENGTH - fixed)

    result = _assemble(final_base, final_line, suffix)
    excess = len(result) - MAX_IDENTIFIER_LENGTH
    if excess <= 0:
        return result
    if len(final_base) - excess < MIN_BASE_LENGTH:
        return result
    return _assemble(final_base[:-excess], final_line, suffix)


def _allocate_pmu(device: str, station: str, used: UsedIdentifiers) -> str:
    candidate = normalize_alphanumeric(station)
    if len(candidate) <= MAX_IDENTIFIER_LENGTH and candidate not in used:
        return candidate
    if len(candidate) > MAX_IDENTIFIER_LENGTH:
        candidate = compress_word(candidate)
    candidate = candidate[:MAX_IDENTIFIER_LENGTH]
    if candidate not in used:
        return candidate
    return make_unique(candidate, device, used)


def allocate_identifier(record: MeasurementRecord, base: str, used: UsedIdentifiers) -> str:
    """
    Build the measurement point for the first member of a line group.

    `base` must already be a clean identifier (A-Z, 0-9, underscore). The
    result is at most 16 characters and not in `used`; the caller registers it.
    """
    device = record.device or ""

    if is_pmu_device(device):
        station = extract_pmu_base_name(device)
        if station and normalize_alphanumeric(station):
            return _allocate_pmu(device, station, used)

    line_name = extract_canonical_line_name(record)
    if line_name:
        candidate = clean_identifier(build_identifier_with_line(base, line_name))[:MAX_IDENTIFIER_LENGTH]
        if candidate not in used:
            return candidate
        logger.debug("Line measurement point %s already taken for signal %s", candidate, record.signal_id)

    # A taken line candidate falls back to the bare base, suffixed only if that is taken too
    return make_unique(base, record.signal_id, used)
