"""
Token classification for point tags and measurement descriptions.

Point tags are split on separators into tokens; each token is classified as a
system prefix, a unit number, a non-name marker or a name-worthy token. The
vocabularies are closed sets so every rule lives in one place.
"""

from enum import Enum, auto
import typing


class TokenKind(Enum):
    """
    Classification of a single point-tag token.
    """
    SYSTEM_PREFIX = auto()
    UNIT = auto()
    NON_NAME_MARKER = auto()
    NAME = auto()
    OTHER = auto()


# Facility / role markers that may lead a point tag
SYSTEM_PREFIXES = frozenset({"PMU", "PDC", "SUB", "SITE"})

# Exact tokens that end the station-name portion of a point tag
NON_NAME_MARKERS = frozenset({"D", "P"})

# Device-class codes (e.g. EPN8, NNN4) also end the station-name portion
NON_NAME_MARKER_PREFIXES = ("EPN", "EPI", "ENN", "ENI", "NPN", "NPI", "NNN", "NNI")

# Words that describe phase or signal type and can never be a line name
PHASE_OR_SIGNAL_INDICATORS = frozenset({
    "A", "B", "C", "+", "-", "0", "1", "2",
    "CURRENT", "VOLTAGE", "MAGNITUDE", "ANGLE", "PHASE",
    "FREQUENCY", "CALCULATED", "VALUE", "CALCULATION",
    "ACTIVE", "REACTIVE", "APPARENT", "POWER", "3-PHASE",
    "THREEPHASE", "THREE", "MW", "MVA", "MVAR",
})

PHASOR_SIGNAL_TYPES = frozenset({"VPHA", "VPHM", "IPHA", "IPHM"})
FREQUENCY_SIGNAL_TYPES = frozenset({"FREQ", "DFDT"})

_MAX_UNIT = 99


def is_system_prefix(token: str) -> bool:
    return token.strip().upper() in SYSTEM_PREFIXES


def is_unit_token(token: str) -> bool:
    """
    True for a plain decimal number in the range 0..99 (leading zeros allowed).
    """
    token = token.strip()
    if not token or not (token.isascii() and token.isdigit()):
        return False
    return int(token) <= _MAX_UNIT


def is_non_name_marker(token: str) -> bool:
    token = token.strip().upper()
    return token in NON_NAME_MARKERS or token.startswith(NON_NAME_MARKER_PREFIXES)


def is_name_token(token: str) -> bool:
    """
    A name token is ASCII-alphabetic and at least three characters long.
    """
    token = token.strip()
    return len(token) >= 3 and token.isascii() and token.isalpha()


def classify_token(token: typing.Any) -> TokenKind:
    """
    Classify a point-tag token. Total over any input: non-strings are OTHER.

    Precedence: system prefix, unit, non-name marker, name.
    """
    if not isinstance(token, str):
        return TokenKind.OTHER
    if is_system_prefix(token):
        return TokenKind.SYSTEM_PREFIX
    if is_unit_token(token):
        return TokenKind.UNIT
    if is_non_name_marker(token):
        return TokenKind.NON_NAME_MARKER
    if is_name_token(token):
        return TokenKind.NAME
    return TokenKind.OTHER


def is_phase_or_signal_indicator(token: str) -> bool:
    return token.strip().upper() in PHASE_OR_SIGNAL_INDICATORS


def _signal_type_key(signal_type: typing.Optional[str]) -> str:
    return (signal_type or "").strip().upper()


def is_phasor_type(signal_type: typing.Optional[str]) -> bool:
    return _signal_type_key(signal_type) in PHASOR_SIGNAL_TYPES


def is_frequency_type(signal_type: typing.Optional[str]) -> bool:
    return _signal_type_key(signal_type) in FREQUENCY_SIGNAL_TYPES
