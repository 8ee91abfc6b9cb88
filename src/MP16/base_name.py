"""
Base measurement point builder.

Derives a memorable identifier of at most 16 characters from a raw point tag,
e.g. "ACME_GRAND_GULF_1-IA" -> "GRNDGULF1" once the "ACME" prefix is stripped.
The base identifier only names the station; line and phasor identity are
layered on later by the allocator.
"""

import typing

from .compress import compress_word, normalize_alphanumeric
from .tokens import is_name_token, is_non_name_marker, is_system_prefix, is_unit_token

MAX_IDENTIFIER_LENGTH = 16

# Separators that may follow an excluded prefix, checked in this order
_PREFIX_SEPARATORS = ("_", "-", "")


def strip_prefixes(raw: str, prefixes: typing.Iterable[str]) -> str:
    """
    Strip each configured prefix from the head of an uppercased point tag.

    Per prefix the first matching form wins: "<P>_", then "<P>-", then "<P>".
    """
    for prefix in prefixes:
        prefix = (prefix or "").strip().upper()
        if not prefix:
            continue
        for separator in _PREFIX_SEPARATORS:
            head = prefix + separator
            if raw.startswith(head):
                raw = raw[len(head):]
                break
    return raw


def scan_name_tokens(left: str) -> typing.Tuple[typing.List[str], typing.Optional[str]]:
    """
    Scan the left segment of a point tag and return (name_tokens, unit_token).

    Leading system prefixes are skipped, the first unit number is remembered,
    and scanning stops at the first non-name marker.
    """
    tokens = [token.strip() for token in left.split("_")]
    tokens = [token for token in tokens if token]

    index = 0
    while index < len(tokens) and is_system_prefix(tokens[index]):
        index += 1

    name_tokens: list[str] = []
    unit: typing.Optional[str] = None
    # Past the head, system-prefix words such as SUB are ordinary name tokens
    for token in tokens[index:]:
        if unit is None and is_unit_token(token):
            unit = token
            continue
        if is_non_name_marker(token):
            break
        if is_name_token(token):
            name_tokens.append(token)

    return name_tokens, unit


def build_station_name(name_tokens: typing.Sequence[str], unit: typing.Optional[str]) -> str:
    # Every token but the last is compressed so the last one stays readable:
    # GRAND + GULF + 1 -> GRNDGULF1
    parts = [
        compress_word(token.upper()) if position < len(name_tokens) - 1 else token.upper()
        for position, token in enumerate(name_tokens)
    ]
    if unit:
        parts.append(unit)
    return "".join(parts)


def build_base_identifier(point_tag: typing.Optional[str], prefixes: typing.Iterable[str] = ()) -> typing.Optional[str]:
    """
    Build the base measurement point for a point tag.

    Returns None when no name token can be found; such records are skipped by
    the caller (no identifier, no row).
    """
    if point_tag is None or not point_tag.strip():
        return None

    raw = strip_prefixes(point_tag.strip().upper(), prefixes)

    # Right of the first dash carries phase/type hints, never naming
    left = raw.split("-", 1)[0]

    name_tokens, unit = scan_name_tokens(left)
    if not name_tokens:
        return None

    packed = normalize_alphanumeric(build_station_name(name_tokens, unit))
    if not packed:
        return None

    return packed[:MAX_IDENTIFIER_LENGTH]
