"""
Lossy name compression used to squeeze station and line names into the
16-character measurement point budget.
"""

import re

VOWELS = frozenset("AEIOU")

# Unit-type keyword kept verbatim inside compressed line names
UNIT_KEYWORD = "UNIT"

_NON_ALPHANUMERIC = re.compile(r"[^A-Z0-9]+")
_NON_IDENTIFIER = re.compile(r"[^A-Z0-9_]+")


def compress_word(word: str) -> str:
    """
    Keep the first character and drop every vowel after it.

    Words of two characters or fewer are returned unchanged, e.g.
    "GRAND" -> "GRND", "EL" -> "EL".
    """
    if len(word) <= 2:
        return word
    return word[0] + "".join(ch for ch in word[1:] if ch.upper() not in VOWELS)


def compress_preserving_keyword(name: str, keyword: str = UNIT_KEYWORD) -> str:
    """
    Compress a line name but leave a unit-type keyword (and whatever follows it) intact.

    "GENUNIT2" -> "GNUNIT2"; names of three characters or fewer stay readable ("KEO").
    """
    if len(name) <= 3:
        return name

    index = name.upper().find(keyword.upper())
    if index >= 0:
        return compress_word(name[:index]) + name[index:]

    return compress_word(name)


def normalize_alphanumeric(text: str) -> str:
    """Uppercase and keep only A-Z and 0-9."""
    return _NON_ALPHANUMERIC.sub("", text.upper())


def clean_identifier(text: str) -> str:
    """Uppercase and keep only the measurement point alphabet (A-Z, 0-9, underscore)."""
    return _NON_IDENTIFIER.sub("", text.upper())
