"""
Deterministic disambiguation of measurement point collisions.

A taken candidate receives a short lower-case Base32 suffix seeded from a
SHA-256 hash of a stable key (signal id or device), so the same record keeps
the same suffix from run to run until its name is persisted.
"""

import hashlib
import logging
import typing

logger = logging.getLogger(__name__)

MAX_IDENTIFIER_LENGTH = 16

# Uppercase letters without I/O, digits without 0/1
BASE32_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_ENCODED_WIDTH = 8
_UINT32_MASK = 0xFFFFFFFF

# suffix length -> attempts before moving to a longer suffix
SUFFIX_ATTEMPTS = {2: 64, 3: 128, 4: 256, 5: 512, 6: 512}

HASH_SALT = "|B"


class UsedIdentifiers:
    """
    Case-insensitive set of measurement points taken within one allocation scope.
    """

    def __init__(self, identifiers: typing.Iterable[str] = ()):
        self._keys: set[str] = set()
        for identifier in identifiers:
            self.add(identifier)

    def add(self, identifier: str) -> None:
        self._keys.add(identifier.upper())

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.upper() in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> typing.Iterator[str]:
        return iter(sorted(self._keys))


def stable_uint32(key: str) -> int:
    """First four bytes of SHA-256(key) as an unsigned little-endian integer."""
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "little")


def base32_suffix(value: int, length: int) -> str:
    """
    Encode a 32-bit value in the readable Base32 alphabet and keep the
    low-order `length` symbols (at most eight).
    """
    value &= _UINT32_MASK
    symbols = []
    for _ in range(_ENCODED_WIDTH):
        value, remainder = divmod(value, len(BASE32_ALPHABET))
        symbols.append(BASE32_ALPHABET[remainder])
    encoded = "".join(reversed(symbols))
    return encoded[max(0, _ENCODED_WIDTH - length):]


def hash16(stable_key: str) -> str:
    """Full 16-character hash name from two differently salted hashes of the key."""
    first = base32_suffix(stable_uint32(stable_key), _ENCODED_WIDTH)
    second = base32_suffix(stable_uint32(f"{stable_key}{HASH_SALT}"), _ENCODED_WIDTH)
    return (first + second)[:MAX_IDENTIFIER_LENGTH]


def make_unique(candidate: str, stable_key: str, used: UsedIdentifiers) -> str:
    """
    Return `candidate` if it is free, otherwise a deterministic suffixed variant.

    Suffix lengths 2..6 are tried in turn; the candidate is truncated to make
    room (never padded or repeated). When every attempt collides the full hash
    name of the stable key is returned.
    """
    candidate = candidate[:MAX_IDENTIFIER_LENGTH]
    if candidate not in used:
        return candidate

    seed = stable_uint32(stable_key)
    for suffix_length, attempts in SUFFIX_ATTEMPTS.items():
        prefix = candidate[:MAX_IDENTIFIER_LENGTH - suffix_length]
        for attempt in range(attempts):
            suffix = base32_suffix(seed + attempt, suffix_length).lower()
            option = prefix + suffix
            if option not in used:
                return option

    fallback = hash16(stable_key)
    if fallback in used:
        # Two stable keys hashing to the same 16 characters is not resolved further
        logger.warning("Hash fallback %s for key %r is already in use", fallback, stable_key)
    else:
        logger.debug("Suffix space exhausted for %s, using hash name %s", candidate, fallback)
    return fallback
