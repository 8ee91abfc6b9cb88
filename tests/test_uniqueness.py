import hashlib
import logging

import pytest

from MP16.uniqueness import (
    BASE32_ALPHABET,
    SUFFIX_ATTEMPTS,
    UsedIdentifiers,
    base32_suffix,
    hash16,
    make_unique,
    stable_uint32,
)


def _exhausted(candidate: str, key: str) -> UsedIdentifiers:
    # every suffixed variant the resolver could try for this key
    used = UsedIdentifiers([candidate])
    seed = stable_uint32(key)
    for length, attempts in SUFFIX_ATTEMPTS.items():
        for attempt in range(attempts):
            used.add(candidate[: 16 - length] + base32_suffix(seed + attempt, length))
    return used


def test_stable_uint32_reads_little_endian():
    digest = hashlib.sha256(b"sig-1").digest()
    assert stable_uint32("sig-1") == int.from_bytes(digest[:4], "little")
    assert 0 <= stable_uint32("") < 2**32


@pytest.mark.parametrize(
    "value, length, expected",
    [
        (0, 8, "AAAAAAAA"),
        (31, 2, "A9"),
        (32, 2, "BA"),
        (33, 3, "ABB"),
        (2**32, 8, "AAAAAAAA"),
    ],
)
def test_base32_suffix(value, length, expected):
    assert base32_suffix(value, length) == expected


def test_alphabet_avoids_ambiguous_symbols():
    assert len(BASE32_ALPHABET) == 32
    assert not set("IO01") & set(BASE32_ALPHABET)


def test_hash16_shape():
    name = hash16("sig-1")
    assert len(name) == 16
    assert set(name) <= set(BASE32_ALPHABET)
    assert name == base32_suffix(stable_uint32("sig-1"), 8) + base32_suffix(stable_uint32("sig-1|B"), 8)


def test_used_identifiers_are_case_insensitive():
    used = UsedIdentifiers(["sub1"])
    assert "SUB1" in used
    assert "Sub1" in used
    assert 42 not in used
    used.add("SUB1")
    assert len(used) == 1


def test_free_candidate_is_returned_unchanged():
    assert make_unique("SUB1", "sig-2", UsedIdentifiers(["OTHER"])) == "SUB1"


def test_collision_gets_lowercase_suffix():
    used = UsedIdentifiers(["SUB1"])
    result = make_unique("SUB1", "sig-2", used)
    assert result == "SUB1" + base32_suffix(stable_uint32("sig-2"), 2).lower()
    assert result[4:] == result[4:].lower()
    assert result.upper() != "SUB1"


def test_resolution_is_deterministic():
    used = UsedIdentifiers(["SUB1"])
    assert make_unique("SUB1", "sig-2", used) == make_unique("SUB1", "sig-2", used)


def test_next_attempt_when_first_suffix_taken():
    seed = stable_uint32("sig-2")
    used = UsedIdentifiers(["SUB1", "SUB1" + base32_suffix(seed, 2)])
    assert make_unique("SUB1", "sig-2", used) == "SUB1" + base32_suffix(seed + 1, 2).lower()


def test_full_length_candidate_is_truncated_for_suffix():
    candidate = "ADMSCRK1_BGLS_AB"
    result = make_unique(candidate, "sig-3", UsedIdentifiers([candidate]))
    assert len(result) == 16
    assert result.startswith(candidate[:14])


def test_longer_suffix_after_short_ones_are_exhausted():
    used = UsedIdentifiers(["SUB1"])
    seed = stable_uint32("sig-2")
    for attempt in range(SUFFIX_ATTEMPTS[2]):
        used.add("SUB1" + base32_suffix(seed + attempt, 2))
    result = make_unique("SUB1", "sig-2", used)
    assert result == "SUB1" + base32_suffix(seed, 3).lower()


def test_hash_fallback_when_suffix_space_exhausted():
    used = _exhausted("SUB1", "sig-2")
    assert make_unique("SUB1", "sig-2", used) == hash16("sig-2")


def test_hash_fallback_collision_is_logged(caplog):
    used = _exhausted("SUB1", "sig-2")
    used.add(hash16("sig-2"))
    with caplog.at_level(logging.WARNING, logger="MP16.uniqueness"):
        result = make_unique("SUB1", "sig-2", used)
    assert result == hash16("sig-2")
    assert any("already in use" in message for message in caplog.messages)
