"""
Base measurement point derivation from raw point tags.
"""

import pytest

from MP16.base_name import build_base_identifier, scan_name_tokens, strip_prefixes


def test_company_prefix_and_phase_hint_are_dropped():
    assert build_base_identifier("ACME_GRAND_GULF_1-IA", ["ACME"]) == "GRNDGULF1"


@pytest.mark.parametrize("point_tag", ["ACME_GRAND_GULF_1", "ACME-GRAND_GULF_1", "ACMEGRAND_GULF_1"])
def test_prefix_forms(point_tag):
    assert build_base_identifier(point_tag, ["ACME"]) == "GRNDGULF1"


def test_first_matching_prefix_form_wins():
    # "ACME_" matches, so the bare "ACME" form is not tried on the remainder
    assert strip_prefixes("ACME_ACME_X", ["ACME"]) == "ACME_X"


def test_every_configured_prefix_is_tried_in_order():
    assert strip_prefixes("GPA_ETR_GRAND", ["GPA", "ETR", "EES"]) == "GRAND"
    assert strip_prefixes("ETR_GRAND", ["GPA", "ETR"]) == "GRAND"


def test_blank_prefixes_are_ignored():
    assert strip_prefixes("GRAND_GULF", ["", "  ", None]) == "GRAND_GULF"


def test_system_prefix_tokens_are_skipped():
    assert build_base_identifier("SUB_GRAND_GULF_1") == "GRNDGULF1"


def test_scan_stops_at_non_name_marker():
    tokens, unit = scan_name_tokens("GRAND_GULF_1_D_EPN8_EXTRA")
    assert tokens == ["GRAND", "GULF"]
    assert unit == "1"


def test_first_unit_only():
    tokens, unit = scan_name_tokens("CANE_2_RIVER_3")
    assert tokens == ["CANE", "RIVER"]
    assert unit == "2"


def test_last_name_token_stays_readable():
    assert build_base_identifier("ADAMS_CREEK_1") == "ADMSCREEK1"


def test_long_names_are_truncated_to_sixteen():
    assert build_base_identifier("WASHINGTON_JEFFERSON_MADISON_7") == "WSHNGTNJFFRSNMAD"


@pytest.mark.parametrize("point_tag", ["ACME_1-IA", "ACME_D_EPN8", "", "   ", None, "ACME_EL_2"])
def test_no_name_tokens_yield_none(point_tag):
    assert build_base_identifier(point_tag, ["ACME"]) is None


def test_right_of_first_dash_is_ignored():
    assert build_base_identifier("GRAND_GULF-SOUTHERN_LINE") == "GRNDGULF"


def test_system_prefix_words_after_the_head_are_name_tokens():
    assert build_base_identifier("GPA_GRAND_SUB_1-IA", ("GPA",)) == "GRNDSUB1"
    tokens, unit = scan_name_tokens("PMU_CANE_SITE_2")
    assert tokens == ["CANE", "SITE"]
    assert unit == "2"
