"""Tests for product text similarity scoring."""

from __future__ import annotations

from receiptscan.receipt.similarity import partial_match, position_similarity, similarity


def test_identical_text_scores_100() -> None:
    assert similarity("MILK 1L", "MILK 1L") == 100


def test_single_character_slip_stays_above_default_threshold() -> None:
    # 7 + 7 characters, indel distance 2 -> 85.7
    assert similarity("MILK 1L", "MILK 1l") == 86


def test_unrelated_text_scores_low() -> None:
    assert similarity("APPLES", "ZUCCHINI") < 50


def test_partial_match_accepts_prefix_reading() -> None:
    assert partial_match("BIO VOLLMILCH 1L", "BIO VOLLMILCH 1L 12") == 100


def test_position_similarity_is_zero_for_same_timestamp(make_position) -> None:
    a = make_position("MILK 1L", "1.29", seconds=0)
    b = make_position("MILK 1L", "1.29", seconds=0)

    assert position_similarity(a, b) == 0


def test_position_similarity_compares_product_text(make_position) -> None:
    a = make_position("MILK 1L", "1.29", seconds=0)
    b = make_position("MILK 1L", "0.99", seconds=1)

    assert position_similarity(a, b) == 100
