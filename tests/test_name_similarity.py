"""Tests for catalog_dedup — name similarity module."""

import pytest

from catalog_dedup.algorithms.name_similarity import (
    compute_name_similarity,
    dice_coefficient,
    is_containment,
    normalize_name,
)


# ---- normalize_name ---------------------------------------------------------


class TestNormalizeName:
    def test_empty_and_none(self):
        assert normalize_name("") == ""
        assert normalize_name(None) == ""

    def test_lowercase(self):
        assert normalize_name("JOLLIBEE") == "jollibee"

    def test_strips_spaces_and_punctuation(self):
        assert normalize_name("Jollibee - Makati!") == "jollibeemakati"
        assert normalize_name("Max's Restaurant") == "maxsrestaurant"

    def test_keeps_digits(self):
        assert normalize_name("7-Eleven 24/7") == "7eleven247"

    def test_non_ascii_letters_are_dropped(self):
        assert normalize_name("Parañaque Grill") == "paraaquegrill"


# ---- dice_coefficient -------------------------------------------------------


class TestDiceCoefficient:
    def test_identical(self):
        assert dice_coefficient("ab", "ab") == 1.0

    def test_equal_after_normalisation(self):
        assert dice_coefficient("Max's", "MAXS") == 1.0

    def test_empty_side(self):
        assert dice_coefficient("", "x") == 0.0
        assert dice_coefficient("abc", "") == 0.0
        assert dice_coefficient(None, "abc") == 0.0

    def test_single_character_unequal(self):
        assert dice_coefficient("a", "b") == 0.0
        assert dice_coefficient("a", "abc") == 0.0

    def test_single_character_equal(self):
        assert dice_coefficient("a", "a") == 1.0

    def test_equal_after_normalisation_to_empty(self):
        """Equality is checked before the length rule."""
        assert dice_coefficient("!!", "??") == 1.0
        assert dice_coefficient("吉野家", "松屋") == 1.0

    def test_one_side_normalises_to_empty(self):
        assert dice_coefficient("!!", "Jollibee") == 0.0

    def test_reference_value(self):
        """night / nacht share only "ht": 2*1 / (5+5-2)."""
        assert dice_coefficient("night", "nacht") == pytest.approx(0.25)

    def test_repeated_bigrams_use_multiset_intersection(self):
        """"aa" occurs 3x and 2x: shared is 2, not 1."""
        assert dice_coefficient("aaaa", "aaa") == pytest.approx(0.8)

    def test_prefix_name(self):
        assert dice_coefficient("Jollibee", "Jollibee Makati") == pytest.approx(0.7)

    def test_symmetry(self):
        pairs = [
            ("Jollibee", "Jollibee Makati"),
            ("aaaa", "aaa"),
            ("Starbucks Coffee", "Starbucks Cofee"),
            ("Mang Inasal", "Inasal ni Mang"),
        ]
        for a, b in pairs:
            assert dice_coefficient(a, b) == dice_coefficient(b, a)

    def test_bounds(self):
        names = ["", "x", "ab", "aaaa", "Jollibee", "Chowking Ayala", "Café Adriatico", "!!"]
        for a in names:
            for b in names:
                assert 0.0 <= dice_coefficient(a, b) <= 1.0

    def test_unrelated_names_score_low(self):
        assert dice_coefficient("Starbucks", "Jollibee") < 0.2


# ---- is_containment ---------------------------------------------------------


class TestIsContainment:
    def test_prefix(self):
        assert is_containment("Jollibee", "Jollibee Makati Branch")

    def test_either_direction(self):
        assert is_containment("Jollibee Makati Branch", "jollibee")

    def test_not_contained(self):
        assert not is_containment("Jollibee", "Chowking")

    def test_missing_name_never_contained(self):
        assert not is_containment("", "Jollibee")
        assert not is_containment(None, "Jollibee")

    def test_name_normalising_to_empty_is_contained(self):
        assert is_containment("!!!", "Jollibee")


# ---- compute_name_similarity ------------------------------------------------


class TestComputeNameSimilarity:
    def test_returns_expected_keys(self):
        result = compute_name_similarity("Jollibee", "Jollibee Makati")
        assert set(result.keys()) == {
            "name_a_normalized",
            "name_b_normalized",
            "exact",
            "containment",
            "dice",
        }

    def test_values(self):
        result = compute_name_similarity("Jollibee", "Jollibee Makati")
        assert result["name_b_normalized"] == "jollibeemakati"
        assert result["exact"] is False
        assert result["containment"] is True
        assert result["dice"] == 0.7

    def test_names_normalising_to_empty_are_exact(self):
        result = compute_name_similarity("!!", "??")
        assert result["exact"] is True
        assert result["dice"] == 1.0

    def test_missing_names_are_not_exact(self):
        assert compute_name_similarity("", "")["exact"] is False
