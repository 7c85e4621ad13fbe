"""Tests for ingredient name cleaning and keyword validation."""

from preppal.core.matching import (
    build_search_term,
    clean_product_description,
    contains_keyword,
    matches_staple,
    normalize_name,
    primary_keyword,
)


class TestCleanProductDescription:
    """Tests for reducing retailer descriptions to food words."""

    def test_strips_house_brand_and_size(self):
        assert clean_product_description("Simple Truth Organic Baby Spinach 5 oz") == "baby spinach"

    def test_strips_symbols_and_weights(self):
        cleaned = clean_product_description("Kroger® Boneless Skinless Chicken Breast 1.5 lb")
        assert cleaned == "boneless skinless chicken breast"

    def test_strips_counts_and_fluid_ounces(self):
        assert clean_product_description("Large Brown Eggs 12 ct") == "large brown eggs"
        assert clean_product_description("Whole Milk 64 fl oz") == "whole milk"

    def test_unit_must_be_a_whole_word(self):
        assert clean_product_description("2 grapefruits") == "grapefruits"
        assert clean_product_description("3 persimmons") == "persimmons"

    def test_plain_description_unchanged_apart_from_case(self):
        assert clean_product_description("Russet Potatoes") == "russet potatoes"


class TestSearchTerm:
    """Tests for building the name-search term."""

    def test_keeps_first_four_words(self):
        term = build_search_term("Private Selection Angus Beef Ribeye Steak Thick Cut 1 lb")
        assert term == "angus beef ribeye steak"

    def test_short_description(self):
        assert build_search_term("Kroger Bananas") == "bananas"

    def test_description_that_cleans_to_nothing(self):
        assert build_search_term("Kroger 16 oz") == ""


class TestPrimaryKeyword:
    """Tests for choosing the word a match must contain."""

    def test_last_non_descriptor_word(self):
        assert primary_keyword("boneless skinless chicken breast") == "breast"

    def test_descriptors_are_skipped(self):
        assert primary_keyword("broccoli florets fresh") == "florets"
        assert primary_keyword("carrots peeled baby") == "carrots"

    def test_falls_back_to_last_word_when_all_descriptors(self):
        assert primary_keyword("raw baby") == "baby"

    def test_short_words_ignored(self):
        assert primary_keyword("ox") is None
        assert primary_keyword("") is None


class TestContainsKeyword:
    """Tests for validating search results by keyword."""

    def test_matches_whole_word(self):
        assert contains_keyword(
            "Chicken, broilers or fryers, breast, meat only, raw",
            "boneless skinless chicken breast",
        )

    def test_allows_plural(self):
        assert contains_keyword("Eggs, Grade A, Large", "large egg")

    def test_rejects_partial_word(self):
        assert not contains_keyword("Eggplant, raw", "large egg")

    def test_rejects_singular_when_term_is_plural(self):
        assert contains_keyword("Strawberries, raw", "fresh strawberries")
        assert not contains_keyword("Strawberry yogurt", "fresh strawberries")

    def test_case_insensitive(self):
        assert contains_keyword("BANANAS, RAW", "bananas")

    def test_no_keyword_never_matches(self):
        assert not contains_keyword("anything", "of to")


class TestNamesAndStaples:
    """Tests for name normalization and pantry staple matching."""

    def test_normalize_name(self):
        assert normalize_name("  Olive Oil ") == "olive oil"
        assert normalize_name(None) == ""

    def test_staple_exact_match(self):
        assert matches_staple("Salt ", "salt")

    def test_staple_whole_word_match(self):
        assert matches_staple("Black Pepper", "pepper")
        assert matches_staple("sea salt flakes", "salt")

    def test_staple_partial_word_does_not_match(self):
        assert not matches_staple("peppermint tea", "pepper")
        assert not matches_staple("unsalted butter", "salt")

    def test_empty_names_never_match(self):
        assert not matches_staple("", "salt")
        assert not matches_staple("salt", "")
