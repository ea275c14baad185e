"""Tests for table name derivation and deduplication."""

import pytest

from sheetsql.sources.naming import dedupe, sanitize_identifier, table_name_for


class TestSanitizeIdentifier:
    def test_collapses_invalid_characters(self):
        assert sanitize_identifier("  Unit Price ($) ") == "Unit_Price"

    def test_nothing_usable(self):
        assert sanitize_identifier("%%%") == ""


class TestTableNameFor:
    """Tests for table_name_for()."""

    def test_single_sheet_uses_stem(self):
        assert table_name_for("Regions", None) == "regions"

    def test_multi_sheet_joins_stem_and_sheet(self):
        assert table_name_for("Sales 2024", "Q1 Orders") == "sales_2024_q1_orders"

    def test_leading_digit_is_prefixed(self):
        assert table_name_for("2024 report", None) == "t_2024_report"

    def test_never_starts_with_underscore(self):
        name = table_name_for("_catalog", None)
        assert name == "catalog"
        assert not name.startswith("_")

    @pytest.mark.parametrize("stem", ["", "###", "__"])
    def test_fallback_name(self, stem):
        assert table_name_for(stem, None) == "sheet"


class TestDedupe:
    def test_free_name_unchanged(self):
        assert dedupe("sales", set()) == "sales"

    def test_smallest_free_suffix(self):
        assert dedupe("sales", {"sales", "sales_2"}) == "sales_3"

    def test_case_insensitive_by_default(self):
        assert dedupe("Sales", {"sales"}) == "Sales_2"
        assert dedupe("Sales", {"sales"}, casefold=False) == "Sales"
