"""
Tests for the shared helpers in core.utils.
"""

import math

import pytest

from core.utils import (
    chunk_list,
    coerce_number,
    drop_none,
    generate_slug,
    ilike_any,
    normalize_string_set,
    split_csv,
)


class TestCoerceNumber:
    @pytest.mark.parametrize("value,expected", [
        ("12.50", 12.5),
        (7, 7.0),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        (math.nan, 0.0),
    ])
    def test_values(self, value, expected):
        assert coerce_number(value) == expected

    def test_default(self):
        assert coerce_number(None, default=4) == 4.0


class TestGenerateSlug:
    def test_examples(self):
        assert generate_slug("  Pajama Sets & More ") == "pajama-sets-more"
        assert generate_slug("T-Shirts") == "t-shirts"
        assert generate_slug("Organic  Cotton -- Hoodie") == "organic-cotton-hoodie"
        assert generate_slug("") == ""


class TestCollections:
    def test_split_csv(self):
        assert split_csv("S, M ,,L") == ["S", "M", "L"]
        assert split_csv([" a ", ""]) == ["a"]
        assert split_csv(math.nan) == []
        assert split_csv(None) == []

    def test_normalize_string_set(self):
        assert normalize_string_set(["Black ", "black", "", None]) == {"black"}

    def test_chunk_list(self):
        assert chunk_list([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
        assert chunk_list([], 100) == []

    def test_drop_none(self):
        assert drop_none({"a": 1, "b": None, "c": False}) == {"a": 1, "c": False}


class TestIlikeAny:
    """Search terms stay inside one quoted PostgREST value."""

    def test_plain_term(self):
        assert ilike_any(["name", "sku"], " hoodie ") == 'name.ilike."%hoodie%",sku.ilike."%hoodie%"'

    def test_filter_syntax_is_quoted(self):
        assert ilike_any(["name"], "a,b)") == 'name.ilike."%a,b)%"'

    def test_quotes_and_backslashes_escaped(self):
        assert ilike_any(["name"], 'say "hi" \\o/') == 'name.ilike."%say \\"hi\\" \\\\o/%"'


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
