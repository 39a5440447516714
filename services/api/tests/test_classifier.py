"""
Tests for keyword classification.

Run with: pytest tests/test_classifier.py -v
"""
from core.classifier import (
    DEFAULT_CATEGORY,
    STORY_CATEGORIES,
    categorize,
    category_facets,
    extract_tags,
)


class TestCategorize:
    """First matching row wins."""

    def test_table_order(self):
        assert [c for c, _ in STORY_CATEGORIES] == [
            "wedding-day",
            "funny",
            "romantic",
            "family",
            "friendship",
            "advice",
            "wishes",
            "memories",
        ]

    def test_earlier_category_wins(self):
        text = "We met at the wedding ceremony and laughed all night"
        assert categorize([text]) == "wedding-day"

    def test_case_insensitive_across_parts(self):
        assert categorize(["Nothing here", "My MOM cried"]) == "family"

    def test_default(self):
        assert categorize(["xyz"]) == DEFAULT_CATEGORY
        assert categorize([None, ""]) == DEFAULT_CATEGORY

    def test_custom_table(self):
        table = (("a", ("apple",)), ("b", ("banana", "apple")))
        assert categorize(["banana apple"], table, default="z") == "a"
        assert categorize(["cherry"], table, default="z") == "z"


class TestExtractTags:
    def test_table_order_and_cap(self):
        text = "heart warm, amazing party, so emotional"
        assert extract_tags([text]) == ["emotional", "fun", "special"]

    def test_none(self):
        assert extract_tags(["plain words"]) == []


class TestCategoryFacets:
    def test_counts_in_first_seen_order(self):
        records = [{"category": "funny"}, {"category": "family"}, {"category": "funny"}, {}]
        facets = category_facets(records)
        assert facets == [
            {"id": "funny", "label": "Funny Moments", "count": 2},
            {"id": "family", "label": "Family Memories", "count": 1},
            {"id": "uncategorized", "label": "Other Stories", "count": 1},
        ]

    def test_unknown_category_label_is_id(self):
        assert category_facets([{"category": "misc"}]) == [{"id": "misc", "label": "misc", "count": 1}]
