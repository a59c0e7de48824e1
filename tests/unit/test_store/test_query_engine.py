"""
Unit tests for QueryEngine
"""

import random

import pytest

from store import QueryEngine, QuoteStore, UNLIMITED, parse_int
from utils.exceptions import (
    ErrorCodes,
    MissingParameterError,
    NotFoundError,
)


def ids(results):
    return [quote.id for quote in results]


@pytest.mark.unit
class TestRandomQuote:
    """Test cases for random selection"""

    def test_returns_member(self, query_engine, quote_store):
        for _ in range(20):
            assert query_engine.random_quote() in quote_store

    def test_seeded_rng_is_reproducible(self, quote_store):
        first = QueryEngine(quote_store, rng=random.Random(7))
        second = QueryEngine(quote_store, rng=random.Random(7))

        assert ids(first.random_quote() for _ in range(10)) == ids(second.random_quote() for _ in range(10))

    def test_empty_collection(self):
        engine = QueryEngine(QuoteStore([]))

        with pytest.raises(NotFoundError) as exc_info:
            engine.random_quote()

        assert exc_info.value.error_code == ErrorCodes.COLLECTION_EMPTY


@pytest.mark.unit
class TestPaginate:
    """Test cases for pagination"""

    def test_defaults_return_everything(self, query_engine, quote_store):
        result = query_engine.paginate()

        assert result["page"] == 1
        assert result["limit"] == len(quote_store)
        assert result["total"] == len(quote_store)
        assert ids(result["results"]) == ids(quote_store.all())

    def test_page_slice(self, query_engine):
        result = query_engine.paginate(page=2, limit=2)
        assert ids(result["results"]) == ["q3", "q4"]

    def test_last_partial_page(self, query_engine):
        result = query_engine.paginate(page=2, limit=4)
        assert ids(result["results"]) == ["q5", "q6"]

    def test_page_past_end_is_empty(self, query_engine):
        result = query_engine.paginate(page=10, limit=5)

        assert result["results"] == []
        assert result["total"] == 6

    def test_zero_limit(self, query_engine):
        result = query_engine.paginate(page=1, limit=0)

        assert result["results"] == []
        assert result["limit"] == 0
        assert result["total"] == 6

    @pytest.mark.parametrize("page", [1, 2, 3, 4, 7])
    @pytest.mark.parametrize("limit", [1, 2, 4, 6, 10])
    def test_page_size_formula(self, query_engine, page, limit):
        total = 6
        start = (page - 1) * limit
        expected = min(limit, total - start) if start < total else 0

        assert len(query_engine.paginate(page=page, limit=limit)["results"]) == expected

    @pytest.mark.parametrize("page", [0, -1])
    def test_page_below_one_falls_back_to_first(self, query_engine, page):
        result = query_engine.paginate(page=page, limit=2)

        assert result["page"] == 1
        assert ids(result["results"]) == ["q1", "q2"]

    def test_negative_limit_falls_back_to_everything(self, query_engine):
        result = query_engine.paginate(page=1, limit=-1)

        assert result["limit"] == 6
        assert len(result["results"]) == 6


@pytest.mark.unit
class TestParseInt:
    """Test cases for lenient query parameter parsing"""

    @pytest.mark.parametrize("raw,expected", [
        ("3", 3),
        (" 12 ", 12),
        ("-4", -4),
        ("0", 0),
        ("abc", None),
        ("2.5", None),
        ("", None),
        (None, None),
    ])
    def test_parse_int(self, raw, expected):
        assert parse_int(raw) == expected


@pytest.mark.unit
class TestSearch:
    """Test cases for content search"""

    def test_substring_match(self, query_engine):
        result = query_engine.search("love")

        assert "q1" in ids(result["results"])
        assert result["total"] >= 1
        assert result["query"] == "love"

    def test_case_insensitive(self, query_engine):
        assert ids(query_engine.search("SIMPLICITY")["results"]) == ["q5"]

    def test_no_match(self, query_engine):
        result = query_engine.search("zebra")

        assert result["total"] == 0
        assert result["results"] == []

    def test_only_content_is_searched(self, query_engine):
        assert query_engine.search("Jobs")["total"] == 0

    @pytest.mark.parametrize("q", [None, ""])
    def test_missing_query(self, query_engine, q):
        with pytest.raises(MissingParameterError) as exc_info:
            query_engine.search(q)

        assert exc_info.value.message == "Missing search query"
        assert exc_info.value.status_code == 400


@pytest.mark.unit
class TestFilters:
    """Test cases for author, tag, date and length filters"""

    def test_author_substring(self, query_engine):
        result = query_engine.by_author("steve")

        assert ids(result["results"]) == ["q1"]
        assert result["author"] == "steve"

    def test_author_partial_name(self, query_engine):
        assert ids(query_engine.by_author("an")["results"]) == ["q3", "q4", "q6"]

    def test_tag_case_insensitive_exact(self, query_engine):
        result = query_engine.by_tag("WORK")

        assert ids(result["results"]) == ["q1", "q6"]
        assert result["tag"] == "WORK"

    def test_tag_mixed_case_data(self, query_engine):
        assert ids(query_engine.by_tag("life")["results"]) == ["q2", "q4"]

    def test_tag_is_not_substring(self, query_engine):
        assert query_engine.by_tag("wor")["total"] == 0

    def test_date_full(self, query_engine):
        result = query_engine.by_date("2023-01-01")

        assert ids(result["results"]) == ["q1"]
        assert result["date"] == "2023-01-01"

    @pytest.mark.parametrize("prefix,expected", [
        ("2023", ["q1", "q2", "q3"]),
        ("2024-02", ["q4", "q5"]),
        ("1999", []),
    ])
    def test_date_prefix(self, query_engine, prefix, expected):
        assert ids(query_engine.by_date(prefix)["results"]) == expected

    def test_length_exact_bounds(self, query_engine):
        result = query_engine.by_length(min_length=49, max_length=49)

        assert ids(result["results"]) == ["q1"]
        assert result["filter"] == {"min": 49, "max": 49}

    def test_length_inclusive_both_ends(self, query_engine):
        assert ids(query_engine.by_length(min_length=42, max_length=57)["results"]) == ["q1", "q2", "q4", "q5"]

    def test_length_unbounded_max(self, query_engine):
        result = query_engine.by_length(min_length=50)

        assert ids(result["results"]) == ["q2", "q3"]
        assert result["filter"] == {"min": 50, "max": UNLIMITED}

    def test_length_defaults(self, query_engine):
        result = query_engine.by_length()

        assert result["total"] == 6
        assert result["filter"] == {"min": 0, "max": "unlimited"}

    def test_length_empty_range(self, query_engine):
        assert query_engine.by_length(min_length=60, max_length=50)["total"] == 0

    def test_length_negative_min_falls_back_to_zero(self, query_engine):
        result = query_engine.by_length(min_length=-10, max_length=40)

        assert result["filter"] == {"min": 0, "max": 40}
        assert ids(result["results"]) == ["q6"]

    def test_filters_only_return_members(self, query_engine, quote_store):
        results = (
            query_engine.search("the")["results"]
            + query_engine.by_author("e")["results"]
            + query_engine.by_tag("wisdom")["results"]
            + query_engine.by_date("20")["results"]
            + query_engine.by_length(min_length=0)["results"]
        )

        assert results
        for quote in results:
            assert quote_store.get(quote.id) is quote


@pytest.mark.unit
class TestLookupAndAggregates:
    """Test cases for id lookup, tag listing and stats"""

    def test_by_id(self, query_engine, quote_store):
        quote = query_engine.by_id("q1")

        assert quote is quote_store.get("q1")
        assert quote.content == "The only way to do great work is to love what you do."

    def test_every_stored_id_resolves(self, query_engine, quote_store):
        for quote in quote_store:
            assert query_engine.by_id(quote.id) == quote

    def test_missing_id(self, query_engine):
        with pytest.raises(NotFoundError) as exc_info:
            query_engine.by_id("q999")

        assert exc_info.value.message == "Quote not found"
        assert exc_info.value.error_code == ErrorCodes.QUOTE_NOT_FOUND

    def test_list_tags(self, query_engine):
        result = query_engine.list_tags()

        assert result["tags"] == [
            "Famous-Quotes", "dreams", "happiness", "inspirational",
            "life", "passion", "wisdom", "work",
        ]
        assert result["total"] == len(result["tags"])

    def test_list_tags_sorted_and_unique(self, query_engine):
        tags = query_engine.list_tags()["tags"]

        assert tags == sorted(tags)
        assert len({tag.lower() for tag in tags}) == len(tags)

    def test_list_tags_empty(self):
        assert QueryEngine(QuoteStore([])).list_tags() == {"total": 0, "tags": []}

    def test_stats(self, query_engine):
        assert query_engine.stats() == {"total_quotes": 6, "total_authors": 6, "total_tags": 8}
