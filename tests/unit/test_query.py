"""
Unit tests for query string lookups.
"""

from minihttp.http.query import get_value, parse_query


class TestGetValue:
    """Tests for get_value()."""

    def test_simple_lookup(self):
        """Test name=value pairs."""
        assert get_value("name=Ada&age=36", "name") == "Ada"
        assert get_value("name=Ada&age=36", "age") == "36"

    def test_missing_name(self):
        """Test that an absent parameter is ""."""
        assert get_value("name=Ada", "missing") == ""

    def test_none_query(self):
        """Test that a request without a query never raises."""
        assert get_value(None, "name") == ""

    def test_empty_query(self):
        """Test that an empty query behaves like no query."""
        assert get_value("", "name") == ""

    def test_last_duplicate_wins(self):
        """Test that repeated names keep the last value."""
        assert get_value("tag=a&tag=b&tag=c", "tag") == "c"

    def test_flag_without_equals(self):
        """Test that a bare token maps to ""."""
        assert get_value("flag&name=Ada", "flag") == ""
        assert get_value("flag&name=Ada", "name") == "Ada"

    def test_split_on_first_equals(self):
        """Test that values may contain "="."""
        assert get_value("expr=a=b", "expr") == "a=b"

    def test_no_decoding(self):
        """Test that values are returned exactly as sent."""
        assert get_value("q=hello%20world&plus=a+b", "q") == "hello%20world"
        assert get_value("q=hello%20world&plus=a+b", "plus") == "a+b"

    def test_empty_value(self):
        """Test name= with nothing after it."""
        assert get_value("name=&age=36", "name") == ""


class TestParseQuery:
    """Tests for parse_query()."""

    def test_full_mapping(self):
        """Test the whole map, in order."""
        params = parse_query("b=2&a=1&flag")

        assert params == {"b": "2", "a": "1", "flag": ""}
        assert list(params) == ["b", "a", "flag"]

    def test_duplicates_collapse(self):
        """Test that duplicates leave one entry holding the last value."""
        assert parse_query("x=1&y=2&x=3") == {"x": "3", "y": "2"}

    def test_none(self):
        """Test that None parses to an empty dict."""
        assert parse_query(None) == {}
