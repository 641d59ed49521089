"""
tests/test_tags.py
Unit tests for repogen.tags: the key:"value" tokenizer and literal unquoting.
"""

from __future__ import annotations

import pytest

from repogen.exceptions import TagSyntaxError
from repogen.tags import parse_tag, unquote_tag_literal


class TestParseTag:
    def test_two_pairs(self) -> None:
        assert parse_tag('column:"id" primary:"true"') == {
            "column": "id",
            "primary": "true",
        }

    def test_keeps_key_order(self) -> None:
        tags = parse_tag('b:"2" a:"1" c:"3"')
        assert list(tags) == ["b", "a", "c"]

    def test_blank_input(self) -> None:
        assert parse_tag("") == {}
        assert parse_tag("   \t ") == {}

    def test_value_with_whitespace_does_not_desynchronize(self) -> None:
        tags = parse_tag('comment:"a b c" column:"name"')
        assert tags == {"comment": "a b c", "column": "name"}

    def test_escaped_quote_in_value(self) -> None:
        tags = parse_tag(r'doc:"say \"hi\"" column:"x"')
        assert tags["doc"] == 'say "hi"'
        assert tags["column"] == "x"

    def test_surrounding_and_repeated_whitespace(self) -> None:
        assert parse_tag('  column:"id"\t\tprimary:"true"  ') == {
            "column": "id",
            "primary": "true",
        }

    def test_empty_value(self) -> None:
        assert parse_tag('column:""') == {"column": ""}

    def test_other_libraries_tags_are_kept(self) -> None:
        tags = parse_tag('json:"id,omitempty" column:"id"')
        assert tags["json"] == "id,omitempty"


class TestParseTagErrors:
    def test_missing_colon(self) -> None:
        with pytest.raises(TagSyntaxError) as exc_info:
            parse_tag('column "id"')
        assert "expected ':'" in exc_info.value.reason
        assert exc_info.value.offset == 6

    def test_unquoted_value(self) -> None:
        with pytest.raises(TagSyntaxError) as exc_info:
            parse_tag("column:id")
        assert "to open the value" in exc_info.value.reason

    def test_unterminated_value(self) -> None:
        with pytest.raises(TagSyntaxError) as exc_info:
            parse_tag('column:"id')
        assert "unterminated" in exc_info.value.reason

    def test_missing_key(self) -> None:
        with pytest.raises(TagSyntaxError) as exc_info:
            parse_tag(':"id"')
        assert exc_info.value.reason == "expected a tag key"
        assert exc_info.value.offset == 0

    def test_duplicate_key(self) -> None:
        with pytest.raises(TagSyntaxError, match="duplicate key 'column'"):
            parse_tag('column:"id" column:"name"')

    def test_pairs_must_be_separated(self) -> None:
        with pytest.raises(TagSyntaxError, match="expected whitespace"):
            parse_tag('column:"id"primary:"true"')

    def test_error_message_names_the_tag(self) -> None:
        with pytest.raises(TagSyntaxError) as exc_info:
            parse_tag("column:id")
        assert "'column:id'" in str(exc_info.value)


class TestUnquoteTagLiteral:
    def test_raw_literal(self) -> None:
        assert unquote_tag_literal('`column:"id"`') == 'column:"id"'

    def test_raw_literal_keeps_backslashes(self) -> None:
        assert unquote_tag_literal(r"`a:\"b\"`") == r'a:\"b\"'

    def test_interpreted_literal(self) -> None:
        assert unquote_tag_literal(r'"column:\"id\""') == 'column:"id"'

    def test_not_a_literal(self) -> None:
        with pytest.raises(TagSyntaxError, match="not a Go string literal"):
            unquote_tag_literal("column")
