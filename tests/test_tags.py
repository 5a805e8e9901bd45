"""Tests for the tag catalog and token matchers."""

import pytest

from bbstyle.errors import CatalogError
from bbstyle.matchers import extract_variable, is_end, is_start
from bbstyle.tags import LITERAL_BLOCK, TAGS, MatcherKind, TagKind, get_tag


class TestCatalog:
    """Catalog order and lookup."""

    def test_declaration_order(self) -> None:
        codes = [tag.code for tag in TAGS]
        assert codes == [
            "b",
            "i",
            "u",
            "s",
            "sup",
            "sub",
            "color",
            "noparse",
            "icon",
            "eicon",
            "url",
            "user",
            "session",
            "channel",
        ]

    def test_variable_tags(self) -> None:
        variable = {tag.code for tag in TAGS if tag.matcher is MatcherKind.VARIABLE}
        assert variable == {"color", "url", "session"}

    def test_tokens(self) -> None:
        tag = get_tag("sup")
        assert tag.start_token == "[sup]"
        assert tag.end_token == "[/sup]"

    def test_literal_block_is_noparse(self) -> None:
        assert LITERAL_BLOCK is get_tag("noparse")
        assert LITERAL_BLOCK.kind is TagKind.NOPARSE

    def test_unknown_code_raises(self) -> None:
        with pytest.raises(CatalogError, match="Tag 'marquee'"):
            get_tag("marquee")

    def test_definitions_are_frozen(self) -> None:
        with pytest.raises(AttributeError):
            get_tag("b").code = "strong"  # type: ignore[misc]


class TestExactMatcher:
    """[b] opens, [/b] closes, nothing else."""

    def test_start(self) -> None:
        bold = get_tag("b")
        assert is_start("[b]", bold)
        assert not is_start("[b=1]", bold)
        assert not is_start("[B]", bold)
        assert not is_start("[/b]", bold)

    def test_end(self) -> None:
        bold = get_tag("b")
        assert is_end("[/b]", bold)
        assert not is_end("[b]", bold)
        assert not is_end("[/b ]", bold)

    def test_prefix_of_longer_code_does_not_match(self) -> None:
        assert not is_start("[sup]", get_tag("s"))
        assert not is_start("[user]", get_tag("u"))

    def test_no_variable(self) -> None:
        assert extract_variable("[b]", get_tag("b")) is None


class TestVariableMatcher:
    """[color] and [color=...] open, [/color] closes."""

    def test_start_with_and_without_value(self) -> None:
        color = get_tag("color")
        assert is_start("[color]", color)
        assert is_start("[color=red]", color)
        assert not is_start("[/color]", color)

    def test_extract_value(self) -> None:
        assert extract_variable("[color=red]", get_tag("color")) == "red"

    def test_value_keeps_later_equals(self) -> None:
        url = get_tag("url")
        assert extract_variable("[url=http://a.b/?x=1]", url) == "http://a.b/?x=1"

    def test_no_equals(self) -> None:
        assert extract_variable("[url]", get_tag("url")) is None

    def test_empty_value(self) -> None:
        assert extract_variable("[session=]", get_tag("session")) == ""

    def test_value_with_spaces(self) -> None:
        session = get_tag("session")
        assert extract_variable("[session=Cool Room]", session) == "Cool Room"

    def test_token_for_other_tag(self) -> None:
        assert extract_variable("[color=red]", get_tag("url")) is None
