"""Tests for URL template expansion."""

import pytest

from omnisearch import template
from omnisearch.template import add_query_items, encode_parameters, expand


class TestExpand:
    """Tests for template parameter substitution."""

    def test_search_terms_are_percent_encoded(self):
        result = expand("hello world/ä", "http://example.com/?q={searchTerms}")
        assert result == "http://example.com/?q=hello%20world%2F%C3%A4"

    def test_search_terms_verbatim(self):
        assert expand("hello world", "{searchTerms}!", encode=False) == "hello world!"

    def test_all_occurrences_replaced(self):
        result = expand("x", "{searchTerms}-{searchTerms}-{count}-{count}")
        assert result == "x-x-20-20"

    def test_fixed_parameters(self):
        result = expand(
            "x",
            "{count}|{startIndex}|{startPage}|{inputEncoding}|{outputEncoding}",
        )
        assert result == "20|0|0|UTF-8|UTF-8"

    def test_language(self):
        assert expand("x", "lang={language}") == "lang=en-US"

        template.set_language("de_DE")
        assert expand("x", "lang={language}") == "lang=de-DE"

    def test_language_from_locale(self, monkeypatch):
        template.set_language(None)
        monkeypatch.setattr(template.locale, "getlocale", lambda: ("pt_BR", "UTF-8"))
        assert template.current_language() == "pt-BR"

        monkeypatch.setattr(template.locale, "getlocale", lambda: (None, None))
        assert template.current_language() == template.DEFAULT_LANGUAGE

    @pytest.mark.parametrize(
        "placeholder",
        ["{source}", "{source?}", "{google:source}", "{moz:source?}", "{:source}"],
    )
    def test_source_variants(self, placeholder):
        assert expand("x", f"a{placeholder}b") == "aomnisearch-testsb"

    def test_source_does_not_touch_other_parameters(self):
        assert expand("x", "{sources}{resource}") == "{sources}{resource}"

    def test_application_name_inserted_literally(self):
        template.set_application_name(r"app\1")
        assert expand("x", "{source}") == r"app\1"

    def test_unknown_parameters_left_alone(self):
        result = expand("x", "http://e.com/?q={searchTerms}&p={startPage?}&f={foo:bar}")
        assert result == "http://e.com/?q=x&p={startPage?}&f={foo:bar}"

    def test_literal_braces_untouched(self):
        assert expand("term", "a{b}c{searchTerms}{}") == "a{b}cterm{}"

    def test_search_term_is_not_expanded_again(self):
        assert expand("{count}", "{searchTerms}", encode=False) == "{count}"


class TestQueryItems:
    """Tests for parameter encoding and query construction."""

    def test_encode_parameters_keeps_order(self):
        parameters = [("q", "{searchTerms}"), ("b", "foo"), ("a", "{count}")]
        assert encode_parameters("hello world", parameters) == "q=hello%20world&b=foo&a=20"

    def test_encode_parameters_escapes_values_once(self):
        assert encode_parameters("a&b=c", [("q", "{searchTerms}")]) == "q=a%26b%3Dc"

    def test_encode_no_parameters(self):
        assert encode_parameters("x", []) == ""

    def test_add_query_items(self):
        assert add_query_items("http://e.com/search", "q=x") == "http://e.com/search?q=x"

    def test_add_query_items_to_existing_query(self):
        assert add_query_items("http://e.com/search?bar", "q=x") == "http://e.com/search?bar&q=x"

    def test_add_query_items_keeps_fragment(self):
        assert add_query_items("http://e.com/s?a=1#top", "q=x") == "http://e.com/s?a=1&q=x#top"

    def test_add_empty_query(self):
        assert add_query_items("http://e.com/search", "") == "http://e.com/search"

    def test_add_query_items_to_unsplittable_url(self):
        assert add_query_items("http://[bad/search", "q=x") == "http://[bad/search?q=x"
        assert add_query_items("http://[bad/search?a", "q=x") == "http://[bad/search?a&q=x"
