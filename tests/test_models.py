"""Tests for descriptors and URL templates."""

import base64

from PIL import Image

from omnisearch.models import Descriptor, UrlTemplate


def make_descriptor(**kwargs) -> Descriptor:
    descriptor = Descriptor(name="GitHub", description="Search GitHub")
    descriptor.search_url_template = "http://github.com/search"
    descriptor.search_parameters = [("q", "{searchTerms}"), ("b", "foo")]
    for key, value in kwargs.items():
        setattr(descriptor, key, value)
    return descriptor


class TestValidity:
    def test_default_descriptor_is_invalid(self):
        descriptor = Descriptor()
        assert not descriptor.is_valid()
        assert descriptor.name == ""
        assert descriptor.tags == []
        assert descriptor.search_method == "get"
        assert descriptor.suggestions_method == "get"
        assert not descriptor.provides_suggestions

    def test_valid_with_name_and_search_template(self):
        descriptor = Descriptor()
        descriptor.name = "Example"
        assert not descriptor.is_valid()

        descriptor.search_url_template = "http://example.com/?q={searchTerms}"
        assert descriptor.is_valid()

        descriptor.name = ""
        assert not descriptor.is_valid()

    def test_suggestions_template_alone_is_not_enough(self):
        descriptor = Descriptor(name="Example")
        descriptor.suggestions_url_template = "http://example.com/suggest"
        assert descriptor.provides_suggestions
        assert not descriptor.is_valid()


class TestMethods:
    def test_method_is_normalized(self):
        descriptor = Descriptor()
        descriptor.search_method = "POST"
        assert descriptor.search_method == "post"
        assert descriptor.search.http_method == "POST"

        descriptor.suggestions_method = "Post"
        assert descriptor.suggestions_method == "post"

    def test_unsupported_method_is_ignored(self):
        descriptor = Descriptor()
        descriptor.search_method = "post"
        descriptor.search_method = "put"
        assert descriptor.search_method == "post"

        descriptor.search_method = ""
        assert descriptor.search_method == "post"

    def test_url_template_constructor_rejects_method(self):
        assert UrlTemplate("http://e.com/", method="DELETE").method == "get"


class TestUrls:
    def test_search_url_without_template(self):
        descriptor = Descriptor(name="Empty")
        assert descriptor.search_url("term") == ""
        assert descriptor.suggestions_url("term") == ""

    def test_search_url_get_parameters(self):
        descriptor = make_descriptor()
        assert descriptor.search_url("hello world") == (
            "http://github.com/search?q=hello%20world&b=foo"
        )

    def test_search_url_template_terms(self):
        descriptor = Descriptor(name="Example")
        descriptor.search_url_template = "http://example.com/{searchTerms}?n={count}"
        assert descriptor.search_url("a b") == "http://example.com/a%20b?n=20"

    def test_post_parameters_go_into_body(self):
        descriptor = make_descriptor(search_method="post")
        assert descriptor.search_url("hello world") == "http://github.com/search"
        assert descriptor.search.body("hello world") == b"q=hello%20world&b=foo"

    def test_get_has_no_body(self):
        descriptor = make_descriptor()
        assert descriptor.search.body("hello") == b""

    def test_suggestions_url(self):
        descriptor = Descriptor(name="Example")
        descriptor.suggestions_url_template = "http://example.com/suggest?q={searchTerms}"
        descriptor.suggestions_parameters = [("client", "{source}")]
        assert descriptor.suggestions_url("py") == (
            "http://example.com/suggest?q=py&client=omnisearch-tests"
        )

    def test_search_url_with_unsplittable_template(self):
        descriptor = Descriptor(name="x")
        descriptor.search_url_template = "http://[bad/search"
        descriptor.search_parameters = [("q", "{searchTerms}")]
        assert descriptor.is_valid()
        assert descriptor.search_url("t") == "http://[bad/search?q=t"


class TestComparison:
    def test_equality_ignores_methods_and_tags(self):
        first = make_descriptor(tags=["code"])
        second = make_descriptor(search_method="post")
        assert first == second

    def test_equality_compares_parameters(self):
        first = make_descriptor()
        second = make_descriptor()
        second.search_parameters = [("b", "foo"), ("q", "{searchTerms}")]
        assert first != second

    def test_equality_compares_image_url(self):
        assert make_descriptor(image_url="http://a/") != make_descriptor()

    def test_ordering_by_name(self):
        engines = [Descriptor(name="Yahoo"), Descriptor(name="Bing"), Descriptor(name="Google")]
        assert [e.name for e in sorted(engines)] == ["Bing", "Google", "Yahoo"]


class TestImage:
    def test_set_image_creates_data_url(self):
        descriptor = Descriptor(name="Example")
        image = Image.new("RGB", (2, 2), "red")

        descriptor.set_image(image)

        assert descriptor.image is image
        prefix = "data:image/png;base64,"
        assert descriptor.image_url.startswith(prefix)
        assert base64.b64decode(descriptor.image_url[len(prefix):]).startswith(b"\x89PNG")

    def test_set_image_keeps_existing_url(self):
        descriptor = Descriptor(name="Example", image_url="http://example.com/favicon.ico")
        descriptor.set_image(Image.new("RGB", (2, 2)))
        assert descriptor.image_url == "http://example.com/favicon.ico"
