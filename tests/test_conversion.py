"""Tests for the conversion engine."""

import json

import pytest
import yaml

from fragments.conversion import convert, csv_to_records
from fragments.exceptions import ConversionError, UnsupportedConversionError


class TestIdentity:
    def test_returns_payload_unchanged(self):
        data = b"test data"
        assert convert(data, "text/plain", "text/plain") is data

    def test_does_not_reencode_invalid_utf8(self):
        data = b"\xff\xfe raw"
        assert convert(data, "text/markdown", "text/markdown") is data


class TestMarkdown:
    def test_markdown_to_html(self):
        markdown = b"# Heading\n\nParagraph with **bold** text."
        html = convert(markdown, "text/markdown", "text/html").decode("utf-8")

        assert "<h1>Heading</h1>" in html
        assert "<strong>bold</strong>" in html
        assert "<p>Paragraph with" in html

    def test_markdown_lists(self):
        html = convert(b"- one\n- two\n", "text/markdown", "text/html").decode("utf-8")
        assert "<ul>" in html
        assert "<li>one</li>" in html
        assert "<li>two</li>" in html

    def test_markdown_to_plain_is_raw_source(self):
        markdown = b"# Heading\n\nParagraph with **bold** text."
        assert convert(markdown, "text/markdown", "text/plain") == markdown


class TestHtml:
    def test_strips_tags(self):
        html = b"<h1>Title</h1><p>Paragraph <strong>content</strong></p>"
        text = convert(html, "text/html", "text/plain")
        assert text == b"TitleParagraph content"

    def test_keeps_entities(self):
        text = convert(b"<p>a &amp; b</p>", "text/html", "text/plain")
        assert text == b"a &amp; b"


class TestCsv:
    def test_csv_to_json(self):
        csv = b"name,age,city\nJohn,30,New York\nJane,25,Boston"
        records = json.loads(convert(csv, "text/csv", "application/json"))

        assert records == [
            {"name": "John", "age": "30", "city": "New York"},
            {"name": "Jane", "age": "25", "city": "Boston"},
        ]

    def test_single_row(self):
        records = json.loads(convert(b"name,age\nJohn,30", "text/csv", "application/json"))
        assert records == [{"name": "John", "age": "30"}]

    def test_trims_headers_and_values(self):
        records = json.loads(convert(b" name , age \n John , 30 \n", "text/csv", "application/json"))
        assert records == [{"name": "John", "age": "30"}]

    def test_skips_blank_rows(self):
        csv = b"name,age\n\nJohn,30\n   \nJane,25\n\n"
        records = json.loads(convert(csv, "text/csv", "application/json"))
        assert len(records) == 2

    def test_row_count_and_keys_match_data(self):
        csv = "a,b,c\r\n1,2,3\r\n4,5,6\r\n7,8,9\r\n"
        records = csv_to_records(csv)
        assert len(records) == 3
        assert all(list(record.keys()) == ["a", "b", "c"] for record in records)

    def test_byte_order_mark_is_not_part_of_header(self):
        csv = b"\xef\xbb\xbfname,age\nJohn,30\n"
        records = json.loads(convert(csv, "text/csv", "application/json"))
        assert records == [{"name": "John", "age": "30"}]

    def test_quoted_fields(self):
        records = csv_to_records('name,quote\nJohn,"Hello, world"\n')
        assert records == [{"name": "John", "quote": "Hello, world"}]

    def test_empty_payload(self):
        assert json.loads(convert(b"", "text/csv", "application/json")) == []

    def test_header_only(self):
        assert json.loads(convert(b"name,age\n", "text/csv", "application/json")) == []

    def test_ragged_row_is_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b"name,age\nJohn,30,extra\n", "text/csv", "application/json")

    def test_unterminated_quote_is_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b'name,age\n"John,30\n', "text/csv", "application/json")

    def test_invalid_utf8_is_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b"name\n\xff\xfe", "text/csv", "application/json")

    def test_csv_to_plain_passthrough(self):
        assert convert(b"a,b\n1,2", "text/csv", "text/plain") == b"a,b\n1,2"


class TestJson:
    def test_json_to_yaml(self):
        payload = json.dumps({"name": "John", "tags": ["a", "b"], "age": 30}).encode()
        rendered = convert(payload, "application/json", "application/yaml").decode("utf-8")

        assert yaml.safe_load(rendered) == {"name": "John", "tags": ["a", "b"], "age": 30}
        assert rendered.index("name") < rendered.index("tags") < rendered.index("age")

    def test_malformed_json_is_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b"{not json", "application/json", "application/yaml")

    def test_json_to_plain_passthrough(self):
        assert convert(b'{"a": 1}', "application/json", "text/plain") == b'{"a": 1}'


class TestOtherText:
    def test_any_text_to_plain_passthrough(self):
        assert convert(b"body { }", "text/css", "text/plain") == b"body { }"


class TestUnsupported:
    def test_unsupported_conversion_names_both_types(self):
        with pytest.raises(UnsupportedConversionError, match="text/plain to image/png"):
            convert(b"test", "text/plain", "image/png")

    def test_unsupported_is_a_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b"{}", "application/json", "text/html")

    def test_plain_cannot_become_html(self):
        with pytest.raises(UnsupportedConversionError):
            convert(b"hello", "text/plain", "text/html")
