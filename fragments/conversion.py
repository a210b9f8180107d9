"""Conversion engine: render fragment data in another media type."""

import csv
import io
import json
import re
from typing import Callable, Dict, List, Tuple

import markdown
import yaml

from common.logging_config import get_logger
from fragments.exceptions import ConversionError, UnsupportedConversionError
from fragments.formats import (
    APPLICATION_JSON,
    APPLICATION_YAML,
    TEXT_CSV,
    TEXT_HTML,
    TEXT_MARKDOWN,
    TEXT_PLAIN,
    is_supported_conversion,
)

logger = get_logger(__name__)

TAG_PATTERN = re.compile(r"<[^>]*>")


def _decode(payload: bytes, source_type: str, encoding: str = "utf-8") -> str:
    try:
        return payload.decode(encoding)
    except UnicodeDecodeError as e:
        raise ConversionError(f"{source_type} payload is not valid UTF-8: {e}") from e


def markdown_to_html(payload: bytes) -> bytes:
    html = markdown.markdown(_decode(payload, TEXT_MARKDOWN))
    return html.encode("utf-8")


def html_to_text(payload: bytes) -> bytes:
    return TAG_PATTERN.sub("", _decode(payload, TEXT_HTML)).encode("utf-8")


def csv_to_records(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into one mapping per non-blank data row.

    The first non-blank row is the header. Header names and values are trimmed.

    Raises:
        ConversionError: On csv syntax errors or rows whose field count differs
            from the header
    """
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header = None
    records = []

    try:
        for row in reader:
            if not row or (len(row) == 1 and not row[0].strip()):
                continue

            if header is None:
                header = [name.strip() for name in row]
                continue

            if len(row) != len(header):
                raise ConversionError(
                    f"CSV row {reader.line_num} has {len(row)} fields, expected {len(header)}"
                )

            records.append({name: value.strip() for name, value in zip(header, row)})
    except csv.Error as e:
        raise ConversionError(f"Malformed CSV at line {reader.line_num}: {e}") from e

    return records


def csv_to_json(payload: bytes) -> bytes:
    # spreadsheet exports often start with a BOM; keep it out of the first header
    records = csv_to_records(_decode(payload, TEXT_CSV, encoding="utf-8-sig"))
    return json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")


def json_to_yaml(payload: bytes) -> bytes:
    try:
        document = json.loads(_decode(payload, APPLICATION_JSON))
    except json.JSONDecodeError as e:
        raise ConversionError(f"Malformed JSON: {e}") from e

    rendered = yaml.safe_dump(
        document,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return rendered.encode("utf-8")


def passthrough(payload: bytes) -> bytes:
    return payload


CONVERTERS: Dict[Tuple[str, str], Callable[[bytes], bytes]] = {
    (TEXT_MARKDOWN, TEXT_HTML): markdown_to_html,
    (TEXT_MARKDOWN, TEXT_PLAIN): passthrough,
    (TEXT_HTML, TEXT_PLAIN): html_to_text,
    (TEXT_CSV, APPLICATION_JSON): csv_to_json,
    (TEXT_CSV, TEXT_PLAIN): passthrough,
    (APPLICATION_JSON, APPLICATION_YAML): json_to_yaml,
    (APPLICATION_JSON, TEXT_PLAIN): passthrough,
}


def convert(payload: bytes, source_type: str, target_type: str) -> bytes:
    """
    Convert a payload from one media type to another.

    Args:
        payload: Raw fragment data
        source_type: Media type of ``payload`` (no parameters)
        target_type: Requested media type (no parameters)

    Returns:
        Converted bytes; ``payload`` itself for identity conversions

    Raises:
        UnsupportedConversionError: If the target is not reachable from the source
        ConversionError: If the payload cannot be converted
    """
    if not is_supported_conversion(source_type, target_type):
        raise UnsupportedConversionError(
            f"Conversion from {source_type} to {target_type} is not supported"
        )

    if source_type == target_type:
        return payload

    converter = CONVERTERS.get((source_type, target_type), passthrough)

    logger.debug(f"Converting {len(payload)} bytes from {source_type} to {target_type}")
    return converter(payload)
