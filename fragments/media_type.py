"""Content-Type header parsing (RFC 7231 media types)."""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional


TYPE_PATTERN = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+/[!#$%&'*+.^_`|~0-9A-Za-z-]+$")

PARAM_PATTERN = re.compile(
    r";[ \t]*([!#$%&'*+.^_`|~0-9A-Za-z-]+)[ \t]*=[ \t]*"
    r"(\"(?:[\t\x20\x21\x23-\x5b\x5d-\x7e\x80-\xff]|\\[\t\x20-\x7e\x80-\xff])*\"|[!#$%&'*+.^_`|~0-9A-Za-z-]+)[ \t]*"
)

QUOTED_PAIR_PATTERN = re.compile(r"\\([\t\x20-\x7e\x80-\xff])")


@dataclass(frozen=True)
class MediaType:
    """
    A parsed Content-Type value.
    """
    type: str
    parameters: Dict[str, str] = field(default_factory=dict)


def parse_media_type(value: str) -> MediaType:
    """
    Parse a Content-Type value into its media type and parameters.

    Args:
        value: Header value, e.g. "text/plain; charset=utf-8"

    Returns:
        MediaType with a lower-cased type and lower-cased parameter names

    Raises:
        ValueError: If the value is not a valid media type
    """
    if not isinstance(value, str) or not value:
        raise ValueError("media type is required")

    index = value.find(";")
    type_part = (value[:index] if index != -1 else value).strip()

    if not TYPE_PATTERN.match(type_part):
        raise ValueError(f"invalid media type: {value!r}")

    parameters = {}
    if index != -1:
        position = index
        for match in PARAM_PATTERN.finditer(value, index):
            if match.start() != position:
                raise ValueError(f"invalid parameter format: {value!r}")
            position = match.end()

            key = match.group(1).lower()
            param_value = match.group(2)
            if param_value.startswith('"'):
                param_value = QUOTED_PAIR_PATTERN.sub(r"\1", param_value[1:-1])
            parameters[key] = param_value

        if position != len(value):
            raise ValueError(f"invalid parameter format: {value!r}")

    return MediaType(type=type_part.lower(), parameters=parameters)


def media_type_of(value: Optional[str]) -> Optional[str]:
    """
    Return the bare ``type/subtype`` of a Content-Type value, or None if malformed.
    """
    try:
        return parse_media_type(value).type
    except ValueError:
        return None
