"""Type capability table: which media types a fragment can be rendered as."""

from typing import Dict, List, Optional

from fragments.media_type import media_type_of


TEXT_PLAIN = "text/plain"
TEXT_MARKDOWN = "text/markdown"
TEXT_HTML = "text/html"
TEXT_CSV = "text/csv"
APPLICATION_JSON = "application/json"
APPLICATION_YAML = "application/yaml"

# Targets reachable from each source, in addition to the source itself.
CONVERSIONS: Dict[str, List[str]] = {
    TEXT_PLAIN: [],
    TEXT_MARKDOWN: [TEXT_HTML, TEXT_PLAIN],
    TEXT_HTML: [TEXT_PLAIN],
    TEXT_CSV: [TEXT_PLAIN, APPLICATION_JSON],
    APPLICATION_JSON: [APPLICATION_YAML, TEXT_PLAIN],
}

EXTENSIONS: Dict[str, str] = {
    ".txt": TEXT_PLAIN,
    ".md": TEXT_MARKDOWN,
    ".html": TEXT_HTML,
    ".csv": TEXT_CSV,
    ".json": APPLICATION_JSON,
    ".yaml": APPLICATION_YAML,
    ".yml": APPLICATION_YAML,
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".avif": "image/avif",
}


def is_text_type(mime_type: Optional[str]) -> bool:
    """
    True for ``text/*`` and ``application/json``.
    """
    if not mime_type:
        return False
    return mime_type.startswith("text/") or mime_type == APPLICATION_JSON


def is_supported_type(value: Optional[str]) -> bool:
    """
    Check whether a Content-Type value can be stored as a fragment.

    Parameters such as charset are ignored; malformed values are rejected.
    """
    return is_text_type(media_type_of(value))


def reachable_formats(mime_type: str) -> List[str]:
    """
    Ordered list of media types ``mime_type`` can be rendered as, itself first.
    """
    if mime_type in CONVERSIONS:
        extra = CONVERSIONS[mime_type]
    elif mime_type.startswith("text/"):
        extra = [TEXT_PLAIN]
    else:
        extra = []
    return [mime_type] + extra


def is_supported_conversion(source_type: str, target_type: str) -> bool:
    if source_type == target_type:
        return True
    return target_type in reachable_formats(source_type)


def get_content_type_from_extension(extension: str) -> Optional[str]:
    """
    Map a file extension (e.g. ".html" or "html") to a media type.

    Returns:
        Media type string, or None for unknown extensions
    """
    if not extension:
        return None
    if not extension.startswith("."):
        extension = f".{extension}"
    return EXTENSIONS.get(extension.lower())
