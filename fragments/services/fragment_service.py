"""Fragment service: create, read (with conversion), update, delete."""

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from common.logging_config import get_logger
from fragments.conversion import convert
from fragments.exceptions import (
    ContentTypeMismatchError,
    ConversionError,
    UnsupportedConversionError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from fragments.formats import get_content_type_from_extension, is_supported_conversion
from fragments.media_type import parse_media_type
from fragments.models.fragment import Fragment
from fragments.repositories.base import StorageBackend

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderedFragment:
    """
    Fragment data ready to be returned to a client.
    """
    fragment: Fragment
    data: bytes
    content_type: str


def split_extension(fragment_ref: str) -> Tuple[str, Optional[str]]:
    """
    Split a requested id into the fragment id and an optional extension.

    "abc.html" -> ("abc", ".html"), "abc" -> ("abc", None)
    """
    fragment_id, extension = os.path.splitext(fragment_ref)
    if not extension:
        return fragment_ref, None
    return fragment_id, extension


class FragmentService:
    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def list_fragments(self, owner_id: str, expand: bool = False) -> Union[List[str], List[Fragment]]:
        return Fragment.find_all_for_owner(self.backend, owner_id, expand=expand)

    def get_fragment(self, owner_id: str, fragment_id: str) -> Fragment:
        return Fragment.find_by_id(self.backend, owner_id, fragment_id)

    def create_fragment(self, owner_id: str, content_type: str, data: bytes) -> Fragment:
        """
        Create a fragment from a request body.

        Metadata is written first, then the payload, then the metadata again
        with the refreshed ``updated`` timestamp.

        Args:
            owner_id: Authenticated owner
            content_type: Content-Type header value, parameters included
            data: Raw request body

        Raises:
            ValidationError: If the content type is malformed or data is not bytes
            UnsupportedMediaTypeError: If the content type cannot be stored
        """
        media_type = self._parse_content_type(content_type)
        if not Fragment.is_supported_type(media_type):
            raise UnsupportedMediaTypeError(f"Unsupported Content-Type: {media_type}")

        if not isinstance(data, (bytes, bytearray)):
            raise ValidationError("Invalid request body format")

        fragment = Fragment(owner_id=owner_id, type=content_type.strip(), backend=self.backend)

        fragment.save()
        try:
            fragment.set_data(data)
        except Exception as e:
            logger.error(f"Creating fragment {fragment.id} failed after metadata was written: {e}")
            self._cleanup_partial_fragment(fragment)
            raise

        logger.info(f"Fragment created [owner_id={owner_id}] [fragment_id={fragment.id}] size={fragment.size}")
        return fragment

    def update_fragment(self, owner_id: str, fragment_id: str, content_type: str, data: bytes) -> Fragment:
        """
        Replace a fragment's data. The media type must match the stored one.

        Raises:
            FragmentNotFoundError: If the fragment does not exist for this owner
            ContentTypeMismatchError: If ``content_type`` names a different media type
        """
        media_type = self._parse_content_type(content_type)
        fragment = Fragment.find_by_id(self.backend, owner_id, fragment_id)

        if media_type != fragment.mime_type:
            logger.warning(
                f"Content-Type mismatch on update [fragment_id={fragment_id}] "
                f"existing={fragment.mime_type} requested={media_type}"
            )
            raise ContentTypeMismatchError(
                f"Cannot update fragment with different Content-Type. "
                f"Original: {fragment.mime_type}, Requested: {media_type}"
            )

        fragment.set_data(data)
        logger.info(f"Fragment updated [owner_id={owner_id}] [fragment_id={fragment_id}] size={fragment.size}")
        return fragment

    def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        Fragment.find_by_id(self.backend, owner_id, fragment_id)
        Fragment.delete(self.backend, owner_id, fragment_id)

    def read_fragment(self, owner_id: str, fragment_ref: str) -> RenderedFragment:
        """
        Read a fragment's data, converting it when an extension is requested.

        Args:
            owner_id: Authenticated owner
            fragment_ref: Fragment id, optionally with an extension ("abc.html")

        Returns:
            RenderedFragment with the (converted) data and its content type

        Raises:
            FragmentNotFoundError: If the fragment or its data does not exist
            UnsupportedConversionError: If the extension is unknown or the
                conversion is not reachable from the fragment's type
            ConversionError: If the payload cannot be converted
        """
        fragment_id, extension = split_extension(fragment_ref)

        target_type = None
        if extension is not None:
            target_type = get_content_type_from_extension(extension)
            if target_type is None:
                logger.warning(f"Unknown extension requested: {extension}")
                raise UnsupportedConversionError(f"Unsupported conversion format: {extension}")

        fragment = Fragment.find_by_id(self.backend, owner_id, fragment_id)
        data = fragment.get_data()

        if target_type is None:
            return RenderedFragment(fragment=fragment, data=data, content_type=fragment.type)

        source_type = fragment.mime_type
        if not is_supported_conversion(source_type, target_type):
            logger.warning(f"Unsupported conversion requested: {source_type} -> {target_type}")
            raise UnsupportedConversionError(
                f"Conversion from {source_type} to {target_type} is not supported"
            )

        try:
            converted = convert(data, source_type, target_type)
        except ConversionError as e:
            logger.warning(
                f"Error converting fragment [fragment_id={fragment_id}] "
                f"{source_type} -> {target_type}: {e}"
            )
            raise

        return RenderedFragment(fragment=fragment, data=converted, content_type=target_type)

    @staticmethod
    def _parse_content_type(content_type: Optional[str]) -> str:
        if not content_type:
            raise ValidationError("Content-Type header is required")
        try:
            return parse_media_type(content_type).type
        except ValueError as e:
            raise ValidationError("Invalid Content-Type format") from e

    def _cleanup_partial_fragment(self, fragment: Fragment) -> None:
        try:
            Fragment.delete(self.backend, fragment.owner_id, fragment.id)
            logger.info(f"Removed partially created fragment {fragment.id}")
        except Exception as e:
            logger.error(f"Failed to clean up partially created fragment {fragment.id}: {e}", exc_info=True)
