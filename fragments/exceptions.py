"""Custom exception classes for the Fragments service."""

from typing import Optional


class FragmentsException(Exception):
    """
    Base exception class for all fragment-related errors.
    """
    pass


class ValidationError(FragmentsException):
    """
    Raised when required input is missing or malformed.
    """
    pass


class UnsupportedMediaTypeError(ValidationError):
    """
    Raised when a fragment is created with a media type the service cannot store.
    """
    pass


class ContentTypeMismatchError(ValidationError):
    """
    Raised when an update supplies a different media type than the stored fragment.
    """
    pass


class PayloadTooLargeError(ValidationError):
    """
    Raised when a request body exceeds the configured fragment size limit.
    """
    pass


class FragmentNotFoundError(FragmentsException):
    """
    Raised when a fragment does not exist for the requesting owner.
    """
    pass


class ConversionError(FragmentsException):
    """
    Raised when a legal conversion fails on the actual payload.
    """
    pass


class UnsupportedConversionError(ConversionError):
    """
    Raised when the target format is not reachable from the source type.
    """
    pass


class BackendError(FragmentsException):
    """
    Raised when a storage backend call fails.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        owner_id: Optional[str] = None,
        fragment_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.owner_id = owner_id
        self.fragment_id = fragment_id

    def __str__(self) -> str:
        context = [
            f"{key}={value}"
            for key, value in (
                ("operation", self.operation),
                ("owner_id", self.owner_id),
                ("fragment_id", self.fragment_id),
            )
            if value is not None
        ]
        message = super().__str__()
        if context:
            return f"{message} [{' '.join(context)}]"
        return message


class AuthenticationError(FragmentsException):
    """
    Raised when request credentials are missing or invalid.
    """
    pass


class ConfigurationError(FragmentsException):
    """
    Raised when the service is started without a usable configuration.
    """
    pass
