"""Errors raised by the VirusTotal client."""

from __future__ import annotations


class VirusTotalError(Exception):
    """Base class for every error raised by vtapi."""


class InvalidArgumentError(VirusTotalError, ValueError):
    """A required argument is missing, empty or malformed."""


class InvalidApiKeyError(InvalidArgumentError):
    """The API key is missing or too short."""


class InvalidResourceError(InvalidArgumentError):
    """A resource is not an MD5, SHA1, SHA256 or scan id."""


class TooManyResourcesError(InvalidArgumentError):
    """A batch holds more resources than the service accepts."""


class SizeLimitError(InvalidArgumentError):
    """A file is larger than the upload limit."""


class UnsupportedAddressError(InvalidArgumentError):
    """The address family is not supported by the service."""


class UrlConversionError(InvalidArgumentError):
    """A URL string could not be turned into a usable URL.

    The parse failure is chained as ``__cause__``.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"There was an error converting {url!r} to an URL")


class ApiError(VirusTotalError):
    """The service answered with something other than a usable 200."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(ApiError):
    """HTTP 204: the public API request rate was exceeded."""


class AccessDeniedError(ApiError):
    """HTTP 403: the API key was refused."""


class SerializationError(VirusTotalError):
    """The response body could not be decoded into the result model."""
