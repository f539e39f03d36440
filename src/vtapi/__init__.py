"""Client for the VirusTotal public API v2."""

from vtapi.client import VirusTotal
from vtapi.config import Settings
from vtapi.exceptions import (
    AccessDeniedError,
    ApiError,
    InvalidApiKeyError,
    InvalidArgumentError,
    InvalidResourceError,
    RateLimitError,
    SerializationError,
    SizeLimitError,
    TooManyResourcesError,
    UnsupportedAddressError,
    UrlConversionError,
    VirusTotalError,
)
from vtapi.logging import setup_logging
from vtapi.models import DomainReport, IPReport, Report, ScanEngine, ScanResult

__all__ = [
    "AccessDeniedError",
    "ApiError",
    "DomainReport",
    "IPReport",
    "InvalidApiKeyError",
    "InvalidArgumentError",
    "InvalidResourceError",
    "RateLimitError",
    "Report",
    "ScanEngine",
    "ScanResult",
    "SerializationError",
    "Settings",
    "SizeLimitError",
    "TooManyResourcesError",
    "UnsupportedAddressError",
    "UrlConversionError",
    "VirusTotal",
    "VirusTotalError",
    "setup_logging",
]
