"""Input validation for VirusTotal requests.

Everything here runs before a request is built, so invalid input never costs
a round trip (the public API only allows a handful of requests per minute).
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterable
from urllib.parse import urlsplit, urlunsplit

from vtapi.exceptions import (
    InvalidArgumentError,
    InvalidResourceError,
    SizeLimitError,
    TooManyResourcesError,
    UnsupportedAddressError,
    UrlConversionError,
)

# MD5, SHA1, SHA256 and scan id (sha256 + "-" + unix timestamp)
RESOURCE_LENGTHS = frozenset({32, 40, 64, 75})

FILE_SIZE_LIMIT = 33_554_432  # 32 MiB

MAX_RESCAN_RESOURCES = 25

_URL_SCHEMES = ("http://", "https://")

_INVALID_HOST_CHARS = re.compile(r"[\s<>\"{}|\\^`]")

# urlsplit drops tabs and newlines silently, and newlines separate batched URLs
_INVALID_URL_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def validate_text(value: str | None, field_name: str) -> str:
    """Reject ``None``, empty and whitespace-only strings.

    Returns:
        The value, unchanged.
    """
    if value is None or not str(value).strip():
        msg = f"{field_name} must not be null or whitespace"
        raise InvalidArgumentError(msg)
    return value


def validate_resource(resource: str | None) -> str:
    """Check that ``resource`` looks like a hash or a scan id.

    Only the length is checked: 32 (MD5), 40 (SHA1), 64 (SHA256) or
    75 (scan id). The characters themselves are left to the service.

    Raises:
        InvalidResourceError: If the resource is empty, whitespace or its
            length matches none of the above.
    """
    if resource is None or not str(resource).strip():
        msg = "Resource must not be null or whitespace"
        raise InvalidResourceError(msg)
    if len(resource) not in RESOURCE_LENGTHS:
        msg = f"Resource {resource} has to be either a MD5, SHA1, SHA256 or scan id"
        raise InvalidResourceError(msg)
    return resource


def validate_resources(resources: Iterable[str], max_items: int | None = None) -> list[str]:
    """Validate a batch of resources.

    Args:
        resources: The resources, in request order.
        max_items: Upper bound on the batch size, ``None`` for no bound.

    Raises:
        InvalidArgumentError: If the batch is empty.
        TooManyResourcesError: If the batch is larger than ``max_items``.
    """
    items = list(resources)
    if not items:
        msg = "You have to supply a resource."
        raise InvalidArgumentError(msg)
    if max_items is not None and len(items) > max_items:
        msg = f"Too many hashes. There is a maximum of {max_items} hashes."
        raise TooManyResourcesError(msg)
    for resource in items:
        validate_resource(resource)
    return items


def validate_file(content: bytes | None, filename: str | None) -> None:
    """Check a file upload against the service limits."""
    if not content:
        msg = "You must provide a file"
        raise InvalidArgumentError(msg)
    if len(content) > FILE_SIZE_LIMIT:
        msg = f"The filesize limit on VirusTotal is 32 MB. Your file is {len(content) // 1024 // 1024} MB"
        raise SizeLimitError(msg)
    if filename is None or not filename.strip():
        msg = "You must provide a filename. Preferably the original filename."
        raise InvalidArgumentError(msg)


def normalize_url(url: str) -> str:
    """Trim ``url`` and add ``http://`` when it carries no scheme.

    Raises:
        UrlConversionError: If the result is not a usable URL. The parse
            failure is chained as ``__cause__``.
    """
    if not isinstance(url, str):
        msg = f"URL must be a string, got {type(url).__name__}"
        raise InvalidArgumentError(msg)

    candidate = url.strip()
    if not candidate.startswith(_URL_SCHEMES):
        candidate = "http://" + candidate

    try:
        if _INVALID_URL_CHARS.search(candidate):
            msg = f"Whitespace or control character in {candidate!r}"
            raise ValueError(msg)
        parts = urlsplit(candidate)
        host = parts.hostname
        if not host or _INVALID_HOST_CHARS.search(host):
            msg = f"Invalid host in {candidate!r}"
            raise ValueError(msg)
        # Accessing the port validates it
        _ = parts.port
    except ValueError as exc:
        raise UrlConversionError(url) from exc

    return candidate


def normalize_urls(urls: Iterable[str]) -> list[str]:
    """Normalize a batch of URLs, failing on the first bad one."""
    items = [normalize_url(url) for url in urls]
    if not items:
        msg = "You have to supply an URL."
        raise InvalidArgumentError(msg)
    return items


def canonical_url(url: str) -> str:
    """Normalized URL with a lower-cased scheme and host and a non-empty path.

    Default ports (80 for http, 443 for https) are dropped.
    This is the form VirusTotal hashes to build URL analysis links.
    """
    parts = urlsplit(normalize_url(url))
    netloc = parts.netloc
    host_start = netloc.rfind("@") + 1
    scheme = parts.scheme.lower()
    host_port = netloc[host_start:].lower()
    if parts.port is not None and parts.port == _DEFAULT_PORTS.get(scheme):
        host_port = host_port.rsplit(":", 1)[0]
    netloc = netloc[:host_start] + host_port
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))


def validate_ipv4(ip: str | ipaddress.IPv4Address | ipaddress.IPv6Address | None) -> str:
    """Return the dotted-quad form of an IPv4 address.

    Raises:
        InvalidArgumentError: If ``ip`` is empty or not an IP address.
        UnsupportedAddressError: If ``ip`` is an IPv6 address.
    """
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        address = ip
    else:
        if ip is None or not str(ip).strip():
            msg = "You have to supply an IP."
            raise InvalidArgumentError(msg)
        try:
            address = ipaddress.ip_address(str(ip).strip())
        except ValueError as exc:
            msg = f"{ip!r} is not a valid IP address"
            raise InvalidArgumentError(msg) from exc

    if address.version != 4:
        msg = "Only IPv4 addresses are supported"
        raise UnsupportedAddressError(msg)
    return str(address)


def validate_domain(domain: str | None) -> str:
    return validate_text(domain, "Domain")


def validate_comment(comment: str | None) -> str:
    return validate_text(comment, "Comment")
