"""Request descriptors for the VirusTotal v2 endpoints.

Each builder validates its input and returns an :class:`ApiRequest`. Nothing
here touches the network.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

from vtapi.validation import (
    MAX_RESCAN_RESOURCES,
    normalize_urls,
    validate_comment,
    validate_domain,
    validate_file,
    validate_ipv4,
    validate_resource,
    validate_resources,
)

# Joins several URLs into one url/scan or url/report parameter
URL_SEPARATOR = "\n"


@dataclass(frozen=True)
class ApiRequest:
    """An outbound request, relative to the API base URL."""

    path: str
    method: Literal["GET", "POST"] = "POST"
    params: dict[str, Any] = field(default_factory=dict)
    files: dict[str, tuple[str, bytes]] | None = None
    # file/report and url/report return engine verdicts keyed by engine name
    normalize_scans: bool = False


def _params(api_key: str, **params: Any) -> dict[str, Any]:
    """Every endpoint takes the key as the 'apikey' parameter."""
    return {"apikey": api_key, **params}


def file_scan(api_key: str, content: bytes, filename: str) -> ApiRequest:
    validate_file(content, filename)
    return ApiRequest(
        path="file/scan",
        params=_params(api_key),
        files={"file": (filename, bytes(content))},
    )


def file_rescan(api_key: str, resources: Iterable[str]) -> ApiRequest:
    hashes = validate_resources(resources, max_items=MAX_RESCAN_RESOURCES)
    return ApiRequest(
        path="file/rescan",
        params=_params(api_key, resource=",".join(hashes)),
    )


def file_report(api_key: str, resources: Iterable[str]) -> ApiRequest:
    hashes = validate_resources(resources)
    return ApiRequest(
        path="file/report",
        params=_params(api_key, resource=",".join(hashes)),
        normalize_scans=True,
    )


def url_scan(api_key: str, urls: Iterable[str]) -> ApiRequest:
    normalized = normalize_urls(urls)
    return ApiRequest(
        path="url/scan",
        params=_params(api_key, url=URL_SEPARATOR.join(normalized)),
    )


def url_report(api_key: str, urls: Iterable[str], scan: bool = False) -> ApiRequest:
    """Build a url/report request.

    ``scan`` asks the service to submit URLs it has no report for.
    """
    normalized = normalize_urls(urls)
    params = _params(api_key, resource=URL_SEPARATOR.join(normalized))
    if scan:
        params["scan"] = 1
    return ApiRequest(path="url/report", params=params, normalize_scans=True)


def ip_report(api_key: str, ip: str | ipaddress.IPv4Address | ipaddress.IPv6Address) -> ApiRequest:
    address = validate_ipv4(ip)
    return ApiRequest(
        path="ip-address/report",
        method="GET",
        params=_params(api_key, ip=address),
    )


def domain_report(api_key: str, domain: str) -> ApiRequest:
    validate_domain(domain)
    return ApiRequest(
        path="domain/report",
        method="GET",
        params=_params(api_key, domain=domain),
    )


def comment_create(api_key: str, resource: str, comment: str) -> ApiRequest:
    validate_resource(resource)
    validate_comment(comment)
    return ApiRequest(
        path="comments/put",
        params=_params(api_key, resource=resource, comment=comment),
    )
