"""VirusTotal public API v2 client.

The public API allows about 5 requests per minute; going over it is answered
with HTTP 204, surfaced here as :class:`RateLimitError`. Check for an
existing report before submitting a file or URL for scanning.
"""

from __future__ import annotations

import errno
import os
from collections.abc import Iterable
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, TypeVar, Union

import httpx
import structlog

from vtapi import builder
from vtapi.config import Settings
from vtapi.exceptions import (
    AccessDeniedError,
    ApiError,
    InvalidApiKeyError,
    InvalidArgumentError,
    RateLimitError,
    SerializationError,
)
from vtapi.hashing import FileLike, resource_for, sha256_hex
from vtapi.models import DomainReport, IPReport, Report, ScanResult, parse_result
from vtapi.validation import canonical_url

if TYPE_CHECKING:
    import ipaddress

    from vtapi.builder import ApiRequest

logger = structlog.get_logger()

T = TypeVar("T")

_HOST = "www.virustotal.com"
_API_PATH = "/vtapi/v2/"

MIN_API_KEY_LENGTH = 64
DEFAULT_RETRY = 3

# A resource identifier, or a file that is hashed into one
ResourceOrFile = Union[str, FileLike]
# Something scan_file() can upload
Upload = Union[bytes, bytearray, memoryview, str, os.PathLike, IO[bytes]]


def _scheme(use_tls: bool) -> str:
    return "https" if use_tls else "http"


def _base_url(use_tls: bool) -> str:
    return f"{_scheme(use_tls)}://{_HOST}{_API_PATH}"


def _first(results: list[T]) -> T | None:
    return results[0] if results else None


def _as_list(items: Iterable[Any] | str) -> list[Any]:
    if isinstance(items, str):
        return [items]
    return list(items)


class VirusTotal:
    """Client for the VirusTotal public API v2.

    Every call is synchronous and blocking. Retry bookkeeping lives on the
    call stack, so one instance can be shared between threads.

    Args:
        api_key: The 64 character key from your VirusTotal profile.
        use_tls: Talk to the API over HTTPS instead of HTTP.
        proxy: Proxy URL handed to the HTTP client.
        timeout: Per-request timeout in seconds.
        retry: Number of attempts made when a response cannot be decoded.
            After the last one the call returns an empty result.
        transport: Custom ``httpx`` transport, mainly for tests.

    Raises:
        InvalidApiKeyError: If the key is missing or shorter than 64 chars.
    """

    def __init__(
        self,
        api_key: str,
        *,
        use_tls: bool = False,
        proxy: str | None = None,
        timeout: float = 30.0,
        retry: int = DEFAULT_RETRY,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key or len(api_key) < MIN_API_KEY_LENGTH:
            msg = "You have to set an API key."
            raise InvalidApiKeyError(msg)

        self._api_key = api_key
        self._use_tls = use_tls
        self._proxy = proxy
        self._timeout = timeout
        self.retry = retry
        self._client = httpx.Client(
            base_url=_base_url(use_tls),
            timeout=timeout,
            proxy=proxy,
            transport=transport,
            follow_redirects=False,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> VirusTotal:
        """Build a client from :class:`vtapi.config.Settings` (``VT_*`` env vars)."""
        settings = settings or Settings()
        return cls(
            settings.api_key.get_secret_value(),
            use_tls=settings.use_tls,
            proxy=settings.proxy,
            timeout=settings.timeout,
            retry=settings.retry,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def use_tls(self) -> bool:
        return self._use_tls

    @use_tls.setter
    def use_tls(self, value: bool) -> None:
        self._use_tls = value
        self._client.base_url = _base_url(value)

    @property
    def proxy(self) -> str | None:
        return self._proxy

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self._timeout = value
        self._client.timeout = value

    @property
    def retry(self) -> int:
        return self._retry

    @retry.setter
    def retry(self, value: int) -> None:
        if value < 0:
            msg = f"retry must be zero or positive, got {value}"
            raise InvalidArgumentError(msg)
        self._retry = value

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def scan_file(self, file: Upload, filename: str | None = None) -> ScanResult | None:
        """Upload a file for scanning.

        Fetch the report first: the file may well have been scanned before.

        Args:
            file: Raw bytes, a path (``str`` or ``os.PathLike``) or an open
                binary handle.
            filename: Name sent with the upload. Required for raw bytes;
                defaults to the file's own name otherwise.

        Raises:
            FileNotFoundError: If a path is given and does not exist.
            SizeLimitError: If the file is larger than 32 MiB.
        """
        content, name = self._read_upload(file, filename)
        return self._get_results(builder.file_scan(self._api_key, content, name), ScanResult)

    def scan_files(self, files: Iterable[Upload | tuple[bytes, str]]) -> list[ScanResult | None]:
        """Scan several files one after the other.

        Items are ``(content, filename)`` tuples or anything :meth:`scan_file`
        accepts. The first failure stops the batch.
        """
        results = []
        for item in files:
            if isinstance(item, tuple):
                results.append(self.scan_file(*item))
            else:
                results.append(self.scan_file(item))
        return results

    def rescan_file(self, item: ResourceOrFile) -> ScanResult | None:
        """Ask the service to rescan a file it already has."""
        return _first(self.rescan_files([item]))

    def rescan_files(self, items: Iterable[ResourceOrFile]) -> list[ScanResult]:
        """Rescan up to 25 files in one request.

        Items may mix MD5, SHA1, SHA256 and scan ids. Files are hashed
        locally and only the SHA-256 is sent.
        """
        resources = [resource_for(item) for item in _as_list(items)]
        return self._get_results(builder.file_rescan(self._api_key, resources), list[ScanResult], [])

    def get_file_report(self, item: ResourceOrFile) -> Report | None:
        return _first(self.get_file_reports([item]))

    def get_file_reports(self, items: Iterable[ResourceOrFile]) -> list[Report]:
        """Get reports for files given by hash, scan id or content.

        Submitted files are scanned with the lowest priority. Poll for the
        report instead of submitting the file again.
        """
        resources = [resource_for(item) for item in _as_list(items)]
        return self._get_results(builder.file_report(self._api_key, resources), list[Report], [])

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def scan_url(self, url: str) -> ScanResult | None:
        return _first(self.scan_urls([url]))

    def scan_urls(self, urls: Iterable[str]) -> list[ScanResult]:
        """Submit URLs for scanning. URLs without a scheme get ``http://``."""
        return self._get_results(builder.url_scan(self._api_key, _as_list(urls)), list[ScanResult], [])

    def get_url_report(self, url: str, scan_if_missing: bool = False) -> Report | None:
        return _first(self.get_url_reports([url], scan_if_missing=scan_if_missing))

    def get_url_reports(self, urls: Iterable[str], scan_if_missing: bool = False) -> list[Report]:
        """Get reports for URLs.

        Args:
            urls: The URLs to look up.
            scan_if_missing: Submit URLs the service has no report for.
        """
        request = builder.url_report(self._api_key, _as_list(urls), scan=scan_if_missing)
        return self._get_results(request, list[Report], [])

    # ------------------------------------------------------------------
    # IPs, domains, comments
    # ------------------------------------------------------------------

    def get_ip_report(self, ip: str | ipaddress.IPv4Address | ipaddress.IPv6Address) -> IPReport | None:
        """Get the report for an IPv4 address. IPv6 is not supported."""
        return self._get_results(builder.ip_report(self._api_key, ip), IPReport)

    def get_domain_report(self, domain: str) -> DomainReport | None:
        return self._get_results(builder.domain_report(self._api_key, domain), DomainReport)

    def create_comment(self, item: ResourceOrFile, comment: str) -> ScanResult | None:
        """Comment on a file given by hash, scan id or content."""
        resource = resource_for(item)
        return self._get_results(builder.comment_create(self._api_key, resource, comment), ScanResult)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def get_public_file_scan_link(self, item: ResourceOrFile) -> str:
        """Link to the web analysis page of a file."""
        resource = resource_for(item)
        return f"{_scheme(self._use_tls)}://{_HOST}/file/{resource}/analysis/"

    def get_public_url_scan_link(self, url: str) -> str:
        """Link to the web analysis page of a URL."""
        url_id = sha256_hex(canonical_url(url).encode("utf-8"))
        return f"{_scheme(self._use_tls)}://{_HOST}/url/{url_id}/analysis/"

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _read_upload(self, file: Upload, filename: str | None) -> tuple[bytes, str | None]:
        if isinstance(file, (bytes, bytearray, memoryview)):
            return bytes(file), filename
        if isinstance(file, (str, os.PathLike)):
            path = Path(file)
            if not path.is_file():
                raise FileNotFoundError(errno.ENOENT, "The file was not found.", str(path))
            return path.read_bytes(), filename or path.name
        if hasattr(file, "read"):
            name = filename or os.path.basename(str(getattr(file, "name", "") or ""))
            content = file.read()
            if not isinstance(content, (bytes, bytearray, memoryview)):
                msg = "File handle must be opened in binary mode"
                raise InvalidArgumentError(msg)
            return bytes(content), name
        msg = f"Cannot upload object of type {type(file).__name__}"
        raise TypeError(msg)

    def _send(self, request: ApiRequest) -> httpx.Response:
        logger.debug("vt_request", method=request.method, path=request.path)
        try:
            if request.method == "GET":
                return self._client.get(request.path, params=request.params)
            return self._client.post(request.path, data=request.params, files=request.files)
        except httpx.TransportError as e:
            logger.error("vt_transport_error", path=request.path, error=str(e))
            raise

    def _check_response(self, response: httpx.Response, path: str) -> str:
        """Map the status line to an error, or return the body."""
        status = response.status_code

        if status == httpx.codes.NO_CONTENT:
            logger.warning("vt_rate_limited", path=path)
            msg = "You have reached the 5 requests pr. min. limit of VirusTotal"
            raise RateLimitError(msg, status)

        if status == httpx.codes.FORBIDDEN:
            logger.error("vt_access_denied", path=path)
            msg = "You don't have access to the service. Make sure your API key is working correctly."
            raise AccessDeniedError(msg, status)

        if status != httpx.codes.OK:
            logger.error("vt_api_error", path=path, status=status)
            msg = f"API gave error code {status}"
            raise ApiError(msg, status)

        body = response.text
        if not body.strip():
            logger.error("vt_api_error", path=path, status=status, error="empty response")
            msg = "API returned an empty response"
            raise ApiError(msg, status)
        return body

    def _get_results(self, request: ApiRequest, result_type: Any, default: Any = None) -> Any:
        """Send ``request`` and decode the answer, re-sending on decode errors.

        ``retry`` bounds the total number of attempts. When every attempt
        fails to decode, ``default`` is returned instead of raising.
        """
        attempts_left = self._retry
        while True:
            body = self._check_response(self._send(request), request.path)
            try:
                return parse_result(body, result_type, normalize=request.normalize_scans)
            except SerializationError as e:
                attempts_left -= 1
                if attempts_left <= 0:
                    logger.warning("vt_retries_exhausted", path=request.path, retry=self._retry, error=str(e))
                    return default
                logger.info("vt_deserialize_retry", path=request.path, attempts_left=attempts_left, error=str(e))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> VirusTotal:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
