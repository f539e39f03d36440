"""Typed results returned by the VirusTotal v2 API."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar, get_origin

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from vtapi.exceptions import SerializationError
from vtapi.normalizer import load_body

T = TypeVar("T")


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    response_code: int = 0
    verbose_msg: str = ""


class ScanResult(_Result):
    """Answer to a scan, rescan or comment request."""

    resource: str | None = None
    scan_id: str | None = None
    permalink: str | None = None
    sha256: str | None = None
    sha1: str | None = None
    md5: str | None = None
    url: str | None = None
    scan_date: str | None = None


class ScanEngine(BaseModel):
    """One antivirus engine's verdict."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    detected: bool = False
    version: str | None = None
    result: str | None = None
    update: str | None = None


class Report(_Result):
    """Stored verdicts for a file or a URL."""

    resource: str | None = None
    scan_id: str | None = None
    permalink: str | None = None
    scan_date: str | None = None
    positives: int = 0
    total: int = 0
    md5: str | None = None
    sha1: str | None = None
    sha256: str | None = None
    url: str | None = None
    filescan_id: str | None = None
    scans: list[ScanEngine] = Field(default_factory=list)

    @property
    def detections(self) -> list[ScanEngine]:
        return [engine for engine in self.scans if engine.detected]


class Sample(BaseModel):
    """A file sample seen communicating with or downloaded from a host."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sha256: str | None = None
    date: str | None = None
    positives: int = 0
    total: int = 0


class UrlDetection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str | None = None
    positives: int = 0
    total: int = 0
    scan_date: str | None = None


class IPResolution(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    hostname: str | None = None
    last_resolved: str | None = None


class DomainResolution(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    ip_address: str | None = None
    last_resolved: str | None = None


class _HostReport(_Result):
    detected_urls: list[UrlDetection] = Field(default_factory=list)
    detected_communicating_samples: list[Sample] = Field(default_factory=list)
    detected_downloaded_samples: list[Sample] = Field(default_factory=list)
    undetected_communicating_samples: list[Sample] = Field(default_factory=list)
    undetected_downloaded_samples: list[Sample] = Field(default_factory=list)


class IPReport(_HostReport):
    """What the service knows about an IPv4 address."""

    asn: int | str | None = None
    as_owner: str | None = None
    country: str | None = None
    resolutions: list[IPResolution] = Field(default_factory=list)


class DomainReport(_HostReport):
    """What the service knows about a domain."""

    resolutions: list[DomainResolution] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    subdomains: list[str] = Field(default_factory=list)
    whois: str | None = None
    whois_timestamp: float | None = None


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(result_type)


def parse_result(body: str | bytes, result_type: type[T] | Any, normalize: bool = False) -> T:
    """Decode a response body into ``result_type``.

    The service answers a single-resource batch with a bare object, so an
    object is wrapped when a list is expected.

    Raises:
        SerializationError: If the body is not JSON or does not fit the model.
    """
    value = load_body(body, normalize=normalize)
    if get_origin(result_type) is list and isinstance(value, dict):
        value = [value]
    try:
        return _adapter(result_type).validate_python(value)
    except ValidationError as exc:
        msg = f"Response does not match {result_type!r}: {exc.error_count()} error(s)"
        raise SerializationError(msg) from exc
