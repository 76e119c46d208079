from typing import Any, Callable, List, Mapping, Optional, Tuple

import httpx

from extender.app.core.config import Settings


def dss_settings(**overrides) -> Settings:
    values = {"dss_service_url": "http://dss.test"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class StaticAccountStore:
    """SigningAccountStore double returning fixed values (or raising)."""

    def __init__(
        self,
        container: Any = None,
        tsa_url: Optional[str] = None,
        container_error: Optional[Exception] = None,
        tsa_error: Optional[Exception] = None,
    ):
        self.container = container
        self.tsa_url = tsa_url
        self.container_error = container_error
        self.tsa_error = tsa_error
        self.accounts_seen: List[Any] = []

    def load_signing_container(self, account):
        self.accounts_seen.append(account)
        if self.container_error is not None:
            raise self.container_error
        return self.container

    def load_timestamp_url(self, account):
        if self.tsa_error is not None:
            raise self.tsa_error
        return self.tsa_url


class RecordingReporter:
    def __init__(self):
        self.reports: List[Tuple[BaseException, str, Mapping]] = []

    def report(self, exc, message, context=None):
        self.reports.append((exc, message, dict(context or {})))


class RecordingDss:
    """
    httpx.MockTransport handler that records requests.

    `responder` builds the response (or raises) for each request.
    """

    def __init__(
        self,
        responder: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ):
        self.requests: List[httpx.Request] = []
        self.responder = responder or (
            lambda request: httpx.Response(200, content=b"%PDF-extended")
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


def split_multipart(body: bytes, boundary: str) -> List[Tuple[bytes, bytes]]:
    """Split a multipart body into (headers, payload) pairs, strictly."""
    delimiter = b"--" + boundary.encode("ascii")
    terminator = delimiter + b"--\r\n"

    assert body.endswith(terminator)
    segments = body[: -len(terminator)].split(delimiter + b"\r\n")
    assert segments[0] == b""

    parts = []
    for segment in segments[1:]:
        headers, payload = segment.split(b"\r\n\r\n", 1)
        assert payload.endswith(b"\r\n")
        parts.append((headers, payload[:-2]))
    return parts


def boundary_of(request: httpx.Request) -> str:
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    return content_type.split("boundary=", 1)[1]
