"""
DSS LTA extension client.

Integrates with the external Digital Signature Service (DSS) to extend
PAdES signatures to PAdES-BASELINE-LTA.

Endpoints:
- POST {base}/api/extend            raw PDF, DSS server-side defaults
- POST {base}/api/extend-with-cert  multipart, account PEM bundle + TSA URL

HARD GUARANTEES:
- Single attempt per call (no retry, no backoff)
- connect timeout 10s, read timeout 60s (TSA, OCSP and CRL calls happen
  remotely during extension)
- Never raises; every failure is an ExtensionResult with an error kind
- Key material is never logged
"""

from __future__ import annotations

import io
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from extender.app.core.config import Settings, get_settings
from extender.app.core.reporting import (
    ErrorReporter,
    NullErrorReporter,
    safe_report,
)
from extender.app.schemas.credentials import CredentialBundle
from extender.app.schemas.extension import (
    ExtensionErrorKind,
    ExtensionMode,
    ExtensionResult,
)

logger = logging.getLogger("extender.dss_extension")

PdfInput = Union[bytes, bytearray, memoryview, io.BytesIO]

FormFile = Tuple[Optional[str], Union[bytes, str], Optional[str]]

EXTEND_PATH = "/api/extend"
EXTEND_WITH_CERT_PATH = "/api/extend-with-cert"

_MAX_LOGGED_BODY_CHARS = 512


def _pdf_bytes(pdf: PdfInput) -> Optional[bytes]:
    if isinstance(pdf, bytes):
        return pdf
    if isinstance(pdf, (bytearray, memoryview)):
        return bytes(pdf)
    if isinstance(pdf, io.BytesIO):
        # A closed stream no longer exposes its buffer
        if pdf.closed:
            return None
        return pdf.getvalue()
    return None


def credential_form_parts(
    pdf_bytes: bytes,
    bundle: CredentialBundle,
) -> List[Tuple[str, FormFile]]:
    """
    multipart/form-data parts for "extend-with-cert", in DSS order.

    All four parts go through `files=` so httpx keeps this order; the
    PEM and TSA fields carry no filename and no Content-Type.
    """
    return [
        ("pdf", ("document.pdf", pdf_bytes, "application/pdf")),
        ("certificate_pem", (None, bundle.certificate_pem, None)),
        (
            "private_key_pem",
            (None, bundle.private_key_pem.get_secret_value(), None),
        ),
        ("tsa_url", (None, bundle.tsa_url, None)),
    ]


class DssExtensionClient:
    """
    Synchronous client for the DSS extension API.

    The client owns its httpx.Client unless one is injected. Use as a
    context manager (or call close()) to release the connection pool.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
        reporter: Optional[ErrorReporter] = None,
    ):
        self.settings = settings or get_settings()
        self.reporter = reporter or NullErrorReporter()

        self.timeout = httpx.Timeout(
            timeout=self.settings.dss_read_timeout_seconds,
            connect=self.settings.dss_connect_timeout_seconds,
            read=self.settings.dss_read_timeout_seconds,
        )

        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            timeout=self.timeout,
            follow_redirects=False,
        )

    def __enter__(self) -> "DssExtensionClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    @property
    def base_url(self) -> str:
        return self.settings.dss_service_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extend_to_lta(
        self,
        pdf: PdfInput,
        bundle: Optional[CredentialBundle] = None,
        *,
        correlation_id: Optional[str] = None,
    ) -> ExtensionResult:
        """
        Extend an already-signed PDF to PAdES-BASELINE-LTA.

        Args:
            pdf:
                Signed PDF as bytes or an in-memory binary stream.
            bundle:
                Account credential. When None the plain endpoint is used
                and the DSS applies its own defaults.
            correlation_id:
                Trace ID forwarded as X-Correlation-ID. Generated if absent.

        Returns:
            ExtensionResult carrying the extended PDF or the failure kind.
        """
        if not self.settings.dss_enabled:
            logger.info("dss_extension_disabled")
            return ExtensionResult.failure(
                ExtensionErrorKind.SERVICE_DISABLED
            )

        pdf_bytes = _pdf_bytes(pdf)
        if pdf_bytes is None:
            logger.warning(
                "dss_extension_invalid_input",
                extra={"input_type": type(pdf).__name__},
            )
            return ExtensionResult.failure(ExtensionErrorKind.INVALID_INPUT)

        if not pdf_bytes:
            return ExtensionResult.failure(ExtensionErrorKind.EMPTY_INPUT)

        correlation_id = correlation_id or str(uuid.uuid4())

        headers = {
            "Accept": "application/pdf",
            "X-Correlation-ID": correlation_id,
        }

        if bundle is None:
            mode = ExtensionMode.PLAIN
            url = f"{self.base_url}{EXTEND_PATH}"
            headers["Content-Type"] = "application/pdf"
            payload: Dict[str, Any] = {"content": pdf_bytes}
        else:
            # httpx sets multipart/form-data with a fresh random boundary
            mode = ExtensionMode.CREDENTIALED
            url = f"{self.base_url}{EXTEND_WITH_CERT_PATH}"
            payload = {"files": credential_form_parts(pdf_bytes, bundle)}

        return self._post(
            url=url,
            payload=payload,
            headers=headers,
            pdf_size=len(pdf_bytes),
            mode=mode,
            correlation_id=correlation_id,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _post(
        self,
        *,
        url: str,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        pdf_size: int,
        mode: ExtensionMode,
        correlation_id: str,
    ) -> ExtensionResult:
        logger.info(
            "dss_extend_request",
            extra={
                "url": url,
                "mode": mode.value,
                "pdf_bytes": pdf_size,
                "trace_id": correlation_id,
            },
        )

        try:
            response = self.client.post(
                url,
                headers=headers,
                timeout=self.timeout,
                **payload,
            )
        except httpx.TimeoutException as exc:
            self._log_failure(
                "dss_extend_timeout", exc, mode, correlation_id
            )
            return ExtensionResult.failure(
                ExtensionErrorKind.NETWORK_TIMEOUT,
                mode=mode,
                detail=str(exc) or type(exc).__name__,
            )
        except Exception as exc:
            self._log_failure(
                "dss_extend_transport_error", exc, mode, correlation_id
            )
            return ExtensionResult.failure(
                ExtensionErrorKind.TRANSPORT_ERROR,
                mode=mode,
                detail=str(exc) or type(exc).__name__,
            )

        if response.status_code != 200:
            detail = response.text[:_MAX_LOGGED_BODY_CHARS]
            logger.error(
                "dss_extend_failed",
                extra={
                    "status_code": response.status_code,
                    "response_body": detail,
                    "mode": mode.value,
                    "trace_id": correlation_id,
                },
            )
            return ExtensionResult.failure(
                ExtensionErrorKind.SERVICE_ERROR,
                mode=mode,
                status_code=response.status_code,
                detail=detail,
            )

        if not response.content:
            logger.error(
                "dss_extend_empty_response",
                extra={"mode": mode.value, "trace_id": correlation_id},
            )
            return ExtensionResult.failure(
                ExtensionErrorKind.SERVICE_ERROR,
                mode=mode,
                status_code=response.status_code,
                detail="empty response body",
            )

        logger.info(
            "dss_extend_succeeded",
            extra={
                "mode": mode.value,
                "response_bytes": len(response.content),
                "trace_id": correlation_id,
            },
        )
        return ExtensionResult.success(response.content, mode)

    def _log_failure(
        self,
        event: str,
        exc: Exception,
        mode: ExtensionMode,
        correlation_id: str,
    ) -> None:
        logger.error(
            event,
            exc_info=True,
            extra={
                "mode": mode.value,
                "error_type": type(exc).__name__,
                "trace_id": correlation_id,
            },
        )
        safe_report(
            self.reporter,
            exc,
            event,
            {"mode": mode.value, "trace_id": correlation_id},
        )


def extend_to_lta(
    pdf: PdfInput,
    bundle: Optional[CredentialBundle] = None,
    *,
    settings: Optional[Settings] = None,
) -> ExtensionResult:
    """One-shot extension with a short-lived client."""
    with DssExtensionClient(settings=settings) as client:
        return client.extend_to_lta(pdf, bundle)
