from __future__ import annotations

import io
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from extender.app.schemas.credentials import CredentialErrorKind


class ExtensionMode(str, Enum):
    """Which DSS endpoint served the request."""

    PLAIN = "plain"
    CREDENTIALED = "credentialed"


class ExtensionErrorKind(str, Enum):
    SERVICE_DISABLED = "service_disabled"
    INVALID_INPUT = "invalid_input"
    EMPTY_INPUT = "empty_input"
    NETWORK_TIMEOUT = "network_timeout"
    SERVICE_ERROR = "service_error"
    TRANSPORT_ERROR = "transport_error"


class ExtensionError(BaseModel):
    """
    Non-fatal diagnostics for a failed LTA extension.

    The caller decides whether to keep the original PDF or surface a
    warning; the error is never raised.
    """

    kind: ExtensionErrorKind

    status_code: Optional[int] = Field(
        None,
        description="HTTP status returned by the DSS (SERVICE_ERROR only)",
    )

    detail: Optional[str] = Field(
        None,
        description="Truncated response body or exception message",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class ExtensionResult(BaseModel):
    """
    Tagged result of an LTA extension attempt.

    Exactly one of `pdf_bytes` / `error` is set. `mode` is None only when
    the request never left the process (short-circuit failures).
    """

    pdf_bytes: Optional[bytes] = None
    error: Optional[ExtensionError] = None
    mode: Optional[ExtensionMode] = None

    credential_error: Optional[CredentialErrorKind] = Field(
        None,
        description=(
            "Set when a credentialed extension was wanted but the "
            "account's credential could not be loaded, so plain mode "
            "was used instead"
        ),
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "ExtensionResult":
        if (self.pdf_bytes is None) == (self.error is None):
            raise ValueError("exactly one of pdf_bytes or error must be set")
        if self.pdf_bytes is not None and not self.pdf_bytes:
            raise ValueError("extended PDF must not be empty")
        return self

    @classmethod
    def success(
        cls, pdf_bytes: bytes, mode: ExtensionMode
    ) -> "ExtensionResult":
        return cls(pdf_bytes=pdf_bytes, mode=mode)

    @classmethod
    def failure(
        cls,
        kind: ExtensionErrorKind,
        *,
        mode: Optional[ExtensionMode] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> "ExtensionResult":
        return cls(
            error=ExtensionError(
                kind=kind,
                status_code=status_code,
                detail=detail,
            ),
            mode=mode,
        )

    @property
    def ok(self) -> bool:
        return self.pdf_bytes is not None

    @property
    def degraded(self) -> bool:
        """True when credentialed mode silently fell back to plain mode."""
        return self.credential_error is not None

    def as_stream(self) -> Optional[io.BytesIO]:
        """Fresh binary stream over the extended PDF, or None on failure."""
        if self.pdf_bytes is None:
            return None
        return io.BytesIO(self.pdf_bytes)
