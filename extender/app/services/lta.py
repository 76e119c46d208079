"""
PAdES-BASELINE-LTA extension orchestration.

Chooses between the credentialed and plain DSS endpoints for an account
and reports, on the result, whether a credentialed extension degraded to
plain mode.

LTA extension is a best-effort enhancement layered on an already-valid
signed document. Its failure must never block the primary signing flow,
so callers typically keep the original PDF when `result.ok` is False.
Calls may take up to the read timeout; run them off latency-sensitive
request paths.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from extender.app.core.config import Settings, get_settings
from extender.app.core.reporting import ErrorReporter, NullErrorReporter
from extender.app.schemas.extension import ExtensionResult
from extender.app.services.accounts import SigningAccountStore
from extender.app.services.credential_loader import CredentialLoader
from extender.app.services.dss_extension import DssExtensionClient, PdfInput

logger = logging.getLogger("extender.lta")


class LtaExtender:
    """Credential selection plus DSS extension for a single account."""

    def __init__(
        self,
        loader: CredentialLoader,
        client: DssExtensionClient,
    ):
        self.loader = loader
        self.client = client

    @classmethod
    def from_settings(
        cls,
        store: SigningAccountStore,
        settings: Optional[Settings] = None,
        reporter: Optional[ErrorReporter] = None,
    ) -> "LtaExtender":
        """Wire the components once at process start."""
        settings = settings or get_settings()
        reporter = reporter or NullErrorReporter()

        return cls(
            loader=CredentialLoader(
                store,
                settings=settings,
                reporter=reporter,
            ),
            client=DssExtensionClient(
                settings=settings,
                reporter=reporter,
            ),
        )

    def __enter__(self) -> "LtaExtender":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def extend(
        self,
        pdf: PdfInput,
        account: Any = None,
        *,
        correlation_id: Optional[str] = None,
    ) -> ExtensionResult:
        """
        Extend `pdf` using the account's credential when available.

        Without an account, or when its credential cannot be loaded, the
        plain endpoint is still attempted. A degraded extension carries
        `credential_error`.
        """
        if account is None:
            return self.client.extend_to_lta(
                pdf,
                correlation_id=correlation_id,
            )

        credential = self.loader.load(account)

        if not credential.ok:
            logger.info(
                "lta_extension_falling_back_to_plain",
                extra={"credential_error": credential.error.value},
            )
            result = self.client.extend_to_lta(
                pdf,
                correlation_id=correlation_id,
            )
            return result.model_copy(
                update={"credential_error": credential.error}
            )

        return self.client.extend_to_lta(
            pdf,
            credential.bundle,
            correlation_id=correlation_id,
        )
