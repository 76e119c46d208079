"""
Credential extraction for DSS LTA extension.

Loads an account's PKCS#12 signing container and converts it into the
PEM bundle accepted by the DSS "extend-with-cert" endpoint.

Guarantees:
- Never raises to the caller; every failure becomes a typed result
- Never returns a partially filled bundle
- Never logs key material (only success/failure and error types)
- TSA URL resolution never fails the load (falls back to the default)
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from extender.app.core.config import Settings, get_settings
from extender.app.core.reporting import (
    ErrorReporter,
    NullErrorReporter,
    safe_report,
)
from extender.app.schemas.credentials import (
    CredentialBundle,
    CredentialErrorKind,
    CredentialResult,
)
from extender.app.services.accounts import SigningAccountStore
from extender.app.services.pkcs8 import (
    IncompleteContainerError,
    extract_certificate_pem,
    extract_private_key_pem,
)

logger = logging.getLogger("extender.credential_loader")


class CredentialLoader:
    """
    Builds CredentialBundles from an account store.

    Stateless; safe to share across threads.
    """

    def __init__(
        self,
        store: SigningAccountStore,
        settings: Optional[Settings] = None,
        reporter: Optional[ErrorReporter] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.reporter = reporter or NullErrorReporter()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, account: Any) -> CredentialResult:
        try:
            container = self.store.load_signing_container(account)
        except Exception as exc:
            self._log_failure(
                "signing_container_load_failed",
                exc,
                CredentialErrorKind.CREDENTIAL_UNAVAILABLE,
            )
            return CredentialResult(
                error=CredentialErrorKind.CREDENTIAL_UNAVAILABLE,
            )

        if container is None:
            logger.info("signing_container_not_configured")
            return CredentialResult(
                error=CredentialErrorKind.CREDENTIAL_UNAVAILABLE,
            )

        tsa_url, defaulted = self._resolve_tsa_url(account)

        try:
            bundle = CredentialBundle(
                certificate_pem=extract_certificate_pem(container),
                private_key_pem=extract_private_key_pem(container),
                tsa_url=tsa_url,
            )
        except IncompleteContainerError as exc:
            self._log_failure(
                "signing_container_incomplete",
                exc,
                CredentialErrorKind.CREDENTIAL_UNAVAILABLE,
            )
            return CredentialResult(
                error=CredentialErrorKind.CREDENTIAL_UNAVAILABLE,
                tsa_url_defaulted=defaulted,
            )
        except Exception as exc:
            self._log_failure(
                "credential_encoding_failed",
                exc,
                CredentialErrorKind.ENCODING_ERROR,
            )
            return CredentialResult(
                error=CredentialErrorKind.ENCODING_ERROR,
                tsa_url_defaulted=defaulted,
            )

        logger.info(
            "credential_bundle_loaded",
            extra={
                "tsa_url": bundle.tsa_url,
                "tsa_url_defaulted": defaulted,
            },
        )
        return CredentialResult(bundle=bundle, tsa_url_defaulted=defaulted)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_tsa_url(self, account: Any) -> Tuple[str, bool]:
        default = self.settings.default_tsa_url

        try:
            url = self.store.load_timestamp_url(account)
        except Exception as exc:
            self._log_failure(
                "tsa_url_load_failed",
                exc,
                CredentialErrorKind.TSA_URL_UNRESOLVED,
            )
            return default, True

        if url is not None and not isinstance(url, str):
            logger.warning(
                "tsa_url_not_a_string",
                extra={
                    "error_kind": CredentialErrorKind.TSA_URL_UNRESOLVED.value,
                    "value_type": type(url).__name__,
                },
            )
            return default, True

        if url is None or not url.strip():
            return default, True

        return url.strip(), False

    def _log_failure(
        self,
        event: str,
        exc: Exception,
        kind: CredentialErrorKind,
    ) -> None:
        # Exception text from cryptography never contains key material
        logger.error(
            event,
            exc_info=True,
            extra={
                "error_kind": kind.value,
                "error_type": type(exc).__name__,
            },
        )
        safe_report(
            self.reporter,
            exc,
            event,
            {"error_kind": kind.value},
        )


def load_credential_bundle(
    account: Any,
    store: SigningAccountStore,
    *,
    settings: Optional[Settings] = None,
    reporter: Optional[ErrorReporter] = None,
) -> Optional[CredentialBundle]:
    """
    Load an account's credential bundle, or None if unavailable.

    Convenience wrapper around CredentialLoader for callers that only
    care about presence.
    """
    return CredentialLoader(
        store,
        settings=settings,
        reporter=reporter,
    ).load(account).bundle
