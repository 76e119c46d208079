"""
Account-side collaborators for credential extraction.

The platform's account records own the encrypted PKCS#12 blob and the
per-account TSA URL. This module defines the interface the credential
loader consumes, plus a single-tenant implementation backed by a PKCS#12
file on disk (the same SIGNING_P12_* variables the platform's local PAdES
signer reads).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.hazmat.primitives.serialization.pkcs12 import (
    PKCS12KeyAndCertificates,
)

from extender.app.core.config import Settings

logger = logging.getLogger("extender.accounts")


class SigningAccountStore(Protocol):
    """
    Lookup of an account's signing material.

    Both methods may return None when the account has nothing configured.
    Implementations may raise; the credential loader isolates failures.
    """

    def load_signing_container(
        self, account: Any
    ) -> Optional[PKCS12KeyAndCertificates]:
        ...

    def load_timestamp_url(self, account: Any) -> Optional[str]:
        ...


def load_pkcs12_container(
    data: bytes,
    password: Optional[str],
) -> PKCS12KeyAndCertificates:
    """
    Decrypt a PKCS#12 blob.

    Raises:
        ValueError:
            On a wrong password or corrupt container.
    """
    return pkcs12.load_pkcs12(
        data,
        password.encode("utf-8") if password else None,
    )


class LocalPkcs12Store:
    """
    Single-tenant store: every account signs with the same container.

    DEVELOPMENT / SINGLE-TENANT ONLY.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def load_signing_container(
        self, account: Any
    ) -> Optional[PKCS12KeyAndCertificates]:
        p12_path = self.settings.signing_p12_path
        if p12_path is None:
            return None

        if not p12_path.is_file():
            logger.warning(
                "signing_container_missing",
                extra={"path": str(p12_path)},
            )
            return None

        return load_pkcs12_container(
            p12_path.read_bytes(),
            self.settings.signing_p12_password.get_secret_value(),
        )

    def load_timestamp_url(self, account: Any) -> Optional[str]:
        return self.settings.signing_tsa_url
