"""
Credential bundle schemas.

A CredentialBundle is the transient PEM triple handed to the DSS
"extend-with-cert" endpoint. It is created fresh per extraction, never
persisted, and the private key is held as a SecretStr so it cannot leak
through reprs or structured logs.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class CredentialErrorKind(str, Enum):
    """Why a credential bundle could not be produced."""

    # Stored container missing, wrong password, or corrupt
    CREDENTIAL_UNAVAILABLE = "credential_unavailable"

    # Recovered via the default TSA URL; never fails a load on its own
    TSA_URL_UNRESOLVED = "tsa_url_unresolved"

    # Certificate / key transcoding (PEM, ASN.1, DER) failed
    ENCODING_ERROR = "encoding_error"


class CredentialBundle(BaseModel):
    """
    PEM-encoded signing credential for a single extension request.

    Invariant: all three fields are non-empty.
    """

    certificate_pem: str = Field(
        ...,
        min_length=1,
        description="X.509 certificate, PEM",
    )

    private_key_pem: SecretStr = Field(
        ...,
        description="Unencrypted PKCS#8 private key, PEM",
    )

    tsa_url: str = Field(
        ...,
        min_length=1,
        description="RFC 3161 Timestamp Authority URL",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_validator("private_key_pem")
    @classmethod
    def _key_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("private_key_pem must not be empty")
        return value


class CredentialResult(BaseModel):
    """
    Outcome of a credential extraction.

    Either `bundle` is set, or `error` explains why it is not. A partially
    filled bundle is never produced.
    """

    bundle: Optional[CredentialBundle] = None
    error: Optional[CredentialErrorKind] = None

    tsa_url_defaulted: bool = Field(
        False,
        description="True when the default TSA URL replaced the account's",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def ok(self) -> bool:
        return self.bundle is not None
