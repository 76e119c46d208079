"""
Centralized configuration for the LTA Extender service.

Pydantic v2 settings management. The settings object is constructed once
at process start and passed explicitly into the extension client and the
credential loader; nothing reads the environment after construction.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DSS_SERVICE_URL = "http://localhost:4000"
DEFAULT_TSA_URL = "http://timestamp.digicert.com"


class Settings(BaseSettings):
    """
    Application settings parsed from the environment.

    A blank DSS_SERVICE_URL disables LTA extension entirely.
    """

    # ---------------------------------------------------------------------
    # Digital Signature Service (DSS)
    # ---------------------------------------------------------------------

    dss_service_url: Annotated[
        str,
        Field(
            default=DEFAULT_DSS_SERVICE_URL,
            description="Base URL of the DSS extension service",
        ),
    ]

    # TSA, OCSP and CRL lookups happen remotely during extension
    dss_connect_timeout_seconds: Annotated[
        float,
        Field(default=10.0, gt=0),
    ]
    dss_read_timeout_seconds: Annotated[
        float,
        Field(default=60.0, gt=0),
    ]

    # ---------------------------------------------------------------------
    # Timestamp Authority
    # ---------------------------------------------------------------------

    default_tsa_url: Annotated[
        str,
        Field(
            default=DEFAULT_TSA_URL,
            min_length=1,
            description="RFC 3161 TSA used when an account has none configured",
        ),
    ]

    # ---------------------------------------------------------------------
    # Single-tenant signing credential (LocalPkcs12Store)
    # ---------------------------------------------------------------------

    signing_p12_path: Optional[Path] = None
    signing_p12_password: Annotated[
        SecretStr,
        Field(
            default=SecretStr(""),
            description="Sensitive credential, redacted from logs",
        ),
    ]
    signing_tsa_url: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @field_validator("dss_service_url")
    @classmethod
    def _strip_service_url(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @property
    def dss_enabled(self) -> bool:
        return bool(self.dss_service_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide settings provider.

    Resolution is idempotent; callers that need isolation (tests, workers
    with their own environment) construct Settings() directly.
    """
    return Settings()
