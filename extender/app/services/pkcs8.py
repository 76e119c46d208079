"""
PEM transcoding for signing credentials.

The DSS "extend-with-cert" endpoint accepts only an unencrypted PKCS#8
private key. PKCS#12 containers expose RSA keys whose native encoding is
PKCS#1, so the PrivateKeyInfo wrapper is assembled explicitly:

    SEQUENCE {
      INTEGER 0                                  -- version
      SEQUENCE {                                 -- AlgorithmIdentifier
        OBJECT IDENTIFIER 1.2.840.113549.1.1.1   -- rsaEncryption
        NULL
      }
      OCTET STRING <PKCS#1 RSAPrivateKey DER>
    }

The resulting PEM is intentionally NOT password protected. It is only ever
sent over an encrypted channel to the trusted internal DSS.
"""

from __future__ import annotations

from asn1crypto import core, keys, pem
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization.pkcs12 import (
    PKCS12KeyAndCertificates,
)


RSA_ENCRYPTION_OID = "1.2.840.113549.1.1.1"

PRIVATE_KEY_PEM_LABEL = "PRIVATE KEY"


class Pkcs8EncodingError(ValueError):
    """Raised when a credential cannot be transcoded to PEM."""


class IncompleteContainerError(ValueError):
    """Raised when a PKCS#12 container lacks its certificate or key."""


# ----------------------------------------------------------------------
# ASN.1 structures
# ----------------------------------------------------------------------

class _RsaAlgorithmIdentifier(core.Sequence):
    _fields = [
        ("algorithm", core.ObjectIdentifier),
        ("parameters", core.Null),
    ]


class _PrivateKeyInfo(core.Sequence):
    _fields = [
        ("version", core.Integer),
        ("private_key_algorithm", _RsaAlgorithmIdentifier),
        ("private_key", core.OctetString),
    ]


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------

def pkcs1_to_pkcs8_der(pkcs1_der: bytes) -> bytes:
    """
    Wrap a PKCS#1 RSAPrivateKey in a PKCS#8 PrivateKeyInfo.

    Raises:
        Pkcs8EncodingError:
            If the input is not a well-formed RSAPrivateKey.
    """
    if not pkcs1_der:
        raise Pkcs8EncodingError("empty PKCS#1 key")

    try:
        # Force a full parse so garbage is rejected before it is wrapped
        keys.RSAPrivateKey.load(pkcs1_der, strict=True).native
    except Exception as exc:
        raise Pkcs8EncodingError(
            f"invalid PKCS#1 RSAPrivateKey: {exc}"
        ) from exc

    info = _PrivateKeyInfo(
        {
            "version": 0,
            "private_key_algorithm": _RsaAlgorithmIdentifier(
                {
                    "algorithm": RSA_ENCRYPTION_OID,
                    "parameters": core.Null(),
                }
            ),
            "private_key": pkcs1_der,
        }
    )
    return info.dump(force=True)


def armor_private_key(pkcs8_der: bytes) -> str:
    """
    PEM-armor a PKCS#8 DER blob.

    Base64 wrapped at 64 characters, BEGIN/END PRIVATE KEY framing and a
    trailing newline after the end marker.
    """
    return pem.armor(PRIVATE_KEY_PEM_LABEL, pkcs8_der).decode("ascii")


# ----------------------------------------------------------------------
# Container extraction
# ----------------------------------------------------------------------

def extract_certificate_pem(container: PKCS12KeyAndCertificates) -> str:
    """Render the container's end-entity certificate as PEM."""
    if container.cert is None:
        raise IncompleteContainerError(
            "PKCS#12 container has no certificate"
        )

    certificate = container.cert.certificate
    return certificate.public_bytes(serialization.Encoding.PEM).decode(
        "ascii"
    )


def extract_private_key_pem(container: PKCS12KeyAndCertificates) -> str:
    """
    Render the container's RSA private key as unencrypted PKCS#8 PEM.

    The output is always PKCS#8, never PKCS#1 and never password-wrapped.
    """
    private_key = container.key
    if private_key is None:
        raise IncompleteContainerError(
            "PKCS#12 container has no private key"
        )

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise Pkcs8EncodingError(
            f"unsupported key type: {type(private_key).__name__}"
        )

    pkcs1_der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )

    return armor_private_key(pkcs1_to_pkcs8_der(pkcs1_der))
