"""
VAPID (RFC 8292) token signing.

The encryption pipeline treats VAPID as a black box: anything with a
``public_key`` and a ``sign(audience, expiration)`` method will do. Vapid
is a minimal ES256 implementation on top of `cryptography`.

JWT layout:
    header = {"typ": "JWT", "alg": "ES256"}
    claims = {"aud": <endpoint origin>, "exp": <unix time>, "sub": <mailto: or https: URI>}
    token  = b64url(header) "." b64url(claims) "." b64url(r || s)
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from typing_extensions import Self

from webpush_crypto.headers import b64url_decode, b64url_encode
from webpush_crypto.keys import encode_public_key

__all__ = [
    "Vapid",
    "VapidSigner",
]

_JWT_HEADER = {"typ": "JWT", "alg": "ES256"}
_P256_COORDINATE_SIZE = 32


class VapidSigner(Protocol):
    """Produces bearer tokens identifying the application server."""

    @property
    def public_key(self) -> bytes:
        """65-byte uncompressed VAPID public key."""
        ...

    def sign(self, audience: str, expiration: int) -> str:
        """Return a signed JWT for the push service origin, valid until expiration (unix time)."""
        ...


def _normalize_subject(subject: str) -> str:
    subject = subject.strip()
    if subject.startswith(("mailto:", "https:")):
        return subject
    if "@" in subject:
        return f"mailto:{subject}"
    raise ValueError(f"VAPID subject must be an email, mailto: or https: URI, got {subject!r}")


def _segment(data: dict[str, Any]) -> str:
    return b64url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


class Vapid:
    """
    ES256 VAPID signer.

    Example:
        vapid = Vapid.from_private_bytes(settings.vapid_private_key, "ops@example.com")
        token = vapid.sign("https://fcm.googleapis.com", int(time.time()) + 43200)
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey, subject: str) -> None:
        """
        Args:
            private_key: P-256 signing key
            subject: Contact email (``mailto:`` added) or ``mailto:``/``https:`` URI

        Raises:
            ValueError: If the key is not P-256 or the subject is malformed
        """
        if not isinstance(private_key.curve, ec.SECP256R1):
            raise ValueError(f"VAPID requires a P-256 key, got curve {private_key.curve.name}")
        self._private_key = private_key
        self._public_key = encode_public_key(private_key.public_key())
        self.subject = _normalize_subject(subject)

    @classmethod
    def generate(cls, subject: str) -> Self:
        """Create a signer with a new random key."""
        return cls(ec.generate_private_key(ec.SECP256R1()), subject)

    @classmethod
    def from_private_bytes(cls, private_key: str | bytes, subject: str) -> Self:
        """
        Load a raw 32-byte private scalar (bytes or base64url text).

        Raises:
            ValueError: If the scalar has the wrong length or is out of range
        """
        raw = b64url_decode(private_key) if isinstance(private_key, str) else private_key
        if len(raw) != _P256_COORDINATE_SIZE:
            raise ValueError(f"Invalid VAPID private key length: {len(raw)} (expected {_P256_COORDINATE_SIZE})")
        return cls(ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256R1()), subject)

    @property
    def public_key(self) -> bytes:
        return self._public_key

    def sign(self, audience: str, expiration: int) -> str:
        """
        Sign a VAPID JWT.

        Args:
            audience: Push service origin (scheme://host)
            expiration: Expiry as unix time in seconds

        Returns:
            Compact JWS string
        """
        claims = {"aud": audience, "exp": int(expiration), "sub": self.subject}
        signing_input = f"{_segment(_JWT_HEADER)}.{_segment(claims)}"

        der_signature = self._private_key.sign(signing_input.encode("ascii"), ec.ECDSA(hashes.SHA256()))
        # JWS wants raw r || s, not DER
        r, s = decode_dss_signature(der_signature)
        signature = r.to_bytes(_P256_COORDINATE_SIZE, "big") + s.to_bytes(_P256_COORDINATE_SIZE, "big")

        return f"{signing_input}.{b64url_encode(signature)}"
