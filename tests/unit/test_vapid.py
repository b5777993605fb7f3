"""Unit tests for the ES256 VAPID signer."""

import json

import pytest
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from webpush_crypto.headers import b64url_decode, b64url_encode
from webpush_crypto.vapid import Vapid

AUDIENCE = "https://fcm.googleapis.com"
EXPIRATION = 1_900_000_000


def _verify(token: str, public_key: bytes) -> dict[str, object]:
    """Verify a compact ES256 JWS and return its claims."""
    header_b64, claims_b64, signature_b64 = token.split(".")
    signature = b64url_decode(signature_b64)
    der = encode_dss_signature(int.from_bytes(signature[:32], "big"), int.from_bytes(signature[32:], "big"))
    key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), public_key)
    key.verify(der, f"{header_b64}.{claims_b64}".encode("ascii"), ec.ECDSA(hashes.SHA256()))
    return json.loads(b64url_decode(claims_b64))


class TestVapidSign:
    """Test JWT structure and signature."""

    def test_token_verifies(self) -> None:
        """The signature verifies under the advertised public key."""
        vapid = Vapid.generate("ops@example.com")
        claims = _verify(vapid.sign(AUDIENCE, EXPIRATION), vapid.public_key)

        assert claims == {"aud": AUDIENCE, "exp": EXPIRATION, "sub": "mailto:ops@example.com"}

    def test_header(self) -> None:
        """JOSE header declares ES256."""
        token = Vapid.generate("ops@example.com").sign(AUDIENCE, EXPIRATION)
        assert json.loads(b64url_decode(token.split(".")[0])) == {"typ": "JWT", "alg": "ES256"}

    def test_signature_is_raw_64_bytes(self) -> None:
        """JWS uses raw r || s, not DER."""
        token = Vapid.generate("ops@example.com").sign(AUDIENCE, EXPIRATION)
        assert len(b64url_decode(token.split(".")[2])) == 64

    def test_no_padding_in_segments(self) -> None:
        """Segments are unpadded base64url."""
        token = Vapid.generate("ops@example.com").sign(AUDIENCE, EXPIRATION)
        assert "=" not in token

    def test_other_key_does_not_verify(self) -> None:
        """A token does not verify under a different key."""
        token = Vapid.generate("ops@example.com").sign(AUDIENCE, EXPIRATION)
        with pytest.raises(InvalidSignature):
            _verify(token, Vapid.generate("ops@example.com").public_key)


class TestVapidKeys:
    """Test key loading and subject handling."""

    def test_from_private_bytes(self) -> None:
        """Raw and base64url scalars load the same key."""
        raw = bytes(range(1, 33))
        a = Vapid.from_private_bytes(raw, "ops@example.com")
        b = Vapid.from_private_bytes(b64url_encode(raw), "ops@example.com")

        assert a.public_key == b.public_key
        assert len(a.public_key) == 65
        assert a.public_key[0] == 0x04

    def test_from_private_bytes_wrong_length(self) -> None:
        """Scalars must be 32 bytes."""
        with pytest.raises(ValueError, match="Invalid VAPID private key length"):
            Vapid.from_private_bytes(b"\x01" * 16, "ops@example.com")

    def test_rejects_non_p256_key(self) -> None:
        """ES256 needs a P-256 key."""
        with pytest.raises(ValueError, match="P-256"):
            Vapid(ec.generate_private_key(ec.SECP384R1()), "ops@example.com")

    @pytest.mark.parametrize(
        ("subject", "expected"),
        [
            ("ops@example.com", "mailto:ops@example.com"),
            ("mailto:ops@example.com", "mailto:ops@example.com"),
            ("https://example.com/contact", "https://example.com/contact"),
            ("  ops@example.com ", "mailto:ops@example.com"),
        ],
    )
    def test_subject_normalization(self, subject: str, expected: str) -> None:
        """Emails gain a mailto: prefix; URIs pass through."""
        assert Vapid.generate(subject).subject == expected

    def test_invalid_subject(self) -> None:
        """Subjects that are neither email nor URI are rejected."""
        with pytest.raises(ValueError, match="VAPID subject"):
            Vapid.generate("example.com")
