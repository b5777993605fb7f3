"""
ECDH key agreement on P-256.

The application server generates a fresh key pair per message and agrees
on a 32-byte shared secret with the user agent's p256dh public key.
Public keys travel as 65-byte uncompressed points (X9.62).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from typing_extensions import Self

from webpush_crypto.constants import PUBLIC_KEY_SIZE, SHARED_SECRET_SIZE, UNCOMPRESSED_POINT_PREFIX
from webpush_crypto.exceptions import InvalidPeerKeyError

__all__ = [
    "EphemeralKeyPair",
    "derive_shared_secret",
    "encode_public_key",
    "generate_ephemeral_key_pair",
    "key_pair_from_private_bytes",
    "load_public_key",
]

_PRIVATE_KEY_SIZE = 32


def encode_public_key(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Serialize a P-256 public key as a 65-byte uncompressed point."""
    return public_key.public_bytes(encoding=Encoding.X962, format=PublicFormat.UncompressedPoint)


@dataclass(frozen=True)
class EphemeralKeyPair:
    """
    Application-server ECDH key pair.

    Generated fresh for every message. Only the ECDH exchange is used;
    the key is never used for signing.
    """

    private_key: ec.EllipticCurvePrivateKey = field(repr=False)
    public_key: bytes
    """65-byte uncompressed point (the aes128gcm key id / aesgcm dh value)."""

    @classmethod
    def from_private_key(cls, private_key: ec.EllipticCurvePrivateKey) -> Self:
        """
        Wrap an existing P-256 private key.

        Raises:
            ValueError: If the key is not on P-256
        """
        if not isinstance(private_key.curve, ec.SECP256R1):
            raise ValueError(f"Expected a P-256 key, got curve {private_key.curve.name}")
        return cls(private_key=private_key, public_key=encode_public_key(private_key.public_key()))


def generate_ephemeral_key_pair() -> EphemeralKeyPair:
    """Generate a new P-256 key pair for a single ECDH agreement."""
    return EphemeralKeyPair.from_private_key(ec.generate_private_key(ec.SECP256R1()))


def key_pair_from_private_bytes(private_bytes: bytes) -> EphemeralKeyPair:
    """
    Rebuild a key pair from a raw 32-byte big-endian private scalar.

    Used for test vectors and by receivers holding a raw p256dh private key.

    Args:
        private_bytes: 32-byte private scalar

    Returns:
        EphemeralKeyPair with the matching public point

    Raises:
        ValueError: If the scalar has the wrong length or is out of range
    """
    if len(private_bytes) != _PRIVATE_KEY_SIZE:
        raise ValueError(f"Invalid private key length: {len(private_bytes)} (expected {_PRIVATE_KEY_SIZE})")
    private_key = ec.derive_private_key(int.from_bytes(private_bytes, "big"), ec.SECP256R1())
    return EphemeralKeyPair.from_private_key(private_key)


def load_public_key(data: bytes) -> ec.EllipticCurvePublicKey:
    """
    Load a peer public key from its uncompressed point encoding.

    Args:
        data: 65-byte uncompressed P-256 point

    Returns:
        Public key object

    Raises:
        InvalidPeerKeyError: If the length, prefix or curve membership is wrong
    """
    if len(data) != PUBLIC_KEY_SIZE:
        raise InvalidPeerKeyError(f"Invalid public key length: {len(data)} bytes (expected {PUBLIC_KEY_SIZE})")
    if data[0] != UNCOMPRESSED_POINT_PREFIX:
        raise InvalidPeerKeyError(f"Public key is not an uncompressed point (prefix 0x{data[0]:02x})")
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), bytes(data))
    except ValueError as e:
        raise InvalidPeerKeyError("Public key is not a point on P-256") from e


def derive_shared_secret(peer_public_key: bytes, own_private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """
    Compute the ECDH shared secret with a peer.

    Args:
        peer_public_key: Peer's 65-byte uncompressed point
        own_private_key: Our P-256 private key

    Returns:
        32-byte shared secret (the X coordinate of the shared point)

    Raises:
        InvalidPeerKeyError: If the peer key is invalid
    """
    peer = load_public_key(peer_public_key)
    try:
        secret = own_private_key.exchange(ec.ECDH(), peer)
    except ValueError as e:
        raise InvalidPeerKeyError("ECDH agreement failed") from e
    if len(secret) != SHARED_SECRET_SIZE:
        raise InvalidPeerKeyError(f"Unexpected shared secret length: {len(secret)}")
    return secret
