"""
Exception hierarchy for webpush_crypto.

All errors inherit from WebPushError for easy catching.
"""


class WebPushError(Exception):
    """Base exception for all Web Push encryption errors."""


class InvalidSubscriptionError(WebPushError):
    """Subscription key material is malformed.

    Possible causes:
    - p256dh or auth is not valid base64url
    - p256dh is not a 65-byte uncompressed P-256 point
    - auth is not exactly 16 bytes
    - endpoint or keys missing from a subscription dict
    """


class InvalidPeerKeyError(WebPushError):
    """Peer public key is not a valid P-256 uncompressed point."""


class UnsupportedAlgorithmError(WebPushError):
    """Content encoding is neither aes128gcm nor aesgcm."""

    def __init__(self, encoding: object) -> None:
        self.encoding = encoding
        super().__init__(f"Unsupported content encoding: {encoding!r}")


class PayloadTooLargeError(WebPushError):
    """Encrypted message would exceed the single-record ceiling.

    The message is not chunked; the caller must shorten the payload.
    """

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Payload too large for single record: {size} bytes (limit {limit})")


class AuthenticationFailedError(WebPushError):
    """AEAD authentication tag did not verify.

    Possible causes:
    - Wrong receiver private key or auth secret
    - Corrupted ciphertext
    - Wrong salt or server public key
    """


class RecordFormatError(WebPushError):
    """Encrypted record is malformed.

    - Body shorter than the aes128gcm header
    - Key id length does not match the body
    - Padding delimiter missing after decryption
    """


class CryptoProviderError(WebPushError):
    """The crypto provider failed to produce keys or random bytes."""
