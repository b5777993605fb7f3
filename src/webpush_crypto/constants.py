"""
Protocol constants for Web Push message encryption.

References:
- RFC 8188 (Encrypted Content-Encoding for HTTP, "aes128gcm")
- RFC 8291 (Message Encryption for Web Push)
- draft-ietf-webpush-encryption-04 (legacy "aesgcm")
"""

from __future__ import annotations

from enum import Enum

from webpush_crypto.exceptions import UnsupportedAlgorithmError

__all__ = [
    "AES_GCM_TAG_SIZE",
    "AUTH_SECRET_SIZE",
    "CEK_SIZE",
    "DEFAULT_TTL",
    "NONCE_SIZE",
    "PADDING_DELIMITER",
    "PUBLIC_KEY_SIZE",
    "RECORD_SIZE",
    "SALT_SIZE",
    "ContentEncoding",
    "Urgency",
]


class ContentEncoding(str, Enum):
    """Content-Encoding schemes supported for push message bodies."""

    AES128GCM = "aes128gcm"
    """RFC 8188/8291 self-describing record (salt, rs and key id in the body)."""

    AESGCM = "aesgcm"
    """Legacy draft scheme; salt and key travel in the Encryption/Crypto-Key headers."""

    @classmethod
    def parse(cls, value: ContentEncoding | str) -> ContentEncoding:
        """
        Resolve a scheme selector given as a member or its token.

        Raises:
            UnsupportedAlgorithmError: If the token names no supported scheme
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedAlgorithmError(value) from None


class Urgency(str, Enum):
    """RFC 8030 §5.3 message urgency."""

    VERY_LOW = "very-low"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


# =============================================================================
# Key material sizes
# =============================================================================

PUBLIC_KEY_SIZE: int = 65
"""Uncompressed P-256 point: 0x04 || X (32B) || Y (32B)."""

UNCOMPRESSED_POINT_PREFIX: int = 0x04

AUTH_SECRET_SIZE: int = 16
SHARED_SECRET_SIZE: int = 32
SALT_SIZE: int = 16

SHA256_SIZE: int = 32
HKDF_MAX_OUTPUT: int = 255 * SHA256_SIZE

# =============================================================================
# AEAD (AES-128-GCM)
# =============================================================================

CEK_SIZE: int = 16
NONCE_SIZE: int = 12
AES_GCM_TAG_SIZE: int = 16

# =============================================================================
# Record framing
# =============================================================================

RECORD_SIZE: int = 4096
"""Single-record ceiling; also the rs field written into the aes128gcm header."""

PADDING_DELIMITER: bytes = b"\x02"
"""Terminal delimiter of the last (and only) record."""

RECORD_SIZE_FIELD_SIZE: int = 4
KEY_ID_LENGTH_FIELD_SIZE: int = 1
AES128GCM_HEADER_MIN_SIZE: int = SALT_SIZE + RECORD_SIZE_FIELD_SIZE + KEY_ID_LENGTH_FIELD_SIZE

# =============================================================================
# HKDF info labels
# =============================================================================

WEBPUSH_INFO_LABEL: bytes = b"WebPush: info\x00"
AUTH_INFO_LABEL: bytes = b"Content-Encoding: auth\x00"
CEK_INFO_PREFIX: bytes = b"Content-Encoding: "
NONCE_INFO_LABEL: bytes = b"Content-Encoding: nonce\x00"
P256_CONTEXT_LABEL: bytes = b"P-256\x00"

# =============================================================================
# HTTP request defaults
# =============================================================================

DEFAULT_TTL: int = 86400
"""Seconds a push service should retain an undelivered message (24 hours)."""

DEFAULT_VAPID_EXPIRATION: int = 12 * 60 * 60
"""Seconds until a VAPID JWT expires; push services reject more than 24 hours."""

MAX_VAPID_EXPIRATION: int = 24 * 60 * 60

CONTENT_TYPE: str = "application/octet-stream"

HEADER_AUTHORIZATION: str = "Authorization"
HEADER_CONTENT_ENCODING: str = "Content-Encoding"
HEADER_CONTENT_LENGTH: str = "Content-Length"
HEADER_CONTENT_TYPE: str = "Content-Type"
HEADER_CRYPTO_KEY: str = "Crypto-Key"
HEADER_ENCRYPTION: str = "Encryption"
HEADER_TTL: str = "TTL"
HEADER_URGENCY: str = "Urgency"
