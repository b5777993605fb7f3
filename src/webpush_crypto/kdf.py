"""
Two-stage HKDF key schedule for Web Push (HMAC-SHA-256 throughout).

Stage 1 mixes the ECDH secret with the subscription's auth secret:
    PRK1 = HKDF-Extract(salt=auth_secret, ikm=ecdh_secret)
    IKM  = HKDF-Expand(PRK1, key_info, 32)

Stage 2 binds the per-message salt and derives the AEAD inputs:
    PRK2  = HKDF-Extract(salt=salt, ikm=IKM)
    CEK   = HKDF-Expand(PRK2, cek_info, 16)
    NONCE = HKDF-Expand(PRK2, nonce_info, 12)

Info strings per scheme:
    aes128gcm: key_info   = "WebPush: info" || 0x00 || ua_public || as_public
               cek_info   = "Content-Encoding: aes128gcm" || 0x00
               nonce_info = "Content-Encoding: nonce" || 0x00
    aesgcm:    key_info   = "Content-Encoding: auth" || 0x00
               cek_info   = "Content-Encoding: aesgcm" || 0x00 || context
               nonce_info = "Content-Encoding: nonce" || 0x00 || context
               context    = "P-256" || 0x00 || len16(ua) || ua || len16(as) || as

Reference: RFC 8291 §3.3-3.4, RFC 8188 §2.2-2.3, draft-ietf-webpush-encryption-04 §3
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac
from cryptography.hazmat.primitives.kdf.hkdf import HKDFExpand

from webpush_crypto.constants import (
    AUTH_INFO_LABEL,
    AUTH_SECRET_SIZE,
    CEK_INFO_PREFIX,
    CEK_SIZE,
    HKDF_MAX_OUTPUT,
    NONCE_INFO_LABEL,
    NONCE_SIZE,
    P256_CONTEXT_LABEL,
    SALT_SIZE,
    SHA256_SIZE,
    WEBPUSH_INFO_LABEL,
    ContentEncoding,
)

__all__ = [
    "EncryptionContext",
    "cek_info",
    "derive_encryption_context",
    "hkdf_expand",
    "hkdf_extract",
    "key_context",
    "key_info",
    "nonce_info",
]


# =============================================================================
# HKDF primitives (RFC 5869)
# =============================================================================


def hkdf_extract(salt: bytes, ikm: bytes) -> bytes:
    """HKDF-Extract: PRK = HMAC-SHA256(salt, IKM)."""
    h = crypto_hmac.HMAC(salt, hashes.SHA256())
    h.update(ikm)
    return h.finalize()


def hkdf_expand(prk: bytes, info: bytes, length: int) -> bytes:
    """
    HKDF-Expand: T(i) = HMAC(PRK, T(i-1) || info || i), truncated to length.

    Args:
        prk: Pseudorandom key (at least 32 bytes)
        info: Context string
        length: Output length (1 to 255 * 32)

    Returns:
        Output keying material

    Raises:
        ValueError: If length is outside the HKDF range
    """
    if not 0 < length <= HKDF_MAX_OUTPUT:
        raise ValueError(f"Invalid HKDF output length: {length} (must be 1..{HKDF_MAX_OUTPUT})")
    return HKDFExpand(algorithm=hashes.SHA256(), length=length, info=info).derive(prk)


# =============================================================================
# Info strings
# =============================================================================


def key_context(ua_public_key: bytes, as_public_key: bytes) -> bytes:
    """
    Legacy aesgcm key context appended to the CEK and nonce info.

    Lengths are 16-bit big-endian.
    """
    return (
        P256_CONTEXT_LABEL
        + len(ua_public_key).to_bytes(2, "big")
        + ua_public_key
        + len(as_public_key).to_bytes(2, "big")
        + as_public_key
    )


def key_info(encoding: ContentEncoding, ua_public_key: bytes, as_public_key: bytes) -> bytes:
    """Info for the stage 1 expansion that yields IKM."""
    if encoding is ContentEncoding.AES128GCM:
        return WEBPUSH_INFO_LABEL + ua_public_key + as_public_key
    return AUTH_INFO_LABEL


def cek_info(encoding: ContentEncoding, context: bytes = b"") -> bytes:
    """Info for the content-encryption key; context is only used by aesgcm."""
    return CEK_INFO_PREFIX + encoding.value.encode("ascii") + b"\x00" + context


def nonce_info(context: bytes = b"") -> bytes:
    """Info for the nonce; the label is shared by both schemes, context is only used by aesgcm."""
    return NONCE_INFO_LABEL + context


# =============================================================================
# Key schedule
# =============================================================================


@dataclass(frozen=True)
class EncryptionContext:
    """
    Per-message key schedule output.

    Lives for a single encrypt or decrypt call. Every field but
    ``encoding`` is derived from fresh inputs; none is ever reused.
    """

    encoding: ContentEncoding
    salt: bytes
    shared_secret: bytes = field(repr=False)
    prk1: bytes = field(repr=False)
    ikm: bytes = field(repr=False)
    prk2: bytes = field(repr=False)
    cek: bytes = field(repr=False)
    nonce: bytes = field(repr=False)


def derive_encryption_context(
    encoding: ContentEncoding,
    *,
    shared_secret: bytes,
    auth_secret: bytes,
    salt: bytes,
    ua_public_key: bytes,
    as_public_key: bytes,
) -> EncryptionContext:
    """
    Run the full two-stage key schedule.

    Deterministic: identical inputs always produce identical output.

    Args:
        encoding: Content encoding scheme
        shared_secret: 32-byte ECDH secret
        auth_secret: 16-byte subscription auth secret
        salt: 16-byte per-message salt
        ua_public_key: User agent (receiver) public key, 65 bytes
        as_public_key: Application server (sender) public key, 65 bytes

    Returns:
        EncryptionContext with PRK1, IKM, PRK2, CEK and nonce

    Raises:
        ValueError: If the salt or auth secret has the wrong length
    """
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Invalid salt length: {len(salt)} (expected {SALT_SIZE})")
    if len(auth_secret) != AUTH_SECRET_SIZE:
        raise ValueError(f"Invalid auth secret length: {len(auth_secret)} (expected {AUTH_SECRET_SIZE})")

    prk1 = hkdf_extract(auth_secret, shared_secret)
    ikm = hkdf_expand(prk1, key_info(encoding, ua_public_key, as_public_key), SHA256_SIZE)

    context = key_context(ua_public_key, as_public_key) if encoding is ContentEncoding.AESGCM else b""
    prk2 = hkdf_extract(salt, ikm)
    cek = hkdf_expand(prk2, cek_info(encoding, context), CEK_SIZE)
    nonce = hkdf_expand(prk2, nonce_info(context), NONCE_SIZE)

    return EncryptionContext(
        encoding=encoding,
        salt=salt,
        shared_secret=shared_secret,
        prk1=prk1,
        ikm=ikm,
        prk2=prk2,
        cek=cek,
        nonce=nonce,
    )
