"""
AES-128-GCM content encryption (96-bit nonce, 128-bit tag, no AAD).
"""

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from webpush_crypto.constants import AES_GCM_TAG_SIZE, CEK_SIZE, NONCE_SIZE
from webpush_crypto.exceptions import AuthenticationFailedError

__all__ = [
    "decrypt",
    "encrypt",
]


def _check_key_and_nonce(cek: bytes, nonce: bytes) -> None:
    if len(cek) != CEK_SIZE:
        raise ValueError(f"Invalid CEK length: {len(cek)} (expected {CEK_SIZE})")
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Invalid nonce length: {len(nonce)} (expected {NONCE_SIZE})")


def encrypt(cek: bytes, nonce: bytes, padded_plaintext: bytes) -> bytes:
    """
    Encrypt a padded record.

    Args:
        cek: 16-byte content-encryption key
        nonce: 12-byte nonce
        padded_plaintext: Payload plus delimiter

    Returns:
        ciphertext || tag (len(padded_plaintext) + 16 bytes)
    """
    _check_key_and_nonce(cek, nonce)
    return AESGCM(cek).encrypt(nonce, padded_plaintext, None)


def decrypt(cek: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt and authenticate a record.

    No plaintext is returned unless the tag verifies.

    Args:
        cek: 16-byte content-encryption key
        nonce: 12-byte nonce
        ciphertext: ciphertext || tag

    Returns:
        Padded plaintext

    Raises:
        AuthenticationFailedError: If the tag does not verify
    """
    _check_key_and_nonce(cek, nonce)
    if len(ciphertext) < AES_GCM_TAG_SIZE:
        raise AuthenticationFailedError("Ciphertext too short")
    try:
        return AESGCM(cek).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationFailedError("Decryption failed") from e
