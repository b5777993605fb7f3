"""
Push message encryption pipeline.

encrypt_message() drives the whole per-message sequence:
1. Decode and validate the subscription keys
2. Draw a fresh ephemeral key pair and salt from the provider
3. ECDH against the subscription's p256dh key
4. Two-stage HKDF key schedule (kdf.py)
5. Pad and AES-128-GCM encrypt the single record
6. Frame per scheme and enforce the 4096-byte ceiling

Any failure aborts the call; nothing partially encrypted is returned.
Calls share no mutable state and may run concurrently.

Usage (sender):
    from webpush_crypto.core import encrypt_message
    from webpush_crypto.subscription import Subscription

    subscription = Subscription.from_dict(subscription_json)
    message = encrypt_message(subscription, '{"title": "Hello"}')
    body = message.body

Usage (receiver side, test oracle):
    from webpush_crypto.core import decrypt_message

    plaintext = decrypt_message(body, receiver_key_pair, auth_secret)
"""

from __future__ import annotations

from dataclasses import dataclass

from webpush_crypto import aead
from webpush_crypto._logging import get_logger
from webpush_crypto.constants import AUTH_SECRET_SIZE, PUBLIC_KEY_SIZE, SALT_SIZE, ContentEncoding
from webpush_crypto.exceptions import (
    CryptoProviderError,
    InvalidPeerKeyError,
    InvalidSubscriptionError,
    PayloadTooLargeError,
    RecordFormatError,
    WebPushError,
)
from webpush_crypto.framing import (
    check_record_size,
    decode_body,
    encode_header,
    header_size,
    pad_plaintext,
    unpad_plaintext,
)
from webpush_crypto.kdf import derive_encryption_context
from webpush_crypto.keys import EphemeralKeyPair, derive_shared_secret, load_public_key
from webpush_crypto.provider import CryptoProvider, DefaultCryptoProvider
from webpush_crypto.subscription import Subscription

__all__ = [
    "EncryptedMessage",
    "decrypt_message",
    "encrypt_message",
]

_logger = get_logger(__name__)

_default_provider = DefaultCryptoProvider()


@dataclass(frozen=True)
class EncryptedMessage:
    """
    One encrypted push message plus the metadata needed for its headers.

    For aes128gcm ``header`` holds salt, rs and key id and is sent as the
    start of the body. For aesgcm ``header`` is empty and ``salt`` and
    ``server_public_key`` go out in the Encryption and Crypto-Key headers.
    """

    encoding: ContentEncoding
    header: bytes
    ciphertext: bytes
    """Ciphertext followed by the 16-byte authentication tag."""
    salt: bytes
    server_public_key: bytes
    """Ephemeral application server public key (65-byte uncompressed point)."""

    @property
    def body(self) -> bytes:
        """HTTP request body: header || ciphertext."""
        return self.header + self.ciphertext

    @property
    def total_length(self) -> int:
        return len(self.header) + len(self.ciphertext)


def _fresh_key_material(provider: CryptoProvider) -> tuple[EphemeralKeyPair, bytes]:
    """Ask the provider for a key pair and salt, translating any failure."""
    try:
        key_pair = provider.generate_key_pair()
        salt = provider.random_bytes(SALT_SIZE)
    except Exception as e:
        raise CryptoProviderError("Crypto provider failed to produce key material") from e

    if len(salt) != SALT_SIZE:
        raise CryptoProviderError(f"Provider returned a {len(salt)}-byte salt (expected {SALT_SIZE})")
    if len(key_pair.public_key) != PUBLIC_KEY_SIZE:
        raise CryptoProviderError(f"Provider returned a {len(key_pair.public_key)}-byte public key")
    return (key_pair, salt)


def encrypt_message(
    subscription: Subscription,
    plaintext: str | bytes,
    encoding: ContentEncoding | str = ContentEncoding.AES128GCM,
    *,
    provider: CryptoProvider | None = None,
) -> EncryptedMessage:
    """
    Encrypt a payload for one subscription.

    Args:
        subscription: Target subscription (keys as base64url text or bytes)
        plaintext: Payload; str is encoded as UTF-8
        encoding: aes128gcm (default) or legacy aesgcm
        provider: Source of ephemeral keys and salt (defaults to the OS CSPRNG)

    Returns:
        EncryptedMessage ready for build_headers()

    Raises:
        UnsupportedAlgorithmError: If encoding is not supported
        InvalidSubscriptionError: If p256dh or auth is malformed
        PayloadTooLargeError: If the message exceeds one 4096-byte record
        CryptoProviderError: If the provider or the cipher fails
    """
    encoding = ContentEncoding.parse(encoding)
    provider = provider or _default_provider

    ua_public_key = subscription.p256dh_bytes()
    auth_secret = subscription.auth_bytes()
    try:
        load_public_key(ua_public_key)
    except InvalidPeerKeyError as e:
        raise InvalidSubscriptionError("p256dh is not a valid P-256 public key") from e

    data = plaintext.encode("utf-8") if isinstance(plaintext, str) else bytes(plaintext)
    padded = pad_plaintext(data)
    try:
        check_record_size(header_size(encoding, PUBLIC_KEY_SIZE), len(padded))
    except PayloadTooLargeError as e:
        _logger.debug("Payload too large: encoding=%s plaintext_size=%d total=%d", encoding.value, len(data), e.size)
        raise

    key_pair, salt = _fresh_key_material(provider)

    try:
        shared_secret = derive_shared_secret(ua_public_key, key_pair.private_key)
    except InvalidPeerKeyError as e:
        raise InvalidSubscriptionError("ECDH with p256dh failed") from e

    context = derive_encryption_context(
        encoding,
        shared_secret=shared_secret,
        auth_secret=auth_secret,
        salt=salt,
        ua_public_key=ua_public_key,
        as_public_key=key_pair.public_key,
    )
    try:
        ciphertext = aead.encrypt(context.cek, context.nonce, padded)
    except Exception as e:
        raise CryptoProviderError("AES-GCM encryption failed") from e

    header = encode_header(salt, key_pair.public_key) if encoding is ContentEncoding.AES128GCM else b""
    message = EncryptedMessage(
        encoding=encoding,
        header=header,
        ciphertext=ciphertext,
        salt=salt,
        server_public_key=key_pair.public_key,
    )
    _logger.debug(
        "Push message encrypted: encoding=%s plaintext_size=%d body_size=%d",
        encoding.value,
        len(data),
        message.total_length,
    )
    return message


def decrypt_message(
    body: bytes,
    receiver_key_pair: EphemeralKeyPair,
    auth_secret: bytes,
    *,
    encoding: ContentEncoding | str = ContentEncoding.AES128GCM,
    salt: bytes | None = None,
    server_public_key: bytes | None = None,
) -> bytes:
    """
    Decrypt a push message body as the user agent would.

    Mirrors encrypt_message() in reverse; used to verify output in tests.

    Args:
        body: HTTP body produced by encrypt_message()
        receiver_key_pair: User agent key pair (its public key is the p256dh)
        auth_secret: 16-byte subscription auth secret
        encoding: Scheme the body was encrypted with
        salt: aesgcm only, from the Encryption header
        server_public_key: aesgcm only, the dh value from the Crypto-Key header

    Returns:
        Original plaintext bytes

    Raises:
        RecordFormatError: If the body, salt or padding is malformed
        InvalidSubscriptionError: If the auth secret is not 16 bytes
        AuthenticationFailedError: If the tag does not verify
        InvalidPeerKeyError: If the server public key is invalid
        ValueError: If aesgcm salt or server key is missing
    """
    encoding = ContentEncoding.parse(encoding)

    if encoding is ContentEncoding.AES128GCM:
        header, ciphertext = decode_body(body)
        salt = header.salt
        server_public_key = header.key_id
    else:
        if salt is None or server_public_key is None:
            raise ValueError("aesgcm decryption requires salt and server_public_key")
        if len(salt) != SALT_SIZE:
            raise RecordFormatError(f"Invalid salt length: {len(salt)} (expected {SALT_SIZE})")
        ciphertext = body

    if len(auth_secret) != AUTH_SECRET_SIZE:
        raise InvalidSubscriptionError(f"auth must be {AUTH_SECRET_SIZE} bytes, got {len(auth_secret)}")

    try:
        shared_secret = derive_shared_secret(server_public_key, receiver_key_pair.private_key)
        context = derive_encryption_context(
            encoding,
            shared_secret=shared_secret,
            auth_secret=auth_secret,
            salt=salt,
            ua_public_key=receiver_key_pair.public_key,
            as_public_key=server_public_key,
        )
        plaintext = unpad_plaintext(aead.decrypt(context.cek, context.nonce, ciphertext))
    except WebPushError as e:
        _logger.debug("Decryption failed: encoding=%s error_type=%s", encoding.value, type(e).__name__)
        raise

    _logger.debug("Push message decrypted: encoding=%s body_size=%d", encoding.value, len(body))
    return plaintext
