"""
HTTP request fields for delivering an encrypted push message.

Builds the headers and body an external transport (httpx, aiohttp,
urllib) POSTs to the subscription endpoint. No network I/O happens here.

Headers for aes128gcm (RFC 8291 / RFC 8292):
    Content-Type: application/octet-stream
    Content-Encoding: aes128gcm
    Content-Length: <body size>
    TTL: <seconds>
    Urgency: <very-low|low|normal|high>          (optional)
    Authorization: vapid t=<jwt>, k=<vapid public key>

Headers for legacy aesgcm:
    Content-Encoding: aesgcm
    Authorization: Bearer <jwt>
    Crypto-Key: p256ecdsa=<vapid public key>;dh=<ephemeral public key>
    Encryption: salt=<salt>
    (plus Content-Type, Content-Length, TTL, Urgency as above)

Usage:
    from webpush_crypto.request import build_push_request

    request = build_push_request(subscription, payload, vapid)
    httpx.post(request.endpoint, content=request.body, headers=request.headers)
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from webpush_crypto._logging import get_logger
from webpush_crypto.constants import (
    CONTENT_TYPE,
    DEFAULT_TTL,
    DEFAULT_VAPID_EXPIRATION,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_ENCODING,
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_CRYPTO_KEY,
    HEADER_ENCRYPTION,
    HEADER_TTL,
    HEADER_URGENCY,
    MAX_VAPID_EXPIRATION,
    ContentEncoding,
    Urgency,
)
from webpush_crypto.core import EncryptedMessage, encrypt_message
from webpush_crypto.headers import b64url_encode
from webpush_crypto.provider import CryptoProvider
from webpush_crypto.subscription import Subscription
from webpush_crypto.vapid import VapidSigner

__all__ = [
    "PushRequest",
    "build_headers",
    "build_push_request",
]

_logger = get_logger(__name__)


@dataclass(frozen=True)
class PushRequest:
    """Everything a transport needs to POST one push message."""

    endpoint: str
    headers: dict[str, str]
    body: bytes


def _validate_ttl(ttl: int) -> int:
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0:
        raise ValueError(f"TTL must be a non-negative integer number of seconds, got {ttl!r}")
    return ttl


def _validate_urgency(urgency: Urgency | str) -> Urgency:
    try:
        return Urgency(urgency)
    except ValueError:
        raise ValueError(f"Invalid urgency: {urgency!r} (expected one of {[u.value for u in Urgency]})") from None


def build_headers(
    message: EncryptedMessage,
    *,
    vapid_token: str,
    vapid_public_key: bytes,
    ttl: int = DEFAULT_TTL,
    urgency: Urgency | str | None = None,
) -> dict[str, str]:
    """
    Map an encrypted message and VAPID token to HTTP headers.

    Args:
        message: Output of encrypt_message()
        vapid_token: Signed VAPID JWT
        vapid_public_key: 65-byte VAPID public key
        ttl: Seconds the push service may hold the message
        urgency: Optional delivery urgency

    Returns:
        Header dict

    Raises:
        ValueError: If ttl or urgency is invalid
    """
    ttl = _validate_ttl(ttl)
    encoded_vapid_key = b64url_encode(vapid_public_key)

    headers = {
        HEADER_CONTENT_TYPE: CONTENT_TYPE,
        HEADER_CONTENT_LENGTH: str(message.total_length),
        HEADER_CONTENT_ENCODING: message.encoding.value,
        HEADER_TTL: str(ttl),
    }
    if urgency is not None:
        headers[HEADER_URGENCY] = _validate_urgency(urgency).value

    if message.encoding is ContentEncoding.AES128GCM:
        headers[HEADER_AUTHORIZATION] = f"vapid t={vapid_token}, k={encoded_vapid_key}"
    else:
        # Some push services require p256ecdsa before dh in a single header
        headers[HEADER_AUTHORIZATION] = f"Bearer {vapid_token}"
        headers[HEADER_CRYPTO_KEY] = f"p256ecdsa={encoded_vapid_key};dh={b64url_encode(message.server_public_key)}"
        headers[HEADER_ENCRYPTION] = f"salt={b64url_encode(message.salt)}"

    return headers


def build_push_request(
    subscription: Subscription,
    payload: str | bytes,
    vapid: VapidSigner,
    *,
    encoding: ContentEncoding | str = ContentEncoding.AES128GCM,
    ttl: int = DEFAULT_TTL,
    urgency: Urgency | str | None = None,
    provider: CryptoProvider | None = None,
    vapid_expiration: int = DEFAULT_VAPID_EXPIRATION,
) -> PushRequest:
    """
    Encrypt a payload and assemble the full delivery request.

    Args:
        subscription: Target subscription
        payload: Message payload (str encoded as UTF-8)
        vapid: VAPID signer for the Authorization header
        encoding: aes128gcm (default) or legacy aesgcm
        ttl: Seconds the push service may hold the message
        urgency: Optional delivery urgency
        provider: Source of ephemeral keys and salt
        vapid_expiration: Token lifetime in seconds (at most 24 hours)

    Returns:
        PushRequest with endpoint, headers and body

    Raises:
        ValueError: If ttl, urgency or vapid_expiration is invalid
        WebPushError: Any error from encrypt_message()
    """
    # Validate options before encrypting
    ttl = _validate_ttl(ttl)
    if urgency is not None:
        urgency = _validate_urgency(urgency)
    if not 0 < vapid_expiration <= MAX_VAPID_EXPIRATION:
        raise ValueError(f"vapid_expiration must be within 1..{MAX_VAPID_EXPIRATION} seconds")

    audience = subscription.audience()
    message = encrypt_message(subscription, payload, encoding, provider=provider)

    token = vapid.sign(audience, int(time.time()) + vapid_expiration)
    headers = build_headers(
        message,
        vapid_token=token,
        vapid_public_key=vapid.public_key,
        ttl=ttl,
        urgency=urgency,
    )
    _logger.debug("Push request built: audience=%s encoding=%s ttl=%d", audience, message.encoding.value, ttl)
    return PushRequest(endpoint=subscription.endpoint, headers=headers, body=message.body)
