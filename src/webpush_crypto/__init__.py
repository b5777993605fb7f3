"""
Web Push message encryption (RFC 8291 "aes128gcm" and legacy "aesgcm").

Encrypts a single push payload for a browser push subscription and builds
the HTTP fields a transport needs to deliver it.

Usage:
    from webpush_crypto import Subscription, Vapid, build_push_request

    subscription = Subscription.from_dict(subscription_json)
    vapid = Vapid.from_private_bytes(settings.vapid_private_key, "ops@example.com")

    request = build_push_request(subscription, '{"title": "Hello"}', vapid, ttl=3600)
    httpx.post(request.endpoint, content=request.body, headers=request.headers)

Lower level:
    from webpush_crypto import encrypt_message

    message = encrypt_message(subscription, payload, "aes128gcm")
"""

from webpush_crypto.constants import ContentEncoding, Urgency
from webpush_crypto.core import EncryptedMessage, decrypt_message, encrypt_message
from webpush_crypto.exceptions import (
    AuthenticationFailedError,
    CryptoProviderError,
    InvalidPeerKeyError,
    InvalidSubscriptionError,
    PayloadTooLargeError,
    RecordFormatError,
    UnsupportedAlgorithmError,
    WebPushError,
)
from webpush_crypto.provider import CryptoProvider, DefaultCryptoProvider
from webpush_crypto.request import PushRequest, build_headers, build_push_request
from webpush_crypto.subscription import Subscription
from webpush_crypto.vapid import Vapid, VapidSigner

__all__ = [
    # Constants
    "ContentEncoding",
    "Urgency",
    # Pipeline
    "CryptoProvider",
    "DefaultCryptoProvider",
    "EncryptedMessage",
    "PushRequest",
    "Subscription",
    "Vapid",
    "VapidSigner",
    "build_headers",
    "build_push_request",
    "decrypt_message",
    "encrypt_message",
    # Exceptions
    "AuthenticationFailedError",
    "CryptoProviderError",
    "InvalidPeerKeyError",
    "InvalidSubscriptionError",
    "PayloadTooLargeError",
    "RecordFormatError",
    "UnsupportedAlgorithmError",
    "WebPushError",
]

__version__ = "0.1.0"
