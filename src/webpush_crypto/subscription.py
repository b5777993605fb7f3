"""
Push subscription as handed out by the browser's PushManager.

Key fields may arrive as base64url text (``PushSubscription.toJSON()``)
or as raw bytes; both are decoded and validated before use.
"""

from __future__ import annotations

import binascii
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from typing_extensions import Self

from webpush_crypto.constants import AUTH_SECRET_SIZE, PUBLIC_KEY_SIZE, UNCOMPRESSED_POINT_PREFIX
from webpush_crypto.exceptions import InvalidSubscriptionError
from webpush_crypto.headers import b64url_decode

__all__ = [
    "Subscription",
]

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _decode_key(value: str | bytes, name: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if not isinstance(value, str):
        raise InvalidSubscriptionError(f"{name} must be base64url text or bytes, got {type(value).__name__}")
    try:
        return b64url_decode(value)
    except (binascii.Error, ValueError) as e:
        raise InvalidSubscriptionError(f"{name} is not valid base64url") from e


@dataclass(frozen=True)
class Subscription:
    """A push subscription: endpoint URL plus the receiver's keys."""

    endpoint: str
    p256dh: str | bytes
    """User agent ECDH public key (uncompressed P-256 point)."""
    auth: str | bytes
    """16-byte authentication secret."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """
        Build from the ``PushSubscription.toJSON()`` shape.

        Example:
            Subscription.from_dict({
                "endpoint": "https://fcm.googleapis.com/fcm/send/...",
                "keys": {"p256dh": "BEe7...", "auth": "kER9..."},
            })

        Raises:
            InvalidSubscriptionError: If endpoint or keys are missing
        """
        endpoint = data.get("endpoint")
        keys = data.get("keys")
        if not endpoint or not isinstance(endpoint, str):
            raise InvalidSubscriptionError("Subscription is missing an endpoint")
        if not isinstance(keys, Mapping) or "p256dh" not in keys or "auth" not in keys:
            raise InvalidSubscriptionError("Subscription is missing p256dh or auth key")
        return cls(endpoint=endpoint, p256dh=keys["p256dh"], auth=keys["auth"])

    def p256dh_bytes(self) -> bytes:
        """
        Decoded user agent public key.

        Only length and point format are checked here; curve membership is
        checked when the key is loaded for ECDH.

        Raises:
            InvalidSubscriptionError: If the key is not a 65-byte uncompressed point
        """
        key = _decode_key(self.p256dh, "p256dh")
        if len(key) != PUBLIC_KEY_SIZE:
            raise InvalidSubscriptionError(f"p256dh must be {PUBLIC_KEY_SIZE} bytes, got {len(key)}")
        if key[0] != UNCOMPRESSED_POINT_PREFIX:
            raise InvalidSubscriptionError("p256dh is not an uncompressed P-256 point")
        return key

    def auth_bytes(self) -> bytes:
        """
        Decoded authentication secret.

        Raises:
            InvalidSubscriptionError: If the secret is not 16 bytes
        """
        secret = _decode_key(self.auth, "auth")
        if len(secret) != AUTH_SECRET_SIZE:
            raise InvalidSubscriptionError(f"auth must be {AUTH_SECRET_SIZE} bytes, got {len(secret)}")
        return secret

    def audience(self) -> str:
        """
        Origin of the endpoint, used as the VAPID ``aud`` claim.

        Userinfo is dropped and the port is omitted when it is the
        scheme default, so ``https://user:pw@push.example.net:443/x``
        yields ``https://push.example.net``.

        Raises:
            InvalidSubscriptionError: If the endpoint is not an absolute URL
        """
        parts = urlsplit(self.endpoint)
        scheme = parts.scheme.lower()
        try:
            host, port = parts.hostname, parts.port
        except ValueError as e:
            raise InvalidSubscriptionError(f"Endpoint has an invalid port: {self.endpoint!r}") from e
        if not scheme or not host:
            raise InvalidSubscriptionError(f"Endpoint is not an absolute URL: {self.endpoint!r}")

        if ":" in host:
            host = f"[{host}]"
        if port is None or port == _DEFAULT_PORTS.get(scheme):
            return f"{scheme}://{host}"
        return f"{scheme}://{host}:{port}"
