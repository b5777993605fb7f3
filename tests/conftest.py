"""Shared test fixtures for webpush_crypto tests."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from webpush_crypto.headers import b64url_encode
from webpush_crypto.keys import EphemeralKeyPair, generate_ephemeral_key_pair
from webpush_crypto.subscription import Subscription

# Enable webpush_crypto debug logging during tests
logging.getLogger("webpush_crypto").setLevel(logging.DEBUG)
logging.getLogger("webpush_crypto").addHandler(logging.StreamHandler())


# === Deterministic Provider ===


@dataclass
class FixedCryptoProvider:
    """Provider returning a fixed key pair and salt, counting calls.

    Lets tests reproduce known vectors and check the pipeline asks for
    exactly one key pair and one salt per message.
    """

    key_pair: EphemeralKeyPair
    salt: bytes
    key_pair_calls: int = field(default=0)
    random_calls: list[int] = field(default_factory=list)

    def generate_key_pair(self) -> EphemeralKeyPair:
        self.key_pair_calls += 1
        return self.key_pair

    def random_bytes(self, size: int) -> bytes:
        self.random_calls.append(size)
        return self.salt


@pytest.fixture
def fixed_provider_factory() -> Callable[..., FixedCryptoProvider]:
    """Factory for deterministic providers.

    Usage:
        def test_something(fixed_provider_factory):
            provider = fixed_provider_factory()  # random but fixed key pair and salt
            provider = fixed_provider_factory(key_pair=kp, salt=salt)
    """

    def _make(key_pair: EphemeralKeyPair | None = None, salt: bytes | None = None) -> FixedCryptoProvider:
        return FixedCryptoProvider(
            key_pair=key_pair or generate_ephemeral_key_pair(),
            salt=salt if salt is not None else secrets.token_bytes(16),
        )

    return _make


# === Key Fixtures ===


@pytest.fixture
def receiver_key_pair() -> EphemeralKeyPair:
    """User agent key pair; its public key is the subscription's p256dh."""
    return generate_ephemeral_key_pair()


@pytest.fixture
def auth_secret() -> bytes:
    """16-byte subscription auth secret."""
    return secrets.token_bytes(16)


@pytest.fixture
def subscription(receiver_key_pair: EphemeralKeyPair, auth_secret: bytes) -> Subscription:
    """Subscription with base64url keys, as a browser hands it out."""
    return Subscription(
        endpoint="https://fcm.googleapis.com/fcm/send/abc123:def456",
        p256dh=b64url_encode(receiver_key_pair.public_key),
        auth=b64url_encode(auth_secret),
    )


@pytest.fixture
def subscription_dict(subscription: Subscription) -> dict[str, object]:
    """The PushSubscription.toJSON() shape of the subscription fixture."""
    return {
        "endpoint": subscription.endpoint,
        "expirationTime": None,
        "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
    }
