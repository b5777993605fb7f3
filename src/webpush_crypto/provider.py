"""
Injected source of key pairs and randomness.

encrypt_message() never reaches for global crypto state directly; it asks
a CryptoProvider. Tests substitute a provider that returns fixed keys and
salts to reproduce known vectors.
"""

from __future__ import annotations

import secrets
from typing import Protocol

from webpush_crypto.keys import EphemeralKeyPair, generate_ephemeral_key_pair

__all__ = [
    "CryptoProvider",
    "DefaultCryptoProvider",
]


class CryptoProvider(Protocol):
    """Capabilities the encryption pipeline needs from the platform."""

    def generate_key_pair(self) -> EphemeralKeyPair:
        """Return a fresh P-256 key pair for one ECDH agreement."""
        ...

    def random_bytes(self, size: int) -> bytes:
        """Return size cryptographically random bytes."""
        ...


class DefaultCryptoProvider:
    """Provider backed by `cryptography` and the OS CSPRNG.

    Stateless; one instance may be shared by any number of threads.
    """

    def generate_key_pair(self) -> EphemeralKeyPair:
        return generate_ephemeral_key_pair()

    def random_bytes(self, size: int) -> bytes:
        return secrets.token_bytes(size)
