"""Web Push message encryption known-answer tests.

RFC 8291 Appendix A:
    Source: https://www.rfc-editor.org/rfc/rfc8291.html#appendix-A
    The encrypted body is reproduced byte for byte by injecting the
    example's application server key pair and salt.

Interoperability scenario:
    Fixed subscription keys, sender key and salt run through both schemes;
    expected intermediates were computed independently.

To update: These are hardcoded; regenerate only if the key schedule changes.
"""

import pytest

from webpush_crypto.constants import ContentEncoding
from webpush_crypto.core import decrypt_message, encrypt_message
from webpush_crypto.framing import encode_header
from webpush_crypto.headers import b64url_decode
from webpush_crypto.kdf import EncryptionContext, derive_encryption_context
from webpush_crypto.keys import derive_shared_secret, key_pair_from_private_bytes
from webpush_crypto.subscription import Subscription

from tests.conftest import FixedCryptoProvider

PLAINTEXT = b"When I grow up, I want to be a watermelon"


# =============================================================================
# RFC 8291 Appendix A
# =============================================================================

RFC_AUTH = "BTBZMqHH6r4Tts7J_aSIgg"
RFC_UA_PUBLIC = "BCVxsr7N_eNgVRqvHtD0zTZsEc6-VV-JvLexhqUzORcxaOzi6-AYWXvTBHm4bjyPjs7Vd8pZGH6SRpkNtoIAiw4"
RFC_UA_PRIVATE = "q1dXpw3UpT5VOmu_cf_v6ih07Aems3njxI-JWgLcM94"
RFC_AS_PUBLIC = "BP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCYLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A8"
RFC_AS_PRIVATE = "yfWPiYE-n46HLnH0KqZOF1fJJU3MYrct3AELtAQ-oRw"
RFC_SALT = "DGv6ra1nlYgDCS1FRnbzlw"
RFC_BODY = (
    "DGv6ra1nlYgDCS1FRnbzlwAAEABBBP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCYLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A_yl95bQpu6cVPTpK4Mqgkf1CXztLVBSt2Ks3oZwbuwXPXLWyouBWLVWGNWQexSgSxsj_Qulcy4a-fN"
)


@pytest.mark.vectors
class TestRFC8291AppendixA:
    """RFC 8291 Appendix A example, aes128gcm."""

    @pytest.fixture
    def provider(self) -> FixedCryptoProvider:
        return FixedCryptoProvider(
            key_pair=key_pair_from_private_bytes(b64url_decode(RFC_AS_PRIVATE)),
            salt=b64url_decode(RFC_SALT),
        )

    @pytest.fixture
    def rfc_subscription(self) -> Subscription:
        return Subscription(
            endpoint="https://push.example.net/push/JzLQ3raZJfFBR0aqvOMsLrt54w4rJUsV",
            p256dh=RFC_UA_PUBLIC,
            auth=RFC_AUTH,
        )

    def test_as_public_key(self, provider: FixedCryptoProvider) -> None:
        """The example's private scalar yields the example's public key."""
        assert provider.key_pair.public_key == b64url_decode(RFC_AS_PUBLIC)

    def test_key_schedule(self) -> None:
        """ECDH secret and every HKDF intermediate match the RFC."""
        as_key_pair = key_pair_from_private_bytes(b64url_decode(RFC_AS_PRIVATE))
        ua_public = b64url_decode(RFC_UA_PUBLIC)

        shared_secret = derive_shared_secret(ua_public, as_key_pair.private_key)
        context = derive_encryption_context(
            ContentEncoding.AES128GCM,
            shared_secret=shared_secret,
            auth_secret=b64url_decode(RFC_AUTH),
            salt=b64url_decode(RFC_SALT),
            ua_public_key=ua_public,
            as_public_key=as_key_pair.public_key,
        )

        assert shared_secret == b64url_decode("kyrL1jIIOHEzg3sM2ZWRHDRB62YACZhhSlknJ672kSs")
        assert context.prk1 == b64url_decode("Snr3JMxaHVDXHWJn5wdC52WjpCtd2EIEGBykDcZW32k")
        assert context.ikm == b64url_decode("S4lYMb_L0FxCeq0WhDx813KgSYqU26kOyzWUdsXYyrg")
        assert context.prk2 == b64url_decode("09_eUZGrsvxChDCGRCdkLiDXrReGOEVeSCdCcPBSJSc")
        assert context.cek == b64url_decode("oIhVW04MRdy2XN9CiKLxTg")
        assert context.nonce == b64url_decode("4h_95klXJ5E_qnoN")

    def test_encrypted_body(self, provider: FixedCryptoProvider, rfc_subscription: Subscription) -> None:
        """encrypt_message reproduces the RFC body exactly."""
        message = encrypt_message(rfc_subscription, PLAINTEXT, provider=provider)

        assert message.body == b64url_decode(RFC_BODY)
        assert message.salt == b64url_decode(RFC_SALT)
        assert message.server_public_key == b64url_decode(RFC_AS_PUBLIC)

    def test_decrypt_rfc_body(self) -> None:
        """The user agent side recovers the RFC plaintext."""
        ua_key_pair = key_pair_from_private_bytes(b64url_decode(RFC_UA_PRIVATE))
        assert ua_key_pair.public_key == b64url_decode(RFC_UA_PUBLIC)

        plaintext = decrypt_message(b64url_decode(RFC_BODY), ua_key_pair, b64url_decode(RFC_AUTH))
        assert plaintext == PLAINTEXT


# =============================================================================
# Interoperability scenario (both schemes, same inputs)
# =============================================================================

SCENARIO_AUTH = "kER9haBadZoLNuH-c44NXQ"
SCENARIO_P256DH = "BEe7bEvNRAOgQnrbukIzZcbq9rVcROzE6YnE5VAQ5E0TzmDfU-dz9IC2p02sNSpfz5FSDsn7rvaPkwoA0ZTvsUY"
SCENARIO_AS_PRIVATE = "5gMll8lkpOU8VdZyjJsse_j8iNb9rBtP99f77F0z8Q0"
SCENARIO_AS_PUBLIC = "BMY6BhMeQ-kKPxbcbZdLRbZ9TmAP-TIrw7Y9kpRjLhKuyuStN_0S-N9fY5zgJeUA0bM-19SQo-HL3VzCxV13TEc"
SCENARIO_SALT = "0KIyRvs_qdJGgjxbkBpzxw"
SCENARIO_SHARED_SECRET = "6wIy8PHmH0fpWvitOzYAvG25gMDYwUM1hUrb4UmUJgg"
SCENARIO_PRK1 = "UAZoehRROrtGt5Ym2eaKXm-116r79yIx5xhGC8TQUMc"


@pytest.fixture
def scenario_provider() -> FixedCryptoProvider:
    return FixedCryptoProvider(
        key_pair=key_pair_from_private_bytes(b64url_decode(SCENARIO_AS_PRIVATE)),
        salt=b64url_decode(SCENARIO_SALT),
    )


@pytest.fixture
def scenario_subscription() -> Subscription:
    return Subscription.from_dict(
        {
            "endpoint": "https://fcm.googleapis.com/fcm/send/scenario",
            "keys": {"p256dh": SCENARIO_P256DH, "auth": SCENARIO_AUTH},
        }
    )


def _scenario_context(encoding: ContentEncoding) -> EncryptionContext:
    as_key_pair = key_pair_from_private_bytes(b64url_decode(SCENARIO_AS_PRIVATE))
    ua_public = b64url_decode(SCENARIO_P256DH)
    shared_secret = derive_shared_secret(ua_public, as_key_pair.private_key)
    return derive_encryption_context(
        encoding,
        shared_secret=shared_secret,
        auth_secret=b64url_decode(SCENARIO_AUTH),
        salt=b64url_decode(SCENARIO_SALT),
        ua_public_key=ua_public,
        as_public_key=as_key_pair.public_key,
    )


@pytest.mark.vectors
class TestScenarioAes128gcm:
    """aes128gcm known answers for the shared scenario."""

    def test_sender_public_key(self, scenario_provider: FixedCryptoProvider) -> None:
        assert scenario_provider.key_pair.public_key == b64url_decode(SCENARIO_AS_PUBLIC)

    def test_shared_secret(self) -> None:
        as_key_pair = key_pair_from_private_bytes(b64url_decode(SCENARIO_AS_PRIVATE))
        shared_secret = derive_shared_secret(b64url_decode(SCENARIO_P256DH), as_key_pair.private_key)
        assert shared_secret == b64url_decode(SCENARIO_SHARED_SECRET)

    def test_key_schedule(self) -> None:
        """Intermediates of both HKDF stages."""
        context = _scenario_context(ContentEncoding.AES128GCM)

        # Auth-secret extract; the first of the two PRKs
        assert context.prk1 == b64url_decode(SCENARIO_PRK1)
        assert context.ikm == b64url_decode("Ly0vJBaYzaWl9lYiIScFUjXBhxPnTwLDFQcsGHU_xqE")
        assert context.prk2 == b64url_decode("S0MEcJ7D6a4nlQqwVb3iQXD6cc0aKq6aqrc53FvqfWA")
        assert context.cek == b64url_decode("_SSI-YPQ16JuNVCdX63ICw")
        assert context.nonce == b64url_decode("3H5oj_0KK-R6ycWM")

    def test_body(self, scenario_provider: FixedCryptoProvider, scenario_subscription: Subscription) -> None:
        """Header layout and ciphertext."""
        message = encrypt_message(scenario_subscription, PLAINTEXT.decode("utf-8"), provider=scenario_provider)

        expected_header = (
            b64url_decode(SCENARIO_SALT) + bytes.fromhex("00001000") + b"\x41" + b64url_decode(SCENARIO_AS_PUBLIC)
        )
        assert message.header == expected_header
        assert message.header == encode_header(b64url_decode(SCENARIO_SALT), b64url_decode(SCENARIO_AS_PUBLIC))
        assert len(message.header) == 86
        assert message.ciphertext == b64url_decode(
            "cqkVuVeIWPnqA26KNOYkBHB39T_h4MQmfqevOng6LPmsc61fLc0qjXM3HogJ4HREg-tzLXV6MDBqEQ"
        )
        assert message.total_length == 86 + len(PLAINTEXT) + 1 + 16


@pytest.mark.vectors
class TestScenarioAesgcm:
    """Legacy aesgcm known answers for the shared scenario."""

    def test_key_schedule(self) -> None:
        """PRK1 is scheme-independent; everything after it differs."""
        context = _scenario_context(ContentEncoding.AESGCM)

        assert context.prk1 == b64url_decode(SCENARIO_PRK1)
        assert context.ikm == b64url_decode("GA36uWZlBOcfrjfGJ3fymAnTT-3Lvumtq-DCKZ-2Ngc")
        assert context.prk2 == b64url_decode("fAfnpKYGBfYzIRqckaPUbrpKqhaSFQyBkmVy582cPpI")
        assert context.cek == b64url_decode("pau_AClIhEsvVbYLSkaq0w")
        assert context.nonce == b64url_decode("mGKuNQXck6b7D6YC")

    def test_body(self, scenario_provider: FixedCryptoProvider, scenario_subscription: Subscription) -> None:
        """Body is the bare ciphertext; salt and key travel in headers."""
        message = encrypt_message(scenario_subscription, PLAINTEXT, "aesgcm", provider=scenario_provider)

        assert message.header == b""
        assert message.body == b64url_decode(
            "i1OKfM9CDCnju0kitvtIi8y9F-_5VIkgL4cR6Z3VKauLrnSCyqmxaPLeX0BoFoOg3k1RxTn4b18WRg"
        )
        assert message.salt == b64url_decode(SCENARIO_SALT)
        assert message.server_public_key == b64url_decode(SCENARIO_AS_PUBLIC)
