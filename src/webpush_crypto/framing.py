"""
Record framing for Web Push message bodies.

aes128gcm body (sent in HTTP body, RFC 8188 §2.1):
┌──────────┬──────────┬──────────┬──────────────────┬────────────────────┐
│ Salt     │ rs       │ idlen    │ keyid            │ Ciphertext + tag   │
│ (16B)    │ (4B BE)  │ (1B)     │ (idlen B, = 65)  │ (N+16B)            │
└──────────┴──────────┴──────────┴──────────────────┴────────────────────┘

keyid is the application server's uncompressed public key. rs is fixed
at 4096 and the message is always a single record.

aesgcm body is the ciphertext + tag alone; salt and key travel out of
band in the Encryption and Crypto-Key headers.

Plaintext of the single record is the payload followed by one 0x02
delimiter byte.
"""

from __future__ import annotations

from dataclasses import dataclass

from webpush_crypto.constants import (
    AES128GCM_HEADER_MIN_SIZE,
    AES_GCM_TAG_SIZE,
    KEY_ID_LENGTH_FIELD_SIZE,
    PADDING_DELIMITER,
    RECORD_SIZE,
    RECORD_SIZE_FIELD_SIZE,
    SALT_SIZE,
    ContentEncoding,
)
from webpush_crypto.exceptions import PayloadTooLargeError, RecordFormatError

__all__ = [
    "RecordHeader",
    "check_record_size",
    "decode_body",
    "encode_header",
    "header_size",
    "pad_plaintext",
    "parse_header",
    "record_overhead",
    "unpad_plaintext",
]

_MAX_KEY_ID_SIZE = 255


@dataclass
class RecordHeader:
    """Parsed aes128gcm header."""

    salt: bytes
    record_size: int
    key_id: bytes

    @property
    def size(self) -> int:
        """Encoded header length in bytes."""
        return AES128GCM_HEADER_MIN_SIZE + len(self.key_id)


def pad_plaintext(plaintext: bytes) -> bytes:
    """Append the single-record delimiter to the payload."""
    return plaintext + PADDING_DELIMITER


def unpad_plaintext(padded: bytes) -> bytes:
    """
    Remove padding from a decrypted last record.

    Trailing zero padding (allowed by RFC 8188 from other senders) is
    stripped first, then the delimiter must be the last byte.

    Raises:
        RecordFormatError: If the delimiter is missing
    """
    stripped = padded.rstrip(b"\x00")
    if not stripped.endswith(PADDING_DELIMITER):
        raise RecordFormatError("Padding delimiter missing from last record")
    return stripped[: -len(PADDING_DELIMITER)]


def encode_header(salt: bytes, key_id: bytes, record_size: int = RECORD_SIZE) -> bytes:
    """
    Encode the aes128gcm header.

    Args:
        salt: 16-byte per-message salt
        key_id: Application server public key (65 bytes)
        record_size: Record size written to the rs field

    Returns:
        21 + len(key_id) byte header

    Raises:
        ValueError: If salt or key id lengths do not fit the layout
    """
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Invalid salt length: {len(salt)} (expected {SALT_SIZE})")
    if len(key_id) > _MAX_KEY_ID_SIZE:
        raise ValueError(f"Key id too long: {len(key_id)} bytes (maximum {_MAX_KEY_ID_SIZE})")
    return (
        salt
        + record_size.to_bytes(RECORD_SIZE_FIELD_SIZE, "big")
        + len(key_id).to_bytes(KEY_ID_LENGTH_FIELD_SIZE, "big")
        + key_id
    )


def parse_header(data: bytes) -> RecordHeader:
    """
    Parse an aes128gcm header from the start of a body.

    Args:
        data: Body bytes starting with the header

    Returns:
        Parsed RecordHeader

    Raises:
        RecordFormatError: If data is too short for the declared key id
    """
    if len(data) < AES128GCM_HEADER_MIN_SIZE:
        raise RecordFormatError(f"Body too short: {len(data)} bytes (minimum {AES128GCM_HEADER_MIN_SIZE})")

    rs_end = SALT_SIZE + RECORD_SIZE_FIELD_SIZE
    key_id_len = data[rs_end]
    if len(data) < AES128GCM_HEADER_MIN_SIZE + key_id_len:
        raise RecordFormatError(f"Body too short for key id of {key_id_len} bytes")

    return RecordHeader(
        salt=bytes(data[:SALT_SIZE]),
        record_size=int.from_bytes(data[SALT_SIZE:rs_end], "big"),
        key_id=bytes(data[AES128GCM_HEADER_MIN_SIZE : AES128GCM_HEADER_MIN_SIZE + key_id_len]),
    )


def decode_body(body: bytes) -> tuple[RecordHeader, bytes]:
    """
    Split an aes128gcm body into header and ciphertext.

    Raises:
        RecordFormatError: If the body is malformed or holds more than one record
    """
    header = parse_header(body)
    ciphertext = body[header.size :]
    if len(ciphertext) < AES_GCM_TAG_SIZE:
        raise RecordFormatError(f"Ciphertext too short: {len(ciphertext)} bytes")
    if len(ciphertext) > header.record_size:
        raise RecordFormatError(f"Ciphertext of {len(ciphertext)} bytes exceeds record size {header.record_size}")
    return (header, ciphertext)


def header_size(encoding: ContentEncoding, key_id_size: int) -> int:
    """Bytes of in-body header for a scheme (aesgcm carries none)."""
    if encoding is ContentEncoding.AES128GCM:
        return AES128GCM_HEADER_MIN_SIZE + key_id_size
    return 0


def record_overhead(encoding: ContentEncoding, key_id_size: int) -> int:
    """
    Calculate total bytes added to the payload.

    Returns:
        Overhead in bytes (header + delimiter + AEAD tag)
    """
    return header_size(encoding, key_id_size) + len(PADDING_DELIMITER) + AES_GCM_TAG_SIZE


def check_record_size(header_length: int, padded_length: int, limit: int = RECORD_SIZE) -> int:
    """
    Enforce the single-record ceiling.

    Args:
        header_length: In-body header bytes (0 for aesgcm)
        padded_length: Padded plaintext bytes (equals ciphertext bytes under GCM)
        limit: Ceiling for header + ciphertext + tag

    Returns:
        Total encrypted body length

    Raises:
        PayloadTooLargeError: If the total exceeds the limit
    """
    total = header_length + padded_length + AES_GCM_TAG_SIZE
    if total > limit:
        raise PayloadTooLargeError(total, limit)
    return total
