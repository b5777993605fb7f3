"""
HTTP header utilities for Web Push requests.

Uses base64url encoding (RFC 4648 §5) for all key, salt and token
material carried in headers.
"""

import base64

__all__ = [
    "b64url_decode",
    "b64url_encode",
    "parse_header_params",
]


def b64url_encode(data: bytes) -> str:
    """
    Encode bytes to base64url string without padding.

    Args:
        data: Raw bytes to encode

    Returns:
        base64url encoded string (no padding)
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str | bytes) -> bytes:
    """
    Decode base64url string to bytes.

    Handles missing padding automatically. Subscriptions serialized with
    the standard alphabet (``+``/``/``) decode as well. Characters outside
    the alphabet are rejected rather than skipped.

    Args:
        s: base64url encoded string (with or without padding)

    Returns:
        Decoded bytes

    Raises:
        binascii.Error: If the input is not valid base64url
    """
    if isinstance(s, bytes):
        s = s.decode("ascii")
    s = s.strip().replace("+", "-").replace("/", "_")
    # Add padding if needed (base64 uses 4-byte blocks)
    padding = len(s) % 4
    if padding:
        s += "=" * (4 - padding)
    return base64.b64decode(s, altchars=b"-_", validate=True)


def parse_header_params(value: str) -> dict[str, str]:
    """
    Parse ``name=value`` parameters from a Crypto-Key or Encryption header.

    Parameters may be separated by ``;`` or ``,`` (both appear in the wild).
    Quoted values are unquoted. Later duplicates win.

    Args:
        value: Raw header value, e.g. ``"p256ecdsa=BF...;dh=BC..."``

    Returns:
        Dict of lower-cased parameter names to values
    """
    params: dict[str, str] = {}
    for part in value.replace(",", ";").split(";"):
        name, sep, param = part.partition("=")
        if not sep:
            continue
        params[name.strip().lower()] = param.strip().strip('"')
    return params
