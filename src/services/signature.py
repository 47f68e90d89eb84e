"""Webhook signature verification.

Meta signs each delivery with HMAC-SHA256 over its own JSON serialization of
the payload, where every non-ASCII character is written as a ``\\uXXXX``
escape. The raw body we receive carries those characters as UTF-8, so the
body is re-escaped before hashing to reproduce the bytes that were signed.

Verification happens before any payload parsing: unauthenticated content is
never parsed.
"""

import hashlib
import hmac

from src.constants import SIGNATURE_PREFIX


def _escape_code_point(code_point: int) -> str:
    if code_point > 0xFFFF:
        # Outside the BMP: JSON writes a UTF-16 surrogate pair
        code_point -= 0x10000
        high = 0xD800 + (code_point >> 10)
        low = 0xDC00 + (code_point & 0x3FF)
        return f"\\u{high:04X}\\u{low:04X}"
    return f"\\u{code_point:04X}"


def escape_non_ascii(text: str) -> str:
    """Escape every character above code point 127 as ``\\uXXXX``.

    The character is upper-cased first when it has a single-character
    uppercase form, so ``"é"`` becomes ``"\\u00C9"``. ASCII passes through
    unchanged.
    """
    parts = []
    for char in text:
        if ord(char) <= 127:
            parts.append(char)
            continue
        upper = char.upper()
        if len(upper) != 1:
            upper = char
        parts.append(_escape_code_point(ord(upper)))
    return "".join(parts)


def calculate_signature_sha256(payload: bytes, secret: bytes) -> str:
    """Return the hex-encoded HMAC-SHA256 of ``payload`` keyed by ``secret``."""
    return hmac.new(secret, payload, hashlib.sha256).hexdigest()


def compute_body_signature(body: bytes, secret: str) -> str:
    """Compute the signature Meta would send for this raw request body."""
    escaped = escape_non_ascii(body.decode("utf-8", errors="replace"))
    return calculate_signature_sha256(
        escaped.encode("ascii"), secret.encode("utf-8")
    )


def strip_signature_prefix(header_value: str | None) -> str:
    """Remove the ``sha256=`` algorithm prefix from a signature header."""
    if not header_value:
        return ""
    return header_value.removeprefix(SIGNATURE_PREFIX)


def verify_signature(body: bytes, secret: str, signature_header: str | None) -> bool:
    """Check a delivery's ``X-Hub-Signature-256`` header against its body.

    Args:
        body: Raw request body bytes
        secret: App secret shared with Meta
        signature_header: Header value, ``sha256=<hex>``

    Returns:
        True only when the supplied digest matches the computed one. An absent
        or empty signature is rejected without computing a digest.
    """
    supplied = strip_signature_prefix(signature_header)
    if not supplied:
        return False

    expected = compute_body_signature(body, secret)
    # Constant-time comparison; compare_digest requires ASCII for str inputs
    return hmac.compare_digest(expected.encode("ascii"), supplied.encode("utf-8"))
