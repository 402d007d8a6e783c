"""Base58 and Base58Check encoding with Decred's BLAKE-256 checksum."""

from __future__ import annotations

from dcr_wallet.utils.crypto import blake256d

_B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

CHECKSUM_SIZE = 4


def base58_encode(payload: bytes) -> str:
    """Encode raw bytes to Base58 (no checksum)."""
    n = int.from_bytes(payload, "big")
    result: list[int] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_B58_ALPHABET[remainder])
    # Leading zero bytes map to leading '1' characters
    for byte in payload:
        if byte != 0:
            break
        result.append(_B58_ALPHABET[0])
    return bytes(reversed(result)).decode("ascii")


def base58_decode(s: str) -> bytes:
    """Decode a Base58 string to raw bytes (no checksum).

    Raises:
        ValueError: If *s* contains a character outside the Base58 alphabet.
    """
    n = 0
    for char in s:
        digit = _B58_ALPHABET.find(char.encode("ascii", errors="replace"))
        if digit < 0:
            msg = f"Invalid Base58 character {char!r}"
            raise ValueError(msg)
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_count = len(s) - len(s.lstrip("1"))
    return b"\x00" * pad_count + result


def checksum(payload: bytes) -> bytes:
    """First four bytes of the double BLAKE-256 of *payload*."""
    return blake256d(payload)[:CHECKSUM_SIZE]


def base58check_encode(payload: bytes) -> str:
    """Encode bytes with a 4-byte BLAKE-256d checksum (Base58Check)."""
    return base58_encode(payload + checksum(payload))


def base58check_decode(s: str) -> bytes:
    """Decode a Base58Check string, verifying the checksum.

    Raises:
        ValueError: If the string is malformed or the checksum is invalid.
    """
    raw = base58_decode(s)
    if len(raw) < CHECKSUM_SIZE:
        msg = "Base58Check string too short"
        raise ValueError(msg)
    payload, check = raw[:-CHECKSUM_SIZE], raw[-CHECKSUM_SIZE:]
    if check != checksum(payload):
        msg = "Base58Check checksum mismatch"
        raise ValueError(msg)
    return payload
