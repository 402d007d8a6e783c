"""Cryptographic helpers — BLAKE-256 hashing used by Decred."""

from __future__ import annotations

import hashlib

from blake256.blake256 import blake_hash


def blake256(data: bytes) -> bytes:
    """Single BLAKE-256 hash."""
    return bytes(blake_hash(data))


def blake256d(data: bytes) -> bytes:
    """Double BLAKE-256 hash (BLAKE256(BLAKE256(data)))."""
    return blake256(blake256(data))


def ripemd160(data: bytes) -> bytes:
    """RIPEMD-160 hash."""
    h = hashlib.new("ripemd160")
    h.update(data)
    return h.digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160(BLAKE-256(data)) — Decred's Hash160."""
    return ripemd160(blake256(data))
