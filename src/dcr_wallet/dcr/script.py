"""Decred script building — P2PKH, P2SH, script type detection.

Provides construction and classification of the standard version 0
locking scripts:
- P2PKH (secp256k1 ECDSA) and the alternative-signature P2PKH forms
  (ed25519, secp256k1 Schnorr) checked with OP_CHECKSIGALT
- P2SH (Pay-to-Script-Hash)
"""

from __future__ import annotations

import enum
import struct

# ---------------------------------------------------------------------------
# Opcodes
# ---------------------------------------------------------------------------


class OpCode(int, enum.Enum):
    """Opcodes used by the standard script templates."""

    OP_0 = 0x00
    OP_DATA_20 = 0x14
    OP_DATA_33 = 0x21
    OP_PUSHDATA1 = 0x4C
    OP_PUSHDATA2 = 0x4D
    OP_PUSHDATA4 = 0x4E
    OP_1 = 0x51
    OP_2 = 0x52
    OP_RETURN = 0x6A
    OP_DUP = 0x76
    OP_EQUAL = 0x87
    OP_EQUALVERIFY = 0x88
    OP_HASH160 = 0xA9
    OP_CHECKSIG = 0xAC
    OP_CHECKSIGALT = 0xBE


class SignatureType(int, enum.Enum):
    """Signature suites an address can commit to."""

    ECDSA_SECP256K1 = 0
    ED25519 = 1
    SCHNORR_SECP256K1 = 2


class ScriptType(enum.StrEnum):
    """Known script types."""

    P2PKH = "pubkeyhash"
    P2PKH_ALT = "pubkeyhashalt"
    P2SH = "scripthash"
    P2PK = "pubkey"
    NULL_DATA = "nulldata"
    UNKNOWN = "unknown"


# Default script version carried by every standard output.
DEFAULT_SCRIPT_VERSION = 0

# OP_DUP OP_HASH160 OP_DATA_20 <20 bytes> OP_EQUALVERIFY OP_CHECKSIG
P2PKH_PK_SCRIPT_SIZE = 1 + 1 + 1 + 20 + 1 + 1

# As P2PKH with a signature type push before OP_CHECKSIGALT
P2PKH_ALT_PK_SCRIPT_SIZE = P2PKH_PK_SCRIPT_SIZE + 1

# OP_HASH160 OP_DATA_20 <20 bytes> OP_EQUAL
P2SH_PK_SCRIPT_SIZE = 1 + 1 + 20 + 1


# ---------------------------------------------------------------------------
# Data push helpers
# ---------------------------------------------------------------------------


def push_data(data: bytes) -> bytes:
    """Encode a data push operation using minimal encoding rules."""
    length = len(data)
    if length == 0:
        return bytes([OpCode.OP_0])
    if length <= 0x4B:
        return bytes([length]) + data
    if length <= 0xFF:
        return bytes([OpCode.OP_PUSHDATA1, length]) + data
    if length <= 0xFFFF:
        return bytes([OpCode.OP_PUSHDATA2]) + struct.pack("<H", length) + data
    return bytes([OpCode.OP_PUSHDATA4]) + struct.pack("<I", length) + data


def _require_hash160(digest: bytes, what: str) -> None:
    if len(digest) != 20:
        msg = f"{what} must be 20 bytes, got {len(digest)}"
        raise ValueError(msg)


# ---------------------------------------------------------------------------
# Locking scripts
# ---------------------------------------------------------------------------


def p2pkh_lock_script(pubkey_hash: bytes) -> bytes:
    """Build a secp256k1 ECDSA P2PKH locking script.

    OP_DUP OP_HASH160 <20 bytes> OP_EQUALVERIFY OP_CHECKSIG
    """
    _require_hash160(pubkey_hash, "pubkey_hash")
    return (
        bytes([OpCode.OP_DUP, OpCode.OP_HASH160])
        + push_data(pubkey_hash)
        + bytes([OpCode.OP_EQUALVERIFY, OpCode.OP_CHECKSIG])
    )


def p2pkh_alt_lock_script(pubkey_hash: bytes, sig_type: SignatureType) -> bytes:
    """Build a P2PKH locking script for an alternative signature suite.

    OP_DUP OP_HASH160 <20 bytes> OP_EQUALVERIFY <sig type> OP_CHECKSIGALT

    Raises:
        ValueError: If *sig_type* is ECDSA (use :func:`p2pkh_lock_script`).
    """
    _require_hash160(pubkey_hash, "pubkey_hash")
    if sig_type == SignatureType.ED25519:
        type_op = OpCode.OP_1
    elif sig_type == SignatureType.SCHNORR_SECP256K1:
        type_op = OpCode.OP_2
    else:
        msg = f"signature type {sig_type!r} has no alternative P2PKH form"
        raise ValueError(msg)
    return (
        bytes([OpCode.OP_DUP, OpCode.OP_HASH160])
        + push_data(pubkey_hash)
        + bytes([OpCode.OP_EQUALVERIFY, type_op, OpCode.OP_CHECKSIGALT])
    )


def p2sh_lock_script(script_hash: bytes) -> bytes:
    """Build a P2SH locking script.

    OP_HASH160 <20 bytes> OP_EQUAL
    """
    _require_hash160(script_hash, "script_hash")
    return bytes([OpCode.OP_HASH160]) + push_data(script_hash) + bytes([OpCode.OP_EQUAL])


# ---------------------------------------------------------------------------
# Script type detection
# ---------------------------------------------------------------------------


def detect_script_type(script: bytes) -> ScriptType:
    """Detect the type of a version 0 locking script."""
    if len(script) == 0:
        return ScriptType.UNKNOWN

    if (
        len(script) == P2PKH_PK_SCRIPT_SIZE
        and script[0] == OpCode.OP_DUP
        and script[1] == OpCode.OP_HASH160
        and script[2] == OpCode.OP_DATA_20
        and script[23] == OpCode.OP_EQUALVERIFY
        and script[24] == OpCode.OP_CHECKSIG
    ):
        return ScriptType.P2PKH

    if (
        len(script) == P2PKH_ALT_PK_SCRIPT_SIZE
        and script[0] == OpCode.OP_DUP
        and script[1] == OpCode.OP_HASH160
        and script[2] == OpCode.OP_DATA_20
        and script[23] == OpCode.OP_EQUALVERIFY
        and script[24] in (OpCode.OP_1, OpCode.OP_2)
        and script[25] == OpCode.OP_CHECKSIGALT
    ):
        return ScriptType.P2PKH_ALT

    if (
        len(script) == P2SH_PK_SCRIPT_SIZE
        and script[0] == OpCode.OP_HASH160
        and script[1] == OpCode.OP_DATA_20
        and script[22] == OpCode.OP_EQUAL
    ):
        return ScriptType.P2SH

    if script[0] == OpCode.OP_RETURN:
        return ScriptType.NULL_DATA

    if len(script) == 35 and script[0] == OpCode.OP_DATA_33 and script[34] == OpCode.OP_CHECKSIG:
        return ScriptType.P2PK

    return ScriptType.UNKNOWN
