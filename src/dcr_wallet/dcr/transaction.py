"""Transaction serialisation — Decred wire format.

Provides pure-Python Decred transaction serialization:
- VarInt encoding/decoding
- OutPoint / TxInput / TxOutput data classes
- MsgTx with prefix + witness serialization, size and hash computation
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from io import BytesIO

from dcr_wallet.utils.crypto import blake256

# ---------------------------------------------------------------------------
# VarInt encoding / decoding
# ---------------------------------------------------------------------------


def encode_varint(n: int) -> bytes:
    """Encode an integer as a variable-length integer."""
    if n < 0xFD:
        return struct.pack("<B", n)
    if n <= 0xFFFF:
        return b"\xfd" + struct.pack("<H", n)
    if n <= 0xFFFFFFFF:
        return b"\xfe" + struct.pack("<I", n)
    return b"\xff" + struct.pack("<Q", n)


def varint_serialize_size(n: int) -> int:
    """Number of bytes :func:`encode_varint` uses for *n*."""
    if n < 0xFD:
        return 1
    if n <= 0xFFFF:
        return 3
    if n <= 0xFFFFFFFF:
        return 5
    return 9


def read_varint(stream: BytesIO) -> int:
    """Read a variable-length integer from a byte stream."""
    first = stream.read(1)
    if len(first) == 0:
        msg = "Unexpected end of stream reading varint"
        raise ValueError(msg)
    n = first[0]
    if n < 0xFD:
        return n
    if n == 0xFD:
        return struct.unpack("<H", _read_exact(stream, 2))[0]
    if n == 0xFE:
        return struct.unpack("<I", _read_exact(stream, 4))[0]
    return struct.unpack("<Q", _read_exact(stream, 8))[0]


def _read_exact(stream: BytesIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        msg = f"Unexpected end of stream: wanted {size} bytes, got {len(data)}"
        raise ValueError(msg)
    return data


def _read_var_bytes(stream: BytesIO) -> bytes:
    return _read_exact(stream, read_varint(stream))


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TX_VERSION = 1

# Transaction trees
TX_TREE_REGULAR = 0
TX_TREE_STAKE = 1

# Default sequence: 0xFFFFFFFF
MAX_TX_IN_SEQUENCE_NUM = 0xFFFFFFFF

# Witness placeholders for inputs whose block location is not yet known
NULL_BLOCK_HEIGHT = 0x00000000
NULL_BLOCK_INDEX = 0xFFFFFFFF


class SerializeType(int, enum.Enum):
    """Which halves of a transaction a serialization carries."""

    FULL = 0
    NO_WITNESS = 1
    ONLY_WITNESS = 2


# ---------------------------------------------------------------------------
# OutPoint / TxInput
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutPoint:
    """Reference to a previous transaction output.

    Attributes:
        hash: 32-byte hash of the previous transaction (internal byte order).
        index: Index of the output in the previous transaction.
        tree: Transaction tree the previous transaction lives in.
    """

    hash: bytes
    index: int
    tree: int = TX_TREE_REGULAR

    @property
    def hash_hex(self) -> str:
        """Previous transaction hash in display (reversed) hex."""
        return self.hash[::-1].hex()

    def __str__(self) -> str:
        return f"{self.hash_hex}:{self.index}"


@dataclass
class TxInput:
    """A transaction input.

    The prefix half holds the outpoint and sequence; the witness half
    holds the input amount, block location and signature script.
    """

    previous_outpoint: OutPoint
    value_in: int
    sequence: int = MAX_TX_IN_SEQUENCE_NUM
    block_height: int = NULL_BLOCK_HEIGHT
    block_index: int = NULL_BLOCK_INDEX
    signature_script: bytes = b""

    def serialize_prefix(self) -> bytes:
        op = self.previous_outpoint
        return (
            op.hash
            + struct.pack("<I", op.index)
            + struct.pack("<b", op.tree)
            + struct.pack("<I", self.sequence)
        )

    def serialize_witness(self) -> bytes:
        return (
            struct.pack("<q", self.value_in)
            + struct.pack("<I", self.block_height)
            + struct.pack("<I", self.block_index)
            + encode_varint(len(self.signature_script))
            + self.signature_script
        )


# ---------------------------------------------------------------------------
# TxOutput
# ---------------------------------------------------------------------------


@dataclass
class TxOutput:
    """A transaction output.

    Attributes:
        value: Output value in atoms.
        script: Locking script.
        version: Script version.
    """

    value: int
    script: bytes
    version: int = 0

    def serialize(self) -> bytes:
        """Serialize the output to bytes."""
        return (
            struct.pack("<q", self.value)
            + struct.pack("<H", self.version)
            + encode_varint(len(self.script))
            + self.script
        )

    def serialize_size(self) -> int:
        """Value 8 bytes + version 2 bytes + varint script length + script."""
        return 8 + 2 + varint_serialize_size(len(self.script)) + len(self.script)

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxOutput:
        """Deserialize a transaction output from a byte stream."""
        value = struct.unpack("<q", _read_exact(stream, 8))[0]
        version = struct.unpack("<H", _read_exact(stream, 2))[0]
        script = _read_var_bytes(stream)
        return cls(value=value, script=script, version=version)


# ---------------------------------------------------------------------------
# MsgTx
# ---------------------------------------------------------------------------


@dataclass
class MsgTx:
    """A Decred transaction.

    Attributes:
        version: Transaction version.
        inputs: Transaction inputs.
        outputs: Transaction outputs.
        lock_time: Lock time.
        expiry: Block height after which the transaction cannot be mined.
        ser_type: Serialization type used by :meth:`serialize`.
    """

    version: int = TX_VERSION
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    lock_time: int = 0
    expiry: int = 0
    ser_type: SerializeType = SerializeType.FULL

    def _encode_version(self, ser_type: SerializeType) -> bytes:
        return struct.pack("<I", (self.version & 0xFFFF) | (int(ser_type) << 16))

    def _prefix(self) -> bytes:
        result = encode_varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize_prefix()
        result += encode_varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()
        result += struct.pack("<I", self.lock_time)
        result += struct.pack("<I", self.expiry)
        return result

    def _witness(self) -> bytes:
        result = encode_varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize_witness()
        return result

    def serialize(self) -> bytes:
        """Serialize the transaction according to :attr:`ser_type`."""
        result = self._encode_version(self.ser_type)
        if self.ser_type in (SerializeType.FULL, SerializeType.NO_WITNESS):
            result += self._prefix()
        if self.ser_type in (SerializeType.FULL, SerializeType.ONLY_WITNESS):
            result += self._witness()
        return result

    def to_hex(self) -> str:
        """Serialize to hex string."""
        return self.serialize().hex()

    def serialize_size(self) -> int:
        """Size in bytes of the full (prefix + witness) serialization."""
        return len(self._encode_version(SerializeType.FULL) + self._prefix() + self._witness())

    def tx_hash(self) -> str:
        """Transaction hash: BLAKE-256 of the prefix serialization, display hex."""
        prefix = self._encode_version(SerializeType.NO_WITNESS) + self._prefix()
        return blake256(prefix)[::-1].hex()

    @classmethod
    def from_bytes(cls, data: bytes) -> MsgTx:
        """Deserialize a fully serialized (prefix + witness) transaction."""
        stream = BytesIO(data)
        raw_version = struct.unpack("<I", _read_exact(stream, 4))[0]
        ser_type = SerializeType(raw_version >> 16)
        if ser_type != SerializeType.FULL:
            msg = f"Unsupported serialization type {ser_type.name}"
            raise ValueError(msg)

        outpoints: list[tuple[OutPoint, int]] = []
        for _ in range(read_varint(stream)):
            tx_hash = _read_exact(stream, 32)
            index, tree, sequence = struct.unpack("<IbI", _read_exact(stream, 9))
            outpoints.append((OutPoint(hash=tx_hash, index=index, tree=tree), sequence))
        outputs = [TxOutput.deserialize(stream) for _ in range(read_varint(stream))]
        lock_time, expiry = struct.unpack("<II", _read_exact(stream, 8))

        if read_varint(stream) != len(outpoints):
            msg = "Mismatched prefix and witness input counts"
            raise ValueError(msg)
        inputs = []
        for outpoint, sequence in outpoints:
            value_in, block_height, block_index = struct.unpack("<qII", _read_exact(stream, 16))
            inputs.append(
                TxInput(
                    previous_outpoint=outpoint,
                    value_in=value_in,
                    sequence=sequence,
                    block_height=block_height,
                    block_index=block_index,
                    signature_script=_read_var_bytes(stream),
                )
            )
        return cls(
            version=raw_version & 0xFFFF,
            inputs=inputs,
            outputs=outputs,
            lock_time=lock_time,
            expiry=expiry,
        )

    @classmethod
    def from_hex(cls, hex_str: str) -> MsgTx:
        """Deserialize a transaction from a hex string."""
        return cls.from_bytes(bytes.fromhex(hex_str))
