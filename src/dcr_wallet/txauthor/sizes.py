"""Signed transaction size estimation.

Worst-case serialized sizes used to compute the relay fee before a
transaction is signed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dcr_wallet.dcr.address import decode_address, pay_to_addr_script
from dcr_wallet.dcr.transaction import varint_serialize_size
from dcr_wallet.txauthor.models import SigScriptClass

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from dcr_wallet.dcr.params import NetworkParams
    from dcr_wallet.dcr.transaction import TxOutput
    from dcr_wallet.txauthor.models import TransactionDestination

# OP_DATA_73 <72 byte DER signature + sighash byte> OP_DATA_33 <33 byte compressed pubkey>
REDEEM_P2PKH_SIG_SCRIPT_SIZE = 1 + 73 + 1 + 33

# OP_DATA_73 <72 byte DER signature + sighash byte>
REDEEM_P2PK_SIG_SCRIPT_SIZE = 1 + 73

# OP_DATA_73 <signature> OP_DATA_35 OP_DATA_33 <pubkey> OP_CHECKSIG
REDEEM_P2SH_SIG_SCRIPT_SIZE = 1 + 73 + 1 + 1 + 33 + 1

_SIG_SCRIPT_SIZES = {
    SigScriptClass.P2PKH: REDEEM_P2PKH_SIG_SCRIPT_SIZE,
    SigScriptClass.P2PK: REDEEM_P2PK_SIG_SCRIPT_SIZE,
    SigScriptClass.P2SH: REDEEM_P2SH_SIG_SCRIPT_SIZE,
}

# version (4) + lock time (4) + expiry (4)
_TX_ENVELOPE_SIZE = 12


def sig_script_size(script_class: SigScriptClass) -> int:
    """Worst-case signature script size for an input of *script_class*."""
    return _SIG_SCRIPT_SIZES[script_class]


def estimate_input_size(script_size: int) -> int:
    """Worst-case serialized size of one input.

    32 bytes previous tx, 4 bytes output index, 1 byte tree, 8 bytes amount,
    4 bytes block height, 4 bytes block index, the varint script length,
    the script, and 4 bytes sequence.
    """
    return 32 + 4 + 1 + 8 + 4 + 4 + varint_serialize_size(script_size) + script_size + 4


def estimate_output_size(script_size: int) -> int:
    """Serialized size of one output: amount, script version, varint length, script."""
    return 8 + 2 + varint_serialize_size(script_size) + script_size


def sum_output_serialize_sizes(outputs: Iterable[TxOutput]) -> int:
    return sum(out.serialize_size() for out in outputs)


def estimate_serialize_size(
    input_script_sizes: Sequence[int],
    outputs: Sequence[TxOutput],
    change_script_size: int = 0,
) -> int:
    """Worst-case serialized size of a signed transaction.

    Args:
        input_script_sizes: Signature script size of each input.
        outputs: Outputs already known.
        change_script_size: Script size of one extra change output slot;
            ``0`` adds no change slot.

    Returns:
        The estimated size in bytes.
    """
    inputs_size = sum(estimate_input_size(size) for size in input_script_sizes)
    output_count = len(outputs)
    change_size = 0
    if change_script_size > 0:
        change_size = estimate_output_size(change_script_size)
        output_count += 1

    # The input count is written in both the prefix and the witness
    return (
        _TX_ENVELOPE_SIZE
        + 2 * varint_serialize_size(len(input_script_sizes))
        + varint_serialize_size(output_count)
        + inputs_size
        + sum_output_serialize_sizes(outputs)
        + change_size
    )


def change_script_size(address: str, params: NetworkParams) -> int:
    """Length of the locking script paying to *address*.

    Raises:
        InvalidAddressError: If the address does not decode for the network.
        UnsupportedAddressTypeError: If the address has no script template.
    """
    return len(pay_to_addr_script(decode_address(address, params)))


def multiple_change_script_size(
    destinations: Iterable[TransactionDestination], params: NetworkParams
) -> int:
    """Sum of the change script sizes of several change destinations."""
    return sum(change_script_size(dest.address, params) for dest in destinations)
