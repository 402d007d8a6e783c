"""Fee and dust policy.

Relay fee scaling and the dust rule that decides whether leftover value is
worth an output of its own.
"""

from __future__ import annotations

from dcr_wallet.dcr.params import DUST_THRESHOLD_FACTOR, MAX_AMOUNT
from dcr_wallet.dcr.transaction import varint_serialize_size

# Average size of an input redeeming a compressed P2PKH output
_AVERAGE_P2PKH_REDEEM_INPUT_SIZE = 165


def fee_for_serialize_size(
    relay_fee_per_kb: int, tx_serialize_size: int, *, max_amount: int = MAX_AMOUNT
) -> int:
    """Minimum fee for a transaction of *tx_serialize_size* bytes.

    The rate is in atoms per kilobyte. A non-zero rate always charges at
    least the rate itself, and the fee never exceeds *max_amount*.
    """
    fee = relay_fee_per_kb * tx_serialize_size // 1000
    if fee == 0 and relay_fee_per_kb > 0:
        fee = relay_fee_per_kb
    if fee < 0 or fee > max_amount:
        fee = max_amount
    return fee


def is_dust_amount(
    amount: int,
    script_size: int,
    relay_fee_per_kb: int,
    *,
    factor: int = DUST_THRESHOLD_FACTOR,
) -> bool:
    """Check whether an output of *amount* with a *script_size* script is dust.

    The cost of an output is its own serialized size plus the average size
    of the input that later redeems it. The output is dust when that cost at
    the relay fee rate exceeds ``1 / factor`` of its value.
    """
    total_size = (
        8 + 2 + varint_serialize_size(script_size) + script_size + _AVERAGE_P2PKH_REDEEM_INPUT_SIZE
    )
    return amount * 1000 // (factor * total_size) < relay_fee_per_kb
