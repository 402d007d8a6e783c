"""Authoring data models.

Data classes passed into and returned from the authoring engine.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from dcr_wallet.dcr.transaction import MsgTx, TxInput


class SigScriptClass(enum.StrEnum):
    """Signature script shape an input will be redeemed with once signed."""

    P2PKH = "p2pkh"
    P2PK = "p2pk"
    P2SH = "p2sh"


@dataclass(frozen=True)
class TransactionDestination:
    """A requested payment (or change) destination.

    When ``send_max`` is set the destination receives everything left over
    after the other payments and the fee; ``atom_amount`` is ignored.
    """

    address: str
    atom_amount: int = 0
    send_max: bool = False


@dataclass(frozen=True)
class SelectedInput:
    """A previously chosen unspent output to be spent.

    Attributes:
        tx_in: The input as it will be serialized (unsigned).
        script_class: Signature script class used to estimate its signed size.
    """

    tx_in: TxInput
    script_class: SigScriptClass = SigScriptClass.P2PKH

    @property
    def value_in(self) -> int:
        return self.tx_in.value_in


@dataclass(frozen=True)
class AuthoredTransaction:
    """An unsigned transaction produced by one authoring call.

    ``tx`` is left for the caller to sign; the engine never touches it after
    returning.

    Attributes:
        tx: The unsigned transaction.
        inputs: The inputs it spends, in the supplied order.
        total_input: Sum of all input values.
        estimated_signed_size: Worst-case serialized size once signed.
        required_fee: Minimum relay fee for ``estimated_signed_size``.
        change_indexes: Output positions that pay change.
    """

    tx: MsgTx
    inputs: tuple[SelectedInput, ...]
    total_input: int
    estimated_signed_size: int
    required_fee: int
    change_indexes: tuple[int, ...] = ()

    @property
    def total_output(self) -> int:
        return sum(out.value for out in self.tx.outputs)

    @property
    def fee(self) -> int:
        """Actual fee paid: everything not sent to an output."""
        return self.total_input - self.total_output

    @property
    def has_change(self) -> bool:
        return bool(self.change_indexes)
