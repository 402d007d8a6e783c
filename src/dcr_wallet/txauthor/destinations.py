"""Destination parsing — payment outputs and the send-max recipient."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dcr_wallet.dcr.address import decode_address, pay_to_addr_script
from dcr_wallet.dcr.script import DEFAULT_SCRIPT_VERSION
from dcr_wallet.dcr.transaction import TxOutput
from dcr_wallet.errors.authoring_errors import (
    InvalidAmountError,
    MultipleMaxAmountRecipientsError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dcr_wallet.dcr.params import NetworkParams
    from dcr_wallet.txauthor.models import TransactionDestination


@dataclass(frozen=True)
class ParsedOutputs:
    """Result of :func:`parse_outputs`.

    Attributes:
        outputs: One output per non-max destination, in request order.
        total_send: Sum of those outputs' values.
        max_amount_address: Address of the send-max destination, or None.
    """

    outputs: list[TxOutput]
    total_send: int
    max_amount_address: str | None = None


def validate_amount(amount: int, params: NetworkParams) -> None:
    """Require ``0 < amount <= params.max_amount``.

    Raises:
        InvalidAmountError: If the amount is out of range.
    """
    if amount <= 0 or amount > params.max_amount:
        msg = f"invalid amount {amount}"
        raise InvalidAmountError(msg)


def make_tx_output(address: str, amount: int, params: NetworkParams) -> TxOutput:
    """Build an output paying *amount* atoms to *address*."""
    script = pay_to_addr_script(decode_address(address, params))
    return TxOutput(value=amount, script=script, version=DEFAULT_SCRIPT_VERSION)


def parse_outputs(
    destinations: Iterable[TransactionDestination], params: NetworkParams
) -> ParsedOutputs:
    """Build payment outputs from *destinations*.

    A send-max destination produces no output; its address is returned as
    the recipient of whatever is left over.

    Raises:
        InvalidAmountError: If a non-max amount is out of range.
        MultipleMaxAmountRecipientsError: If more than one destination is
            set to receive the max amount.
        InvalidAddressError: If an address does not decode for the network.
        UnsupportedAddressTypeError: If an address has no script template.
    """
    outputs: list[TxOutput] = []
    total_send = 0
    max_amount_address: str | None = None

    for destination in destinations:
        if not destination.send_max:
            validate_amount(destination.atom_amount, params)

        if destination.send_max:
            if max_amount_address is not None:
                raise MultipleMaxAmountRecipientsError
            max_amount_address = destination.address
            continue

        output = make_tx_output(destination.address, destination.atom_amount, params)
        total_send += output.value
        outputs.append(output)

    if max_amount_address is not None:
        decode_address(max_amount_address, params)

    return ParsedOutputs(
        outputs=outputs, total_send=total_send, max_amount_address=max_amount_address
    )
