"""Transaction authoring — change allocation, fee and dust resolution.

``author_transaction`` turns pre-selected inputs and payment destinations
into an unsigned transaction:
1. Parse payment destinations (at most one send-max recipient)
2. Decide where change goes (send-max recipient, explicit change
   destinations, or a fresh internal address)
3. Estimate the signed size assuming a change output and compute the fee
4. Drop dust change, or materialize change outputs at random positions
"""

from __future__ import annotations

import dataclasses
import random
from typing import TYPE_CHECKING, Protocol

from dcr_wallet.dcr.amount import format_amount
from dcr_wallet.dcr.transaction import TX_VERSION, MsgTx, TxOutput
from dcr_wallet.errors.authoring_errors import (
    ChangeAddressGenerationFailedError,
    ChangeAllocationExceedsAvailableError,
    ConflictingChangeSpecificationError,
    InsufficientFundsError,
    ScriptTooLargeError,
)
from dcr_wallet.txauthor.destinations import make_tx_output, parse_outputs, validate_amount
from dcr_wallet.txauthor.models import AuthoredTransaction, TransactionDestination
from dcr_wallet.txauthor.rules import fee_for_serialize_size, is_dust_amount
from dcr_wallet.txauthor.sizes import (
    change_script_size,
    estimate_serialize_size,
    multiple_change_script_size,
    sig_script_size,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dcr_wallet.dcr.params import NetworkParams
    from dcr_wallet.txauthor.models import SelectedInput


class ChangeAddressProvider(Protocol):
    """Source of fresh internal addresses for change."""

    async def next_change_address(self, account: int) -> str:
        """Return a new, unused change address of *account*."""
        ...


def randomize_output_position(outputs: list[TxOutput], index: int, rng: random.Random) -> int:
    """Swap ``outputs[index]`` with a uniformly chosen position.

    Returns:
        The new position of the output.
    """
    r = rng.randrange(len(outputs))
    outputs[r], outputs[index] = outputs[index], outputs[r]
    return r


async def _resolve_change_address(
    change_source: ChangeAddressProvider, account: int
) -> str:
    try:
        return await change_source.next_change_address(account)
    except Exception as exc:
        msg = f"error generating internal address to use as change: {exc}"
        raise ChangeAddressGenerationFailedError(msg) from exc


async def author_transaction(
    inputs: Sequence[SelectedInput],
    send_destinations: Sequence[TransactionDestination],
    change_destinations: Sequence[TransactionDestination],
    account: int,
    params: NetworkParams,
    *,
    change_source: ChangeAddressProvider,
    relay_fee_per_kb: int | None = None,
    rng: random.Random | None = None,
) -> AuthoredTransaction:
    """Author an unsigned transaction spending *inputs*.

    Args:
        inputs: Pre-selected inputs; spent in the given order.
        send_destinations: Payment destinations, at most one marked send-max.
        change_destinations: Explicit change destinations with fixed amounts.
            Must be empty when a send-max destination is present.
        account: Account a fresh change address is drawn from when neither
            a send-max nor explicit change destinations are given.
        params: Network parameters.
        change_source: Provider of fresh change addresses.
        relay_fee_per_kb: Fee rate in atoms/kB; network default when None.
        rng: Randomness for change output positions; system randomness
            when None.

    Returns:
        The authored transaction.

    Raises:
        AuthoringError: On any validation, funding or change failure.
    """
    rate = params.default_relay_fee_per_kb if relay_fee_per_kb is None else relay_fee_per_kb
    rng = rng if rng is not None else random.SystemRandom()

    parsed = parse_outputs(send_destinations, params)
    outputs = list(parsed.outputs)
    # Single recipient of all change: the send-max address or a fresh one
    change_address = parsed.max_amount_address

    if change_address is not None and change_destinations:
        raise ConflictingChangeSpecificationError

    if change_address is None and not change_destinations:
        change_address = await _resolve_change_address(change_source, account)

    total_input = sum(inp.value_in for inp in inputs)
    input_script_sizes = [sig_script_size(inp.script_class) for inp in inputs]

    if change_address is not None:
        total_change_script_size = change_script_size(change_address, params)
    else:
        total_change_script_size = multiple_change_script_size(change_destinations, params)

    max_signed_size = estimate_serialize_size(
        input_script_sizes, outputs, total_change_script_size
    )
    required_fee = fee_for_serialize_size(rate, max_signed_size, max_amount=params.max_amount)
    change_amount = total_input - parsed.total_send - required_fee

    if change_amount < 0:
        shortfall = -change_amount
        msg = (
            "total send amount plus tx fee is higher than the total input amount by "
            f"{format_amount(shortfall)}"
        )
        raise InsufficientFundsError(msg, shortfall=shortfall)

    change_outputs: list[TxOutput] = []
    if change_amount == 0 or is_dust_amount(
        change_amount, total_change_script_size, rate, factor=params.dust_threshold_factor
    ):
        # Dust change is left to the fee; size the transaction without it
        max_signed_size = estimate_serialize_size(input_script_sizes, outputs, 0)
        required_fee = fee_for_serialize_size(rate, max_signed_size, max_amount=params.max_amount)
    else:
        if change_address is not None:
            allocations = [TransactionDestination(change_address, change_amount)]
        else:
            allocations = list(change_destinations)

        total_change_amount = 0
        for allocation in allocations:
            validate_amount(allocation.atom_amount, params)
            change_output = make_tx_output(allocation.address, allocation.atom_amount, params)
            if len(change_output.script) > params.max_script_element_size:
                raise ScriptTooLargeError
            total_change_amount += change_output.value
            outputs.append(change_output)
            change_outputs.append(change_output)
            randomize_output_position(outputs, len(outputs) - 1, rng)

        if total_change_amount > change_amount:
            msg = (
                f"total amount allocated to change addresses ({format_amount(total_change_amount)})"
                f" is higher than actual change amount for transaction"
                f" ({format_amount(change_amount)})"
            )
            raise ChangeAllocationExceedsAvailableError(msg)

    change_indexes = tuple(
        i for i, out in enumerate(outputs) if any(out is change for change in change_outputs)
    )
    tx = MsgTx(
        version=TX_VERSION,
        inputs=[dataclasses.replace(inp.tx_in) for inp in inputs],
        outputs=outputs,
        lock_time=0,
        expiry=0,
    )
    return AuthoredTransaction(
        tx=tx,
        inputs=tuple(inputs),
        total_input=total_input,
        estimated_signed_size=max_signed_size,
        required_fee=required_fee,
        change_indexes=change_indexes,
    )
