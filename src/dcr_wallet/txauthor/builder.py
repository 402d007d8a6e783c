"""TxAuthor — per-request transaction builder.

Collects send and change destinations and the pre-selected inputs for one
account, then authors, estimates or sizes the transaction on demand.
The authored transaction is cached until the destinations or inputs change,
so estimates and the final construction describe the same transaction and
draw a single change address. Instances hold request state and are not
meant to be shared across tasks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dcr_wallet.dcr.address import decode_address
from dcr_wallet.errors.authoring_errors import AuthoringError, DestinationIndexError
from dcr_wallet.txauthor.author import author_transaction
from dcr_wallet.txauthor.models import TransactionDestination

if TYPE_CHECKING:
    import random
    from collections.abc import Iterable

    from dcr_wallet.dcr.params import NetworkParams
    from dcr_wallet.txauthor.author import ChangeAddressProvider
    from dcr_wallet.txauthor.models import AuthoredTransaction, SelectedInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TxFeeAndSize:
    """Fee and size of the transaction the builder would currently author."""

    fee: int
    estimated_signed_size: int
    change: int


def _check_index(items: list[TransactionDestination], index: int, kind: str) -> None:
    if not 0 <= index < len(items):
        msg = f"no {kind} destination at index {index}"
        raise DestinationIndexError(msg)


class TxAuthor:
    """Build a transaction for one account step by step.

    Example::

        author = TxAuthor(0, TESTNET_PARAMS, wallet)
        author.use_inputs(selected)
        author.add_send_destination("Ts...", 150_000_000)
        authored = await author.construct()
    """

    def __init__(
        self,
        account: int,
        params: NetworkParams,
        change_source: ChangeAddressProvider,
        *,
        relay_fee_per_kb: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._account = account
        self._params = params
        self._change_source = change_source
        self._relay_fee_per_kb = relay_fee_per_kb
        self._rng = rng
        self._destinations: list[TransactionDestination] = []
        self._change_destinations: list[TransactionDestination] = []
        self._inputs: list[SelectedInput] = []
        self._authored: AuthoredTransaction | None = None

    @property
    def account(self) -> int:
        return self._account

    @property
    def params(self) -> NetworkParams:
        return self._params

    @property
    def relay_fee_per_kb(self) -> int:
        """Fee rate in effect, falling back to the network default."""
        if self._relay_fee_per_kb is None:
            return self._params.default_relay_fee_per_kb
        return self._relay_fee_per_kb

    # ------------------------------------------------------------------
    # Send destinations
    # ------------------------------------------------------------------

    def add_send_destination(
        self, address: str, atom_amount: int = 0, *, send_max: bool = False
    ) -> None:
        """Append a payment destination.

        Raises:
            InvalidAddressError: If *address* is not valid for the network.
        """
        decode_address(address, self._params)
        self._destinations.append(TransactionDestination(address, atom_amount, send_max))
        self._authored = None

    def update_send_destination(
        self, index: int, address: str, atom_amount: int = 0, *, send_max: bool = False
    ) -> None:
        """Replace the payment destination at *index*."""
        _check_index(self._destinations, index, "send")
        decode_address(address, self._params)
        self._destinations[index] = TransactionDestination(address, atom_amount, send_max)
        self._authored = None

    def remove_send_destination(self, index: int) -> None:
        _check_index(self._destinations, index, "send")
        del self._destinations[index]
        self._authored = None

    def send_destination(self, index: int) -> TransactionDestination:
        _check_index(self._destinations, index, "send")
        return self._destinations[index]

    def total_send_amount(self) -> int:
        """Sum of all fixed payment amounts (send-max destinations excluded)."""
        return sum(dest.atom_amount for dest in self._destinations if not dest.send_max)

    # ------------------------------------------------------------------
    # Change destinations
    # ------------------------------------------------------------------

    def add_change_destination(self, address: str, atom_amount: int) -> None:
        """Append an explicit change destination with a fixed amount."""
        decode_address(address, self._params)
        self._change_destinations.append(TransactionDestination(address, atom_amount))
        self._authored = None

    def update_change_destination(self, index: int, address: str, atom_amount: int) -> None:
        _check_index(self._change_destinations, index, "change")
        decode_address(address, self._params)
        self._change_destinations[index] = TransactionDestination(address, atom_amount)
        self._authored = None

    def remove_change_destination(self, index: int) -> None:
        _check_index(self._change_destinations, index, "change")
        del self._change_destinations[index]
        self._authored = None

    def change_destination(self, index: int) -> TransactionDestination:
        _check_index(self._change_destinations, index, "change")
        return self._change_destinations[index]

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def use_inputs(self, inputs: Iterable[SelectedInput]) -> None:
        """Set the pre-selected inputs the transaction spends."""
        self._inputs = list(inputs)
        self._authored = None

    # ------------------------------------------------------------------
    # Authoring
    # ------------------------------------------------------------------

    async def construct(self) -> AuthoredTransaction:
        """Author the unsigned transaction from the current state.

        Reuses the previous result while nothing has changed since.

        Raises:
            AuthoringError: If the transaction cannot be authored.
        """
        if self._authored is not None:
            return self._authored

        authored = await author_transaction(
            self._inputs,
            self._destinations,
            self._change_destinations,
            self._account,
            self._params,
            change_source=self._change_source,
            relay_fee_per_kb=self.relay_fee_per_kb,
            rng=self._rng,
        )
        if not authored.has_change:
            logger.debug("No change output for account %d; leftover added to fee", self._account)
        logger.debug(
            "Authored tx for account %d: %d inputs, %d outputs, fee %d, est. size %d",
            self._account,
            len(authored.inputs),
            len(authored.tx.outputs),
            authored.fee,
            authored.estimated_signed_size,
        )
        self._authored = authored
        return authored

    async def estimate_fee_and_size(self) -> TxFeeAndSize:
        """Fee, estimated signed size and change of the current transaction."""
        authored = await self.construct()
        change = sum(authored.tx.outputs[i].value for i in authored.change_indexes)
        return TxFeeAndSize(
            fee=authored.fee,
            estimated_signed_size=authored.estimated_signed_size,
            change=change,
        )

    async def estimate_max_send_amount(self) -> int:
        """Amount the send-max destination would receive.

        Raises:
            AuthoringError: If no destination is set to receive the max amount.
        """
        if not any(dest.send_max for dest in self._destinations):
            msg = "no destination is set to receive the max amount"
            raise AuthoringError(msg, code="no-max-amount-recipient")
        return (await self.estimate_fee_and_size()).change
