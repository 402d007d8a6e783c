"""Tests for the transaction author — txauthor/author.py."""

from __future__ import annotations

import dataclasses
import random

import pytest

from dcr_wallet.dcr.address import AddressType
from dcr_wallet.dcr.transaction import TxOutput
from dcr_wallet.errors.authoring_errors import (
    ChangeAddressGenerationFailedError,
    ChangeAllocationExceedsAvailableError,
    ConflictingChangeSpecificationError,
    InsufficientFundsError,
    InvalidAddressError,
    InvalidAmountError,
    MultipleMaxAmountRecipientsError,
    ScriptTooLargeError,
)
from dcr_wallet.txauthor.author import author_transaction, randomize_output_position
from dcr_wallet.txauthor.models import SigScriptClass, TransactionDestination

COIN = 100_000_000

# 1 P2PKH input (166 bytes) + P2PKH outputs (36 bytes each) + 15 bytes envelope
SIZE_1_IN_1_OUT = 217
SIZE_1_IN_2_OUT = 253


class TestScenarios:
    """End-to-end authoring at the default testnet fee rate."""

    @pytest.mark.asyncio
    async def test_payment_with_change(
        self, params, change_source, change_address, make_addr, make_utxo
    ) -> None:
        dest = make_addr(1)
        authored = await author_transaction(
            [make_utxo(COIN)],
            [TransactionDestination(dest, 50_000_000)],
            [],
            0,
            params,
            change_source=change_source,
            rng=random.Random(1),
        )

        assert authored.estimated_signed_size == SIZE_1_IN_2_OUT
        assert authored.required_fee == 2530
        assert authored.fee == 2530
        assert len(authored.tx.outputs) == 2
        values = sorted(out.value for out in authored.tx.outputs)
        assert values == [49_997_470, 50_000_000]
        assert change_source.calls == [0]

        (change_index,) = authored.change_indexes
        assert authored.tx.outputs[change_index].value == 49_997_470

    @pytest.mark.asyncio
    async def test_send_max(self, params, change_source, make_addr, make_utxo) -> None:
        authored = await author_transaction(
            [make_utxo(COIN)],
            [TransactionDestination(make_addr(1), send_max=True)],
            [],
            0,
            params,
            change_source=change_source,
        )

        assert len(authored.tx.outputs) == 1
        assert authored.estimated_signed_size == SIZE_1_IN_1_OUT
        assert authored.tx.outputs[0].value == COIN - 2170
        assert authored.fee == 2170
        # The send-max recipient takes the change; no fresh address is needed
        assert change_source.calls == []

    @pytest.mark.asyncio
    async def test_dust_change_donated_to_fee(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(1_000)],
            [TransactionDestination(make_addr(1), 900)],
            [],
            0,
            params,
            change_source=change_source,
            relay_fee_per_kb=200,
        )

        assert [out.value for out in authored.tx.outputs] == [900]
        assert not authored.has_change
        assert authored.fee == 100
        assert authored.estimated_signed_size == SIZE_1_IN_1_OUT
        assert authored.required_fee == 43

    @pytest.mark.asyncio
    async def test_zero_amount_rejected(self, params, change_source, make_addr, make_utxo) -> None:
        with pytest.raises(InvalidAmountError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 0)],
                [],
                0,
                params,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_two_send_max_rejected(self, params, change_source, make_addr, make_utxo) -> None:
        with pytest.raises(MultipleMaxAmountRecipientsError):
            await author_transaction(
                [make_utxo(COIN)],
                [
                    TransactionDestination(make_addr(1), send_max=True),
                    TransactionDestination(make_addr(2), send_max=True),
                ],
                [],
                0,
                params,
                change_source=change_source,
            )


    @pytest.mark.asyncio
    async def test_send_max_empty_address_rejected(
        self, params, change_source, make_utxo
    ) -> None:
        with pytest.raises(InvalidAddressError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination("", send_max=True)],
                [],
                0,
                params,
                change_source=change_source,
            )
        assert change_source.calls == []


class TestInsufficientFunds:
    @pytest.mark.asyncio
    async def test_fee_exceeds_input(self, params, change_source, make_addr, make_utxo) -> None:
        with pytest.raises(InsufficientFundsError) as exc_info:
            await author_transaction(
                [make_utxo(1_000)],
                [TransactionDestination(make_addr(1), 900)],
                [],
                0,
                params,
                change_source=change_source,
            )
        assert exc_info.value.shortfall == 2430
        assert exc_info.value.code == "insufficient-funds"
        assert "0.0000243 DCR" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_send_exceeds_input(self, params, change_source, make_addr, make_utxo) -> None:
        with pytest.raises(InsufficientFundsError) as exc_info:
            await author_transaction(
                [make_utxo(COIN), make_utxo(COIN, index=1)],
                [TransactionDestination(make_addr(1), 3 * COIN)],
                [],
                0,
                params,
                change_source=change_source,
            )
        assert exc_info.value.shortfall > COIN

    @pytest.mark.asyncio
    async def test_exact_funding_has_no_change(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(50_000_000 + 2530)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [],
            0,
            params,
            change_source=change_source,
        )
        assert len(authored.tx.outputs) == 1
        assert authored.fee == 2530
        assert authored.estimated_signed_size == SIZE_1_IN_1_OUT

    @pytest.mark.asyncio
    async def test_no_inputs(self, params, change_source, make_addr) -> None:
        with pytest.raises(InsufficientFundsError):
            await author_transaction(
                [],
                [TransactionDestination(make_addr(1), 1_000)],
                [],
                0,
                params,
                change_source=change_source,
            )


class TestDustResolution:
    """Change just either side of the dust threshold (6030 atoms at 1e4 atoms/kB)."""

    @pytest.mark.asyncio
    async def test_change_below_threshold_dropped(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        total_input = 50_000_000 + 2530 + 6029
        authored = await author_transaction(
            [make_utxo(total_input)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [],
            0,
            params,
            change_source=change_source,
        )
        assert [out.value for out in authored.tx.outputs] == [50_000_000]
        assert authored.fee == total_input - 50_000_000
        assert authored.required_fee == 2170
        assert authored.fee >= authored.required_fee

    @pytest.mark.asyncio
    async def test_change_at_threshold_kept(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(50_000_000 + 2530 + 6030)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [],
            0,
            params,
            change_source=change_source,
        )
        assert sorted(out.value for out in authored.tx.outputs) == [6030, 50_000_000]
        assert authored.fee == 2530

    @pytest.mark.asyncio
    async def test_send_max_dust_leaves_no_outputs(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(5_000)],
            [TransactionDestination(make_addr(1), send_max=True)],
            [],
            0,
            params,
            change_source=change_source,
        )
        assert authored.tx.outputs == []
        assert authored.fee == 5_000


class TestConservation:
    @pytest.mark.parametrize("seed", range(5))
    @pytest.mark.asyncio
    async def test_inputs_equal_outputs_plus_fee(
        self, seed, params, change_source, make_addr, make_utxo
    ) -> None:
        rng = random.Random(seed)
        inputs = [make_utxo(rng.randrange(30_000_000, 90_000_000), index=i) for i in range(3)]
        destinations = [
            TransactionDestination(make_addr(i + 1), rng.randrange(1_000_000, 20_000_000))
            for i in range(3)
        ]

        authored = await author_transaction(
            inputs, destinations, [], 0, params, change_source=change_source, rng=rng
        )

        assert authored.total_input == sum(inp.value_in for inp in inputs)
        assert authored.total_output + authored.fee == authored.total_input
        assert authored.fee == authored.required_fee
        assert all(out.value > 0 for out in authored.tx.outputs)

    @pytest.mark.asyncio
    async def test_inputs_preserved_in_order(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        inputs = [make_utxo(COIN, index=i) for i in range(4)]
        authored = await author_transaction(
            inputs,
            [TransactionDestination(make_addr(1), COIN)],
            [],
            0,
            params,
            change_source=change_source,
        )
        assert authored.inputs == tuple(inputs)
        assert [inp.previous_outpoint for inp in authored.tx.inputs] == [
            inp.tx_in.previous_outpoint for inp in inputs
        ]

    @pytest.mark.asyncio
    async def test_input_script_class_affects_size(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(COIN, script_class=SigScriptClass.P2PK)],
            [TransactionDestination(make_addr(1), send_max=True)],
            [],
            0,
            params,
            change_source=change_source,
        )
        # 74-byte signature script instead of 108
        assert authored.estimated_signed_size == SIZE_1_IN_1_OUT - 34

    @pytest.mark.asyncio
    async def test_estimate_matches_signed_serialization(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(COIN), make_utxo(COIN, index=1)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [],
            0,
            params,
            change_source=change_source,
        )
        tx = authored.tx
        for tx_in in tx.inputs:
            tx_in.signature_script = b"\x00" * 108
        assert tx.serialize_size() == authored.estimated_signed_size


class TestChangeSpecification:
    @pytest.mark.asyncio
    async def test_send_max_with_change_rejected(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        with pytest.raises(ConflictingChangeSpecificationError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), send_max=True)],
                [TransactionDestination(make_addr(2), 1_000_000)],
                0,
                params,
                change_source=change_source,
            )
        assert change_source.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure_wrapped(
        self, params, failing_change_source, make_addr, make_utxo
    ) -> None:
        with pytest.raises(
            ChangeAddressGenerationFailedError, match="wallet database unavailable"
        ) as exc_info:
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 1_000_000)],
                [],
                7,
                params,
                change_source=failing_change_source,
            )
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert failing_change_source.calls == [7]

    @pytest.mark.asyncio
    async def test_invalid_change_address_from_provider(
        self, params, make_change_source, make_addr, make_utxo
    ) -> None:
        change_source = make_change_source(["0OIl"])
        with pytest.raises(InvalidAddressError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 1_000_000)],
                [],
                0,
                params,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_explicit_change_destinations(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        change_a, change_b = make_addr(0xA0), make_addr(0xB0)
        authored = await author_transaction(
            [make_utxo(COIN)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [
                TransactionDestination(change_a, 10_000_000),
                TransactionDestination(change_b, 20_000_000),
            ],
            0,
            params,
            change_source=change_source,
            rng=random.Random(3),
        )

        assert change_source.calls == []
        assert len(authored.tx.outputs) == 3
        assert len(authored.change_indexes) == 2
        change_values = sorted(authored.tx.outputs[i].value for i in authored.change_indexes)
        assert change_values == [10_000_000, 20_000_000]
        # One change slot sized for both change scripts (25 + 25 bytes)
        assert authored.estimated_signed_size == 278
        assert authored.required_fee == 2780
        # Unallocated leftover goes to the fee
        assert authored.fee == COIN - 80_000_000

    @pytest.mark.asyncio
    async def test_explicit_change_over_allocated(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        with pytest.raises(ChangeAllocationExceedsAvailableError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 50_000_000)],
                [
                    TransactionDestination(make_addr(0xA0), 40_000_000),
                    TransactionDestination(make_addr(0xB0), 9_997_221),
                ],
                0,
                params,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_explicit_change_exactly_allocated(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        authored = await author_transaction(
            [make_utxo(COIN)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [
                TransactionDestination(make_addr(0xA0), 40_000_000),
                TransactionDestination(make_addr(0xB0), 9_997_220),
            ],
            0,
            params,
            change_source=change_source,
        )
        assert authored.fee == authored.required_fee == 2780

    @pytest.mark.asyncio
    async def test_explicit_change_zero_amount(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        with pytest.raises(InvalidAmountError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 50_000_000)],
                [TransactionDestination(make_addr(0xA0), 0)],
                0,
                params,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_explicit_change_invalid_address(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        with pytest.raises(InvalidAddressError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 50_000_000)],
                [TransactionDestination("0OIl", 1_000_000)],
                0,
                params,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_change_script_too_large(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        tight = dataclasses.replace(params, max_script_element_size=24)
        with pytest.raises(ScriptTooLargeError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1, params=tight), 50_000_000)],
                [],
                0,
                tight,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_explicit_change_script_too_large(
        self, params, change_source, make_addr, make_utxo
    ) -> None:
        tight = dataclasses.replace(params, max_script_element_size=24)
        with pytest.raises(ScriptTooLargeError):
            await author_transaction(
                [make_utxo(COIN)],
                [TransactionDestination(make_addr(1), 50_000_000)],
                [
                    TransactionDestination(make_addr(0xA0, AddressType.P2SH), 10_000_000),
                    TransactionDestination(make_addr(0xB0), 10_000_000),
                ],
                0,
                tight,
                change_source=change_source,
            )

    @pytest.mark.asyncio
    async def test_p2sh_change_fits_tight_limit(
        self, params, make_change_source, make_addr, make_utxo
    ) -> None:
        tight = dataclasses.replace(params, max_script_element_size=24)
        change_source = make_change_source([make_addr(0xCC, AddressType.P2SH)])
        authored = await author_transaction(
            [make_utxo(COIN)],
            [TransactionDestination(make_addr(1), 50_000_000)],
            [],
            0,
            tight,
            change_source=change_source,
        )
        # 23-byte P2SH change script: 2 bytes smaller than a P2PKH slot
        assert authored.estimated_signed_size == SIZE_1_IN_2_OUT - 2
        assert authored.fee == 2510


class TestRandomizedPosition:
    async def _change_index(self, seed, params, change_source, make_addr, make_utxo) -> int:
        authored = await author_transaction(
            [make_utxo(COIN)],
            [TransactionDestination(make_addr(i + 1), 1_000_000) for i in range(3)],
            [],
            0,
            params,
            change_source=change_source,
            rng=random.Random(seed),
        )
        (change_index,) = authored.change_indexes
        assert authored.tx.outputs[change_index].value == COIN - 3_000_000 - authored.fee
        return change_index

    @pytest.mark.asyncio
    async def test_position_varies_across_calls(
        self, params, make_change_source, change_address, make_addr, make_utxo
    ) -> None:
        change_source = make_change_source([change_address] * 20)
        positions = {
            await self._change_index(seed, params, change_source, make_addr, make_utxo)
            for seed in range(20)
        }
        assert len(positions) > 1

    @pytest.mark.asyncio
    async def test_same_seed_same_position(
        self, params, make_change_source, change_address, make_addr, make_utxo
    ) -> None:
        change_source = make_change_source([change_address] * 2)
        first = await self._change_index(42, params, change_source, make_addr, make_utxo)
        second = await self._change_index(42, params, change_source, make_addr, make_utxo)
        assert first == second

    def test_randomize_output_position_swaps(self) -> None:
        outputs = [TxOutput(value=v, script=b"") for v in (1, 2, 3, 4)]
        new_index = randomize_output_position(outputs, 3, random.Random(0))
        assert outputs[new_index].value == 4
        assert sorted(out.value for out in outputs) == [1, 2, 3, 4]

    def test_randomize_single_output(self) -> None:
        outputs = [TxOutput(value=5, script=b"")]
        assert randomize_output_position(outputs, 0, random.Random(9)) == 0
