"""Shared test fixtures for the dcr-wallet test suite."""

from __future__ import annotations

import pytest

from dcr_wallet.dcr.address import AddressType, encode_address
from dcr_wallet.dcr.params import TESTNET_PARAMS, NetworkParams
from dcr_wallet.dcr.transaction import OutPoint, TxInput
from dcr_wallet.txauthor.models import SelectedInput, SigScriptClass


class FakeChangeSource:
    """Change provider handing out pre-made addresses and recording calls."""

    def __init__(self, addresses: list[str], *, error: BaseException | None = None) -> None:
        self._addresses = list(addresses)
        self._error = error
        self.calls: list[int] = []

    async def next_change_address(self, account: int) -> str:
        self.calls.append(account)
        if self._error is not None:
            raise self._error
        return self._addresses.pop(0)


def make_address(
    seed: int,
    address_type: AddressType = AddressType.P2PKH,
    params: NetworkParams = TESTNET_PARAMS,
) -> str:
    """Deterministic address whose hash is *seed* repeated 20 times."""
    return encode_address(address_type, bytes([seed]) * 20, params)


def make_input(
    value: int,
    index: int = 0,
    script_class: SigScriptClass = SigScriptClass.P2PKH,
) -> SelectedInput:
    """Selected input with a placeholder outpoint."""
    outpoint = OutPoint(hash=bytes([index + 1]) * 32, index=index)
    return SelectedInput(TxInput(previous_outpoint=outpoint, value_in=value), script_class)


@pytest.fixture
def params() -> NetworkParams:
    """Testnet parameters (default relay fee 1e4 atoms/kB)."""
    return TESTNET_PARAMS


@pytest.fixture
def change_address() -> str:
    return make_address(0xCC)


@pytest.fixture
def change_source(change_address: str) -> FakeChangeSource:
    return FakeChangeSource([change_address] * 4)


@pytest.fixture
def make_addr():
    """Factory fixture for deterministic testnet addresses."""
    return make_address


@pytest.fixture
def make_utxo():
    """Factory fixture for selected inputs."""
    return make_input


@pytest.fixture
def failing_change_source() -> FakeChangeSource:
    return FakeChangeSource([], error=ConnectionError("wallet database unavailable"))


@pytest.fixture
def make_change_source():
    """Factory fixture building a change provider from a list of addresses."""
    return FakeChangeSource
