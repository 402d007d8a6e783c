"""Network parameters for the Decred networks.

Address prefixes and policy constants mirror the Decred reference
chain configuration. Parameters are injected wherever they are needed;
nothing in the package reads a global "active network".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

# Atoms per coin and the hard ceiling on any single amount.
ATOMS_PER_COIN = 100_000_000
MAX_AMOUNT = 21_000_000 * ATOMS_PER_COIN

# Default minimum relay fee policy, atoms per kilobyte.
DEFAULT_RELAY_FEE_PER_KB = 10_000

# Max bytes pushable to the stack.
MAX_SCRIPT_ELEMENT_SIZE = 2048

# An output is dust when the cost to spend it is more than 1/3 of its value.
DUST_THRESHOLD_FACTOR = 3


class Network(enum.StrEnum):
    """Supported Decred networks."""

    MAINNET = "mainnet"
    TESTNET = "testnet"
    SIMNET = "simnet"


@dataclass(frozen=True)
class NetworkParams:
    """Address encoding rules and policy constants for one network.

    Attributes:
        name: Network name.
        pubkey_addr_id: Prefix of pay-to-pubkey addresses.
        pubkey_hash_addr_id: Prefix of secp256k1 ECDSA pay-to-pubkey-hash addresses.
        pkh_edwards_addr_id: Prefix of ed25519 pay-to-pubkey-hash addresses.
        pkh_schnorr_addr_id: Prefix of secp256k1 Schnorr pay-to-pubkey-hash addresses.
        script_hash_addr_id: Prefix of pay-to-script-hash addresses.
        max_amount: Largest amount, in atoms, a single output may carry.
        default_relay_fee_per_kb: Fee rate used when the caller gives none.
        dust_threshold_factor: Spend-cost multiple above which an output is dust.
        max_script_element_size: Max bytes pushable to the stack.
    """

    name: Network
    pubkey_addr_id: bytes
    pubkey_hash_addr_id: bytes
    pkh_edwards_addr_id: bytes
    pkh_schnorr_addr_id: bytes
    script_hash_addr_id: bytes
    max_amount: int = MAX_AMOUNT
    default_relay_fee_per_kb: int = DEFAULT_RELAY_FEE_PER_KB
    dust_threshold_factor: int = DUST_THRESHOLD_FACTOR
    max_script_element_size: int = MAX_SCRIPT_ELEMENT_SIZE


MAINNET_PARAMS = NetworkParams(
    name=Network.MAINNET,
    pubkey_addr_id=b"\x13\x86",  # Dk
    pubkey_hash_addr_id=b"\x07\x3f",  # Ds
    pkh_edwards_addr_id=b"\x07\x1f",  # De
    pkh_schnorr_addr_id=b"\x07\x01",  # DS
    script_hash_addr_id=b"\x07\x1a",  # Dc
)

TESTNET_PARAMS = NetworkParams(
    name=Network.TESTNET,
    pubkey_addr_id=b"\x28\xf7",  # Tk
    pubkey_hash_addr_id=b"\x0f\x21",  # Ts
    pkh_edwards_addr_id=b"\x0f\x01",  # Te
    pkh_schnorr_addr_id=b"\x0e\xe3",  # TS
    script_hash_addr_id=b"\x0e\xfc",  # Tc
)

SIMNET_PARAMS = NetworkParams(
    name=Network.SIMNET,
    pubkey_addr_id=b"\x27\x6f",  # Sk
    pubkey_hash_addr_id=b"\x0e\x91",  # Ss
    pkh_edwards_addr_id=b"\x0e\x71",  # Se
    pkh_schnorr_addr_id=b"\x0e\x53",  # SS
    script_hash_addr_id=b"\x0e\x6c",  # Sc
)

_PARAMS_BY_NETWORK = {
    Network.MAINNET: MAINNET_PARAMS,
    Network.TESTNET: TESTNET_PARAMS,
    Network.SIMNET: SIMNET_PARAMS,
}


def params_for(network: Network | str) -> NetworkParams:
    """Return the parameters of a network by enum value or name.

    Raises:
        ValueError: If the network name is unknown.
    """
    return _PARAMS_BY_NETWORK[Network(network)]
