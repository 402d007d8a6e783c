"""Address encoding — Decred Base58Check addresses.

Decred addresses carry a two-byte network prefix that also identifies
the address type, followed by the hash (or key) they commit to:
- P2PKH for secp256k1 ECDSA, ed25519 and secp256k1 Schnorr keys
- P2SH script hashes
- P2PK public keys (recognised, but no payment script is built for them)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from dcr_wallet.dcr.base58 import base58check_decode, base58check_encode
from dcr_wallet.dcr.params import NetworkParams
from dcr_wallet.dcr.script import (
    SignatureType,
    p2pkh_alt_lock_script,
    p2pkh_lock_script,
    p2sh_lock_script,
)
from dcr_wallet.errors.authoring_errors import InvalidAddressError, UnsupportedAddressTypeError
from dcr_wallet.utils.crypto import hash160

_NET_ID_SIZE = 2
_HASH_SIZE = 20


class AddressType(enum.StrEnum):
    """Address types distinguishable by their network prefix."""

    P2PKH = "p2pkh"
    P2PKH_EDWARDS = "p2pkh-ed25519"
    P2PKH_SCHNORR = "p2pkh-schnorr"
    P2SH = "p2sh"
    P2PK = "p2pk"


@dataclass(frozen=True)
class Address:
    """A decoded address.

    Attributes:
        encoded: The Base58Check string the address was decoded from.
        address_type: Kind of address, from the network prefix.
        payload: Hash (or key material for P2PK) following the prefix.
        network: The network the address belongs to.
    """

    encoded: str
    address_type: AddressType
    payload: bytes
    network: NetworkParams

    def __str__(self) -> str:
        return self.encoded


def _prefix_for(address_type: AddressType, params: NetworkParams) -> bytes:
    return {
        AddressType.P2PKH: params.pubkey_hash_addr_id,
        AddressType.P2PKH_EDWARDS: params.pkh_edwards_addr_id,
        AddressType.P2PKH_SCHNORR: params.pkh_schnorr_addr_id,
        AddressType.P2SH: params.script_hash_addr_id,
        AddressType.P2PK: params.pubkey_addr_id,
    }[address_type]


def _type_for_prefix(prefix: bytes, params: NetworkParams) -> AddressType | None:
    for address_type in AddressType:
        if _prefix_for(address_type, params) == prefix:
            return address_type
    return None


def encode_address(address_type: AddressType, payload: bytes, params: NetworkParams) -> str:
    """Encode a hash (or key) as an address of *address_type* on *params*.

    Raises:
        ValueError: If a hash-based address payload is not 20 bytes.
    """
    if address_type != AddressType.P2PK and len(payload) != _HASH_SIZE:
        msg = f"{address_type} payload must be {_HASH_SIZE} bytes, got {len(payload)}"
        raise ValueError(msg)
    return base58check_encode(_prefix_for(address_type, params) + payload)


def pubkey_hash_address(
    pubkey: bytes,
    params: NetworkParams,
    *,
    sig_type: SignatureType = SignatureType.ECDSA_SECP256K1,
) -> str:
    """Generate a P2PKH address from a serialized public key."""
    address_type = {
        SignatureType.ECDSA_SECP256K1: AddressType.P2PKH,
        SignatureType.ED25519: AddressType.P2PKH_EDWARDS,
        SignatureType.SCHNORR_SECP256K1: AddressType.P2PKH_SCHNORR,
    }[sig_type]
    return encode_address(address_type, hash160(pubkey), params)


def decode_address(address: str, params: NetworkParams) -> Address:
    """Decode an address, requiring it to belong to *params*' network.

    Raises:
        InvalidAddressError: If the string is not a well-formed address for
            the network.
    """
    try:
        payload = base58check_decode(address)
    except ValueError as exc:
        msg = f"invalid address {address!r}: {exc}"
        raise InvalidAddressError(msg) from exc

    prefix, body = payload[:_NET_ID_SIZE], payload[_NET_ID_SIZE:]
    address_type = _type_for_prefix(prefix, params)
    if address_type is None:
        msg = f"address {address!r} is not valid for network {params.name}"
        raise InvalidAddressError(msg)
    if address_type != AddressType.P2PK and len(body) != _HASH_SIZE:
        msg = f"invalid address {address!r}: bad payload length {len(body)}"
        raise InvalidAddressError(msg)
    return Address(encoded=address, address_type=address_type, payload=body, network=params)


def is_address_valid(address: str, params: NetworkParams) -> bool:
    """Check whether *address* decodes for *params*' network."""
    try:
        decode_address(address, params)
    except InvalidAddressError:
        return False
    return True


def pay_to_addr_script(address: Address) -> bytes:
    """Build the locking script that pays to *address*.

    Raises:
        UnsupportedAddressTypeError: If the address type has no payment
            script template.
    """
    if address.address_type == AddressType.P2PKH:
        return p2pkh_lock_script(address.payload)
    if address.address_type == AddressType.P2PKH_EDWARDS:
        return p2pkh_alt_lock_script(address.payload, SignatureType.ED25519)
    if address.address_type == AddressType.P2PKH_SCHNORR:
        return p2pkh_alt_lock_script(address.payload, SignatureType.SCHNORR_SECP256K1)
    if address.address_type == AddressType.P2SH:
        return p2sh_lock_script(address.payload)
    msg = f"unable to generate payment script for unsupported address type {address.address_type}"
    raise UnsupportedAddressTypeError(msg)
