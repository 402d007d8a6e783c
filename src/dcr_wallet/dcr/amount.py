"""Atom amount formatting."""

from __future__ import annotations

from decimal import Decimal

from dcr_wallet.dcr.params import ATOMS_PER_COIN


def atoms_to_coin(atoms: int) -> Decimal:
    """Convert an integer atom amount to a coin-denominated Decimal."""
    return Decimal(atoms) / Decimal(ATOMS_PER_COIN)


def format_amount(atoms: int) -> str:
    """Format an atom amount the way the wallet reports it, e.g. ``1.5 DCR``."""
    coins = atoms_to_coin(atoms).normalize()
    # normalize() turns whole amounts into exponent form (1E+1)
    text = format(coins, "f")
    return f"{text} DCR"
