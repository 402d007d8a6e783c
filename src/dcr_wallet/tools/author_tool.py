#!/usr/bin/env python3
"""Decred Transaction Author Tool — validate addresses, author transactions.

A standalone CLI utility around the authoring engine. The network and fee
rate come from ``AppConfig`` (``DCRWALLET_*`` env vars or ``--config``):

    # Check an address against the configured network
    python -m dcr_wallet.tools.author_tool validate <address>

    # Author a transaction spending two inputs, paying one address and
    # returning change to another
    python -m dcr_wallet.tools.author_tool author \\
        --input 100000000 --input 25000000 \\
        --to TsXXXX:50000000 --change TsYYYY

    # Send everything (minus fee) to one address
    python -m dcr_wallet.tools.author_tool author --input 100000000 --to TsXXXX:max
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dcr_wallet.config.settings import AppConfig
from dcr_wallet.dcr.address import decode_address
from dcr_wallet.dcr.amount import format_amount
from dcr_wallet.dcr.script import detect_script_type
from dcr_wallet.dcr.transaction import OutPoint, TxInput
from dcr_wallet.errors.wallet_errors import WalletError
from dcr_wallet.txauthor.builder import TxAuthor
from dcr_wallet.txauthor.models import SelectedInput

logger = logging.getLogger(__name__)


class _StaticChangeSource:
    """Change provider returning the address given on the command line."""

    def __init__(self, address: str | None) -> None:
        self._address = address

    async def next_change_address(self, account: int) -> str:
        if not self._address:
            msg = "no change address given; pass --change"
            raise ValueError(msg)
        return self._address


def _parse_destination(spec: str) -> tuple[str, int, bool]:
    """Split ``ADDRESS:AMOUNT`` or ``ADDRESS:max``."""
    address, sep, amount = spec.rpartition(":")
    if not sep or not address:
        msg = f"destination must be ADDRESS:AMOUNT or ADDRESS:max, got {spec!r}"
        raise argparse.ArgumentTypeError(msg)
    if amount.lower() == "max":
        return address, 0, True
    try:
        return address, int(amount), False
    except ValueError:
        msg = f"invalid amount in destination {spec!r}"
        raise argparse.ArgumentTypeError(msg) from None


def _load_config(path: str | None) -> AppConfig:
    return AppConfig.from_yaml(path) if path else AppConfig()


def _cmd_validate(address: str, config: AppConfig) -> int:
    try:
        decoded = decode_address(address, config.chain_params())
    except WalletError as exc:
        print(f"invalid: {exc.message}")
        return 1
    print(f"valid {decoded.address_type} address on {config.network}")
    return 0


def _synthetic_inputs(values: list[int]) -> list[SelectedInput]:
    """Inputs with placeholder outpoints; only their values matter for authoring."""
    return [
        SelectedInput(TxInput(previous_outpoint=OutPoint(hash=b"\x00" * 32, index=i), value_in=v))
        for i, v in enumerate(values)
    ]


async def _author(args: argparse.Namespace, config: AppConfig) -> int:
    fee_rate = args.fee_rate if args.fee_rate is not None else config.relay_fee_per_kb()
    author = TxAuthor(
        args.account,
        config.chain_params(),
        _StaticChangeSource(args.change),
        relay_fee_per_kb=fee_rate,
    )
    author.use_inputs(_synthetic_inputs(args.input))
    try:
        for address, amount, send_max in args.to:
            author.add_send_destination(address, amount, send_max=send_max)
        authored = await author.construct()
    except WalletError as exc:
        logger.debug("Authoring failed", exc_info=True)
        print(f"error ({exc.code}): {exc.message}")
        return 1

    print(f"Network:        {config.network}")
    print(f"Fee rate:       {fee_rate} atoms/kB")
    total = authored.total_input
    print(f"Total input:    {total:>16,} atoms  ({format_amount(total)})")
    print("Outputs:")
    for i, out in enumerate(authored.tx.outputs):
        marker = " (change)" if i in authored.change_indexes else ""
        script_type = detect_script_type(out.script)
        print(f"  [{i}] {out.value:>16,} atoms  {script_type} {out.script.hex()}{marker}")
    print(f"Fee:            {authored.fee:>16,} atoms  ({format_amount(authored.fee)})")
    print(f"Est. size:      {authored.estimated_signed_size} bytes")
    print(f"Unsigned tx:    {authored.tx.to_hex()}")
    return 0


def _build_author_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="author_tool author")
    parser.add_argument(
        "--input", type=int, action="append", required=True, help="input value (atoms)"
    )
    parser.add_argument("--to", type=_parse_destination, action="append", required=True)
    parser.add_argument("--change", default=None, help="change address")
    parser.add_argument("--fee-rate", type=int, default=None, help="atoms per kB")
    parser.add_argument("--account", type=int, default=0)
    parser.add_argument("--config", default=None, help="YAML config file")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(__doc__)
        return 1

    cmd, rest = argv[0].lower(), argv[1:]

    if cmd == "validate":
        if not rest:
            print("Usage: author_tool validate <address> [config.yaml]")
            return 1
        config = _load_config(rest[1] if len(rest) > 1 else None)
        logging.basicConfig(level=config.effective_log_level)
        return _cmd_validate(rest[0], config)
    if cmd == "author":
        args = _build_author_parser().parse_args(rest)
        config = _load_config(args.config)
        logging.basicConfig(level=config.effective_log_level)
        return asyncio.run(_author(args, config))

    print(f"Unknown command: {cmd}")
    print(__doc__)
    return 1


if __name__ == "__main__":
    sys.exit(main())
