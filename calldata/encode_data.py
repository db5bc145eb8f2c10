"""Encode calldata for the token mint, initializer and proxy deployment.

Prints hex-encoded calldata for `mint(address,uint256)` per token wallet, the
`initialize(address,address[3])` payload, and the proxy constructor arguments
that embed it. Nothing is signed or sent; paste the output into a multisig or
deployment tool.
"""

from __future__ import annotations

import argparse
import os
import sys
import traceback
from typing import Any, Dict, List, Sequence, Tuple

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

import calldata.config as config
from calldata.abi import (
    AbiType,
    AddressType,
    BytesType,
    FixedArrayType,
    Signature,
    UintType,
    encode,
    encode_hex,
    signature_from_abi,
    to_hex,
)
from calldata.errors import ArityMismatch, CalldataError, InvalidAmount, UnsupportedType
from calldata.units import checksum_address, parse_units

console = Console()

COMMANDS = ("mint", "initialize", "proxy", "all", "custom")


def parse_args(argv: list[str] | None = None, env: Dict[str, str] | os._Environ[str] = os.environ) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Encode calldata for token minting, initialization and proxy deployment.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="mint",
        choices=COMMANDS,
        help="What to encode (default: mint).",
    )
    parser.add_argument(
        "--amount",
        default=env.get(config.ENV_AMOUNT, config.DEFAULT_MINT_AMOUNT),
        help=f"Tokens minted per wallet, in whole tokens (default: {config.DEFAULT_MINT_AMOUNT} or ${config.ENV_AMOUNT})",
    )
    parser.add_argument(
        "--decimals",
        type=int,
        default=env.get(config.ENV_DECIMALS, str(config.DEFAULT_DECIMALS)),
        help=f"Token decimals used to scale --amount (default: {config.DEFAULT_DECIMALS} or ${config.ENV_DECIMALS})",
    )
    parser.add_argument(
        "--wallets",
        default=env.get(config.ENV_WALLETS, ",".join(config.TOKEN_WALLETS)),
        help=f"Comma-separated token wallet addresses (or set ${config.ENV_WALLETS}).",
    )
    parser.add_argument(
        "--owner",
        default=env.get(config.ENV_OWNER, config.OWNER_ADDRESS),
        help=f"Owner passed to initialize (or set ${config.ENV_OWNER}).",
    )
    parser.add_argument(
        "--implementation",
        default=env.get(config.ENV_IMPLEMENTATION, config.IMPLEMENTATION_ADDRESS),
        help=f"Token implementation behind the proxy (or set ${config.ENV_IMPLEMENTATION}).",
    )
    parser.add_argument(
        "--admin",
        default=env.get(config.ENV_ADMIN, config.ADMIN_ADDRESS),
        help=f"Proxy admin owner (or set ${config.ENV_ADMIN}).",
    )
    parser.add_argument(
        "--signature",
        help="Signature for the custom command, e.g. 'transfer(address,uint256)'.",
    )
    parser.add_argument(
        "--arg",
        dest="values",
        action="append",
        default=[],
        help="Argument for the custom command, repeat per parameter. Arrays are comma-separated.",
    )
    parser.add_argument(
        "--no-strict",
        dest="strict",
        action="store_false",
        help="Accept mixed-case addresses that fail the EIP-55 checksum.",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print only the hex strings, one per line.",
    )
    args = parser.parse_args(argv)

    if args.command == "custom" and not args.signature:
        parser.error("The custom command requires --signature.")
    if args.command != "custom" and (args.signature or args.values):
        parser.error("--signature and --arg are only valid with the custom command.")
    if not (0 <= args.decimals <= config.MAX_DECIMALS):
        parser.error(f"--decimals must be between 0 and {config.MAX_DECIMALS}.")

    return args


def split_addresses(text: str, strict: bool = True) -> Tuple[str, ...]:
    return tuple(checksum_address(part.strip(), strict=strict) for part in text.split(",") if part.strip())


def build_mint_calls(wallets: Sequence[str], amount: int) -> List[Tuple[str, str]]:
    signature = signature_from_abi(config.MINT_ABI, "mint")
    return [(f"Token Wallet {i}", encode_hex(signature, [wallet, amount])) for i, wallet in enumerate(wallets, start=1)]


def build_initialize_call(owner: str, wallets: Sequence[str]) -> bytes:
    signature = signature_from_abi(config.INITIALIZE_ABI, "initialize")
    return encode(signature, [owner, list(wallets)])


def build_proxy_constructor_args(implementation: str, admin: str, init_data: bytes) -> bytes:
    signature = signature_from_abi(config.PROXY_CONSTRUCTOR_ABI)
    return encode(signature, [implementation, admin, init_data])


def parse_argument(abi_type: AbiType, text: str, strict: bool = True) -> Any:
    """Turn a command-line literal into a value for ``abi_type``."""
    text = text.strip()
    if isinstance(abi_type, AddressType):
        return checksum_address(text, strict=strict)
    if isinstance(abi_type, UintType):
        try:
            return int(text, 16) if text[:2].lower() == "0x" else int(text)
        except ValueError:
            raise InvalidAmount(f"Not an integer: {text!r}") from None
    if isinstance(abi_type, FixedArrayType):
        if isinstance(abi_type.element, FixedArrayType):
            raise UnsupportedType(f"Nested arrays cannot be passed on the command line: {abi_type.canonical}")
        return [parse_argument(abi_type.element, part, strict) for part in text.split(",")]
    if isinstance(abi_type, BytesType):
        return text
    raise UnsupportedType(f"Unsupported ABI type: {abi_type!r}")


def build_custom_call(signature_text: str, values: Sequence[str], strict: bool = True) -> str:
    signature = Signature.parse(signature_text)
    if len(values) != len(signature.params):
        raise ArityMismatch(
            f"{signature_text} takes {len(signature.params)} arguments, got {len(values)}",
            {"expected": len(signature.params), "actual": len(values)},
        )
    parsed = [parse_argument(param.type, text, strict) for param, text in zip(signature.params, values)]
    return encode_hex(signature, parsed)


def collect_outputs(args: argparse.Namespace) -> List[Tuple[str, str]]:
    if args.command == "custom":
        return [("Calldata", build_custom_call(args.signature, args.values, args.strict))]

    outputs: List[Tuple[str, str]] = []
    wallets = split_addresses(args.wallets, args.strict)

    if args.command in ("mint", "all"):
        amount = parse_units(args.amount, args.decimals)
        outputs.extend(build_mint_calls(wallets, amount))

    if args.command in ("initialize", "proxy", "all"):
        owner = checksum_address(args.owner, strict=args.strict)
        init_data = build_initialize_call(owner, wallets)
        if args.command in ("initialize", "all"):
            outputs.append(("Initialize", to_hex(init_data)))
        if args.command in ("proxy", "all"):
            implementation = checksum_address(args.implementation, strict=args.strict)
            admin = checksum_address(args.admin, strict=args.strict)
            outputs.append(("Proxy constructor args", to_hex(build_proxy_constructor_args(implementation, admin, init_data))))

    return outputs


def log_outputs(args: argparse.Namespace, outputs: Sequence[Tuple[str, str]]) -> None:
    if args.raw:
        for _label, value in outputs:
            console.print(value, soft_wrap=True, highlight=False)
        return

    console.print(f"[bold green]=== Encoded Calldata ({args.command}) ===[/bold green]")
    if args.command in ("mint", "all"):
        console.print(f"Mint amount: {escape(args.amount)} tokens x 10^{args.decimals}", highlight=False)
    if args.command == "custom":
        console.print(f"Signature: {escape(args.signature)}", highlight=False)
    console.print()
    for label, value in outputs:
        console.print(f"{label}: {value}", soft_wrap=True, highlight=False)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)

    try:
        outputs = collect_outputs(args)
    except CalldataError as exc:
        console.print(f"[red]Encoding failed:[/red] {escape(exc.message)}", soft_wrap=True)
        sys.exit(1)

    log_outputs(args, outputs)


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        # Allow argparse and explicit sys.exit to propagate.
        raise
    except Exception:
        console.print("[red]Unexpected error occurred[/red]")
        console.print(traceback.format_exc())
        sys.exit(1)
