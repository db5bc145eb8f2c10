"""Caller-facing argument handling: token amounts and checksummed addresses."""

from __future__ import annotations

import re
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Union

from web3 import Web3

import calldata.config as config
from calldata.errors import InvalidAddress, InvalidAmount

_ADDRESS = re.compile(r"0x[0-9a-fA-F]{40}")


def parse_units(amount: Union[str, int, Decimal], decimals: int = config.DEFAULT_DECIMALS) -> int:
    """Convert a human-readable amount ("2000000000", "1.5") to integer units.

    Uses exact decimal arithmetic; floats are rejected outright since
    ``2e9 * 10**18`` is not representable in a double.
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= config.MAX_DECIMALS:
        raise InvalidAmount(f"decimals must be an int between 0 and {config.MAX_DECIMALS}, got {decimals!r}")
    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidAmount(f"Amount must be a decimal string, int or Decimal, got {type(amount).__name__}")

    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, int):
        value = Decimal(amount)
    elif isinstance(amount, str):
        try:
            value = Decimal(amount.strip().replace("_", ""))
        except InvalidOperation:
            raise InvalidAmount(f"Not a decimal amount: {amount!r}") from None
    else:
        raise InvalidAmount(f"Unsupported amount type: {type(amount).__name__}")

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative, got {amount!r}")

    with localcontext() as ctx:
        ctx.prec = 200
        ctx.traps[Inexact] = True
        try:
            scaled = value.scaleb(decimals)
        except Inexact:
            raise InvalidAmount(f"Amount {amount!r} is too large to scale exactly") from None
    if scaled != scaled.to_integral_value():
        raise InvalidAmount(f"Amount {amount!r} has more than {decimals} fractional digits")
    return int(scaled)


def format_units(value: int, decimals: int = config.DEFAULT_DECIMALS) -> str:
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative, got {value}")
    whole, fraction = divmod(value, 10**decimals)
    if not fraction:
        return str(whole)
    return f"{whole}.{str(fraction).rjust(decimals, '0').rstrip('0')}"


def checksum_address(address: str, strict: bool = True) -> str:
    """Validate ``address`` and return its EIP-55 checksummed form.

    All-lowercase and all-uppercase input carries no checksum and is accepted.
    Mixed-case input must match the checksum unless ``strict`` is off.
    """
    if not isinstance(address, str) or not _ADDRESS.fullmatch(address):
        raise InvalidAddress(f"Invalid address: {address!r}", {"value": address})
    body = address[2:]
    mixed_case = body != body.lower() and body != body.upper()
    if strict and mixed_case and not Web3.is_checksum_address(address):
        raise InvalidAddress(f"Address fails checksum: {address}", {"value": address})
    return Web3.to_checksum_address(address)
