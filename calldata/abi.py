"""Contract ABI encoding for the static types, fixed arrays and `bytes` used by the scripts.

Calldata is `selector + head + tail`: static values take their 32-byte words
in the head in declaration order, a dynamic `bytes` value takes one head word
holding the offset of its tail entry (length word, payload, zero padding).
Constructors have no selector. Hashing and checksum casing come from web3.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

from web3 import Web3

from calldata.errors import (
    ArityMismatch,
    ArrayLengthMismatch,
    DecodingError,
    EncodingError,
    IntegerOverflow,
    InvalidAddress,
    UnsupportedType,
)

WORD = 32
ADDRESS_SIZE = 20
SELECTOR_SIZE = 4

_HEX_ADDRESS = re.compile(r"(?:0[xX])?[0-9a-fA-F]{40}")
_HEX_DATA = re.compile(r"(?:0[xX])?(?:[0-9a-fA-F]{2})*")
_ARRAY_TYPE = re.compile(r"(.+)\[([1-9][0-9]*)\]")
_UINT_TYPE = re.compile(r"uint([1-9][0-9]*)?")
_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_SIGNATURE = re.compile(r"\s*(?:function\s+)?([A-Za-z_$][A-Za-z0-9_$]*)?\s*\((.*)\)\s*")


def _uint_word(value: int) -> bytes:
    return value.to_bytes(WORD, "big")


def _read_word(data: bytes, offset: int) -> bytes:
    if offset < 0 or offset + WORD > len(data):
        raise DecodingError(
            f"Calldata too short: need a word at offset {offset}, have {len(data)} bytes",
            {"offset": offset, "size": len(data)},
        )
    return data[offset : offset + WORD]


def _hex_bytes(value: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str) or not _HEX_DATA.fullmatch(value):
        raise EncodingError(f"Expected bytes or an even-length hex string, got {value!r}")
    return bytes.fromhex(value[2:] if value[:2].lower() == "0x" else value)


@dataclass(frozen=True)
class AddressType:
    is_dynamic = False
    head_size = WORD

    @property
    def canonical(self) -> str:
        return "address"

    def encode(self, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            raw = bytes(value)
            if len(raw) != ADDRESS_SIZE:
                raise InvalidAddress(f"Address must be {ADDRESS_SIZE} bytes, got {len(raw)}", {"value": value})
        elif isinstance(value, str) and _HEX_ADDRESS.fullmatch(value):
            raw = bytes.fromhex(value[-2 * ADDRESS_SIZE :])
        else:
            raise InvalidAddress(f"Address must be 20 bytes of hex, got {value!r}", {"value": value})
        return raw.rjust(WORD, b"\x00")

    def decode(self, data: bytes, offset: int) -> str:
        word = _read_word(data, offset)
        if any(word[: WORD - ADDRESS_SIZE]):
            raise DecodingError(f"Dirty address padding at offset {offset}", {"offset": offset})
        return Web3.to_checksum_address("0x" + word[WORD - ADDRESS_SIZE :].hex())


@dataclass(frozen=True)
class UintType:
    bits: int = 256

    is_dynamic = False
    head_size = WORD

    @property
    def canonical(self) -> str:
        return f"uint{self.bits}"

    def encode(self, value: Any) -> bytes:
        # bool is an int subclass; floats lose precision past 2**53
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodingError(f"{self.canonical} expects an int, got {type(value).__name__}", {"value": value})
        if value < 0 or value.bit_length() > self.bits:
            raise IntegerOverflow(f"{value} does not fit in {self.canonical}", {"value": value, "bits": self.bits})
        return _uint_word(value)

    def decode(self, data: bytes, offset: int) -> int:
        value = int.from_bytes(_read_word(data, offset), "big")
        if value.bit_length() > self.bits:
            raise DecodingError(f"Value at offset {offset} exceeds {self.canonical}", {"offset": offset})
        return value


@dataclass(frozen=True)
class FixedArrayType:
    element: "AbiType"
    length: int

    is_dynamic = False

    @property
    def canonical(self) -> str:
        return f"{self.element.canonical}[{self.length}]"

    @property
    def head_size(self) -> int:
        return self.element.head_size * self.length

    def encode(self, value: Any) -> bytes:
        if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
            raise EncodingError(f"{self.canonical} expects a list or tuple, got {type(value).__name__}")
        if len(value) != self.length:
            raise ArrayLengthMismatch(
                f"{self.canonical} expects {self.length} elements, got {len(value)}",
                {"expected": self.length, "actual": len(value)},
            )
        return b"".join(self.element.encode(item) for item in value)

    def decode(self, data: bytes, offset: int) -> tuple:
        step = self.element.head_size
        return tuple(self.element.decode(data, offset + i * step) for i in range(self.length))


@dataclass(frozen=True)
class BytesType:
    is_dynamic = True
    head_size = WORD

    @property
    def canonical(self) -> str:
        return "bytes"

    def encode(self, value: Any) -> bytes:
        payload = _hex_bytes(value)
        padding = b"\x00" * (-len(payload) % WORD)
        return _uint_word(len(payload)) + payload + padding

    def decode(self, data: bytes, offset: int) -> bytes:
        size = int.from_bytes(_read_word(data, offset), "big")
        start = offset + WORD
        if start + size > len(data):
            raise DecodingError(
                f"bytes payload of {size} bytes at offset {offset} runs past the end of calldata",
                {"offset": offset, "length": size},
            )
        return data[start : start + size]


AbiType = Union[AddressType, UintType, FixedArrayType, BytesType]


def parse_type(text: str) -> AbiType:
    """Parse an ABI type string such as ``address``, ``uint256`` or ``address[3]``."""
    text = text.strip()
    match = _ARRAY_TYPE.fullmatch(text)
    if match:
        element = parse_type(match.group(1))
        length = int(match.group(2))
        if element.is_dynamic:
            raise UnsupportedType(f"Fixed arrays of dynamic types are not supported: {text}")
        return FixedArrayType(element, length)
    if text == "address":
        return AddressType()
    if text == "bytes":
        return BytesType()
    match = _UINT_TYPE.fullmatch(text)
    if match:
        bits = int(match.group(1) or 256)
        if bits % 8 or bits > 256:
            raise UnsupportedType(f"Invalid integer width: {text}")
        return UintType(bits)
    raise UnsupportedType(f"Unsupported ABI type: {text!r}", {"type": text})


@dataclass(frozen=True)
class Param:
    type: AbiType
    name: str = ""


@dataclass(frozen=True)
class Signature:
    """A function (``name`` set) or constructor (``name`` is None) parameter list."""

    params: Tuple[Param, ...]
    name: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Signature":
        """Parse ``mint(address,uint256)``, ``function mint(address to, uint256 amount)``,
        ``constructor(address,address,bytes)`` or a bare ``(address,address,bytes)``."""
        match = _SIGNATURE.fullmatch(text)
        if not match:
            raise EncodingError(f"Malformed signature: {text!r}")
        name = match.group(1)
        if name == "constructor":
            name = None
        body = match.group(2).strip()
        params = []
        if body:
            for part in body.split(","):
                pieces = part.split()
                if not pieces or len(pieces) > 2:
                    raise EncodingError(f"Malformed parameter {part!r} in {text!r}")
                param_name = pieces[1] if len(pieces) == 2 else ""
                if param_name and not _IDENTIFIER.fullmatch(param_name):
                    raise EncodingError(f"Invalid parameter name {param_name!r} in {text!r}")
                params.append(Param(parse_type(pieces[0]), param_name))
        return cls(tuple(params), name)

    @classmethod
    def from_abi(cls, entry: Mapping[str, Any]) -> "Signature":
        kind = entry.get("type", "function")
        if kind == "constructor":
            name = None
        elif kind == "function":
            name = entry["name"]
        else:
            raise UnsupportedType(f"ABI entry of type {kind!r} has no calldata")
        params = tuple(Param(parse_type(item["type"]), item.get("name", "")) for item in entry.get("inputs", []))
        return cls(params, name)

    @property
    def types(self) -> Tuple[AbiType, ...]:
        return tuple(param.type for param in self.params)

    @property
    def is_constructor(self) -> bool:
        return self.name is None

    @property
    def canonical(self) -> Optional[str]:
        if self.is_constructor:
            return None
        return f"{self.name}({','.join(t.canonical for t in self.types)})"

    @property
    def selector(self) -> Optional[bytes]:
        if self.is_constructor:
            return None
        return function_selector(self.canonical)


def signature_from_abi(abi: Iterable[Mapping[str, Any]], name: Optional[str] = None) -> Signature:
    """Pick the function called ``name`` (or the constructor when ``name`` is None) out of a JSON ABI."""
    if name is None:
        matches = [entry for entry in abi if entry.get("type") == "constructor"]
    else:
        matches = [entry for entry in abi if entry.get("type", "function") == "function" and entry.get("name") == name]
    if not matches:
        raise UnsupportedType(f"No {'constructor' if name is None else name!r} entry in ABI")
    if len(matches) > 1:
        raise UnsupportedType(f"{name!r} is overloaded; build the Signature explicitly")
    return Signature.from_abi(matches[0])


def function_selector(canonical: str) -> bytes:
    return bytes(Web3.keccak(text=canonical)[:SELECTOR_SIZE])


def _as_signature(signature: Union[Signature, str]) -> Signature:
    if isinstance(signature, Signature):
        return signature
    return Signature.parse(signature)


def encode_arguments(types: Sequence[AbiType], args: Sequence[Any]) -> bytes:
    """Head/tail encode ``args`` against ``types``; no selector."""
    types = tuple(types)
    if isinstance(args, (str, bytes, bytearray)):
        raise EncodingError("Arguments must be a list or tuple of values")
    args = tuple(args)
    if len(args) != len(types):
        raise ArityMismatch(
            f"Expected {len(types)} arguments, got {len(args)}",
            {"expected": len(types), "actual": len(args)},
        )

    head_size = sum(abi_type.head_size for abi_type in types)
    head = []
    tail = []
    tail_size = 0
    for index, (abi_type, value) in enumerate(zip(types, args)):
        try:
            encoded = abi_type.encode(value)
        except EncodingError as exc:
            exc.details.setdefault("argument", index)
            raise
        if abi_type.is_dynamic:
            head.append(_uint_word(head_size + tail_size))
            tail.append(encoded)
            tail_size += len(encoded)
        else:
            head.append(encoded)
    return b"".join(head) + b"".join(tail)


def encode(signature: Union[Signature, str], args: Sequence[Any]) -> bytes:
    sig = _as_signature(signature)
    return (sig.selector or b"") + encode_arguments(sig.types, args)


def encode_hex(signature: Union[Signature, str], args: Sequence[Any]) -> str:
    return to_hex(encode(signature, args))


def decode_arguments(types: Sequence[AbiType], data: bytes) -> tuple:
    values = []
    position = 0
    for abi_type in types:
        if abi_type.is_dynamic:
            offset = int.from_bytes(_read_word(data, position), "big")
            values.append(abi_type.decode(data, offset))
        else:
            values.append(abi_type.decode(data, position))
        position += abi_type.head_size
    return tuple(values)


def decode(signature: Union[Signature, str], data: Union[str, bytes]) -> tuple:
    """Inverse of :func:`encode`: recover argument values from calldata."""
    sig = _as_signature(signature)
    if isinstance(data, str):
        try:
            data = _hex_bytes(data)
        except EncodingError as exc:
            raise DecodingError(exc.message) from None
    data = bytes(data)
    if sig.selector is not None:
        if data[:SELECTOR_SIZE] != sig.selector:
            raise DecodingError(
                f"Selector mismatch: expected {to_hex(sig.selector)} for {sig.canonical}, got {to_hex(data[:SELECTOR_SIZE])}",
            )
        data = data[SELECTOR_SIZE:]
    return decode_arguments(sig.types, data)


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()
