"""Errors raised while building calldata."""

from __future__ import annotations

from typing import Any, Dict, Optional


class CalldataError(Exception):
    """Base exception for calldata encoding and argument handling"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }


class EncodingError(CalldataError):
    """A value could not be encoded for its declared ABI type"""


class InvalidAddress(EncodingError):
    """Address is not 20 bytes of hex, or fails the checksum"""


class IntegerOverflow(EncodingError):
    """Integer is negative or does not fit the declared width"""


class ArityMismatch(EncodingError):
    """Argument count differs from the parameter count"""


class ArrayLengthMismatch(EncodingError):
    """Fixed-size array argument has the wrong number of elements"""


class UnsupportedType(EncodingError):
    """ABI type string outside the supported set"""


class DecodingError(CalldataError):
    """Calldata is malformed for the given signature"""


class InvalidAmount(CalldataError):
    """Human-readable amount cannot be converted to integer units"""
