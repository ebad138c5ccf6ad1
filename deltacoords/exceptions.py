"""
Errors raised by the deltacoords codec.

Every error is a ``ValueError`` so callers that already guard varint
decoding with ``except ValueError`` keep working.
"""

from typing import Optional


class DeltaCodecError(ValueError):
    """Base class for corrupt or unparseable delta batch input."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.reason = message
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)


class MalformedVarint(DeltaCodecError):
    """
    A varint never terminated, or ran longer than its integer width allows.

    ``truncated`` is True when the input ran out before the terminating
    byte, False when the continuation chain was simply too long.
    """

    def __init__(self, message: str, offset: Optional[int] = None, truncated: bool = False):
        super().__init__(message, offset)
        self.truncated = truncated


class TruncatedField(DeltaCodecError):
    """A field announced more payload bytes than the input holds."""

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        field_number: Optional[int] = None,
        expected: Optional[int] = None,
        available: Optional[int] = None,
    ):
        super().__init__(message, offset)
        self.field_number = field_number
        self.expected = expected
        self.available = available


class TruncatedPacked(TruncatedField):
    """A packed field's payload, or one of its elements, is cut short."""


class FrameTooLarge(DeltaCodecError):
    """A framed batch announces a length above the configured maximum."""

    def __init__(self, length: int, limit: int, offset: Optional[int] = None):
        super().__init__(f"Batch frame of {length} bytes exceeds limit of {limit} bytes", offset)
        self.length = length
        self.limit = limit


__all__ = [
    'DeltaCodecError',
    'MalformedVarint',
    'TruncatedField',
    'TruncatedPacked',
    'FrameTooLarge',
]
