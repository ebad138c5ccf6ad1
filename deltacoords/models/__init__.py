"""
Data models for deltacoords.

This module contains pure data structures with no codec logic.
"""

from dataclasses import dataclass
from typing import NamedTuple

__all__ = [
    'DeltaRecord',
    'UnknownField',
]


class DeltaRecord(NamedTuple):
    """One node coordinate update."""
    id: int
    lat: int  # fixed-point units chosen by the caller
    lon: int


@dataclass(frozen=True)
class UnknownField:
    """A field this schema does not recognize, kept verbatim for re-emission."""
    field_number: int
    wire_type: int
    payload: bytes  # bytes after the tag
    raw: bytes      # exact input bytes, tag included

    def __len__(self) -> int:
        return len(self.raw)
