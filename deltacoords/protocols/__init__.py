"""
Protocols (interfaces) for deltacoords collaborators.

The codec never opens files or sockets itself; it talks to whatever the
cache store hands it through these two contracts. Any object with the
right method satisfies them, so ``io.BytesIO`` and binary file objects
work without subclassing.
"""

from abc import ABC, abstractmethod
from typing import Optional

__all__ = [
    'ByteReader',
    'ByteWriter',
]


def _has_method(cls, name: str) -> bool:
    return any(callable(base.__dict__.get(name)) for base in cls.__mro__)


class ByteReader(ABC):
    """Protocol for byte sources."""

    @abstractmethod
    def read(self, size: int) -> Optional[bytes]:
        """
        Read up to ``size`` bytes.

        Args:
            size: Maximum number of bytes to return

        Returns:
            Bytes read; ``b''`` or ``None`` at end of input
        """
        pass

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is ByteReader:
            return _has_method(subclass, 'read')
        return NotImplemented


class ByteWriter(ABC):
    """Protocol for byte sinks."""

    @abstractmethod
    def write(self, data: bytes):
        """Write all of ``data``; failures propagate to the caller."""
        pass

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is ByteWriter:
            return _has_method(subclass, 'write')
        return NotImplemented
