"""
Context layer - wire format implementations.
"""

from deltacoords.context.encoding import CodedInput, encode_packed, read_packed, read_unpacked

__all__ = [
    'CodedInput',
    'encode_packed',
    'read_packed',
    'read_unpacked',
]
