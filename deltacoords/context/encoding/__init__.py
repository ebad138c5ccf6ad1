"""
Encoding context: varints, zig-zag mapping, tags and packed fields.
"""

from deltacoords.context.encoding.varint import (
    encode_varint,
    decode_varint,
    zigzag_encode,
    zigzag_decode,
    varint_size,
    signed_size,
)
from deltacoords.context.encoding.wire import CodedInput, encode_tag, split_tag, skip_field
from deltacoords.context.encoding.packed import (
    encode_packed,
    decode_packed_payload,
    packed_field_size,
    packed_payload_size,
    read_packed,
    read_unpacked,
)

__all__ = [
    'encode_varint',
    'decode_varint',
    'zigzag_encode',
    'zigzag_decode',
    'varint_size',
    'signed_size',
    'CodedInput',
    'encode_tag',
    'split_tag',
    'skip_field',
    'encode_packed',
    'decode_packed_payload',
    'packed_field_size',
    'packed_payload_size',
    'read_packed',
    'read_unpacked',
]
