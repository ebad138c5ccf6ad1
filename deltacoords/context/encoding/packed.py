"""
Packed repeated fields

A packed field stores a whole integer sequence under one tag:

    [tag(field, LENGTH_DELIMITED)][payload_size: varint][v0][v1]...[vn]

Each value is a zig-zag varint with no per-value tag. Empty sequences are
not written at all, so a batch that only touched ids carries no lat/lon
bytes.

Readers also accept the legacy unpacked form, where every value has its
own VARINT tag with the same field number. Both forms may appear for the
same field in one message and are concatenated in arrival order.
"""

from typing import List, Optional, Sequence

from deltacoords.constants import WIRETYPE_LENGTH_DELIMITED
from deltacoords.context.encoding.varint import (
    decode_signed,
    encode_signed_list,
    encode_varint,
    max_varint_bytes,
    signed_list_size,
    varint_size,
    zigzag_decode,
)
from deltacoords.context.encoding.wire import CodedInput, encode_tag
from deltacoords.exceptions import MalformedVarint, TruncatedPacked


def packed_payload_size(values: Sequence[int], bits: int) -> int:
    """Bytes of packed payload, excluding tag and length prefix"""
    return signed_list_size(values, bits)


def packed_field_size(field_number: int, values: Sequence[int], bits: int,
                      payload_size: Optional[int] = None) -> int:
    """
    Framed size of a packed field: tag + length prefix + payload

    Examples:
        >>> packed_field_size(1, [], 64)
        0
        >>> packed_field_size(1, [1, -1], 64)
        4
    """
    if not values:
        return 0
    if payload_size is None:
        payload_size = packed_payload_size(values, bits)
    return len(encode_tag(field_number, WIRETYPE_LENGTH_DELIMITED)) + varint_size(payload_size) + payload_size


def encode_packed(field_number: int, values: Sequence[int], bits: int,
                  payload_size: Optional[int] = None) -> bytes:
    """
    Encode a sequence as one packed field

    Args:
        field_number: Field tag number
        values: Signed integers to pack
        bits: Integer width (32 or 64)
        payload_size: Previously measured payload size, if known

    Returns:
        Framed field bytes, or b'' for an empty sequence

    Example:
        >>> encode_packed(2, [0, -1, 1], 32)
        b'\\x12\\x03\\x00\\x01\\x02'
    """
    if not values:
        return b''

    payload = encode_signed_list(values, bits)
    if payload_size is not None and payload_size != len(payload):
        raise ValueError(
            f"Field {field_number} measured at {payload_size} bytes but encoded to {len(payload)}; "
            f"values changed between measuring and writing"
        )

    result = bytearray(encode_tag(field_number, WIRETYPE_LENGTH_DELIMITED))
    result.extend(encode_varint(len(payload)))
    result.extend(payload)
    return bytes(result)


def decode_packed_payload(payload: bytes, bits: int, field_number: Optional[int] = None,
                          base_offset: int = 0) -> List[int]:
    """
    Decode every value from a packed payload

    Args:
        payload: Payload bytes (length prefix already stripped)
        bits: Integer width (32 or 64)
        field_number: Field number, for error reporting
        base_offset: Absolute offset of payload[0], for error reporting

    Raises:
        TruncatedPacked: the last value runs past the payload boundary
        MalformedVarint: a value is longer than its width allows

    Example:
        >>> decode_packed_payload(b'\\x00\\x01\\x02', 32)
        [0, -1, 1]
    """
    result = []
    offset = 0
    end = len(payload)

    while offset < end:
        try:
            value, consumed = decode_signed(payload, offset, bits, end)
        except MalformedVarint as exc:
            if exc.truncated:
                raise TruncatedPacked(
                    f"Value in packed field {field_number} crosses the payload boundary",
                    base_offset + offset,
                    field_number=field_number,
                    expected=None,
                    available=end - offset,
                ) from None
            raise MalformedVarint(exc.reason, base_offset + offset) from None
        result.append(value)
        offset += consumed

    return result


def read_packed(stream: CodedInput, field_number: int, bits: int, target: List[int]):
    """Read a length-delimited packed run (tag already consumed) onto ``target``"""
    length = stream.read_length()
    start = stream.offset
    payload = stream.read_exact(length, field_number, error=TruncatedPacked)
    target.extend(decode_packed_payload(payload, bits, field_number, start))


def read_unpacked(stream: CodedInput, bits: int, target: List[int]):
    """Read one individually tagged varint value (tag already consumed) onto ``target``"""
    raw = stream.read_varint(max_varint_bytes(bits))
    target.append(zigzag_decode(raw & ((1 << bits) - 1)))
