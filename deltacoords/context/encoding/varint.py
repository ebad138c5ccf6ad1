"""
Variable-length integer encoding (varint) with zig-zag mapping

Protocol Buffer style varint encoding for compact integer storage:
- Values 0-127: 1 byte
- Values 128-16,383: 2 bytes
- Values 16,384-2,097,151: 3 bytes
- etc.

Signed values go through zig-zag mapping first, so that -1 costs one byte
instead of the ten a two's-complement varint would need:
- 0 -> 0, -1 -> 1, 1 -> 2, -2 -> 3, ...

Node ids in a delta batch are sint64, latitudes and longitudes sint32.
"""

from typing import Iterable

from deltacoords.constants import INT32_BITS, INT64_BITS, MAX_VARINT32_BYTES, MAX_VARINT64_BYTES
from deltacoords.exceptions import MalformedVarint


def max_varint_bytes(bits: int) -> int:
    """Longest legal varint for an integer of ``bits`` width"""
    if bits == INT32_BITS:
        return MAX_VARINT32_BYTES
    if bits == INT64_BITS:
        return MAX_VARINT64_BYTES
    raise ValueError(f"Unsupported integer width: {bits}")


def to_signed(value: int, bits: int) -> int:
    """
    Reduce an integer to the signed range of ``bits`` (two's complement)

    Examples:
        >>> to_signed(2**31, 32)
        -2147483648
        >>> to_signed(-5, 32)
        -5
    """
    half = 1 << (bits - 1)
    return ((value + half) & ((1 << bits) - 1)) - half


def zigzag_encode(n: int, bits: int = INT64_BITS) -> int:
    """
    Map a signed integer to an unsigned one, interleaving by magnitude

    Values outside the signed range of ``bits`` are truncated to it first,
    the same way a fixed-width integer would hold them.

    Examples:
        >>> [zigzag_encode(n) for n in (0, -1, 1, -2, 2)]
        [0, 1, 2, 3, 4]
        >>> zigzag_encode(-2147483648, 32)
        4294967295
    """
    n = to_signed(n, bits)
    return ((n << 1) ^ (n >> (bits - 1))) & ((1 << bits) - 1)


def zigzag_decode(n: int) -> int:
    """
    Reverse zig-zag mapping

    Examples:
        >>> [zigzag_decode(n) for n in (0, 1, 2, 3, 4)]
        [0, -1, 1, -2, 2]
    """
    return (n >> 1) ^ -(n & 1)


def encode_varint(value: int) -> bytes:
    """
    Encode integer as variable-length bytes using Protocol Buffer encoding

    Args:
        value: Non-negative integer to encode

    Returns:
        Bytes representing the varint (1-10 bytes for 64-bit values)

    Examples:
        >>> encode_varint(0)
        b'\\x00'
        >>> encode_varint(127)
        b'\\x7f'
        >>> encode_varint(128)
        b'\\x80\\x01'
        >>> encode_varint(300)
        b'\\xac\\x02'
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")

    result = bytearray()

    while value > 0x7F:
        # Set high bit (0x80) to indicate more bytes follow
        result.append((value & 0x7F) | 0x80)
        value >>= 7

    # Last byte: no high bit set
    result.append(value)

    return bytes(result)


def decode_varint(data: bytes, offset: int = 0, max_bytes: int = MAX_VARINT64_BYTES,
                  end: int = None) -> tuple[int, int]:
    """
    Decode varint from bytes starting at offset

    Args:
        data: Bytes containing varint
        offset: Starting position in bytes
        max_bytes: Longest accepted encoding (5 for 32-bit, 10 for 64-bit)
        end: Position the varint must not cross (defaults to len(data))

    Returns:
        Tuple of (decoded_value, bytes_consumed)

    Raises:
        MalformedVarint: input ended mid-varint (``truncated`` set), or the
            continuation chain ran past ``max_bytes``

    Examples:
        >>> decode_varint(b'\\x00')
        (0, 1)
        >>> decode_varint(b'\\x7f')
        (127, 1)
        >>> decode_varint(b'\\x80\\x01')
        (128, 2)
        >>> decode_varint(b'\\xac\\x02')
        (300, 2)
    """
    if end is None:
        end = len(data)

    result = 0
    shift = 0
    bytes_read = 0

    while True:
        if bytes_read >= max_bytes:
            raise MalformedVarint(f"Varint longer than {max_bytes} bytes", offset)

        if offset + bytes_read >= end:
            raise MalformedVarint("Incomplete varint", offset, truncated=True)

        byte = data[offset + bytes_read]
        bytes_read += 1

        # Add 7 bits to result
        result |= (byte & 0x7F) << shift
        shift += 7

        # If high bit not set, we're done
        if not byte & 0x80:
            return result, bytes_read


def varint_size(value: int) -> int:
    """
    Bytes needed for varint encoding of a non-negative integer

    Examples:
        >>> varint_size(0)
        1
        >>> varint_size(127)
        1
        >>> varint_size(128)
        2
        >>> varint_size(16383)
        2
        >>> varint_size(16384)
        3
    """
    if value < 0:
        raise ValueError(f"Cannot size negative value: {value}")
    if value == 0:
        return 1

    # Count 7-bit groups needed
    return (value.bit_length() + 6) // 7


def encode_signed(value: int, bits: int) -> bytes:
    """Zig-zag map ``value`` at ``bits`` width and encode it as a varint"""
    return encode_varint(zigzag_encode(value, bits))


def decode_signed(data: bytes, offset: int, bits: int, end: int = None) -> tuple[int, int]:
    """
    Decode one zig-zag varint of ``bits`` width

    Varints that carry more than ``bits`` significant bits are masked to
    the width before unmapping.

    Examples:
        >>> decode_signed(b'\\x03', 0, 32)
        (-2, 1)
        >>> decode_signed(b'\\xff\\xff\\xff\\xff\\x0f', 0, 32)
        (-2147483648, 5)
    """
    raw, consumed = decode_varint(data, offset, max_varint_bytes(bits), end)
    return zigzag_decode(raw & ((1 << bits) - 1)), consumed


def signed_size(value: int, bits: int) -> int:
    """Encoded length of ``value`` as a zig-zag varint, without encoding it"""
    return varint_size(zigzag_encode(value, bits))


def encode_signed_list(values: Iterable[int], bits: int) -> bytes:
    """
    Encode integers as a tagless run of zig-zag varints

    Example:
        >>> encode_signed_list([0, -1, 1, 64], 32)
        b'\\x00\\x01\\x02\\x80\\x01'
    """
    result = bytearray()
    for value in values:
        result.extend(encode_signed(value, bits))
    return bytes(result)


def signed_list_size(values: Iterable[int], bits: int) -> int:
    """Total bytes for a tagless run of zig-zag varints"""
    return sum(signed_size(v, bits) for v in values)


if __name__ == '__main__':
    import doctest
    doctest.testmod()
