"""
Wire-level input handling: tags, buffered reads and unknown field skipping

CodedInput pulls bytes from any reader exposing ``read(max)`` and keeps
only the unconsumed tail buffered. Everything read since the last
``release()`` stays addressable, which is how unknown fields are copied
into the trailer byte-for-byte instead of being re-encoded.

Tag layout (one varint):
    [field_number << 3 | wire_type]
"""

from typing import Optional, Tuple

from deltacoords.constants import (
    DEFAULT_CHUNK_SIZE,
    MAX_GROUP_DEPTH,
    MAX_VARINT32_BYTES,
    MAX_VARINT64_BYTES,
    TAG_TYPE_BITS,
    TAG_TYPE_MASK,
    WIRETYPE_END_GROUP,
    WIRETYPE_FIXED32,
    WIRETYPE_FIXED64,
    WIRETYPE_LENGTH_DELIMITED,
    WIRETYPE_START_GROUP,
    WIRETYPE_VARINT,
)
from deltacoords.context.encoding.varint import decode_varint, encode_varint
from deltacoords.exceptions import DeltaCodecError, MalformedVarint, TruncatedField


def make_tag(field_number: int, wire_type: int) -> int:
    """
    Combine a field number and wire type into a tag value

    Examples:
        >>> make_tag(1, 2)
        10
        >>> make_tag(4, 3)
        35
    """
    return (field_number << TAG_TYPE_BITS) | wire_type


def encode_tag(field_number: int, wire_type: int) -> bytes:
    """
    Encode a field tag

    Examples:
        >>> encode_tag(1, 2)
        b'\\n'
        >>> encode_tag(3, 2)
        b'\\x1a'
    """
    return encode_varint(make_tag(field_number, wire_type))


def split_tag(tag: int) -> Tuple[int, int]:
    """Split a tag into (field_number, wire_type)"""
    return tag >> TAG_TYPE_BITS, tag & TAG_TYPE_MASK


class CodedInput:
    """Buffered, position-tracking view over a byte reader"""

    def __init__(self, reader, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")
        self._reader = reader
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._pos = 0
        self._base = 0  # absolute offset of _buffer[0]
        self._exhausted = False

    @classmethod
    def from_bytes(cls, data: bytes) -> 'CodedInput':
        stream = cls(None)
        stream._buffer = bytearray(data)
        stream._exhausted = True
        return stream

    @property
    def offset(self) -> int:
        """Absolute number of bytes consumed so far"""
        return self._base + self._pos

    def _fill(self, needed: int) -> bool:
        """Ensure ``needed`` unread bytes are buffered; False if input ends first"""
        while len(self._buffer) - self._pos < needed:
            if self._exhausted:
                return False
            chunk = self._reader.read(self._chunk_size)
            if not chunk:
                self._exhausted = True
                return False
            self._buffer.extend(chunk)
        return True

    def at_end(self) -> bool:
        return not self._fill(1)

    def release(self):
        """Drop consumed bytes; positions before this point are no longer addressable"""
        if self._pos:
            del self._buffer[:self._pos]
            self._base += self._pos
            self._pos = 0

    def mark(self) -> int:
        """Buffer position usable with ``since``"""
        return self._pos

    def since(self, mark: int) -> bytes:
        """Raw bytes consumed since ``mark``"""
        return bytes(self._buffer[mark:self._pos])

    def read_varint(self, max_bytes: int) -> int:
        # Fill lazily so a short tail still decodes, then let decode_varint
        # report truncation against what is actually available.
        self._fill(max_bytes)
        try:
            value, consumed = decode_varint(self._buffer, self._pos, max_bytes)
        except MalformedVarint as exc:
            raise MalformedVarint(exc.reason, self.offset, exc.truncated) from None
        self._pos += consumed
        return value

    def read_tag(self) -> int:
        return self.read_varint(MAX_VARINT32_BYTES)

    def read_length(self) -> int:
        return self.read_varint(MAX_VARINT32_BYTES)

    def read_exact(self, length: int, field_number: Optional[int] = None,
                   error: type = TruncatedField) -> bytes:
        """Read exactly ``length`` bytes or raise ``error``"""
        start = self.offset
        if not self._fill(length):
            available = len(self._buffer) - self._pos
            what = f"Field {field_number}" if field_number is not None else "Frame"
            raise error(
                f"{what} announces {length} bytes but only {available} remain",
                start,
                field_number=field_number,
                expected=length,
                available=available,
            )
        data = bytes(self._buffer[self._pos:self._pos + length])
        self._pos += length
        return data

    def read_rest(self) -> bytes:
        """Consume everything left in the input"""
        while self._fill(len(self._buffer) - self._pos + 1):
            pass
        data = bytes(self._buffer[self._pos:])
        self._pos = len(self._buffer)
        return data


def skip_field(stream: CodedInput, field_number: int, wire_type: int, depth: int = 0) -> bool:
    """
    Consume one field's payload whose tag has already been read

    Returns False when the wire type cannot be delimited (stray end-group
    or reserved types 6 and 7); the stream position is then unchanged.
    ``depth`` counts the groups already open around this field.

    Raises:
        MalformedVarint: a varint payload or length prefix is malformed
        TruncatedField: a fixed or length-delimited payload is cut short
        DeltaCodecError: groups nest deeper than MAX_GROUP_DEPTH
    """
    if wire_type == WIRETYPE_VARINT:
        stream.read_varint(MAX_VARINT64_BYTES)
    elif wire_type == WIRETYPE_FIXED64:
        stream.read_exact(8, field_number)
    elif wire_type == WIRETYPE_LENGTH_DELIMITED:
        stream.read_exact(stream.read_length(), field_number)
    elif wire_type == WIRETYPE_FIXED32:
        stream.read_exact(4, field_number)
    elif wire_type == WIRETYPE_START_GROUP:
        _skip_group(stream, field_number, depth + 1)
    else:
        return False
    return True


def _skip_group(stream: CodedInput, field_number: int, depth: int):
    start = stream.offset
    if depth > MAX_GROUP_DEPTH:
        raise DeltaCodecError(f"Groups nested deeper than {MAX_GROUP_DEPTH} levels at field {field_number}",
                              start)
    while True:
        if stream.at_end():
            raise TruncatedField(f"Group for field {field_number} is not terminated",
                                 start, field_number=field_number)
        inner_number, inner_type = split_tag(stream.read_tag())
        if inner_type == WIRETYPE_END_GROUP:
            if inner_number != field_number:
                raise DeltaCodecError(
                    f"Group for field {field_number} closed by end-group of field {inner_number}",
                    start)
            return
        if not skip_field(stream, inner_number, inner_type, depth):
            raise DeltaCodecError(f"Undelimited wire type {inner_type} inside group {field_number}",
                                  start)
