"""
Stream codec: drives the wire primitives against a byte reader/writer

Message layout (fields in number order, empty fields omitted):

    [1: ids  packed sint64]
    [2: lats packed sint32]
    [3: lons packed sint32]
    [unknown fields, verbatim]

Encoding is two-pass. ``measure_batch`` sizes every packed payload first,
because a length prefix has to be written before its payload.

Decoding reads tags until the reader is exhausted. Fields may arrive in
any order, repeated, packed or unpacked. Anything this schema does not
understand is copied into the batch's trailer, so bytes written by a newer
producer survive a round trip through this version.
"""

import logging
from typing import Dict, Tuple

from deltacoords.constants import (
    DEFAULT_CHUNK_SIZE,
    FIELD_IDS,
    FIELD_LATS,
    FIELD_LONS,
    INT32_BITS,
    INT64_BITS,
    WIRETYPE_LENGTH_DELIMITED,
    WIRETYPE_VARINT,
)
from deltacoords.context.encoding.packed import (
    encode_packed,
    packed_field_size,
    packed_payload_size,
    read_packed,
    read_unpacked,
)
from deltacoords.context.encoding.wire import CodedInput, skip_field, split_tag
from deltacoords.models import UnknownField
from deltacoords.protocols import ByteReader, ByteWriter

logger = logging.getLogger(__name__)

# (field number, batch attribute, integer width)
FIELDS = (
    (FIELD_IDS, 'ids', INT64_BITS),
    (FIELD_LATS, 'lats', INT32_BITS),
    (FIELD_LONS, 'lons', INT32_BITS),
)


def measure_batch(batch) -> Tuple[int, Dict[int, int]]:
    """
    Size a batch without encoding it

    Returns:
        Tuple of (total_size, payload size per field number)
    """
    total = 0
    payload_sizes = {}

    for field_number, name, bits in FIELDS:
        values = getattr(batch, name)
        payload_size = packed_payload_size(values, bits)
        payload_sizes[field_number] = payload_size
        total += packed_field_size(field_number, values, bits, payload_size)

    total += sum(len(entry.raw) for entry in batch.unknown_trailer)
    return total, payload_sizes


def serialize_batch(batch, writer) -> int:
    """
    Write a batch to ``writer``

    One ``write`` call per non-empty field, then one for the trailer.
    Writer errors propagate unchanged.

    Returns:
        Number of bytes written
    """
    if not isinstance(writer, ByteWriter):
        raise TypeError(f"Expected an object with write(bytes), got {type(writer).__name__}")

    total, payload_sizes = measure_batch(batch)
    batch.cached_size = total

    for field_number, name, bits in FIELDS:
        data = encode_packed(field_number, getattr(batch, name), bits, payload_sizes[field_number])
        if data:
            writer.write(data)

    if batch.unknown_trailer:
        writer.write(b''.join(entry.raw for entry in batch.unknown_trailer))

    return total


def deserialize_batch(source, batch, chunk_size: int = DEFAULT_CHUNK_SIZE):
    """
    Decode fields from ``source`` and merge them into ``batch``

    Args:
        source: A ByteReader, or a CodedInput already positioned at the
            first tag
        batch: Batch receiving the decoded values; existing content is kept
        chunk_size: Read size used when wrapping a plain reader

    Raises:
        MalformedVarint: a tag or value varint is unterminated or overlong
        TruncatedPacked: a packed payload is cut short
        TruncatedField: an unknown field's payload is cut short

    On error, fields decoded before the failing one stay in ``batch``.
    """
    if isinstance(source, CodedInput):
        stream = source
    elif isinstance(source, ByteReader):
        stream = CodedInput(source, chunk_size)
    else:
        raise TypeError(f"Expected an object with read(size), got {type(source).__name__}")

    targets = {
        field_number: (getattr(batch, name), bits)
        for field_number, name, bits in FIELDS
    }
    batch.cached_size = None

    while True:
        stream.release()
        if stream.at_end():
            break

        start = stream.mark()
        field_number, wire_type = split_tag(stream.read_tag())
        tag_end = stream.mark()

        target = targets.get(field_number)
        if target is not None:
            values, bits = target
            if wire_type == WIRETYPE_LENGTH_DELIMITED:
                read_packed(stream, field_number, bits, values)
                continue
            if wire_type == WIRETYPE_VARINT:
                read_unpacked(stream, bits, values)
                continue

        if field_number and skip_field(stream, field_number, wire_type):
            raw = stream.since(start)
            batch.unknown_trailer.append(
                UnknownField(field_number, wire_type, raw[tag_end - start:], raw)
            )
            continue

        # No way to find where this field ends: keep everything left as one entry.
        stream.read_rest()
        raw = stream.since(start)
        logger.warning(
            "Undelimited tag (field %d, wire type %d) at byte %d; keeping %d trailing bytes opaque",
            field_number, wire_type, stream.offset - len(raw), len(raw),
        )
        batch.unknown_trailer.append(
            UnknownField(field_number, wire_type, raw[tag_end - start:], raw)
        )
        break
