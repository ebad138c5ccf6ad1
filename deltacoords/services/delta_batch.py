"""
DeltaBatch: a batch of node coordinate updates

Three parallel sequences describe the records: ``ids[i]``, ``lats[i]`` and
``lons[i]`` belong to the same node. The batch is an append-only log.
Merging concatenates and never deduplicates; if the cache wants "last
update wins", it resolves that when applying the batch.

Usage:
    batch = DeltaBatch()
    batch.append(42, 525200000, 134050000)
    data = batch.to_bytes()
    assert DeltaBatch.from_bytes(data) == batch
"""

import io
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from deltacoords.constants import DEFAULT_CHUNK_SIZE, FIXED_COORD_BYTES, FIXED_ID_BYTES
from deltacoords.models import DeltaRecord, UnknownField
from deltacoords.services.stream_codec import deserialize_batch, measure_batch, serialize_batch


@dataclass
class DeltaBatch:
    """Node id / latitude / longitude updates plus unrecognized trailing fields."""
    ids: List[int] = field(default_factory=list)
    lats: List[int] = field(default_factory=list)
    lons: List[int] = field(default_factory=list)
    unknown_trailer: List[UnknownField] = field(default_factory=list)

    # Serialized length from the last size computation; None once stale
    cached_size: Optional[int] = field(default=None, compare=False, repr=False)

    def __len__(self) -> int:
        return len(self.ids)

    def append(self, node_id: int, lat: int, lon: int):
        """Append one record. Values are not range-checked."""
        self.ids.append(node_id)
        self.lats.append(lat)
        self.lons.append(lon)
        self.cached_size = None

    def extend(self, records: Iterable[Tuple[int, int, int]]):
        for node_id, lat, lon in records:
            self.ids.append(node_id)
            self.lats.append(lat)
            self.lons.append(lon)
        self.cached_size = None

    def clear(self):
        self.ids.clear()
        self.lats.clear()
        self.lons.clear()
        self.unknown_trailer.clear()
        self.cached_size = 0

    def merge(self, other: 'DeltaBatch') -> 'DeltaBatch':
        """
        Concatenate ``other`` onto this batch, trailer included

        Returns self, so merges chain: ``a.merge(b).merge(c)``.
        """
        # list() copies first so merging a batch into itself doubles it cleanly
        self.ids.extend(list(other.ids))
        self.lats.extend(list(other.lats))
        self.lons.extend(list(other.lons))
        self.unknown_trailer.extend(list(other.unknown_trailer))
        self.cached_size = None
        return self

    def copy_from(self, other: 'DeltaBatch') -> 'DeltaBatch':
        if other is self:
            return self
        self.clear()
        return self.merge(other)

    def clone(self) -> 'DeltaBatch':
        return DeltaBatch().merge(self)

    def swap(self, other: 'DeltaBatch'):
        """Exchange all contents with ``other`` in place"""
        self.ids, other.ids = other.ids, self.ids
        self.lats, other.lats = other.lats, self.lats
        self.lons, other.lons = other.lons, self.lons
        self.unknown_trailer, other.unknown_trailer = other.unknown_trailer, self.unknown_trailer
        self.cached_size, other.cached_size = other.cached_size, self.cached_size

    def is_empty(self) -> bool:
        return not (self.ids or self.lats or self.lons or self.unknown_trailer)

    def is_aligned(self) -> bool:
        """True when every id has exactly one latitude and one longitude"""
        return len(self.ids) == len(self.lats) == len(self.lons)

    def records(self) -> Iterator[DeltaRecord]:
        """Iterate records; stops at the shortest sequence if misaligned"""
        for node_id, lat, lon in zip(self.ids, self.lats, self.lons):
            yield DeltaRecord(node_id, lat, lon)

    def trailer_bytes(self) -> bytes:
        return b''.join(entry.raw for entry in self.unknown_trailer)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def compute_size(self) -> int:
        """Serialized length if written now; cached in ``cached_size``"""
        self.cached_size, _ = measure_batch(self)
        return self.cached_size

    def serialize_to(self, writer) -> int:
        """
        Write this batch to ``writer`` (any object with ``write(bytes)``)

        Returns:
            Number of bytes written
        """
        return serialize_batch(self, writer)

    def deserialize_from(self, reader, chunk_size: int = DEFAULT_CHUNK_SIZE) -> 'DeltaBatch':
        """
        Decode from ``reader`` until it is exhausted, merging into this batch

        Existing content is kept and the decoded records are appended after
        it. Use ``parse_from`` for a fresh batch.

        Raises:
            MalformedVarint, TruncatedPacked, TruncatedField
        """
        deserialize_batch(reader, self, chunk_size)
        return self

    @classmethod
    def parse_from(cls, reader, chunk_size: int = DEFAULT_CHUNK_SIZE) -> 'DeltaBatch':
        return cls().deserialize_from(reader, chunk_size)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.serialize_to(buffer)
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DeltaBatch':
        return cls.parse_from(io.BytesIO(data))

    def merge_from_bytes(self, data: bytes) -> 'DeltaBatch':
        return self.deserialize_from(io.BytesIO(data))


def fixed_width_size(batch: DeltaBatch) -> int:
    """Size of the same values in a fixed-width layout (8 bytes per id, 4 per coordinate)"""
    return (len(batch.ids) * FIXED_ID_BYTES
            + (len(batch.lats) + len(batch.lons)) * FIXED_COORD_BYTES)


def compare_sizes(batch: DeltaBatch) -> Dict[str, Any]:
    """
    Compare the packed encoding against a fixed-width layout

    Args:
        batch: Batch to analyze

    Returns:
        Dict with size comparisons
    """
    fixed_size = fixed_width_size(batch)
    encoded_size = batch.compute_size()

    return {
        'records': len(batch),
        'fixed_size': fixed_size,
        'encoded_size': encoded_size,
        'compression_ratio': fixed_size / encoded_size if encoded_size > 0 else 0,
        'space_saved': fixed_size - encoded_size,
        'space_saved_pct': (1 - encoded_size / fixed_size) * 100 if fixed_size > 0 else 0,
    }
