"""
deltacoords wire constants.

Single source of truth for field numbers, wire types and size bounds.
Keep this file stable: field numbers must never change between versions,
or older cache files stop decoding.
"""

# Field numbers
FIELD_IDS = 1   # repeated sint64, packed
FIELD_LATS = 2  # repeated sint32, packed
FIELD_LONS = 3  # repeated sint32, packed

# Wire types (low three bits of every tag)
WIRETYPE_VARINT = 0
WIRETYPE_FIXED64 = 1
WIRETYPE_LENGTH_DELIMITED = 2
WIRETYPE_START_GROUP = 3
WIRETYPE_END_GROUP = 4
WIRETYPE_FIXED32 = 5

TAG_TYPE_BITS = 3
TAG_TYPE_MASK = (1 << TAG_TYPE_BITS) - 1

# Integer widths
INT32_BITS = 32
INT64_BITS = 64

# Longest legal varint for each width: ceil(bits / 7)
MAX_VARINT32_BYTES = 5
MAX_VARINT64_BYTES = 10

# Nesting limit for unknown groups, matching protobuf's default recursion limit
MAX_GROUP_DEPTH = 100

# Reader tuning
DEFAULT_CHUNK_SIZE = 64 * 1024  # bytes pulled from a reader per refill

# Safety bound for one framed batch in a cache file
DEFAULT_MAX_BATCH_SIZE = 64 * 1024 * 1024  # 64 MiB

# Fixed-width reference layout used by size reports
FIXED_ID_BYTES = 8
FIXED_COORD_BYTES = 4
