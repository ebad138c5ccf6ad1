"""
deltacoords - Compact codec for node coordinate delta batches

Batches of (node id, lat, lon) updates are stored as packed zig-zag
varints in a forward-compatible, length-prefixed format. A cache file is
a concatenation of framed batches.

Architecture:
- Models: Pure data structures (DeltaRecord, UnknownField)
- Protocols: Collaborator contracts (ByteReader, ByteWriter)
- Context: Wire format (varints, tags, packed fields)
- Services: Batch operations, stream codec, cache file framing
- CLI: dump and stats commands
"""

__version__ = "1.0.0"
__license__ = "MIT"

from deltacoords import models, protocols
from deltacoords.exceptions import (
    DeltaCodecError,
    MalformedVarint,
    TruncatedField,
    TruncatedPacked,
    FrameTooLarge,
)
from deltacoords.models import DeltaRecord, UnknownField
from deltacoords.services import DeltaBatch, DeltaCacheFile, compare_sizes, write_delimited, iter_delimited

__all__ = [
    'models',
    'protocols',
    'DeltaBatch',
    'DeltaCacheFile',
    'DeltaRecord',
    'UnknownField',
    'compare_sizes',
    'write_delimited',
    'iter_delimited',
    'DeltaCodecError',
    'MalformedVarint',
    'TruncatedField',
    'TruncatedPacked',
    'FrameTooLarge',
]
