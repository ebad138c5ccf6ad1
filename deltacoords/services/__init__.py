"""
Services layer - batch operations, stream codec and cache file framing.
"""

from deltacoords.services.delta_batch import DeltaBatch, compare_sizes, fixed_width_size
from deltacoords.services.stream_codec import serialize_batch, deserialize_batch, measure_batch
from deltacoords.services.cache_file import DeltaCacheFile, write_delimited, read_delimited, iter_delimited

__all__ = [
    'DeltaBatch',
    'compare_sizes',
    'fixed_width_size',
    'serialize_batch',
    'deserialize_batch',
    'measure_batch',
    'DeltaCacheFile',
    'write_delimited',
    'read_delimited',
    'iter_delimited',
]
