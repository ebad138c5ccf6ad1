"""
Cache file framing: a file is a plain concatenation of framed batches

    [size: varint][batch bytes][size: varint][batch bytes]...

There is no file header, so appending a batch never touches earlier
frames. Readers reject frames above ``max_batch_size`` before reading
them, which bounds memory on corrupt input.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from deltacoords.constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_BATCH_SIZE
from deltacoords.context.encoding.varint import encode_varint
from deltacoords.context.encoding.wire import CodedInput
from deltacoords.exceptions import FrameTooLarge, TruncatedField
from deltacoords.services.delta_batch import DeltaBatch, fixed_width_size

logger = logging.getLogger(__name__)


def write_delimited(batch: DeltaBatch, writer) -> int:
    """
    Write one framed batch with a single ``write`` call

    The frame is assembled in memory first, so a writer never holds a
    length prefix without the batch that follows it.

    Returns:
        Bytes written, length prefix included
    """
    frame = encode_varint(batch.compute_size()) + batch.to_bytes()
    writer.write(frame)
    return len(frame)


def read_delimited(stream: CodedInput, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE) -> Optional[DeltaBatch]:
    """
    Read the next framed batch from ``stream``

    Returns:
        The batch, or None at a clean end of input

    Raises:
        FrameTooLarge: the frame announces more than ``max_batch_size`` bytes
        TruncatedField: the input ends inside the frame
        MalformedVarint, TruncatedPacked: the batch itself is corrupt
    """
    stream.release()
    if stream.at_end():
        return None

    start = stream.offset
    length = stream.read_length()
    if length > max_batch_size:
        raise FrameTooLarge(length, max_batch_size, start)

    payload = stream.read_exact(length, error=TruncatedField)
    batch = DeltaBatch()
    batch.deserialize_from(CodedInput.from_bytes(payload))
    logger.debug("Read %d-byte batch with %d records at byte %d", length, len(batch), start)
    return batch


def iter_delimited(reader, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
                   chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[DeltaBatch]:
    """Yield every framed batch from ``reader`` in order"""
    stream = CodedInput(reader, chunk_size)
    while True:
        batch = read_delimited(stream, max_batch_size)
        if batch is None:
            return
        yield batch


class DeltaCacheFile:
    """
    Append-only file of framed delta batches

    Usage:
        cache = DeltaCacheFile('coords.delta')
        cache.append(batch)
        for batch in cache:
            ...
        everything = cache.replay()
    """

    def __init__(self, path: Union[str, Path], max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = Path(path)
        self.max_batch_size = max_batch_size
        self.chunk_size = chunk_size

    def __repr__(self) -> str:
        return f"DeltaCacheFile({str(self.path)!r})"

    def append(self, batch: DeltaBatch) -> int:
        """
        Append one framed batch to the end of the file

        A failed write truncates the file back to its previous size.

        Returns:
            Bytes written
        """
        size = batch.compute_size()
        if size > self.max_batch_size:
            raise FrameTooLarge(size, self.max_batch_size)

        previous_size = self.path.stat().st_size if self.path.exists() else 0
        try:
            with open(self.path, 'ab') as f:
                written = write_delimited(batch, f)
        except BaseException:
            # the file must never end inside a frame
            if self.path.exists():
                os.truncate(self.path, previous_size)
            raise

        logger.debug("Appended %d records (%d bytes) to %s", len(batch), written, self.path)
        return written

    def __iter__(self) -> Iterator[DeltaBatch]:
        with open(self.path, 'rb') as f:
            yield from iter_delimited(f, self.max_batch_size, self.chunk_size)

    def replay(self) -> DeltaBatch:
        """Merge every batch in file order into one batch"""
        merged = DeltaBatch()
        count = 0
        for batch in self:
            merged.merge(batch)
            count += 1
        logger.debug("Replayed %d batches (%d records) from %s", count, len(merged), self.path)
        return merged

    def stats(self) -> Dict[str, Any]:
        """Batch, record and byte counts for the whole file"""
        batches = 0
        records = 0
        encoded_size = 0
        fixed_size = 0
        trailer_size = 0
        misaligned = 0

        for batch in self:
            batches += 1
            records += len(batch)
            encoded_size += batch.compute_size()
            fixed_size += fixed_width_size(batch)
            trailer_size += len(batch.trailer_bytes())
            if not batch.is_aligned():
                misaligned += 1

        return {
            'path': str(self.path),
            'file_size': self.path.stat().st_size,
            'batches': batches,
            'records': records,
            'encoded_size': encoded_size,
            'fixed_size': fixed_size,
            'trailer_size': trailer_size,
            'misaligned_batches': misaligned,
            'compression_ratio': fixed_size / encoded_size if encoded_size > 0 else 0,
        }
