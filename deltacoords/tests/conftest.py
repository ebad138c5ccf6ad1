"""
Pytest configuration and shared fixtures for deltacoords tests
"""

import pytest
from typing import List, Tuple

from deltacoords import DeltaBatch


@pytest.fixture
def sample_records() -> List[Tuple[int, int, int]]:
    """A handful of node updates in 1e-7 degree units"""
    return [
        (1, 525200000, 134050000),
        (2, 525200123, 134049877),
        (-7, 0, 0),
        (4500000000, -339249000, 184241000),
        (9223372036854775807, 900000000, -1800000000),
    ]


@pytest.fixture
def sample_batch(sample_records) -> DeltaBatch:
    batch = DeltaBatch()
    batch.extend(sample_records)
    return batch


@pytest.fixture
def scenario_batch() -> DeltaBatch:
    """Deliberately misaligned batch: 3 ids, 2 lats, 1 lon"""
    return DeltaBatch(ids=[1, -1, 1000000], lats=[0, -850000000], lons=[0])


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "coords.delta"


class ChunkedReader:
    """Reader that hands out at most ``step`` bytes per call"""

    def __init__(self, data: bytes, step: int = 1):
        self.data = data
        self.pos = 0
        self.step = step
        self.calls = 0

    def read(self, size: int) -> bytes:
        self.calls += 1
        size = min(size, self.step)
        chunk = self.data[self.pos:self.pos + size]
        self.pos += len(chunk)
        return chunk


@pytest.fixture
def chunked_reader():
    return ChunkedReader
