"""
Integration tests for the deltacoords CLI
"""

import pytest
from click.testing import CliRunner

from deltacoords import DeltaBatch, DeltaCacheFile
from deltacoords.__main__ import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def populated_cache(cache_path, sample_batch, scenario_batch):
    cache = DeltaCacheFile(cache_path)
    cache.append(sample_batch)
    cache.append(scenario_batch)
    return cache_path


class TestDumpCommand:
    """deltacoords dump"""

    def test_dump_prints_records(self, runner, populated_cache, sample_records):
        result = runner.invoke(cli, ['dump', '-i', str(populated_cache)])
        assert result.exit_code == 0, result.output
        assert '--- batch 0: 5 records' in result.output
        assert '--- batch 1: 3 records' in result.output
        node_id, lat, lon = sample_records[0]
        assert f"{node_id}\t{lat}\t{lon}" in result.output
        assert 'misaligned' in result.output

    def test_dump_limit(self, runner, populated_cache):
        result = runner.invoke(cli, ['dump', '-i', str(populated_cache), '--limit', '2'])
        assert result.exit_code == 0, result.output
        assert '... 3 more' in result.output

    def test_dump_shows_unknown_fields(self, runner, cache_path):
        DeltaCacheFile(cache_path).append(DeltaBatch.from_bytes(b'\x0a\x01\x02\x22\x03abc'))
        result = runner.invoke(cli, ['dump', '-i', str(cache_path)])
        assert result.exit_code == 0, result.output
        assert 'unknown field 4 (wire type 2, 5 bytes)' in result.output

    def test_dump_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ['dump', '-i', str(tmp_path / 'nope.delta')])
        assert result.exit_code == 1

    def test_dump_corrupt_file(self, runner, cache_path):
        cache_path.write_bytes(b'\x05\x0a\x05\x02')
        result = runner.invoke(cli, ['dump', '-i', str(cache_path)])
        assert result.exit_code == 2


class TestStatsCommand:
    """deltacoords stats"""

    def test_stats(self, runner, populated_cache):
        result = runner.invoke(cli, ['stats', '-i', str(populated_cache)])
        assert result.exit_code == 0, result.output
        assert 'Batches: 2' in result.output
        assert 'Records: 8' in result.output
        assert 'Misaligned batches: 1' in result.output

    def test_stats_frame_limit(self, runner, populated_cache):
        result = runner.invoke(cli, ['stats', '-i', str(populated_cache), '--max-batch-size', '4'])
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '1.0.0' in result.output
