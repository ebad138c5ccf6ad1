"""
CLI commands for deltacoords.
"""

import sys
from itertools import islice
from pathlib import Path

import click

from deltacoords.constants import DEFAULT_MAX_BATCH_SIZE
from deltacoords.exceptions import DeltaCodecError
from deltacoords.services import DeltaCacheFile


def _open_cache(input, max_batch_size):
    input_path = Path(input)
    if not input_path.exists():
        click.echo(f"Error: Cache file not found: {input}", err=True)
        sys.exit(1)
    return DeltaCacheFile(input_path, max_batch_size=max_batch_size)


@click.command()
@click.option('--input', '-i', required=True, help='Delta cache file path')
@click.option('--limit', type=int, default=20, help='Max records to display per batch (default: 20)')
@click.option('--max-batch-size', type=int, default=DEFAULT_MAX_BATCH_SIZE,
              help='Reject frames larger than this many bytes')
def dump(input, limit, max_batch_size):
    """
    Print the records of every batch in a delta cache file.

    Example:
        deltacoords dump -i cache/coords.delta --limit 5
    """
    cache = _open_cache(input, max_batch_size)

    try:
        for index, batch in enumerate(cache):
            click.echo(f"--- batch {index}: {len(batch)} records, {batch.compute_size()} bytes")
            if not batch.is_aligned():
                click.echo(
                    f"    warning: misaligned sequences "
                    f"(ids={len(batch.ids)}, lats={len(batch.lats)}, lons={len(batch.lons)})"
                )
            for record in islice(batch.records(), limit):
                click.echo(f"{record.id}\t{record.lat}\t{record.lon}")
            if len(batch) > limit:
                click.echo(f"    ... {len(batch) - limit} more")
            for entry in batch.unknown_trailer:
                click.echo(
                    f"    unknown field {entry.field_number} "
                    f"(wire type {entry.wire_type}, {len(entry.raw)} bytes)"
                )
    except DeltaCodecError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@click.command()
@click.option('--input', '-i', required=True, help='Delta cache file path')
@click.option('--max-batch-size', type=int, default=DEFAULT_MAX_BATCH_SIZE,
              help='Reject frames larger than this many bytes')
def stats(input, max_batch_size):
    """
    Summarize a delta cache file and compare it to a fixed-width layout.

    Example:
        deltacoords stats -i cache/coords.delta
    """
    cache = _open_cache(input, max_batch_size)

    try:
        summary = cache.stats()
    except DeltaCodecError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    click.echo("=== Delta Cache Stats ===")
    click.echo(f"File size: {summary['file_size']} bytes")
    click.echo(f"Batches: {summary['batches']}")
    click.echo(f"Records: {summary['records']}")
    click.echo(f"Encoded size: {summary['encoded_size']} bytes")
    click.echo(f"Fixed-width size: {summary['fixed_size']} bytes")
    click.echo(f"Compression ratio: {summary['compression_ratio']:.2f}×")
    if summary['trailer_size']:
        click.echo(f"Unknown trailer bytes: {summary['trailer_size']}")
    if summary['misaligned_batches']:
        click.echo(f"Misaligned batches: {summary['misaligned_batches']}")
