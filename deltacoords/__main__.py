"""
Entry point for python -m deltacoords
"""

import click
from deltacoords import __version__
from deltacoords.cli import dump, stats

@click.group()
@click.version_option(version=__version__)
def cli():
    """deltacoords - Delta coordinate cache codec"""
    pass

cli.add_command(dump)
cli.add_command(stats)

if __name__ == '__main__':
    cli()
