"""
CLI layer - developer commands for inspecting delta cache files.
"""

from deltacoords.cli.commands import dump, stats

__all__ = ['dump', 'stats']
