# src/mill_atlas/presentation/cli/_state.py
"""Shared state passed to sub-commands through the Typer context."""

from mill_atlas.config import MillAtlasConfig


class CLISharedState:
    def __init__(self, config: MillAtlasConfig):
        self.config = config
