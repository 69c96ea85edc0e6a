# src/mill_atlas/__init__.py
"""mill-atlas: heritage inventory service for mills, levadas and poças."""

__version__ = "0.4.0"
