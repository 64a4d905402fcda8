"""
Infrastructure layer - Python host and tooling.

This layer contains the Python source model, settings, file output and the command line tool.
It depends on both Application and Domain layers.
"""

from . import python_host, testing
from .config import AutoInjectSettings
from .writer import SourceWriter

__all__ = [
    "python_host",
    "testing",
    "AutoInjectSettings",
    "SourceWriter",
]
