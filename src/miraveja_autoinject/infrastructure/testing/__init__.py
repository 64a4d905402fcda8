"""
Testing utilities module.

Provides helpers for testing code that uses miraveja-autoinject.
"""

from .utilities import InMemoryModules, create_compilation, run_generator

__all__ = [
    "create_compilation",
    "run_generator",
    "InMemoryModules",
]
