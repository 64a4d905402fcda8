"""Application layer - Marker definition emission."""

from typing import Optional

from miraveja_autoinject.domain import GENERATED_HEADER, GeneratedSource, GeneratorOptions

MARKER_SOURCE = GENERATED_HEADER + '''
"""Markers for classes registered by the generated auto-inject routine."""

import enum


class InjectLifetime(enum.IntEnum):
    """Lifetime of a class registered through ``Injectable``."""

    SCOPED = 0x01
    SINGLETON = 0x02
    TRANSIENT = 0x03


class Injectable:
    """Marks a class for automatic registration.

    Args:
        lifetime: Lifetime the class is registered with.
        interface_type: Abstraction the class is registered under, if any.

    Example:
        >>> @Injectable(InjectLifetime.SINGLETON, IUserRepository)
        ... class SqlUserRepository(IUserRepository):
        ...     pass
    """

    def __init__(self, lifetime, interface_type=None):
        self.lifetime = lifetime
        self.interface_type = interface_type

    def __call__(self, cls):
        cls.__injectable__ = self
        return cls
'''


class MarkerDefinitionEmitter:
    """Emits the static module defining ``InjectLifetime`` and ``Injectable``.

    The module is emitted on every pass, whether or not any class uses it, so
    user code can import it and the resolver can find the marker class in the
    same pass.
    """

    def __init__(self, options: Optional[GeneratorOptions] = None) -> None:
        self._options = options or GeneratorOptions()

    def emit(self) -> GeneratedSource:
        """Return the marker module source."""
        return GeneratedSource.for_module(self._options.marker_module, MARKER_SOURCE)
