from enum import Enum, IntEnum
from typing import Any, Optional


class Lifetime(str, Enum):
    """Defines the lifetime a registered service is given by the container.

    Attributes:
        SINGLETON: Single instance shared across entire application.
        TRANSIENT: New instance created on each resolution.
        SCOPED: Single instance per scope (e.g., per HTTP request).
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class LifetimeCode(IntEnum):
    """Lifetime codes carried by the ``InjectLifetime`` marker enumeration.

    Attributes:
        SCOPED: Registered with ``Lifetime.SCOPED``.
        SINGLETON: Registered with ``Lifetime.SINGLETON``.
        TRANSIENT: Registered with ``Lifetime.TRANSIENT``.
    """

    SCOPED = 0x01
    SINGLETON = 0x02
    TRANSIENT = 0x03

    @property
    def lifetime(self) -> Lifetime:
        """The registration lifetime this code stands for."""
        return Lifetime[self.name]

    @classmethod
    def parse(cls, value: Any) -> Optional["LifetimeCode"]:
        """Map a raw marker value to a code, or None when it is not one of ours.

        Args:
            value: Raw value read from the marker's constructor arguments.

        Returns:
            The matching code, or None for unknown values, ``None`` and booleans.
        """
        if not isinstance(value, int) or isinstance(value, bool):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class BindingMode(str, Enum):
    """Whether a class is registered as itself or under an abstraction."""

    CONCRETE = "concrete"
    ABSTRACTION = "abstraction"


class TypeKind(str, Enum):
    """Kind of a resolved type symbol."""

    CLASS = "class"
    ENUM = "enum"
    EXTERNAL = "external"


class TypedConstantKind(str, Enum):
    """Kind of a constant value bound to a decorator argument.

    Attributes:
        PRIMITIVE: Literal value such as an int, str or None.
        ENUM: Member of an enumeration, value is the member's value.
        TYPE: Reference to a class, value is its TypeSymbol.
        ARRAY: List or tuple of constants.
        ERROR: Expression the semantic model could not evaluate.
    """

    PRIMITIVE = "primitive"
    ENUM = "enum"
    TYPE = "type"
    ARRAY = "array"
    ERROR = "error"


class DiagnosticSeverity(str, Enum):
    """Severity of a diagnostic reported to the host."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value
