from typing import Dict, List, Optional, Type, Union

from miraveja_autoinject.domain import IServiceCollection, Lifetime, LifetimeError, ServiceDescriptor


class ServiceCollection(IServiceCollection):
    """Service collection the generated registration routine registers into.

    Records one descriptor per service type. Any container can be populated
    from the descriptors afterwards.

    Attributes:
        _descriptors: Dictionary mapping service types to their descriptors.

    Example:
        >>> from autoinject.registration import auto_inject
        >>> services = auto_inject(ServiceCollection())
        >>> services.get_descriptor(IUserRepository).implementation_type
        <class 'myapp.repositories.SqlUserRepository'>
    """

    def __init__(self) -> None:
        self._descriptors: Dict[Type, ServiceDescriptor] = {}

    def register(
        self,
        implementation: Type,
        lifetime: Union[Lifetime, str],
        abstraction: Optional[Type] = None,
    ) -> "ServiceCollection":
        """Register a class under a lifetime, optionally bound to an abstraction.

        Args:
            implementation: The class to instantiate.
            lifetime: Lifetime of the instances, as a Lifetime or its value.
            abstraction: Type the service is resolved by, defaults to the implementation.

        Returns:
            The collection itself, so calls can be chained.

        Raises:
            LifetimeError: If the lifetime is unknown, or the service type is
                           already registered with a different lifetime.
        """
        try:
            lifetime = Lifetime(lifetime)
        except ValueError as e:
            raise LifetimeError(f"Invalid lifetime {lifetime!r} for {implementation.__name__}") from e

        service_type = abstraction if abstraction is not None else implementation

        # Check for conflicting registrations
        if service_type in self._descriptors:
            existing = self._descriptors[service_type]
            if existing.lifetime != lifetime:
                raise LifetimeError(
                    f"Service {service_type.__name__} is already registered "
                    f"with lifetime {existing.lifetime.value}, "
                    f"cannot re-register with {lifetime.value}"
                )
            return self  # Skip if already registered with same lifetime

        self._descriptors[service_type] = ServiceDescriptor(
            service_type=service_type,
            implementation_type=implementation,
            lifetime=lifetime,
        )
        return self

    def get_descriptor(self, service_type: Type) -> Optional[ServiceDescriptor]:
        return self._descriptors.get(service_type)

    @property
    def descriptors(self) -> List[ServiceDescriptor]:
        """Registered descriptors, in registration order."""
        return list(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._descriptors
