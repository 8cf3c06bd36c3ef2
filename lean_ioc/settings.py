from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .core import RegistrationStore
from .lifecycles import Lifecycle, TransientLifecycle
from .registration_sources import (
    EnumerableRegistrationSource,
    OpenGenericRegistrationSource,
    RegistrationSource,
)

RegistrationSourceFactory = Callable[[RegistrationStore], RegistrationSource]


@dataclass(kw_only=True)
class ContainerSettings:
    """
    default_lifecycle: factory for the lifecycle of registrations that do not name one.
    registration_sources: factories for the sources consulted, in order, when a contract is not registered.
    inject_properties: inject properties on every instance built from a constructor.
    """

    default_lifecycle: Callable[[], Lifecycle] = TransientLifecycle
    registration_sources: Sequence[RegistrationSourceFactory] = (
        EnumerableRegistrationSource,
        OpenGenericRegistrationSource,
    )
    inject_properties: bool = False

    def create_store(self) -> RegistrationStore:
        store = RegistrationStore()
        for source_factory in self.registration_sources:
            store.add_registration_source(source_factory(store))
        return store
