from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from .arguments import ArgumentBinding
from .constructors import ConstructorInfo
from .core import DelegateActivator, InstanceActivator, ReflectionActivator, RegistrationEntry, RegistrationStore
from .errors import RegistrationError
from .lifecycles import Lifecycle, TransientLifecycle
from .settings import ContainerSettings
from .type_filters import is_protocol

logger = logging.getLogger(__name__)

TService = TypeVar("TService")

LifecycleOption = Lifecycle | type[Lifecycle] | None


class Registrator:
    """Turns registration declarations into entries of a registration store."""

    settings: ContainerSettings
    store: RegistrationStore

    def _check_can_register(self):
        pass

    def _create_lifecycle(self, lifecycle: LifecycleOption) -> Lifecycle:
        if lifecycle is None:
            return self.settings.default_lifecycle()
        if isinstance(lifecycle, type):
            return lifecycle()
        # instances act as templates, every entry keeps its own cache
        return lifecycle.clone()

    def _add(self, entry: RegistrationEntry):
        self._check_can_register()
        if entry.key in self.store:
            logger.warning("Registration %r replaces an existing registration", entry.key)
        self.store.add(entry)
        logger.debug("Registered %r", entry)

    @staticmethod
    def _validate_implementation(contract_type: Any, implementation_type: Any):
        if not (isinstance(contract_type, type) and isinstance(implementation_type, type)):
            return
        if is_protocol(contract_type):
            return
        if not issubclass(implementation_type, contract_type):
            raise RegistrationError(f"{implementation_type!r} does not implement {contract_type!r}")

    def register(
        self,
        contract_type: type[TService] | Any,
        implementation_type: type[TService] | Any = None,
        *,
        lifecycle: LifecycleOption = None,
        name: str | None = None,
        group: str | None = None,
        args: Sequence[Any] = (),
        named_args: Mapping[str, Any] | None = None,
        constructors: Sequence[ConstructorInfo | Callable] | None = None,
        properties: Sequence[str] | None = None,
    ):
        implementation = implementation_type if implementation_type is not None else contract_type
        self._validate_implementation(contract_type, implementation)

        self._add(
            RegistrationEntry(
                contract_type=contract_type,
                implementation_type=implementation,
                activator=ReflectionActivator(implementation, constructors),
                lifecycle=self._create_lifecycle(lifecycle),
                name=name,
                group=group,
                arguments=ArgumentBinding(args, named_args),
                properties=properties,
            )
        )
        return self

    def register_instance(
        self,
        contract_type: type[TService] | Any,
        instance: TService,
        *,
        name: str | None = None,
        group: str | None = None,
    ):
        if instance is None:
            raise RegistrationError(f"Cannot register None as an instance of {contract_type!r}")

        self._add(
            RegistrationEntry(
                contract_type=contract_type,
                implementation_type=type(instance),
                activator=InstanceActivator(instance),
                lifecycle=TransientLifecycle(),
                name=name,
                group=group,
            )
        )
        return self

    def register_factory(
        self,
        contract_type: type[TService] | Any,
        factory: Callable[[Any], TService],
        *,
        lifecycle: LifecycleOption = None,
        name: str | None = None,
        group: str | None = None,
    ):
        if not callable(factory):
            raise RegistrationError(f"Factory for {contract_type!r} is not callable")

        self._add(
            RegistrationEntry(
                contract_type=contract_type,
                implementation_type=contract_type,
                activator=DelegateActivator(factory, implementation_type=contract_type),
                lifecycle=self._create_lifecycle(lifecycle),
                name=name,
                group=group,
            )
        )
        return self
