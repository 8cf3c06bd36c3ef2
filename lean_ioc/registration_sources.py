"""Registration sources synthesize entries for contract types nobody registered explicitly."""

from __future__ import annotations

import abc
import logging
from collections.abc import Collection, Iterable, MutableSequence, Sequence
from typing import Any, ClassVar, get_args, get_origin

from .core import DelegateActivator, ReflectionActivator, RegistrationEntry, RegistrationStore
from .lifecycles import TransientLifecycle
from .type_filters import is_concrete

logger = logging.getLogger(__name__)


class RegistrationSource(abc.ABC):
    def __init__(self, store: RegistrationStore):
        self.store = store

    @abc.abstractmethod
    def supports(self, contract_type: Any) -> bool: ...

    @abc.abstractmethod
    def synthesize(self, contract_type: Any, container: Any) -> RegistrationEntry: ...


class EnumerableRegistrationSource(RegistrationSource):
    """
    Supplies ``Sequence[T]`` (and the other collection shapes below) as every
    registration of ``T``, in registration order. The entry is transient so
    registrations added later are picked up on the next resolve.
    """

    COLLECTION_MAPPINGS: ClassVar[dict[Any, type]] = {
        tuple: tuple,
        list: list,
        Sequence: tuple,
        Iterable: tuple,
        Collection: tuple,
        MutableSequence: list,
    }

    @classmethod
    def get_collection_shape(cls, contract_type: Any) -> tuple[type, Any] | None:
        origin = get_origin(contract_type)
        if origin not in cls.COLLECTION_MAPPINGS:
            return None

        args = get_args(contract_type)
        if len(args) == 1 and origin is not tuple:
            return cls.COLLECTION_MAPPINGS[origin], args[0]
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return tuple, args[0]
        return None

    def supports(self, contract_type: Any) -> bool:
        shape = self.get_collection_shape(contract_type)
        if shape is None:
            return False
        _, element_type = shape
        return self.store.has(element_type)

    def synthesize(self, contract_type: Any, container: Any) -> RegistrationEntry:
        collection_type, element_type = self.get_collection_shape(contract_type)  # type: ignore
        store = self.store

        def resolve_elements(resolver):
            entries = store.all(lambda e: e.contract_type == element_type)
            return collection_type(resolver.resolve_entry(e) for e in entries)

        return RegistrationEntry(
            contract_type=contract_type,
            implementation_type=contract_type,
            activator=DelegateActivator(resolve_elements, implementation_type=contract_type),
            lifecycle=TransientLifecycle(),
        )


class OpenGenericRegistrationSource(RegistrationSource):
    """
    Closes an open generic registration: when ``Repository`` is registered with
    ``SqlRepository``, a request for ``Repository[User]`` is served by
    ``SqlRepository[User]``.
    """

    def supports(self, contract_type: Any) -> bool:
        origin = get_origin(contract_type)
        if origin is None or not get_args(contract_type):
            return False
        return self.store.try_get(origin) is not None

    @staticmethod
    def _close_implementation(implementation_type: Any, args: tuple[Any, ...]) -> Any:
        parameters = getattr(implementation_type, "__parameters__", ())
        if parameters and len(parameters) == len(args):
            return implementation_type[args]
        return implementation_type

    def synthesize(self, contract_type: Any, container: Any) -> RegistrationEntry:
        open_entry = self.store.try_get(get_origin(contract_type))
        if open_entry is None:
            raise LookupError(f"Open registration for {contract_type!r} disappeared")

        if isinstance(open_entry.activator, ReflectionActivator):
            implementation_type = self._close_implementation(open_entry.implementation_type, get_args(contract_type))
            activator = ReflectionActivator(implementation_type, selector=open_entry.activator.selector)
        else:
            implementation_type = open_entry.implementation_type
            activator = open_entry.activator

        return RegistrationEntry(
            contract_type=contract_type,
            implementation_type=implementation_type,
            activator=activator,
            lifecycle=open_entry.lifecycle.clone(),
            name=open_entry.name,
            group=open_entry.group,
            arguments=open_entry.arguments,
            properties=open_entry.properties,
        )


class ConcreteTypeRegistrationSource(RegistrationSource):
    """Activates any concrete, non-builtin class on request without a registration."""

    def supports(self, contract_type: Any) -> bool:
        if contract_type is Any or not isinstance(contract_type, type):
            return False
        return is_concrete(contract_type)

    def synthesize(self, contract_type: Any, container: Any) -> RegistrationEntry:
        return RegistrationEntry(
            contract_type=contract_type,
            implementation_type=contract_type,
            activator=ReflectionActivator(contract_type),
            lifecycle=TransientLifecycle(),
        )
