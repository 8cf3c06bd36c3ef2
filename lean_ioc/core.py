"""Registration store and activation primitives."""

from __future__ import annotations

import abc
import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from theutilitybelt.functional.utils import constant

from .arguments import ArgumentBinding
from .constructors import ConstructorInfo, ConstructorSelector, get_constructors
from .lifecycles import Lifecycle
from .utils import EMPTY, type_name

if TYPE_CHECKING:
    from .registration_sources import RegistrationSource

logger = logging.getLogger(__name__)

TService = TypeVar("TService")

RegistrationFilter = Callable[["RegistrationEntry"], bool]

all_registrations = constant(True)


class RegistrationKey:
    """
    Identity of a registration. Two keys are equal when their contract type and
    name match; ``group`` is carried along but is not part of the identity.
    Keys are read-only so a key never changes its hash while it is stored.
    """

    __slots__ = ("_contract_type", "_group", "_name")

    def __init__(self, contract_type: Any, name: str | None = None, group: str | None = None):
        object.__setattr__(self, "_contract_type", contract_type)
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_group", group)

    @property
    def contract_type(self) -> Any:
        return self._contract_type

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def group(self) -> str | None:
        return self._group

    def __setattr__(self, name, value):
        raise AttributeError(f"RegistrationKey is read-only, cannot set {name!r}")

    def __eq__(self, other):
        if not isinstance(other, RegistrationKey):
            return NotImplemented
        return self._contract_type == other._contract_type and self._name == other._name

    def __hash__(self):
        return hash((self._contract_type, self._name))

    def __repr__(self):
        return f"RegistrationKey({type_name(self._contract_type)}, name={self._name!r}, group={self._group!r})"


class Activator(abc.ABC):
    implementation_type: Any

    @abc.abstractmethod
    def activate(self, context: ResolutionContext) -> Any: ...


class ReflectionActivator(Activator):
    """Builds an implementation by selecting one of its constructors and binding its parameters."""

    __slots__ = ("constructors", "implementation_type", "selector")

    def __init__(
        self,
        implementation_type: Any,
        constructors: Sequence[ConstructorInfo | Callable] | None = None,
        selector: ConstructorSelector | None = None,
    ):
        self.implementation_type = implementation_type
        if constructors:
            self.constructors = [
                c if isinstance(c, ConstructorInfo) else ConstructorInfo.from_callable(c) for c in constructors
            ]
        else:
            self.constructors = get_constructors(implementation_type)
        self.selector = selector or ConstructorSelector()

    def activate(self, context: ResolutionContext) -> Any:
        selected = self.selector.select(self.constructors, context)
        return selected.invoke(self._bind_arguments(selected, context))

    @staticmethod
    def _bind_arguments(selected: ConstructorInfo, context: ResolutionContext) -> dict[str, Any]:
        runtime_arguments = context.runtime_arguments.cursor()
        arguments = context.arguments.cursor()
        values: dict[str, Any] = {}

        for parameter in selected.parameters:
            value = runtime_arguments.take(parameter)
            if value is EMPTY:
                value = arguments.take(parameter)
            if value is EMPTY:
                if parameter.has_default and not context.store.is_supported(parameter.parameter_type):
                    continue
                value = context.container.resolve(parameter.parameter_type)
            values[parameter.name] = value

        return values


class InstanceActivator(Activator):
    __slots__ = ("implementation_type", "instance")

    def __init__(self, instance: Any):
        self.instance = instance
        self.implementation_type = type(instance)

    def activate(self, context: ResolutionContext) -> Any:
        return self.instance


class DelegateActivator(Activator):
    """Calls a factory function with the requesting container."""

    __slots__ = ("factory", "implementation_type")

    def __init__(self, factory: Callable[[Any], Any], implementation_type: Any = None):
        self.factory = factory
        self.implementation_type = implementation_type or factory

    def activate(self, context: ResolutionContext) -> Any:
        return self.factory(context.container)


class RegistrationEntry:
    __slots__ = (
        "_call_state",
        "activator",
        "arguments",
        "contract_type",
        "implementation_type",
        "key",
        "lifecycle",
        "properties",
    )

    def __init__(
        self,
        contract_type: Any,
        implementation_type: Any,
        activator: Activator,
        lifecycle: Lifecycle,
        *,
        name: str | None = None,
        group: str | None = None,
        arguments: ArgumentBinding | None = None,
        properties: Sequence[str] | None = None,
    ):
        self.contract_type = contract_type
        self.implementation_type = implementation_type
        self.activator = activator
        self.lifecycle = lifecycle
        self.key = RegistrationKey(contract_type, name, group)
        self.arguments = arguments or ArgumentBinding()
        self.properties = tuple(properties) if properties is not None else None
        self._call_state = threading.local()

    @property
    def name(self) -> str | None:
        return self.key.name

    @property
    def group(self) -> str | None:
        return self.key.group

    @property
    def runtime_arguments(self) -> ArgumentBinding:
        binding = getattr(self._call_state, "runtime_arguments", None)
        return binding if binding is not None else ArgumentBinding()

    @contextmanager
    def runtime_scope(self, runtime_arguments: ArgumentBinding) -> Iterator[ArgumentBinding]:
        """
        Binds runtime arguments to this entry for the current thread while the
        block runs. The previous binding is restored afterwards, also on failure.
        """
        previous = getattr(self._call_state, "runtime_arguments", None)
        self._call_state.runtime_arguments = runtime_arguments
        try:
            yield runtime_arguments
        finally:
            self._call_state.runtime_arguments = previous

    def __repr__(self):
        return (
            f"RegistrationEntry({type_name(self.contract_type)} -> {type_name(self.implementation_type)}, "
            f"name={self.name!r}, lifecycle={self.lifecycle!r})"
        )


class RegistrationStore:
    def __init__(self, registration_sources: Iterable[RegistrationSource] = ()):
        self._entries: dict[RegistrationKey, RegistrationEntry] = {}
        self._keys_by_contract: dict[Any, list[RegistrationKey]] = {}
        self._registration_sources: list[RegistrationSource] = list(registration_sources)
        self._lock = threading.RLock()

    @property
    def registration_sources(self) -> Sequence[RegistrationSource]:
        return tuple(self._registration_sources)

    def add_registration_source(self, source: RegistrationSource):
        self._registration_sources.append(source)

    def add(self, entry: RegistrationEntry):
        with self._lock:
            if entry.key in self._entries:
                logger.debug("Replacing registration %r", entry.key)
            else:
                self._keys_by_contract.setdefault(entry.contract_type, []).append(entry.key)
            self._entries[entry.key] = entry

    def remove(self, contract_type: Any):
        with self._lock:
            for key in self._keys_by_contract.pop(contract_type, []):
                del self._entries[key]

    def try_get(self, contract_type: Any, name: str | None = None) -> RegistrationEntry | None:
        if name is not None:
            return self._entries.get(RegistrationKey(contract_type, name))

        entry = self._entries.get(RegistrationKey(contract_type))
        if entry is not None:
            return entry

        keys = self._keys_by_contract.get(contract_type)
        if keys and len(keys) == 1:
            return self._entries[keys[0]]
        return None

    def has(self, contract_type: Any) -> bool:
        return bool(self._keys_by_contract.get(contract_type))

    def has_duplicate(self, contract_type: Any) -> bool:
        return len(self._keys_by_contract.get(contract_type, ())) > 1

    def names(self, contract_type: Any) -> list[str | None]:
        return [key.name for key in self._keys_by_contract.get(contract_type, ())]

    def all(self, filter: RegistrationFilter = all_registrations) -> list[RegistrationEntry]:
        return [entry for entry in list(self._entries.values()) if filter(entry)]

    def is_supported(self, contract_type: Any) -> bool:
        if self.has(contract_type):
            return True
        return any(source.supports(contract_type) for source in self._registration_sources)

    def get_or_synthesize(self, contract_type: Any, container: Any) -> RegistrationEntry | None:
        """
        Asks the registration sources, in order, for an entry for an unregistered
        contract type and caches the first one produced. Concurrent callers for
        the same contract type receive the same cached entry.
        """
        with self._lock:
            entry = self.try_get(contract_type)
            if entry is not None:
                return entry

            source = next((s for s in self._registration_sources if s.supports(contract_type)), None)
            if source is None:
                return None

            entry = source.synthesize(contract_type, container)
            logger.debug("%s synthesized %r", type(source).__name__, entry)
            self.add(entry)
            return entry

    def __contains__(self, key: RegistrationKey):
        return key in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self.all())


class ResolutionContext:
    """State for one activation: who asked, where to look, and which arguments apply."""

    __slots__ = ("arguments", "container", "entry", "runtime_arguments", "store")

    def __init__(
        self,
        container: Any,
        store: RegistrationStore,
        entry: RegistrationEntry,
        arguments: ArgumentBinding,
        runtime_arguments: ArgumentBinding,
    ):
        self.container = container
        self.store = store
        self.entry = entry
        self.arguments = arguments
        self.runtime_arguments = runtime_arguments


class Resolver(Protocol):
    def resolve(
        self,
        contract_type: type[TService],
        *args: Any,
        name: str | None = None,
        named_args: Mapping[str, Any] | None = None,
    ) -> TService: ...

    def resolve_all(self, contract_type: Any = None, filter: RegistrationFilter = all_registrations) -> list[Any]: ...

    def resolve_entry(self, entry: RegistrationEntry) -> Any: ...

    def has_registration(self, contract_type: Any) -> bool: ...

    def inject_properties(self, instance: Any) -> None: ...
