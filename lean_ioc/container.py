"""Simple IOC container."""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from functools import partial
from typing import Any, ClassVar, Union, get_args, get_origin, get_type_hints

from .arguments import ArgumentBinding, to_named_arguments
from .core import (
    InstanceActivator,
    ReflectionActivator,
    RegistrationEntry,
    RegistrationFilter,
    RegistrationStore,
    ResolutionContext,
    Resolver,
    TService,
    all_registrations,
)
from .errors import ActivationFailedError, RegistrationAmbiguousError, RegistrationNotFoundError
from .lifecycles import ScopeStorage, TransientLifecycle, ambient_scope
from .registrator import Registrator
from .settings import ContainerSettings
from .type_filters import is_builtin
from .utils import type_name

logger = logging.getLogger(__name__)


def _unwrap_optional(t: Any) -> Any:
    origin = get_origin(t)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(t) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return t


def _is_injectable_type(t: Any) -> bool:
    return isinstance(t, type) and not is_builtin(t)


def get_injectable_properties(cls: type, names: Sequence[str] | None = None) -> list[tuple[str, Any]]:
    """
    Lists the ``(name, type)`` pairs that property injection may assign on
    instances of ``cls``: annotated instance attributes and properties with a
    setter whose getter declares a return type. Builtin types are skipped.
    When ``names`` is given only those properties are returned, in that order.
    """
    candidates: dict[str, Any] = {}

    for name, hint in get_type_hints(cls).items():
        if get_origin(hint) is ClassVar:
            continue
        candidates[name] = _unwrap_optional(hint)

    for name, attr in inspect.getmembers(cls, lambda a: isinstance(a, property)):
        if attr.fset is None:
            candidates.pop(name, None)
            continue
        return_type = get_type_hints(attr.fget).get("return") if attr.fget else None
        if return_type is not None:
            candidates[name] = _unwrap_optional(return_type)

    if names is not None:
        return [(name, candidates[name]) for name in names if name in candidates and _is_injectable_type(candidates[name])]

    return [(name, t) for name, t in candidates.items() if _is_injectable_type(t)]


class Container(Registrator):
    def __init__(self, store: RegistrationStore | None = None, *, settings: ContainerSettings | None = None):
        self.settings = settings or ContainerSettings()
        self.store = store if store is not None else self.settings.create_store()
        self._register_self()

    def _register_self(self):
        for contract_type in (Resolver, Container):
            if self.store.has(contract_type):
                self.store.remove(contract_type)

            self.store.add(
                RegistrationEntry(
                    contract_type=contract_type,
                    implementation_type=type(self),
                    activator=InstanceActivator(self),
                    lifecycle=TransientLifecycle(),
                )
            )

    def resolve(
        self,
        contract_type: type[TService],
        *args: Any,
        name: str | None = None,
        named_args: Mapping[str, Any] | None = None,
    ) -> TService:
        entry = self._find_entry(contract_type, name)
        return self._activate(entry, ArgumentBinding(args, named_args))

    def resolve_with(self, contract_type: type[TService], arguments: Any, *, name: str | None = None) -> TService:
        """
        Resolves with named constructor arguments taken from a structured object
        (a mapping, dataclass instance, named tuple or plain object).
        """
        return self.resolve(contract_type, name=name, named_args=to_named_arguments(arguments))

    def resolve_entry(self, entry: RegistrationEntry) -> Any:
        return self._activate(entry, ArgumentBinding())

    def resolve_all(self, contract_type: Any = None, filter: RegistrationFilter = all_registrations) -> list[Any]:
        entries = self.store.all(filter)
        if contract_type is not None:
            entries = [e for e in entries if e.contract_type == contract_type]
        return [self._activate(e, ArgumentBinding()) for e in entries]

    def has_registration(self, contract_type: Any) -> bool:
        return self.store.is_supported(contract_type)

    def inject_properties(self, instance: Any, properties: Sequence[str] | None = None) -> None:
        for name, property_type in get_injectable_properties(type(instance), properties):
            if not self.store.has(property_type):
                continue
            if getattr(instance, name, None) is not None:
                continue
            logger.debug("Injecting %s.%s", type_name(type(instance)), name)
            setattr(instance, name, self.resolve(property_type))

    @contextmanager
    def new_scope(self, items: ScopeStorage | None = None) -> Iterator[Container]:
        """
        Opens an ambient scope for scoped registrations. Instances are kept in
        ``items`` (a new dict when omitted) until the block exits.
        """
        with ambient_scope(items):
            yield self

    def _find_entry(self, contract_type: Any, name: str | None) -> RegistrationEntry:
        entry = self.store.try_get(contract_type, name)
        if entry is not None:
            return entry

        if name is not None:
            raise RegistrationNotFoundError(contract_type, name)

        if self.store.has_duplicate(contract_type):
            raise RegistrationAmbiguousError(contract_type, self.store.names(contract_type))

        try:
            entry = self.store.get_or_synthesize(contract_type, self)
        except Exception as ex:
            raise ActivationFailedError(contract_type, ex) from ex

        if entry is None:
            raise RegistrationNotFoundError(contract_type)
        return entry

    def _activate(self, entry: RegistrationEntry, runtime_arguments: ArgumentBinding) -> Any:
        with entry.runtime_scope(runtime_arguments):
            context = ResolutionContext(
                container=self,
                store=self.store,
                entry=entry,
                arguments=entry.arguments,
                runtime_arguments=entry.runtime_arguments,
            )
            try:
                return entry.lifecycle.get_instance(context, partial(self._create_instance, context))
            except Exception as ex:
                logger.debug("Activation of %s failed", type_name(entry.implementation_type), exc_info=True)
                raise ActivationFailedError(entry.implementation_type, ex) from ex

    def _create_instance(self, context: ResolutionContext) -> Any:
        entry = context.entry
        instance = entry.activator.activate(context)
        if self.settings.inject_properties and isinstance(entry.activator, ReflectionActivator):
            self.inject_properties(instance, entry.properties)
        return instance
