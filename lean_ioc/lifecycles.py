"""Instance reuse strategies."""

from __future__ import annotations

import abc
import logging
import threading
from collections.abc import Callable, Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from .errors import ScopeNotActiveError
from .utils import EMPTY

if TYPE_CHECKING:
    from .core import ResolutionContext

logger = logging.getLogger(__name__)

ScopeStorage = MutableMapping[Any, Any]
ScopeStorageProvider = Callable[[], "ScopeStorage | None"]

_current_scope_items: ContextVar[ScopeStorage | None] = ContextVar("lean_ioc_scope_items", default=None)


def current_scope_items() -> ScopeStorage | None:
    return _current_scope_items.get()


@contextmanager
def ambient_scope(items: ScopeStorage | None = None) -> Iterator[ScopeStorage]:
    """
    Makes ``items`` (a new dict when omitted) the ambient scope storage for the
    current context until the block exits.
    """
    storage: ScopeStorage = {} if items is None else items
    token = _current_scope_items.set(storage)
    logger.debug("Entered scope %s", id(storage))
    try:
        yield storage
    finally:
        _current_scope_items.reset(token)
        logger.debug("Left scope %s", id(storage))


class Lifecycle(abc.ABC):
    @abc.abstractmethod
    def get_instance(self, context: ResolutionContext, activate: Callable[[], Any]) -> Any: ...

    def clone(self) -> Lifecycle:
        """A fresh strategy of the same kind with an empty cache. Override when __init__ takes arguments."""
        return type(self)()

    def __repr__(self):
        return f"{type(self).__name__}()"


class TransientLifecycle(Lifecycle):
    def get_instance(self, context: ResolutionContext, activate: Callable[[], Any]) -> Any:
        return activate()


class SingletonLifecycle(Lifecycle):
    def __init__(self):
        self._instance = EMPTY
        self._lock = threading.RLock()

    def get_instance(self, context: ResolutionContext, activate: Callable[[], Any]) -> Any:
        if self._instance is EMPTY:
            with self._lock:
                if self._instance is EMPTY:
                    self._instance = activate()
        return self._instance


class ScopedLifecycle(Lifecycle):
    """
    Reuses one instance per ambient scope storage. The storage is owned by
    whoever supplies it; this strategy only reads and writes entries in it.
    """

    def __init__(self, storage_provider: ScopeStorageProvider = current_scope_items):
        self.storage_provider = storage_provider

    def get_instance(self, context: ResolutionContext, activate: Callable[[], Any]) -> Any:
        items = self.storage_provider()
        if items is None:
            raise ScopeNotActiveError(context.entry.contract_type)

        key = context.entry.key
        instance = items.get(key, EMPTY)
        if instance is EMPTY:
            instance = activate()
            items[key] = instance
        return instance

    def clone(self) -> Lifecycle:
        return ScopedLifecycle(self.storage_provider)


class ThreadLifecycle(Lifecycle):
    def __init__(self):
        self._local = threading.local()

    def get_instance(self, context: ResolutionContext, activate: Callable[[], Any]) -> Any:
        instance = getattr(self._local, "instance", EMPTY)
        if instance is EMPTY:
            instance = activate()
            self._local.instance = instance
        return instance
