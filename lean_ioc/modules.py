from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .builder import ContainerBuilder


class RegistrationModule(ABC):
    """
    A reusable group of registrations applied with ``ContainerBuilder.register_module``.

    ``module_key`` decides how often a module runs on one builder: ``None``
    runs it on every call, any other value runs it once per builder for all
    modules sharing that key. The builder keeps track of the keys it has seen.
    """

    @abstractmethod
    def register(self, builder: ContainerBuilder): ...

    def module_key(self) -> Hashable | None:
        return None

    def __call__(self, builder: ContainerBuilder):
        self.register(builder)


class OnlyRunOncePerInstanceModule(RegistrationModule):
    def module_key(self) -> Hashable | None:
        return self


class OnlyRunOncePerClassModule(RegistrationModule):
    def module_key(self) -> Hashable | None:
        return type(self)
