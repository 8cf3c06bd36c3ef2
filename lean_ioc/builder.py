from __future__ import annotations

import logging
from collections.abc import Callable, Hashable

from theutilitybelt.functional.predicate import always_true
from theutilitybelt.typing.utils import get_subclasses

from .container import Container
from .errors import RegistrationError
from .modules import RegistrationModule
from .registrator import LifecycleOption, Registrator
from .settings import ContainerSettings, RegistrationSourceFactory
from .type_filters import is_abstract

logger = logging.getLogger(__name__)


class ContainerBuilder(Registrator):
    """
    Collects registrations and builds a container from them.

        builder = ContainerBuilder()
        builder.register(Repository, SqlRepository, lifecycle=SingletonLifecycle)
        container = builder.build()
    """

    def __init__(self, settings: ContainerSettings | None = None):
        self.settings = settings or ContainerSettings()
        self.store = self.settings.create_store()
        self._applied_modules: set[Hashable] = set()
        self._is_built = False

    def _check_can_register(self):
        if self._is_built:
            raise RegistrationError("The container has already been built, register on the container instead")

    def register_subclasses(
        self,
        base_type: type,
        *,
        lifecycle: LifecycleOption = None,
        subclass_type_filter: Callable[[type], bool] = always_true,
        group: str | None = None,
    ) -> ContainerBuilder:
        """
        Registers every concrete subclass of ``base_type`` under ``base_type``,
        each named after its class.
        """
        full_type_filter = ~(is_abstract) & subclass_type_filter
        for subclass in get_subclasses(base_type, filter=full_type_filter):
            self.register(base_type, subclass, lifecycle=lifecycle, name=subclass.__name__, group=group)
        return self

    def register_module(self, module: RegistrationModule | Callable[[ContainerBuilder], None]) -> ContainerBuilder:
        """
        Applies a module to this builder. Modules with a ``module_key`` already
        applied here are skipped.
        """
        self._check_can_register()
        key = module.module_key() if isinstance(module, RegistrationModule) else None
        if key is not None:
            if key in self._applied_modules:
                logger.debug("Module %r already applied, skipping", key)
                return self
            self._applied_modules.add(key)

        try:
            module(self)
        except Exception:
            self._applied_modules.discard(key)
            raise
        return self

    def add_registration_source(self, source_factory: RegistrationSourceFactory) -> ContainerBuilder:
        self._check_can_register()
        self.store.add_registration_source(source_factory(self.store))
        return self

    def build(self) -> Container:
        self._check_can_register()
        self._is_built = True
        logger.debug("Building container with %d registrations", len(self.store))
        return Container(self.store, settings=self.settings)
