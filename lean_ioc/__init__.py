"""A small inversion of control container."""

from .arguments import ArgumentBinding, to_named_arguments
from .builder import ContainerBuilder
from .constructors import ConstructorInfo, ConstructorSelector, ParameterInfo, constructor, get_constructors
from .container import Container
from .core import (
    Activator,
    DelegateActivator,
    InstanceActivator,
    ReflectionActivator,
    RegistrationEntry,
    RegistrationFilter,
    RegistrationKey,
    RegistrationStore,
    ResolutionContext,
    Resolver,
)
from .errors import (
    ActivationFailedError,
    RegistrationAmbiguousError,
    RegistrationError,
    RegistrationNotFoundError,
    ResolutionFailedError,
    ScopeNotActiveError,
)
from .lifecycles import Lifecycle, ScopedLifecycle, SingletonLifecycle, ThreadLifecycle, TransientLifecycle
from .modules import OnlyRunOncePerClassModule, OnlyRunOncePerInstanceModule, RegistrationModule
from .registration_sources import (
    ConcreteTypeRegistrationSource,
    EnumerableRegistrationSource,
    OpenGenericRegistrationSource,
    RegistrationSource,
)
from .settings import ContainerSettings

__all__ = [
    "ActivationFailedError",
    "Activator",
    "ArgumentBinding",
    "ConcreteTypeRegistrationSource",
    "ConstructorInfo",
    "ConstructorSelector",
    "Container",
    "ContainerBuilder",
    "ContainerSettings",
    "DelegateActivator",
    "EnumerableRegistrationSource",
    "InstanceActivator",
    "Lifecycle",
    "OnlyRunOncePerClassModule",
    "OnlyRunOncePerInstanceModule",
    "OpenGenericRegistrationSource",
    "ParameterInfo",
    "ReflectionActivator",
    "RegistrationAmbiguousError",
    "RegistrationEntry",
    "RegistrationError",
    "RegistrationFilter",
    "RegistrationKey",
    "RegistrationModule",
    "RegistrationNotFoundError",
    "RegistrationSource",
    "RegistrationStore",
    "ResolutionContext",
    "ResolutionFailedError",
    "Resolver",
    "ScopeNotActiveError",
    "ScopedLifecycle",
    "SingletonLifecycle",
    "ThreadLifecycle",
    "TransientLifecycle",
    "constructor",
    "get_constructors",
    "to_named_arguments",
]
