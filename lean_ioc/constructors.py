from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, get_origin, get_type_hints

from .utils import EMPTY, type_name

if TYPE_CHECKING:
    from .core import ResolutionContext

logger = logging.getLogger(__name__)

_CONSTRUCTOR_MARKER = "__lean_ioc_constructor__"


class ParameterInfo:
    __slots__ = ("default_value", "kind", "name", "parameter_type")

    def __init__(
        self,
        name: str,
        parameter_type: Any,
        default_value: Any = EMPTY,
        kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        self.name = name
        self.parameter_type = parameter_type
        self.default_value = EMPTY if default_value is inspect.Parameter.empty else default_value
        self.kind = kind

    @property
    def has_default(self) -> bool:
        return self.default_value is not EMPTY

    def __repr__(self):
        return f"{self.name}: {type_name(self.parameter_type)}"


def _get_parameter_info(subject: Callable, signature_source: Callable | None = None) -> list[ParameterInfo]:
    source = signature_source or subject
    if inspect.isclass(source):
        hints_source = source.__init__
    else:
        hints_source = getattr(source, "__func__", source)

    hints = get_type_hints(hints_source)
    signature = inspect.signature(source)

    parameters = []
    for name, param in signature.parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        parameters.append(
            ParameterInfo(
                name=name,
                parameter_type=hints.get(name, Any),
                default_value=param.default,
                kind=param.kind,
            )
        )
    return parameters


class ConstructorInfo:
    """
    Describes one way of building an implementation: the callable to invoke and
    the parameters it takes.
    """

    __slots__ = ("factory", "name", "parameters")

    def __init__(self, factory: Callable, parameters: Sequence[ParameterInfo], name: str = "__init__"):
        self.factory = factory
        self.parameters = tuple(parameters)
        self.name = name

    @classmethod
    def from_callable(cls, factory: Callable, *, name: str | None = None, signature_source: Callable | None = None):
        return cls(
            factory=factory,
            parameters=_get_parameter_info(factory, signature_source),
            name=name or getattr(factory, "__name__", "__init__"),
        )

    def invoke(self, arguments: dict[str, Any]) -> Any:
        positional = []
        keywords = {}
        for parameter in self.parameters:
            if parameter.name not in arguments:
                continue
            if parameter.kind == inspect.Parameter.POSITIONAL_ONLY:
                positional.append(arguments[parameter.name])
            else:
                keywords[parameter.name] = arguments[parameter.name]
        return self.factory(*positional, **keywords)

    def __len__(self):
        return len(self.parameters)

    def __repr__(self):
        params = ", ".join(repr(p) for p in self.parameters)
        return f"{self.name}({params})"


def constructor(fn):
    """
    Marks a classmethod as an alternative constructor that the container may
    choose when activating the class.

        class Service:
            @constructor
            @classmethod
            def from_repository(cls, repository: Repository): ...
    """
    target = fn.__func__ if isinstance(fn, classmethod) else fn
    setattr(target, _CONSTRUCTOR_MARKER, True)
    return fn


def get_constructors(implementation: Any) -> list[ConstructorInfo]:
    """
    Returns the constructor candidates for an implementation type: the type
    itself (its ``__init__``) followed by any classmethods marked with
    ``@constructor``.
    """
    target = get_origin(implementation) or implementation
    constructors = [
        ConstructorInfo.from_callable(implementation, name="__init__", signature_source=target),
    ]

    seen: set[str] = set()
    for klass in inspect.getmro(target):
        for attr_name, attr in vars(klass).items():
            if attr_name in seen:
                continue
            seen.add(attr_name)
            if isinstance(attr, classmethod) and getattr(attr.__func__, _CONSTRUCTOR_MARKER, False):
                constructors.append(ConstructorInfo.from_callable(getattr(target, attr_name), name=attr_name))

    return constructors


class ConstructorSelector:
    """
    Picks the richest constructor that the registered dependencies and the
    supplied arguments can fully satisfy. Never fails: when no candidate can be
    satisfied the constructor with the fewest parameters is returned.
    """

    def select(self, constructors: Sequence[ConstructorInfo], context: ResolutionContext) -> ConstructorInfo:
        candidates = sorted(constructors, key=len, reverse=True)
        fallback = candidates[-1]

        if len(candidates) == 1:
            return fallback

        arguments = context.arguments
        runtime_arguments = context.runtime_arguments
        supplied_count = arguments.count + runtime_arguments.count

        for candidate in candidates:
            satisfiable = {p.name for p in candidate.parameters if context.store.is_supported(p.parameter_type)}

            if supplied_count == 0:
                if len(satisfiable) == len(candidate.parameters):
                    logger.debug("Selected %r for %s", candidate, type_name(context.entry.implementation_type))
                    return candidate
                continue

            if supplied_count < len(candidate.parameters) - len(satisfiable):
                continue

            if all(
                p.name in satisfiable or arguments.can_supply(p) or runtime_arguments.can_supply(p)
                for p in candidate.parameters
            ):
                logger.debug("Selected %r for %s", candidate, type_name(context.entry.implementation_type))
                return candidate

        logger.debug("Falling back to %r for %s", fallback, type_name(context.entry.implementation_type))
        return fallback
