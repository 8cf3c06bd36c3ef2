from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from .utils import EMPTY

if TYPE_CHECKING:
    from .constructors import ParameterInfo


def value_matches_type(value: Any, parameter_type: Any) -> bool:
    if parameter_type is Any or parameter_type is EMPTY or parameter_type is inspect.Parameter.empty:
        return True

    origin = get_origin(parameter_type)
    if origin is Union or origin is types.UnionType:
        return any(value_matches_type(value, arg) for arg in get_args(parameter_type))

    if parameter_type is None or parameter_type is type(None):
        return value is None

    check_type = origin or parameter_type
    if isinstance(check_type, type):
        return isinstance(value, check_type)

    return True


def to_named_arguments(arguments: Any) -> dict[str, Any]:
    """
    Converts a structured argument object into a named argument mapping.

    Accepts mappings, dataclass instances, named tuples and plain objects
    (their public instance attributes).
    """
    if arguments is None:
        return {}
    if isinstance(arguments, Mapping):
        return dict(arguments)
    if dataclasses.is_dataclass(arguments) and not isinstance(arguments, type):
        return {f.name: getattr(arguments, f.name) for f in dataclasses.fields(arguments)}
    if isinstance(arguments, tuple) and hasattr(arguments, "_asdict"):
        return dict(arguments._asdict())
    if hasattr(arguments, "__dict__"):
        return {k: v for k, v in vars(arguments).items() if not k.startswith("_")}

    raise TypeError(f"Cannot convert {type(arguments).__name__} to named arguments")


class ArgumentBinding:
    """
    Holds explicit constructor arguments: an ordered sequence of anonymous values
    and a mapping of parameter name to value.
    """

    __slots__ = ("named", "positional")

    def __init__(self, positional: Iterable[Any] = (), named: Mapping[str, Any] | None = None):
        self.positional: tuple[Any, ...] = tuple(positional)
        self.named: dict[str, Any] = dict(named) if named else {}

    @property
    def count(self) -> int:
        return len(self.positional) + len(self.named)

    def can_supply(self, parameter: ParameterInfo) -> bool:
        if parameter.name in self.named:
            return True
        return any(value_matches_type(value, parameter.parameter_type) for value in self.positional)

    def extend(self, positional: Iterable[Any] = (), named: Mapping[str, Any] | None = None) -> ArgumentBinding:
        merged_named = dict(self.named)
        if named:
            merged_named.update(named)
        return ArgumentBinding((*self.positional, *positional), merged_named)

    def cursor(self) -> ArgumentCursor:
        return ArgumentCursor(self)

    def __repr__(self):
        return f"ArgumentBinding(positional={self.positional!r}, named={self.named!r})"


class ArgumentCursor:
    """Consumes values from a binding while the parameters of one constructor are bound."""

    __slots__ = ("_binding", "_remaining")

    def __init__(self, binding: ArgumentBinding):
        self._binding = binding
        self._remaining = list(binding.positional)

    def take(self, parameter: ParameterInfo) -> Any:
        if parameter.name in self._binding.named:
            return self._binding.named[parameter.name]

        for index, value in enumerate(self._remaining):
            if value_matches_type(value, parameter.parameter_type):
                del self._remaining[index]
                return value

        return EMPTY
