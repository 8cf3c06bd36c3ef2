from collections.abc import Callable
from typing import Any

from theutilitybelt.functional.predicate import predicate

from .core import RegistrationEntry, all_registrations  # noqa: F401
from .lifecycles import Lifecycle


def create_filter(func: Callable[[RegistrationEntry], bool]):
    return predicate(func)


def with_name(name: str | None):
    """
    Filter registrations equal the name
    """

    def _with_name(r: RegistrationEntry):
        return r.name == name

    return predicate(_with_name)


def name_starts_with(prefix: str):
    """
    Filter registrations where the name starts the prefix
    """

    def _name_starts_with(r: RegistrationEntry):
        if r.name is not None:
            return r.name.startswith(prefix)
        return False

    return predicate(_name_starts_with)


is_not_named = with_name(None)
is_not_named.__doc__ = "Filter for registrations that do not have a name"

is_named = ~is_not_named
is_named.__doc__ = "Filter for registrations that have a name"


def in_group(group: str):
    """
    Filter registrations declared in the group
    """

    def _in_group(r: RegistrationEntry):
        return r.group == group

    return predicate(_in_group)


def with_contract(contract_type: Any):
    def _with_contract(r: RegistrationEntry):
        return r.contract_type == contract_type

    return predicate(_with_contract)


def with_implementation(implementation: Any):
    """
    Filter to registrations that have the implementation
    """

    def _with_implementation(r: RegistrationEntry):
        return r.implementation_type == implementation

    return predicate(_with_implementation)


def with_lifecycle(lifecycle_type: type[Lifecycle]):
    def _with_lifecycle(r: RegistrationEntry):
        return isinstance(r.lifecycle, lifecycle_type)

    return predicate(_with_lifecycle)
