from __future__ import annotations

from typing import Any

from .utils import type_name


class ResolutionFailedError(Exception):
    """Base class for every failure raised while resolving a contract."""


class RegistrationError(Exception):
    """Raised when a registration is declared incorrectly."""


class RegistrationNotFoundError(ResolutionFailedError):
    def __init__(self, contract_type: Any, name: str | None = None):
        self.contract_type = contract_type
        self.name = name
        super().__init__(str(self))

    def __str__(self):
        with_name = f" with name '{self.name}'" if self.name is not None else ""
        return f"No registration found for {type_name(self.contract_type)}{with_name}"


class RegistrationAmbiguousError(ResolutionFailedError):
    def __init__(self, contract_type: Any, names: list[str | None] | None = None):
        self.contract_type = contract_type
        self.names = names or []
        super().__init__(str(self))

    def __str__(self):
        names = ", ".join(repr(n) for n in self.names)
        return (
            f"{type_name(self.contract_type)} has more than one registration ({names}), "
            "resolve it with a name"
        )


class ScopeNotActiveError(ResolutionFailedError):
    def __init__(self, contract_type: Any):
        self.contract_type = contract_type
        super().__init__(str(self))

    def __str__(self):
        return f"{type_name(self.contract_type)} is expected to be resolved within a scope"


class ActivationFailedError(ResolutionFailedError):
    """
    Raised when building an implementation fails, either in its own constructor
    or in one of its nested dependencies. ``cause`` is the original failure.
    """

    def __init__(self, implementation_type: Any, cause: BaseException):
        self.implementation_type = implementation_type
        self.cause = cause
        super().__init__(str(self))

    @property
    def chain(self) -> list[Any]:
        chain = [self.implementation_type]
        if isinstance(self.cause, ActivationFailedError):
            chain.extend(self.cause.chain)
        return chain

    @property
    def root_cause(self) -> BaseException:
        if isinstance(self.cause, ActivationFailedError):
            return self.cause.root_cause
        return self.cause

    @staticmethod
    def print_implementation(implementation_type: Any):
        content = f"implementation: {type_name(implementation_type)}"
        width = len(content)
        top_border = "┌" + "─" * (width + 2) + "┐"
        bottom_border = "└" + "─" * (width + 2) + "┘"
        return f"{top_border}\n│ {content} │\n{bottom_border}"

    @property
    def message(self):
        root = self.root_cause
        return f"Failed to activate {type_name(self.implementation_type)}: {type(root).__name__}: {root}"

    @property
    def activation_chain(self):
        arrow = "↓\n"
        return arrow.join(f"{self.print_implementation(t)}\n" for t in self.chain)

    def __str__(self):
        return f"\n{self.message}\n\nActivation chain:\n{self.activation_chain}"
