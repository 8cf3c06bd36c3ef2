import inspect

from assertive import assert_that, has_length

from lean_ioc.arguments import ArgumentBinding
from lean_ioc.constructors import ConstructorInfo, ConstructorSelector, constructor, get_constructors
from lean_ioc.core import InstanceActivator, RegistrationEntry, RegistrationStore, ResolutionContext
from lean_ioc.lifecycles import TransientLifecycle


class Dependency:
    pass


def build_empty():
    return "empty"


def build_with_dependency(dependency: Dependency):
    return "dependency"


def build_with_dependency_and_size(dependency: Dependency, size: int):
    return "dependency_and_size"


CONSTRUCTORS = [
    ConstructorInfo.from_callable(build_empty),
    ConstructorInfo.from_callable(build_with_dependency),
    ConstructorInfo.from_callable(build_with_dependency_and_size),
]


def register_dependency(store: RegistrationStore):
    store.add(
        RegistrationEntry(
            contract_type=Dependency,
            implementation_type=Dependency,
            activator=InstanceActivator(Dependency()),
            lifecycle=TransientLifecycle(),
        )
    )


def make_context(store, arguments=None, runtime_arguments=None):
    entry = RegistrationEntry(
        contract_type=object,
        implementation_type=object,
        activator=InstanceActivator(object()),
        lifecycle=TransientLifecycle(),
    )
    return ResolutionContext(
        container=None,
        store=store,
        entry=entry,
        arguments=arguments or ArgumentBinding(),
        runtime_arguments=runtime_arguments or ArgumentBinding(),
    )


def test_selects_richest_constructor_satisfied_by_registrations():
    store = RegistrationStore()
    register_dependency(store)

    selected = ConstructorSelector().select(CONSTRUCTORS, make_context(store))

    assert_that(selected.name).matches("build_with_dependency")


def test_selects_constructor_completed_by_named_argument():
    store = RegistrationStore()
    register_dependency(store)

    selected = ConstructorSelector().select(
        CONSTRUCTORS, make_context(store, runtime_arguments=ArgumentBinding(named={"size": 5}))
    )

    assert_that(selected.name).matches("build_with_dependency_and_size")


def test_persistent_arguments_count_towards_selection():
    store = RegistrationStore()
    register_dependency(store)

    selected = ConstructorSelector().select(CONSTRUCTORS, make_context(store, arguments=ArgumentBinding([5])))

    assert_that(selected.name).matches("build_with_dependency_and_size")


def test_selects_parameterless_constructor_when_nothing_is_registered():
    selected = ConstructorSelector().select(CONSTRUCTORS, make_context(RegistrationStore()))

    assert_that(selected.name).matches("build_empty")


def test_positional_argument_matching_the_parameter_type_satisfies_it():
    selected = ConstructorSelector().select(
        CONSTRUCTORS, make_context(RegistrationStore(), runtime_arguments=ArgumentBinding([Dependency()]))
    )

    assert_that(selected.name).matches("build_with_dependency")


def test_single_constructor_is_returned_even_when_unsatisfiable():
    only = ConstructorInfo.from_callable(build_with_dependency_and_size)

    selected = ConstructorSelector().select([only], make_context(RegistrationStore()))

    assert_that(selected).matches(only)


def test_falls_back_to_fewest_parameters_when_nothing_is_satisfiable():
    def needs_size(size: int):
        pass

    def needs_size_and_label(size: int, label: str):
        pass

    constructors = [ConstructorInfo.from_callable(needs_size_and_label), ConstructorInfo.from_callable(needs_size)]

    selected = ConstructorSelector().select(constructors, make_context(RegistrationStore()))

    assert_that(selected.name).matches("needs_size")


def test_get_constructors_includes_init_and_marked_classmethods():
    class Service:
        def __init__(self, dependency: Dependency, size: int):
            self.dependency = dependency
            self.size = size

        @constructor
        @classmethod
        def from_dependency(cls, dependency: Dependency):
            return cls(dependency, 0)

        @classmethod
        def not_a_constructor(cls):
            return cls(Dependency(), 0)

    constructors = get_constructors(Service)

    assert_that(constructors).matches(has_length(2))
    assert_that([c.name for c in constructors]).matches(["__init__", "from_dependency"])
    assert_that([p.name for p in constructors[0].parameters]).matches(["dependency", "size"])
    assert_that(len(constructors[1])).matches(1)


def test_parameter_info_records_defaults_and_skips_variadics():
    def build(a: int, b: str = "x", *args, **kwargs):
        pass

    info = ConstructorInfo.from_callable(build)

    assert_that([p.name for p in info.parameters]).matches(["a", "b"])
    assert_that(info.parameters[0].has_default).matches(False)
    assert_that(info.parameters[1].default_value).matches("x")


def test_invoke_passes_positional_only_parameters_positionally():
    def build(a: int, /, b: int):
        return (a, b)

    info = ConstructorInfo.from_callable(build)

    assert_that(info.parameters[0].kind).matches(inspect.Parameter.POSITIONAL_ONLY)
    assert_that(info.invoke({"a": 1, "b": 2})).matches((1, 2))
