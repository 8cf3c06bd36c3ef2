import threading
import time
from collections.abc import Iterable, Sequence
from typing import Generic, TypeVar

from assertive import assert_that, has_length, is_exact_type, is_same_instance_as, raises_exception

from lean_ioc import (
    ActivationFailedError,
    ConcreteTypeRegistrationSource,
    ContainerBuilder,
    ContainerSettings,
    EnumerableRegistrationSource,
    OpenGenericRegistrationSource,
    RegistrationNotFoundError,
    SingletonLifecycle,
)
from lean_ioc.registration_filters import with_contract

T = TypeVar("T")


class Plugin:
    pass


class PluginA(Plugin):
    pass


class PluginB(Plugin):
    pass


class PluginC(Plugin):
    pass


class PluginD(Plugin):
    pass


def test_sequence_resolves_every_registration_in_order():
    builder = ContainerBuilder()
    builder.register(Plugin, PluginA, name="a")
    builder.register(Plugin, PluginB, name="b")
    builder.register(Plugin, PluginC, name="c")
    container = builder.build()

    plugins = container.resolve(Sequence[Plugin])

    assert_that(plugins).matches(has_length(3))
    assert_that([type(p) for p in plugins]).matches([PluginA, PluginB, PluginC])


def test_sequence_includes_registrations_added_after_the_first_resolve():
    builder = ContainerBuilder()
    builder.register(Plugin, PluginA, name="a")
    builder.register(Plugin, PluginB, name="b")
    builder.register(Plugin, PluginC, name="c")
    container = builder.build()

    container.resolve(Sequence[Plugin])
    container.register(Plugin, PluginD, name="d")
    plugins = container.resolve(Sequence[Plugin])

    assert_that(plugins).matches(has_length(4))
    assert_that(plugins[3]).matches(is_exact_type(PluginD))


def test_collection_shapes():
    container = ContainerBuilder().register(Plugin, PluginA, name="a").register(Plugin, PluginB, name="b").build()

    assert_that(container.resolve(list[Plugin])).matches(is_exact_type(list))
    assert_that(container.resolve(tuple[Plugin, ...])).matches(is_exact_type(tuple))
    assert_that(container.resolve(Iterable[Plugin])).matches(has_length(2))


def test_list_shape_is_a_fresh_list_on_every_resolve():
    container = ContainerBuilder().register(Plugin, PluginA).build()

    first = container.resolve(list[Plugin])
    first.clear()
    second = container.resolve(list[Plugin])

    assert_that(second).matches(has_length(1))


def test_sequence_of_unregistered_type_is_not_found():
    container = ContainerBuilder().build()

    with raises_exception(RegistrationNotFoundError):
        container.resolve(Sequence[Plugin])


def test_sequence_elements_keep_their_lifecycles():
    container = ContainerBuilder().register(Plugin, PluginA, lifecycle=SingletonLifecycle).build()

    first = container.resolve(Sequence[Plugin])
    second = container.resolve(Sequence[Plugin])

    assert_that(first[0]).matches(is_same_instance_as(second[0]))


def test_sequence_dependency_is_injected_into_constructor():
    class PluginHost:
        def __init__(self, plugins: Sequence[Plugin]):
            self.plugins = plugins

    container = (
        ContainerBuilder()
        .register(Plugin, PluginA, name="a")
        .register(Plugin, PluginB, name="b")
        .register(PluginHost)
        .build()
    )

    host = container.resolve(PluginHost)

    assert_that(host.plugins).matches(has_length(2))


class Repository(Generic[T]):
    pass


class SqlRepository(Repository[T]):
    pass


class User:
    pass


class Order:
    pass


def test_open_generic_registration_is_closed_on_request():
    container = ContainerBuilder().register(Repository, SqlRepository).build()

    users = container.resolve(Repository[User])

    assert_that(users).matches(is_exact_type(SqlRepository))
    assert_that(users.__orig_class__).matches(SqlRepository[User])


def test_open_generic_singletons_are_per_closed_type():
    container = ContainerBuilder().register(Repository, SqlRepository, lifecycle=SingletonLifecycle).build()

    users = container.resolve(Repository[User])
    orders = container.resolve(Repository[Order])

    assert_that(container.resolve(Repository[User])).matches(is_same_instance_as(users))
    assert_that(orders).does_not_match(is_same_instance_as(users))


def test_closed_registration_wins_over_open_generic():
    class UserRepository(Repository[User]):
        pass

    container = (
        ContainerBuilder().register(Repository, SqlRepository).register(Repository[User], UserRepository).build()
    )

    assert_that(container.resolve(Repository[User])).matches(is_exact_type(UserRepository))
    assert_that(container.resolve(Repository[Order])).matches(is_exact_type(SqlRepository))


def test_concrete_types_are_not_resolved_by_default():
    class Service:
        pass

    container = ContainerBuilder().build()

    with raises_exception(RegistrationNotFoundError):
        container.resolve(Service)


def test_concrete_type_source_activates_unregistered_classes():
    class Dependency:
        pass

    class Service:
        def __init__(self, dependency: Dependency):
            self.dependency = dependency

    settings = ContainerSettings(
        registration_sources=(
            EnumerableRegistrationSource,
            OpenGenericRegistrationSource,
            ConcreteTypeRegistrationSource,
        )
    )
    container = ContainerBuilder(settings).build()

    service = container.resolve(Service)

    assert_that(service).matches(is_exact_type(Service))
    assert_that(service.dependency).matches(is_exact_type(Dependency))


def test_concrete_type_source_can_be_added_to_a_builder():
    class Service:
        pass

    container = ContainerBuilder().add_registration_source(ConcreteTypeRegistrationSource).build()

    assert_that(container.resolve(Service)).matches(is_exact_type(Service))


def test_concrete_type_source_skips_builtins_and_abstract_types():
    from abc import ABC, abstractmethod

    class Abstract(ABC):
        @abstractmethod
        def run(self): ...

    container = ContainerBuilder().add_registration_source(ConcreteTypeRegistrationSource).build()

    assert_that(container.has_registration(int)).matches(False)
    assert_that(container.has_registration(Abstract)).matches(False)


def test_failing_synthesis_is_reported_as_activation_failure():
    class Broken:
        def __init__(self, value: int):
            self.value = value

    container = ContainerBuilder().add_registration_source(ConcreteTypeRegistrationSource).build()

    with raises_exception(ActivationFailedError):
        container.resolve(Broken)


def test_concurrent_first_resolves_synthesize_one_collection_entry():
    synthesized = []

    class CountingEnumerableSource(EnumerableRegistrationSource):
        def synthesize(self, contract_type, container):
            synthesized.append(contract_type)
            time.sleep(0.01)
            return super().synthesize(contract_type, container)

    settings = ContainerSettings(registration_sources=(CountingEnumerableSource,))
    container = (
        ContainerBuilder(settings).register(Plugin, PluginA, name="a").register(Plugin, PluginB, name="b").build()
    )
    sizes = []
    barrier = threading.Barrier(8)

    def resolve():
        barrier.wait()
        sizes.append(len(container.resolve(Sequence[Plugin])))

    threads = [threading.Thread(target=resolve) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert_that(synthesized).matches(has_length(1))
    assert_that(sizes).matches([2] * 8)
    assert_that(container.store.all(with_contract(Sequence[Plugin]))).matches(has_length(1))
