from typing import get_args


def singleton(cls):
    """
    A singleton decorator. Every instantiation of the decorated class returns
    the same instance. Used for sentinel values that must compare by identity.
    """

    cls.__INSTANCE__ = None

    def singleton_new(singleton_cls):
        if cls.__INSTANCE__ is None:
            cls.__INSTANCE__ = super(cls, cls).__new__(cls)
        return cls.__INSTANCE__

    cls.__new__ = singleton_new

    return cls


@singleton
class _empty:  # noqa: N801
    def __bool__(self):
        return False

    def __repr__(self):
        return "EMPTY"


EMPTY = _empty()


def type_name(t) -> str:
    if get_args(t):
        return repr(t)
    return getattr(t, "__qualname__", None) or repr(t)
