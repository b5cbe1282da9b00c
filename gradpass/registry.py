# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" Class decorators for extension points: registries of subclasses (e.g. gradient
    implementations) and enumerations that accept new members (e.g. mirror strategies). """

from aenum import Enum, extend_enum
from typing import Any, Dict, Type


def make_registry(cls: Type) -> Type:
    """
    Turns ``cls`` into an extension point. The class gains three class-level
    functions:

    * ``register(subclass, **kwargs)`` records ``subclass`` along with its
      registration arguments (e.g. ``op="exp", name="default"``);
    * ``unregister(subclass)`` removes it;
    * ``extensions()`` returns the registered subclasses, in registration
      order, mapped to their arguments.
    """
    registry: Dict[Type, Dict[str, Any]] = {}

    def register(subclass: Type, **kwargs):
        registry[subclass] = kwargs

    def unregister(subclass: Type):
        del registry[subclass]

    cls._registry_ = registry
    cls.register = staticmethod(register)
    cls.unregister = staticmethod(unregister)
    cls.extensions = staticmethod(lambda: registry)
    return cls


def autoregister(cls: Type, **kwargs) -> Type:
    """
    Registers ``cls`` with the registry of every direct base class created by
    ``make_registry``.

    :raise TypeError: If no base class is an extension point.
    """
    bases = [base for base in cls.__bases__ if hasattr(base, '_registry_') and hasattr(base, 'register')]
    if not bases:
        raise TypeError(f'{cls.__name__} does not extend a registry class')
    for base in bases:
        base.register(cls, **kwargs)
    return cls


def autoregister_params(**params):
    """
    Class decorator form of ``autoregister`` that passes ``params`` as the
    registration arguments, e.g. ``@autoregister_params(op="exp", name="default")``.
    """
    return lambda cls: autoregister(cls, **params)


def extensible_enum(cls: Type) -> Type:
    """
    Adds a ``register(name, *value)`` function to an ``aenum`` enumeration,
    which appends a new member. Members cannot be removed. Without a value,
    auto-numbered enumerations assign one.
    """
    if not issubclass(cls, Enum):
        raise TypeError("Only aenum.Enum subclasses may be made extensible")

    cls.register = lambda name, *value: extend_enum(cls, name, *value)
    return cls
