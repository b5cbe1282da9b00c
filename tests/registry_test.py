# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
import aenum
import pytest

from gradpass.registry import autoregister, autoregister_params, extensible_enum, make_registry


@make_registry
class Extensible:
    pass


def test_class_registry():

    @autoregister_params(kind='a')
    class Ext(Extensible):
        pass

    assert Extensible.extensions()[Ext] == {'kind': 'a'}
    Extensible.unregister(Ext)
    assert Ext not in Extensible.extensions()


def test_autoregister_requires_registry():

    class NotExtensible:
        pass

    class Sub(NotExtensible):
        pass

    with pytest.raises(TypeError):
        autoregister(Sub)


def test_extensible_enum():

    @extensible_enum
    class Color(aenum.AutoNumberEnum):
        Red = ()
        Green = ()

    Color.register('Blue')
    assert Color.Blue in Color
    assert Color['Blue'] is Color.Blue
    assert len(Color) == 3


def test_extensible_enum_requires_enum():
    with pytest.raises(TypeError):
        extensible_enum(object)
