# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
import pytest

from gradpass import Graph, apply_op, variable
from gradpass.autodiff import (AutoDiffException, MirrorMapError, MirrorStrategy, build_mirror_map, gradients,
                               make_mirror_fun, register_mirror_strategy)
from gradpass.config import set_temporary


def chain():
    x = variable('x')
    f = apply_op('exp', x, name='f')
    g = apply_op('log', f, name='g')
    return x, f, g


def test_no_predicate_builds_no_map():
    x, f, g = chain()
    assert build_mirror_map(Graph([g]).topological_order(), None) is None


def test_identity_map():
    x, f, g = chain()
    mirror_map = build_mirror_map(Graph([g]).topological_order(), lambda n: False)
    assert mirror_map == {x: x, f: f, g: g}


def test_mirrored_inputs_are_rewritten():
    x, f, g = chain()
    mirror_map = build_mirror_map(Graph([g]).topological_order(), lambda n: n is not x)

    assert mirror_map[x] is x
    f_mirror, g_mirror = mirror_map[f], mirror_map[g]
    assert f_mirror is not f and g_mirror is not g
    assert f_mirror.name == 'f_mirror'
    assert f_mirror.op is f.op
    assert f_mirror.inputs == [x.entry()]
    assert g_mirror.inputs == [f_mirror.entry()]
    # Original nodes are left untouched
    assert g.inputs == [f.entry()]


def test_mirrored_control_dependencies():
    x = variable('x')
    c = apply_op('exp', x, name='c')
    y = apply_op('negative', x, name='y', control_deps=[c])

    mirror_map = build_mirror_map(Graph([y]).topological_order(), lambda n: not n.is_variable())

    assert mirror_map[y].control_deps == [mirror_map[c]]
    assert y.control_deps == [c]


def test_mirror_suffix_from_config():
    x, f, g = chain()
    with set_temporary('autodiff', 'mirror_suffix', value='_recomputed'):
        mirror_map = build_mirror_map(Graph([g]).topological_order(), lambda n: n is f)
    assert mirror_map[f].name == 'f_recomputed'


def test_mirror_map_miss():
    x, f, g = chain()
    # f is missing from the order, so g cannot be rewritten
    with pytest.raises(MirrorMapError):
        build_mirror_map([x, g], lambda n: True)


def test_builtin_strategies():
    x, f, g = chain()
    assert make_mirror_fun(MirrorStrategy.StoreAll) is None
    assert make_mirror_fun('StoreAll') is None

    recompute_all = make_mirror_fun('RecomputeAll')
    assert not recompute_all(x)
    assert recompute_all(f) and recompute_all(g)

    user_defined = make_mirror_fun(MirrorStrategy.UserDefined, ['g', 'x'])
    assert not user_defined(x)
    assert not user_defined(f)
    assert user_defined(g)


def test_strategy_errors():
    with pytest.raises(AutoDiffException):
        make_mirror_fun('NoSuchStrategy')
    with pytest.raises(AutoDiffException):
        make_mirror_fun(MirrorStrategy.UserDefined)


def test_register_strategy():
    strategy = register_mirror_strategy('RecomputeExp', lambda names: lambda n: n.op is not None and n.op.name == 'exp')
    assert MirrorStrategy.RecomputeExp is strategy

    x, f, g = chain()
    mirror_fun = make_mirror_fun('RecomputeExp')
    assert mirror_fun(f)
    assert not mirror_fun(g)


def test_gradient_uses_recomputed_values():
    x = variable('x')
    f = apply_op('exp', x, name='f')
    y = apply_op('exp', f, name='y')

    dx, = gradients(y, x, ys_out_grad=variable('seed'), mirror_strategy='RecomputeAll')

    # dx = dy/df * exp(x), where exp(x) is read from the recomputed f
    recomputed = dx.node.inputs[1].node
    assert recomputed is not f
    assert recomputed.name == 'f_mirror'
    assert recomputed.inputs == [x.entry()]
    assert f.inputs == [x.entry()]


def test_user_defined_strategy_in_gradients():
    x = variable('x')
    f = apply_op('exp', x, name='f')
    h = apply_op('exp', f, name='h')
    y = apply_op('exp', h, name='y')

    dx, = gradients(y, x, ys_out_grad=variable('seed'), mirror_strategy='UserDefined', data_to_recompute=['h'])

    names = {n.name for n in Graph([dx]).topological_order()}
    assert 'h_mirror' in names
    assert 'f_mirror' not in names
    assert 'f' in names
