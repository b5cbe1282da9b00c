# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
import pytest

from gradpass import GraphError, Node, NodeEntry, Op, apply_op, register_op, variable
from gradpass.graph import as_entries
from gradpass.op import list_ops


def test_entry_identity():
    x = variable('x')
    other = variable('x')

    assert NodeEntry(x, 0) == x.entry(0)
    assert hash(NodeEntry(x, 0)) == hash(x.entry())
    assert x.entry() != other.entry()
    assert len({x.entry(), x.entry(), other.entry()}) == 2


def test_entry_unpacking():
    s = apply_op('split', variable())
    node, index = s.entry(1)
    assert node is s
    assert index == 1


def test_entry_index_range():
    x = variable('x')
    s = apply_op('split', x)

    assert s.outputs() == [s.entry(0), s.entry(1)]
    with pytest.raises(GraphError):
        s.entry(2)
    with pytest.raises(GraphError):
        x.entry(1)
    with pytest.raises(GraphError):
        NodeEntry(x, -1)


def test_entry_of_non_node():
    with pytest.raises(GraphError):
        NodeEntry('x', 0)


def test_variable():
    x = variable('x', shape=(2, 3))
    assert x.is_variable()
    assert x.op is None
    assert x.num_outputs == 1
    assert x.attrs == {'shape': (2, 3)}
    assert repr(x) == 'Node(x, op=null)'


def test_generated_names_are_unique():
    x = variable()
    names = {apply_op('exp', x).name for _ in range(10)}
    assert len(names) == 10
    assert all(name.startswith('exp_') for name in names)


def test_apply_op():
    x = variable('x')
    c = variable('c')
    y = apply_op('elemwise_add', x, x.entry(), name='y', control_deps=[c], axis=1)

    assert y.op is Op.get('elemwise_add')
    assert y.inputs == [x.entry(), x.entry()]
    assert y.control_deps == [c]
    assert y.attrs == {'axis': 1}
    assert not y.is_variable()


def test_apply_op_errors():
    x = variable('x')
    with pytest.raises(GraphError):
        apply_op('no_such_operator', x)
    with pytest.raises(GraphError):
        apply_op('elemwise_add', x)
    with pytest.raises(GraphError):
        apply_op('exp', 1.0)


def test_variadic_op():
    xs = [variable() for _ in range(5)]
    total = apply_op('__ewise_sum__', *xs)
    assert len(total.inputs) == 5


def test_copy():
    x = variable('x')
    y = apply_op('exp', x, name='y', alpha=2)
    clone = y.copy(name='y2')

    assert clone.name == 'y2'
    assert clone.op is y.op
    assert clone.inputs == y.inputs
    clone.inputs.append(x.entry())
    clone.attrs['alpha'] = 3
    assert len(y.inputs) == 1
    assert y.attrs == {'alpha': 2}
    assert y.copy().name == 'y'


def test_as_entries():
    x = variable()
    s = apply_op('split', x)
    assert as_entries(x) == [x.entry()]
    assert as_entries(s.entry(1)) == [s.entry(1)]
    assert as_entries([x, s.entry(1)]) == [x.entry(), s.entry(1)]


def test_register_op():
    op = register_op('test_register_op', 3, 2, description='for testing')
    assert Op.get('test_register_op') is op
    assert 'test_register_op' in list_ops()
    # Registering the same definition again is allowed
    assert register_op('test_register_op', 3, 2) is op
    with pytest.raises(GraphError):
        register_op('test_register_op', 1, 1)
    with pytest.raises(GraphError):
        register_op('test_no_outputs', 1, 0)


def test_builtin_aggregation_ops():
    assert Op.get('__zero__').num_inputs == 0
    assert Op.get('__ewise_sum__').num_inputs == -1
    assert Op.get('split').num_outputs == 2
