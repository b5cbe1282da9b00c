# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
from gradpass import register_op, variable
from gradpass.autodiff import GradEntry, default_aggregate
from gradpass.config import set_temporary


def test_aggregate_empty():
    result = default_aggregate([])
    assert result.node.op.name == '__zero__'
    assert result.index == 0
    assert result.node.inputs == []


def test_aggregate_empty_creates_fresh_nodes():
    assert default_aggregate([]).node is not default_aggregate([]).node


def test_aggregate_single():
    grad = variable('g').entry()
    assert default_aggregate([grad]) is grad


def test_aggregate_many_keeps_order():
    grads = [variable(name).entry() for name in 'abc']
    result = default_aggregate(grads)
    assert result.node.op.name == '__ewise_sum__'
    assert result.node.inputs == grads


def test_aggregate_does_not_alias_input_list():
    grads = [variable().entry(), variable().entry()]
    result = default_aggregate(grads)
    grads.append(variable().entry())
    assert len(result.node.inputs) == 2


def test_aggregate_configured_operators():
    register_op('fill_zero', 0)
    register_op('add_n', -1)
    with set_temporary('autodiff', 'zero_op', value='fill_zero'):
        assert default_aggregate([]).node.op.name == 'fill_zero'
    with set_temporary('autodiff', 'sum_op', value='add_n'):
        assert default_aggregate([variable().entry(), variable().entry()]).node.op.name == 'add_n'
    assert default_aggregate([]).node.op.name == '__zero__'


def test_grad_entry_aggregates_once():
    calls = []

    def aggregate(grads):
        calls.append(grads)
        return default_aggregate(grads)

    entry = GradEntry()
    entry.add(variable().entry())
    entry.add(variable().entry())
    assert not entry.aggregated

    first = entry.aggregate(aggregate)
    second = entry.aggregate(aggregate)

    assert entry.aggregated
    assert first is second
    assert len(calls) == 1
