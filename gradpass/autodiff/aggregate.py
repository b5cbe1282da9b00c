# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" Default reduction of the partial gradients of a single value. """
from typing import List

from gradpass.config import Config
from gradpass.graph import Node, NodeEntry
from gradpass.op import Op


def default_aggregate(grads: List[NodeEntry]) -> NodeEntry:
    """ Reduces the partial gradients of one value to a single gradient entry.

        * No partial gradients: a new zero node (``autodiff.zero_op``).
        * One partial gradient: that entry, unchanged.
        * Otherwise: a new sum node (``autodiff.sum_op``) whose inputs are the
          partial gradients in the given order.

        :param grads: The partial gradients, in consumer visitation order.
        :return: An entry referring to the aggregated gradient.
    """
    if len(grads) == 1:
        return grads[0]
    if len(grads) == 0:
        zero_node = Node(op=Op.get(Config.get('autodiff', 'zero_op')))
        return zero_node.entry(0)
    sum_node = Node(op=Op.get(Config.get('autodiff', 'sum_op')), inputs=grads)
    return sum_node.entry(0)
