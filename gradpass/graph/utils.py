# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" Various utility functions to traverse gradpass graphs. """
from typing import Callable, Iterable, Iterator, List, Optional, Union

from gradpass.graph.nodes import Node, NodeEntry


def predecessors(node: Node) -> Iterator[Node]:
    """ Yields the producers of a node's inputs, followed by its control dependencies. """
    for e in node.inputs:
        yield e.node
    yield from node.control_deps


def dfs_visit(heads: Iterable[Union[Node, NodeEntry]], fvisit: Optional[Callable[[Node], None]] = None) -> List[Node]:
    """ Produce all nodes reachable from ``heads`` in depth-first post-order.

    Every node appears exactly once and after all of the nodes it depends on
    (through inputs or control dependencies). Inputs are explored in order,
    then control dependencies, and heads are explored in the given order, so
    the result is deterministic for a fixed graph.

    :param heads: Nodes or node entries to start from.
    :param fvisit: Optional callback invoked on each node in visitation order.
    :return: A list of nodes in topological order.
    :note: Assumes an acyclic graph. The traversal is iterative and does not
           depend on the interpreter recursion limit.
    """
    visited = set()
    order = []
    for head in heads:
        start = head.node if isinstance(head, NodeEntry) else head
        if start in visited:
            continue
        visited.add(start)
        stack = [(start, predecessors(start))]
        while stack:
            node, children = stack[-1]
            try:
                child = next(children)
                if child not in visited:
                    visited.add(child)
                    stack.append((child, predecessors(child)))
            except StopIteration:
                stack.pop()
                order.append(node)
                if fvisit is not None:
                    fvisit(node)
    return order
