# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" The graph container that passes consume and produce. """

import types
from typing import Any, Dict, Iterable, List, Mapping, Optional

import networkx as nx
from networkx.algorithms import isomorphism

from gradpass.graph.nodes import GraphError, Node, NodeEntry, NodeOrEntry, as_entries
from gradpass.graph.utils import dfs_visit


class Graph(object):
    """ An immutable dataflow graph, given by its output entries and a
        mapping of named attributes.

        Attributes are a side channel used to pass configuration into passes
        (e.g., ``grad_ys`` for the gradient pass). Passes never modify a graph
        in place; they return new graphs.
    """

    def __init__(self, outputs: Iterable[NodeOrEntry] = (), attrs: Optional[Mapping[str, Any]] = None):
        self._outputs = tuple(as_entries(outputs))
        self._attrs = dict(attrs or {})

    @property
    def outputs(self) -> List[NodeEntry]:
        return list(self._outputs)

    @property
    def attrs(self) -> Mapping[str, Any]:
        """ Read-only view of the graph attributes. """
        return types.MappingProxyType(self._attrs)

    def has_attr(self, name: str) -> bool:
        return name in self._attrs

    def get_attr(self, name: str) -> Any:
        try:
            return self._attrs[name]
        except KeyError:
            raise GraphError('Graph attribute "%s" does not exist' % name) from None

    def with_attrs(self, **attrs) -> 'Graph':
        """ Returns a new graph with the same outputs and updated attributes. """
        new_attrs = dict(self._attrs)
        new_attrs.update(attrs)
        return Graph(self._outputs, new_attrs)

    def topological_order(self) -> List[Node]:
        """ Returns all nodes reachable from the graph outputs, in topological order. """
        return dfs_visit(self._outputs)

    def nodes(self) -> List[Node]:
        return self.topological_order()

    def number_of_nodes(self) -> int:
        return len(self.topological_order())

    def __len__(self) -> int:
        return self.number_of_nodes()

    @property
    def nx(self) -> nx.MultiDiGraph:
        """ Returns a networkx version of this graph.

            Nodes are numbered by topological order and labeled with their operator
            name (``null`` for variables). Every graph output is represented by an
            additional sink node labeled ``__output_<position>__``. Edge attributes
            hold the producer output ``index`` and consumer input ``slot``;
            control dependencies use index and slot ``-1``.
        """
        result = nx.MultiDiGraph()
        order = self.topological_order()
        node_ids: Dict[Node, int] = {}
        for i, node in enumerate(order):
            node_ids[node] = i
            result.add_node(i, op='null' if node.op is None else node.op.name, name=node.name)
        for node in order:
            for slot, e in enumerate(node.inputs):
                result.add_edge(node_ids[e.node], node_ids[node], index=e.index, slot=slot)
            for dep in node.control_deps:
                result.add_edge(node_ids[dep], node_ids[node], index=-1, slot=-1)
        for pos, e in enumerate(self._outputs):
            sink = ('output', pos)
            result.add_node(sink, op='__output_%d__' % pos, name=None)
            result.add_edge(node_ids[e.node], sink, index=e.index, slot=0)
        return result

    def is_isomorphic(self, other: 'Graph') -> bool:
        """ Returns True if both graphs have the same operator structure and
            output positions, up to node identity and names. """
        node_match = isomorphism.categorical_node_match('op', None)
        edge_match = isomorphism.categorical_multiedge_match(['index', 'slot'], [None, None])
        return nx.is_isomorphic(self.nx, other.nx, node_match=node_match, edge_match=edge_match)

    def __repr__(self):
        return 'Graph(outputs=%s, attrs=%s)' % (list(self._outputs), sorted(self._attrs.keys()))
