# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" Contains the node and node-entry classes of gradpass dataflow graphs. """

import collections
import itertools
from typing import Any, Dict, Iterable, List, Optional, Union


class GraphError(Exception):
    """ Raised when a dataflow graph is malformed or constructed incorrectly. """
    pass


_name_counters = collections.defaultdict(itertools.count)


def _unique_name(prefix: str) -> str:
    return '%s_%d' % (prefix, next(_name_counters[prefix]))


class Node(object):
    """ An operator application in a dataflow graph.

        A node without an operator is a leaf (variable) node. Nodes are
        compared and hashed by identity, since the same node object may be
        referenced as an input by arbitrarily many other nodes.
    """

    def __init__(self,
                 op: Optional['gradpass.op.Op'] = None,
                 name: Optional[str] = None,
                 inputs: Iterable['NodeEntry'] = (),
                 control_deps: Iterable['Node'] = (),
                 attrs: Optional[Dict[str, Any]] = None):
        self.op = op
        self.name = name if name is not None else _unique_name('var' if op is None else op.name)
        self.inputs: List[NodeEntry] = list(inputs)
        self.control_deps: List[Node] = list(control_deps)
        self.attrs: Dict[str, Any] = dict(attrs or {})

    @property
    def num_outputs(self) -> int:
        if self.op is None:
            return 1
        return self.op.num_outputs

    def is_variable(self) -> bool:
        return self.op is None

    def entry(self, index: int = 0) -> 'NodeEntry':
        return NodeEntry(self, index)

    def outputs(self) -> List['NodeEntry']:
        return [NodeEntry(self, i) for i in range(self.num_outputs)]

    def copy(self, name: Optional[str] = None) -> 'Node':
        """ Returns a structural (shallow) copy of this node. The input and
            control dependency lists of the copy are new lists that refer to
            the same producers as the original.

            :param name: Name of the copy. Defaults to the name of this node.
        """
        return Node(op=self.op,
                    name=self.name if name is None else name,
                    inputs=self.inputs,
                    control_deps=self.control_deps,
                    attrs=self.attrs)

    def __repr__(self):
        opname = 'null' if self.op is None else self.op.name
        return 'Node(%s, op=%s)' % (self.name, opname)


class NodeEntry(object):
    """ A reference to one specific output of a node. Two entries are equal
        iff they point to the same node object and the same output index. """

    __slots__ = ('_node', '_index')

    def __init__(self, node: Node, index: int = 0):
        if not isinstance(node, Node):
            raise GraphError('Node entries must refer to a Node, got %s' % type(node).__name__)
        if index < 0 or index >= node.num_outputs:
            raise GraphError('Output index %d out of range for node "%s" with %d outputs' %
                             (index, node.name, node.num_outputs))
        self._node = node
        self._index = index

    @property
    def node(self) -> Node:
        return self._node

    @property
    def index(self) -> int:
        return self._index

    def __eq__(self, other):
        if not isinstance(other, NodeEntry):
            return NotImplemented
        return self._node is other._node and self._index == other._index

    def __hash__(self):
        return hash((id(self._node), self._index))

    def __iter__(self):
        yield self._node
        yield self._index

    def __repr__(self):
        return '%s:%d' % (self._node.name, self._index)


NodeOrEntry = Union[Node, NodeEntry]


def as_entry(value: NodeOrEntry) -> NodeEntry:
    """ Converts a node (referring to its first output) or an entry to an entry. """
    if isinstance(value, NodeEntry):
        return value
    if isinstance(value, Node):
        return value.entry(0)
    raise GraphError('Expected a Node or NodeEntry, got %s' % type(value).__name__)


def as_entries(values: Union[NodeOrEntry, Iterable[NodeOrEntry]]) -> List[NodeEntry]:
    if isinstance(values, (Node, NodeEntry)):
        return [as_entry(values)]
    return [as_entry(v) for v in values]


def variable(name: Optional[str] = None, **attrs) -> Node:
    """ Creates a leaf (variable) node. """
    return Node(op=None, name=name, attrs=attrs)


def apply_op(op_name: str,
             *inputs: NodeOrEntry,
             name: Optional[str] = None,
             control_deps: Iterable[Node] = (),
             **attrs) -> Node:
    """ Creates a node applying a registered operator to the given inputs.

        :param op_name: Name of a registered operator (see ``gradpass.op``).
        :param inputs: Input nodes or entries. A node stands for its first output.
        :param name: Optional node name. If not given, a unique name is generated.
        :param control_deps: Nodes that must execute before the new node.
        :param attrs: Operator attributes.
        :return: The new node.
    """
    from gradpass.op import Op

    op = Op.get(op_name)
    entries = [as_entry(i) for i in inputs]
    if op.num_inputs >= 0 and len(entries) != op.num_inputs:
        raise GraphError('Operator "%s" expects %d inputs, got %d' % (op.name, op.num_inputs, len(entries)))
    return Node(op=op, name=name, inputs=entries, control_deps=control_deps, attrs=attrs)
