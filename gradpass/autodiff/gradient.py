# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
    Symbolic reverse-mode differentiation of a dataflow graph.
    This module exposes the GradientPassGenerator class, which builds a new graph
    computing the gradients of a set of output entries with respect to a set of
    input entries.
"""
import logging
from typing import Dict, List, Optional

from gradpass.config import Config
from gradpass.graph import Graph, Node, NodeEntry, dfs_visit
from gradpass.autodiff.aggregate import default_aggregate
from gradpass.autodiff.base_abc import (AggregateFunction, AutoDiffException, GradientConfig, GradientContractError,
                                        GradientPreconditionError, MirrorMapError, MissingGradientError,
                                        find_gradient_implementation)
from gradpass.autodiff.mirror import build_mirror_map

log = logging.getLogger(__name__)


class GradEntry(object):
    """ The pending gradient of one node output: the partial gradients
        contributed by its consumers, and their aggregate once computed. """

    __slots__ = ('grads', 'sum')

    def __init__(self):
        self.grads: List[NodeEntry] = []
        self.sum: Optional[NodeEntry] = None

    @property
    def aggregated(self) -> bool:
        return self.sum is not None

    def add(self, grad: NodeEntry):
        if self.sum is not None:
            raise AutoDiffException(f"Gradient contribution {grad} arrived after its value was aggregated")
        self.grads.append(grad)

    def aggregate(self, aggregate_fun: AggregateFunction) -> NodeEntry:
        """ Aggregates the partial gradients. The aggregate is computed at most
            once; later calls return the same entry. """
        if self.sum is None:
            self.sum = aggregate_fun(list(self.grads))
        return self.sum


class GradientPassGenerator:
    """ Class that holds the state of one gradient graph construction.

        :param config: The outputs, seed gradients, inputs and strategies of the
                       differentiation (see :class:`~gradpass.autodiff.base_abc.GradientConfig`).
    """

    def __init__(self, config: GradientConfig):
        config.validate()
        self.config = config
        self.aggregate_fun: AggregateFunction = config.aggregate_fun or default_aggregate

        #: Forward nodes reachable from the outputs, in topological order
        self.topo_order: List[Node] = []

        #: Pending gradient of each output of each visited node
        self.output_grads: Dict[Node, List[GradEntry]] = {}

        #: Mapping from forward node to the node used by its gradient implementation
        self.mirror_map: Optional[Dict[Node, Node]] = None

        # Variable to check if the generator has already been applied
        self._applied = False

    def generate(self) -> Graph:
        """ Generate the gradient graph.

            :return: A graph whose outputs are the gradients of ``config.xs``, in order.
        """
        if self._applied:
            raise GradientPreconditionError("generate may only be called once. Instantiate a new "
                                            "GradientPassGenerator.")
        self._applied = True

        self._visit()
        self._seed()
        self.mirror_map = build_mirror_map(self.topo_order, self.config.mirror_fun)
        self._reverse()
        return Graph(outputs=self._assemble())

    def _slots(self, node: Node) -> List[GradEntry]:
        slots = self.output_grads.get(node)
        if slots is None:
            slots = [GradEntry() for _ in range(node.num_outputs)]
            self.output_grads[node] = slots
        return slots

    def _visit(self):
        """ Topologically sorts the ancestors of the outputs and allocates their pending gradients. """
        self.topo_order = dfs_visit(self.config.ys, fvisit=self._slots)
        log.debug("Gradient pass visited %d nodes from %d outputs", len(self.topo_order), len(self.config.ys))

    def _seed(self):
        # A later seed of a repeated output replaces the earlier ones
        for y, seed in zip(self.config.ys, self.config.ys_out_grad):
            self.output_grads[y.node][y.index].grads = [seed]

    def _mirrored(self, node: Node) -> Node:
        if self.mirror_map is None:
            return node
        try:
            return self.mirror_map[node]
        except KeyError:
            raise MirrorMapError(f"Node {node} is missing from the mirror map") from None

    def _reverse(self):
        """ Propagates gradients through the topological order in reverse. """
        debugprint = Config.get_bool('debugprint')
        for node in reversed(self.topo_order):
            if node.is_variable():
                continue

            out_agg_grads = [entry.aggregate(self.aggregate_fun) for entry in self.output_grads[node]]

            impl = find_gradient_implementation(node)
            if impl is None:
                raise MissingGradientError(f"No gradient implementation registered for operator "
                                           f"'{node.op.name}' (node '{node.name}')")

            input_grads = list(impl.gradient(self._mirrored(node), out_agg_grads))
            if len(input_grads) != len(node.inputs):
                raise GradientContractError(f"Gradient of operator '{node.op.name}' (node '{node.name}') returned "
                                            f"{len(input_grads)} gradients for {len(node.inputs)} inputs")

            for inp, grad in zip(node.inputs, input_grads):
                if not isinstance(grad, NodeEntry):
                    raise GradientContractError(f"Gradient of operator '{node.op.name}' (node '{node.name}') "
                                                f"returned {type(grad).__name__} instead of a NodeEntry")
                self.output_grads[inp.node][inp.index].add(grad)

            if debugprint:
                log.info("Propagated gradients through %s: %s", node, input_grads)
            else:
                log.debug("Propagated gradients through %s: %s", node, input_grads)

    def _assemble(self) -> List[NodeEntry]:
        """ Returns the aggregated gradient of every requested input, in order. """
        result = []
        for x in self.config.xs:
            entry = self._slots(x.node)[x.index]
            result.append(entry.aggregate(self.aggregate_fun))
        return result
