# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
Abstract Base Classes for Autodiff
"""
import abc
import dataclasses
import logging
import typing

import gradpass.registry
from gradpass.graph import Graph, Node, NodeEntry

log = logging.getLogger(__name__)

#: Reduces the partial gradients of one value to a single gradient entry
AggregateFunction = typing.Callable[[typing.List[NodeEntry]], NodeEntry]

#: Decides whether a forward node should be recomputed in the backward pass
MirrorFunction = typing.Callable[[Node], bool]

#: Graph attributes the gradient pass requires
REQUIRED_ATTRIBUTES = ('grad_ys', 'grad_ys_out_grad', 'grad_xs')


class AutoDiffException(Exception):
    """Base class for all exceptions related to automatic differentiation failures."""
    pass


class GradientPreconditionError(AutoDiffException):
    """Raised when the inputs to the gradient pass are incomplete or inconsistent."""
    pass


class MissingGradientError(AutoDiffException):
    """Raised when an operator without a registered gradient implementation is encountered."""
    pass


class GradientContractError(AutoDiffException):
    """Raised when a gradient implementation violates its contract."""
    pass


class MirrorMapError(AutoDiffException):
    """Raised when the mirror map does not cover a node of the topological order."""
    pass


@dataclasses.dataclass
class GradientConfig:
    """The explicit configuration of one gradient pass invocation."""
    ys: typing.List[NodeEntry]  #: Output entries to differentiate
    ys_out_grad: typing.List[NodeEntry]  #: Seed gradients, positionally paired with ``ys``
    xs: typing.List[NodeEntry]  #: Entries to differentiate with respect to
    aggregate_fun: typing.Optional[AggregateFunction] = None  #: Overrides the default aggregator
    mirror_fun: typing.Optional[MirrorFunction] = None  #: Enables mirroring for the nodes it selects

    def validate(self):
        """Checks the configuration, raising ``GradientPreconditionError`` on failure."""
        for field in ('ys', 'ys_out_grad', 'xs'):
            entries = getattr(self, field)
            if not all(isinstance(e, NodeEntry) for e in entries):
                raise GradientPreconditionError(f"Gradient expects {field} to be a list of NodeEntry objects")
        if len(self.ys) != len(self.ys_out_grad):
            raise GradientPreconditionError(f"Gradient requires one seed gradient per output, got {len(self.ys)} "
                                            f"outputs and {len(self.ys_out_grad)} seed gradients")

    @staticmethod
    def from_graph(graph: Graph) -> 'GradientConfig':
        """Reads the gradient attribute bundle of a graph.

        :param graph: A graph with the ``grad_ys``, ``grad_ys_out_grad`` and ``grad_xs`` attributes, and optionally
                      ``grad_aggregate_fun`` and ``grad_mirror_fun``.
        :return: The gradient configuration.
        """
        for attr in REQUIRED_ATTRIBUTES:
            if not graph.has_attr(attr):
                raise GradientPreconditionError(f"Gradient requires {attr} to be present")
        return GradientConfig(ys=list(graph.get_attr('grad_ys')),
                              ys_out_grad=list(graph.get_attr('grad_ys_out_grad')),
                              xs=list(graph.get_attr('grad_xs')),
                              aggregate_fun=graph.attrs.get('grad_aggregate_fun'),
                              mirror_fun=graph.attrs.get('grad_mirror_fun'))


@gradpass.registry.make_registry
class GradientImplementation(abc.ABC):
    """ABC for gradient implementations.

    The register function expects an argument ``op=op_name`` where ``op_name`` is the name of the operator this
    implementation differentiates, e.g. ``"elemwise_mul"``. It also expects a ``name`` argument that names the
    implementation.
    """

    @staticmethod
    def gradient_can_be_applied(node: Node) -> bool:
        """Return whether this implementation can be applied.

        :param node: The candidate node.
        :return: True if the implementation can be applied, False otherwise.
        """
        return True

    @staticmethod
    @abc.abstractmethod
    def gradient(forward_node: Node, out_grads: typing.List[NodeEntry]) -> typing.List[NodeEntry]:
        """Build the gradient expressions of a forward node's inputs.

        :param forward_node: The node to differentiate (or its mirrored substitute). Gradient expressions may use
                             its inputs and outputs.
        :param out_grads: The aggregated gradient of each output of the node, in output order.
        :return: One gradient entry per input of the node, in input order.
        """
        ...


# Register the implementations
import gradpass.autodiff.implementations


def find_gradient_implementation(node: Node) -> typing.Optional[GradientImplementation]:
    """Try to find the gradient implementation for ``node``.

    :param node: The node to find the implementation for.
    :return: The GradientImplementation for node if one is registered and can be applied, else None.
    """
    if node.op is None:
        return None

    valid_impls = []
    for impl, args in GradientImplementation.extensions().items():
        if "name" not in args:
            raise ValueError(f"Expected name in arguments of implementation {impl}.")

        if args.get("op") == node.op.name and impl.gradient_can_be_applied(node):
            valid_impls.append((args["name"], impl))

    implementation = node.attrs.get("gradient_implementation")
    if implementation:
        filtered_impls = [i for name, i in valid_impls if name == implementation]
        if filtered_impls:
            return filtered_impls[0]

        log.warning(f"Set gradient_implementation {implementation} on {node}, but it could not be"
                    f" applied. Falling back to default selection.")
    if valid_impls:
        return valid_impls[0][1]
    else:
        return None
