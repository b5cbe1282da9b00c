# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" The gradient pass: returns a gradient graph of ``grad_ys`` with respect to ``grad_xs``. """
from typing import Any, Dict, Set

from gradpass.graph import Graph
from gradpass.autodiff.base_abc import REQUIRED_ATTRIBUTES, GradientConfig
from gradpass.autodiff.gradient import GradientPassGenerator
from gradpass.transformation import pass_pipeline as ppl


class GradientPass(ppl.Pass):
    """
    Builds the gradient graph of a graph's ``grad_ys`` attribute with respect to its ``grad_xs`` attribute,
    seeded with ``grad_ys_out_grad``. Optional attributes ``grad_aggregate_fun`` and ``grad_mirror_fun`` override
    gradient aggregation and enable mirroring, respectively.

    The returned graph's outputs are the gradients of ``grad_xs``, in order, and it has no attributes.
    """

    CATEGORY: str = 'Autodiff'

    def modifies(self) -> ppl.Modifies:
        return ppl.Modifies.Everything

    def should_reapply(self, modified: ppl.Modifies) -> bool:
        return bool(modified & (ppl.Modifies.Topology | ppl.Modifies.Attributes))

    def attribute_dependencies(self) -> Set[str]:
        return set(REQUIRED_ATTRIBUTES)

    def apply_pass(self, graph: Graph, pipeline_results: Dict[str, Any]) -> Graph:
        config = GradientConfig.from_graph(graph)
        return GradientPassGenerator(config).generate()

    def report(self, pass_retval: Graph) -> str:
        return f'Built {len(pass_retval.outputs)} gradients ({pass_retval.number_of_nodes()} nodes).'
