# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" Gradients of the operators produced by gradient aggregation. """
from typing import List

from gradpass.registry import autoregister_params
from gradpass.graph import Node, NodeEntry
from gradpass.autodiff.base_abc import GradientImplementation


@autoregister_params(op="__zero__", name="default")
class ZeroGradient(GradientImplementation):
    """ The zero operator has no inputs, so there is nothing to propagate. """

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return []


@autoregister_params(op="__ewise_sum__", name="default")
class ElementwiseSumGradient(GradientImplementation):
    """ Every summand receives the output gradient unchanged. """

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [out_grads[0]] * len(forward_node.inputs)
