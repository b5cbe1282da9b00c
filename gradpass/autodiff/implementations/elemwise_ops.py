# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
Gradient Implementations for Element-wise Operators.

Every rule builds its gradient expression out of the (possibly mirrored)
forward node's inputs and outputs, so that recomputed values are used when
mirroring is enabled.
"""
from typing import List

from gradpass.registry import autoregister_params
from gradpass.graph import Node, NodeEntry, apply_op
from gradpass.autodiff.base_abc import GradientImplementation


def _grad_name(forward_node: Node, suffix: str) -> str:
    return f"{forward_node.name}_grad_{suffix}"


@autoregister_params(op="ones_like", name="default")
class OnesLikeGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [apply_op("zeros_like", forward_node.inputs[0], name=_grad_name(forward_node, "in")).entry()]


@autoregister_params(op="zeros_like", name="default")
class ZerosLikeGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [apply_op("zeros_like", forward_node.inputs[0], name=_grad_name(forward_node, "in")).entry()]


@autoregister_params(op="copy", name="default")
class CopyGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [out_grads[0]]


@autoregister_params(op="negative", name="default")
class NegativeGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [apply_op("negative", out_grads[0], name=_grad_name(forward_node, "in")).entry()]


@autoregister_params(op="exp", name="default")
class ExpGradient(GradientImplementation):
    """ d/dx exp(x) = exp(x), taken from the node's own output. """

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [
            apply_op("elemwise_mul", out_grads[0], forward_node.entry(0), name=_grad_name(forward_node, "in")).entry()
        ]


@autoregister_params(op="log", name="default")
class LogGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [
            apply_op("elemwise_div", out_grads[0], forward_node.inputs[0], name=_grad_name(forward_node,
                                                                                              "in")).entry()
        ]


@autoregister_params(op="relu", name="default")
class ReluGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [
            apply_op("relu_backward", out_grads[0], forward_node.inputs[0], name=_grad_name(forward_node,
                                                                                               "in")).entry()
        ]


@autoregister_params(op="relu_backward", name="default")
class ReluBackwardGradient(GradientImplementation):
    """ relu_backward is linear in the output gradient and piecewise constant in the mask input. """

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        mask_input = forward_node.inputs[1]
        return [
            apply_op("relu_backward", out_grads[0], mask_input, name=_grad_name(forward_node, "ograd")).entry(),
            apply_op("zeros_like", mask_input, name=_grad_name(forward_node, "mask")).entry(),
        ]


@autoregister_params(op="elemwise_add", name="default")
class AddGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [out_grads[0], out_grads[0]]


@autoregister_params(op="elemwise_sub", name="default")
class SubGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [out_grads[0], apply_op("negative", out_grads[0], name=_grad_name(forward_node, "rhs")).entry()]


@autoregister_params(op="elemwise_mul", name="default")
class MulGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        lhs, rhs = forward_node.inputs
        return [
            apply_op("elemwise_mul", out_grads[0], rhs, name=_grad_name(forward_node, "lhs")).entry(),
            apply_op("elemwise_mul", out_grads[0], lhs, name=_grad_name(forward_node, "rhs")).entry(),
        ]


@autoregister_params(op="elemwise_div", name="default")
class DivGradient(GradientImplementation):
    """ For z = a / b: dz/da = 1 / b and dz/db = -z / b. """

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        _, rhs = forward_node.inputs
        lhs_grad = apply_op("elemwise_div", out_grads[0], rhs, name=_grad_name(forward_node, "lhs"))
        scaled = apply_op("elemwise_mul", lhs_grad, forward_node.entry(0),
                          name=_grad_name(forward_node, "rhs_scaled"))
        return [lhs_grad.entry(), apply_op("negative", scaled, name=_grad_name(forward_node, "rhs")).entry()]


@autoregister_params(op="split", name="default")
class SplitGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        return [apply_op("concatenate", *out_grads, name=_grad_name(forward_node, "in")).entry()]


@autoregister_params(op="concatenate", name="default")
class ConcatenateGradient(GradientImplementation):

    @staticmethod
    def gradient(forward_node: Node, out_grads: List[NodeEntry]) -> List[NodeEntry]:
        parts = apply_op("split", out_grads[0], name=_grad_name(forward_node, "in"))
        return parts.outputs()
