# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
from typing import Collection, List, Optional, Sequence, Union

from gradpass.config import Config
from gradpass.graph import Graph, Node, NodeEntry, apply_op, as_entries
from gradpass.autodiff.base_abc import AggregateFunction, MirrorFunction
from gradpass.autodiff.mirror import MirrorStrategy, make_mirror_fun
from gradpass.transformation.gradient_pass import GradientPass

EntryList = Union[Node, NodeEntry, Sequence[Union[Node, NodeEntry]]]


def gradients(ys: EntryList,
              xs: EntryList,
              ys_out_grad: Optional[EntryList] = None,
              aggregate_fun: Optional[AggregateFunction] = None,
              mirror_fun: Optional[MirrorFunction] = None,
              mirror_strategy: Optional[Union[MirrorStrategy, str]] = None,
              data_to_recompute: Optional[Collection[str]] = None) -> List[NodeEntry]:
    """ Builds the gradient expressions of ``ys`` with respect to ``xs``.

        ``ys``, ``xs`` and ``ys_out_grad`` can be provided either as ``NodeEntry`` objects or as ``Node`` objects, in
        which case the first output of the node is used.

        :param ys: the outputs to differentiate.
        :param xs: the inputs w.r.t. which the gradients will be returned.
        :param ys_out_grad: seed gradients of ``ys``. If not given, a seed of ones (``autodiff.seed_op``) is created
                            for every output.
        :param aggregate_fun: overrides the reduction of multiple partial gradients of the same value.
        :param mirror_fun: predicate selecting forward nodes to recompute in the backward pass.
        :param mirror_strategy: strategy for forwarding data to the backward pass, if ``mirror_fun`` is not given.
                                Could be one of:
            * "StoreAll": store all intermediate data (uses most memory).
            * "RecomputeAll": recompute all intermediate data.
            * "UserDefined": recompute only the nodes named in ``data_to_recompute``.
            Defaults to ``autodiff.mirror_strategy``.
        :param data_to_recompute: names of nodes to recompute instead of storing. Only used with "UserDefined".
        :return: one gradient entry per element of ``xs``, in order.
    """
    ys = as_entries(ys)
    xs = as_entries(xs)
    if ys_out_grad is None:
        seed_op = Config.get('autodiff', 'seed_op')
        ys_out_grad = [apply_op(seed_op, y, name=f"{y.node.name}_seed").entry() for y in ys]
    else:
        ys_out_grad = as_entries(ys_out_grad)

    if mirror_fun is None:
        if mirror_strategy is None:
            mirror_strategy = Config.get('autodiff', 'mirror_strategy')
        mirror_fun = make_mirror_fun(mirror_strategy, data_to_recompute)

    attrs = dict(grad_ys=ys, grad_ys_out_grad=ys_out_grad, grad_xs=xs)
    if aggregate_fun is not None:
        attrs['grad_aggregate_fun'] = aggregate_fun
    if mirror_fun is not None:
        attrs['grad_mirror_fun'] = mirror_fun

    result = GradientPass().apply_pass(Graph(outputs=ys, attrs=attrs), {})
    return result.outputs
