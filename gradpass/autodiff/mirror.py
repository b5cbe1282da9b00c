# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
Mirroring (recomputation) of forward nodes for the backward pass.

A mirrored node is a structural copy of a forward node whose inputs point to
the mirrored copies of its producers. Gradient implementations that read
forward values through a mirrored node recompute them instead of keeping the
original values alive until the backward pass.
"""
import logging
from typing import Callable, Collection, Dict, List, Optional, Union

import aenum

from gradpass.config import Config
from gradpass.graph import Node, NodeEntry
from gradpass.registry import extensible_enum
from gradpass.autodiff.base_abc import AutoDiffException, MirrorFunction, MirrorMapError

log = logging.getLogger(__name__)


@extensible_enum
class MirrorStrategy(aenum.AutoNumberEnum):
    """ Strategies for providing forward values to the backward pass. """
    StoreAll = ()  #: Keep every forward value (no recomputation)
    RecomputeAll = ()  #: Recompute every operator node
    UserDefined = ()  #: Recompute only the operator nodes whose names are given


MirrorFunctionFactory = Callable[[Optional[Collection[str]]], Optional[MirrorFunction]]


def _store_all(names: Optional[Collection[str]]) -> Optional[MirrorFunction]:
    return None


def _recompute_all(names: Optional[Collection[str]]) -> Optional[MirrorFunction]:
    return lambda node: not node.is_variable()


def _user_defined(names: Optional[Collection[str]]) -> Optional[MirrorFunction]:
    if names is None:
        raise AutoDiffException("The UserDefined mirror strategy requires a list of node names to recompute")
    to_recompute = frozenset(names)
    return lambda node: not node.is_variable() and node.name in to_recompute


_strategy_factories: Dict[MirrorStrategy, MirrorFunctionFactory] = {
    MirrorStrategy.StoreAll: _store_all,
    MirrorStrategy.RecomputeAll: _recompute_all,
    MirrorStrategy.UserDefined: _user_defined,
}


def register_mirror_strategy(name: str, factory: MirrorFunctionFactory) -> MirrorStrategy:
    """ Registers a new mirror strategy.

        :param name: Name of the new ``MirrorStrategy`` member.
        :param factory: Function that receives the optional collection of node names given by the user and returns
                        a mirror predicate (or None to disable mirroring).
        :return: The new strategy.
    """
    MirrorStrategy.register(name)
    strategy = MirrorStrategy[name]
    _strategy_factories[strategy] = factory
    return strategy


def make_mirror_fun(strategy: Union[MirrorStrategy, str],
                    data_to_recompute: Optional[Collection[str]] = None) -> Optional[MirrorFunction]:
    """ Creates the mirror predicate of a strategy.

        :param strategy: A ``MirrorStrategy`` or the name of one.
        :param data_to_recompute: Names of nodes to recompute (used by ``UserDefined``).
        :return: The mirror predicate, or None if no node should be mirrored.
    """
    if isinstance(strategy, str):
        try:
            strategy = MirrorStrategy[strategy]
        except KeyError:
            raise AutoDiffException(f"Unknown mirror strategy '{strategy}'") from None
    if strategy not in _strategy_factories:
        raise AutoDiffException(f"Mirror strategy {strategy} has no registered predicate factory")
    return _strategy_factories[strategy](data_to_recompute)


def _lookup(mirror_map: Dict[Node, Node], node: Node) -> Node:
    try:
        return mirror_map[node]
    except KeyError:
        raise MirrorMapError(f"Node {node} is missing from the mirror map; it was not visited before its "
                             "consumers") from None


def build_mirror_map(topo_order: List[Node],
                     mirror_fun: Optional[MirrorFunction],
                     suffix: Optional[str] = None) -> Optional[Dict[Node, Node]]:
    """ Builds the mirror map of a topologically-ordered list of nodes.

        :param topo_order: Nodes in forward topological order.
        :param mirror_fun: Predicate selecting the nodes to mirror. If None, no map is built.
        :param suffix: Suffix of mirrored node names. Defaults to ``autodiff.mirror_suffix``.
        :return: A mapping from every node to itself or to its mirrored copy, or None if mirroring is disabled.
        :note: Existing nodes are never modified.
    """
    if mirror_fun is None:
        return None
    if suffix is None:
        suffix = Config.get('autodiff', 'mirror_suffix')

    mirror_map: Dict[Node, Node] = {}
    for node in topo_order:
        if mirror_fun(node):
            new_node = node.copy(name=node.name + suffix)
            new_node.inputs = [NodeEntry(_lookup(mirror_map, e.node), e.index) for e in node.inputs]
            new_node.control_deps = [_lookup(mirror_map, dep) for dep in node.control_deps]
            mirror_map[node] = new_node
        else:
            mirror_map[node] = node

    log.debug("Mirrored %d of %d nodes", sum(1 for k, v in mirror_map.items() if k is not v), len(mirror_map))
    return mirror_map
