# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
API for graph analysis and manipulation Passes.
"""
from enum import Flag, auto
from typing import Any, Dict, Optional, Set, Type, Union

from gradpass.graph import Graph


class Modifies(Flag):
    """
    Specifies which elements of a graph have been modified by a Pass.
    This is used when deciding whether to rerun certain Passes for graph analysis.
    Note that this is a Python ``Flag``, which means values such as ``Nodes | Edges`` are allowed.
    """
    Nothing = 0  #: Nothing was modified
    Nodes = auto()  #: Nodes were created or removed
    Edges = auto()  #: Input or control dependency edges were created, removed, or rewired
    Outputs = auto()  #: The output entries of the graph were modified
    Attributes = auto()  #: Graph attributes were modified
    Topology = Nodes | Edges | Outputs  #: The structure of the graph was modified
    Everything = Topology | Attributes  #: Modification to arbitrary parts of the graph


class Pass:
    """
    A graph analysis or transformation. A Pass is defined by one main method: ``apply_pass``, which receives the
    graph to analyze or transform, as well as the previous results of a surrounding pass manager, if any.
    Passes never modify their input graph in place; transformations return a new graph.

    The other methods declare pass metadata for a pass manager:
    * ``depends_on``: Which other passes this pass requires
    * ``modifies``: Which elements of the graph this Pass modifies (used to invalidate cached analyses)
    * ``should_reapply``: Given the modified elements of the graph, should this pass be rerun?
    * ``attribute_dependencies``: Which graph attributes the pass reads (a change invalidates its result)
    """

    CATEGORY: str = 'Helper'

    def depends_on(self) -> Set[Union[Type['Pass'], 'Pass']]:
        """
        Which other Passes need to run first.

        :return: A set of Pass subclasses or objects that need to run prior to this Pass.
        """
        return set()

    def modifies(self) -> Modifies:
        """
        Which elements of the graph are modified by this pass, if run successfully.

        :return: A ``Modifies`` set of flags of modified elements.
        """
        raise NotImplementedError

    def should_reapply(self, modified: Modifies) -> bool:
        """
        Queries whether this Pass should be rerun after other passes have run and modified the graph.

        :param modified: Flags specifying which elements of the graph were modified.
        :return: True if this Pass should be rerun when the given elements are modified.
        """
        raise NotImplementedError

    def attribute_dependencies(self) -> Set[str]:
        """
        Names of the graph attributes this pass reads.

        :return: A set of attribute names.
        """
        return set()

    def apply_pass(self, graph: Graph, pipeline_results: Dict[str, Any]) -> Optional[Any]:
        """
        Applies the pass to the given graph.

        :param graph: The graph to apply the pass to.
        :param pipeline_results: If run by a pass manager, a dictionary that is populated with prior Pass results as
                                 ``{Pass subclass name: returned object from pass}``. Otherwise, an empty dictionary
                                 is expected.
        :return: Some object if pass was applied, or None if nothing changed.
        """
        raise NotImplementedError

    def report(self, pass_retval: Any) -> Optional[str]:
        """
        Returns a user-readable string report based on the results of this pass.

        :param pass_retval: The return value from applying this pass.
        :return: A string with the user-readable report, or None if nothing to report.
        """
        return None

    @classmethod
    def subclasses_recursive(cls) -> Set[Type['Pass']]:
        """
        Returns every concrete (non-abstract) descendant of this class.
        """
        result = set()
        pending = list(cls.__subclasses__())
        while pending:
            sc = pending.pop()
            pending.extend(sc.__subclasses__())
            if not getattr(sc, '__abstractmethods__', False):
                result.add(sc)
        return result

    @staticmethod
    def from_name(name: str) -> 'Pass':
        """
        Constructs a registered pass from its class name.

        :param name: The name of a Pass subclass, e.g., ``"GradientPass"``.
        :return: A new instance of the pass.
        """
        try:
            pss = next(ext for ext in Pass.subclasses_recursive() if ext.__name__ == name)
        except StopIteration:
            raise KeyError(f'Pass "{name}" is not registered') from None
        return pss()
