# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
from gradpass.graph.nodes import GraphError, Node, NodeEntry, apply_op, as_entry, as_entries, variable
from gradpass.graph.graph import Graph
from gradpass.graph.utils import dfs_visit
