# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
from .version import __version__
from .config import Config
from .graph import Graph, GraphError, Node, NodeEntry, apply_op, variable
from .op import Op, register_op

from . import autodiff, transformation
from .autodiff import gradients
from .transformation import GradientPass
