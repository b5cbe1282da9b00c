# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
gradpass Automatic Differentiation (AD) System.

This module provides reverse-mode automatic differentiation as a graph-to-graph
transformation: the gradients of a set of outputs are built symbolically as a
new graph, which a downstream engine executes.

Main Components
---------------
- **gradients**: Main entry point for building gradient expressions
- **GradientPassGenerator**: Core algorithm for generating gradient graphs
- **GradientImplementation**: ABC for implementing operator-specific gradient rules
- **GradientConfig**: Outputs, seeds, inputs and strategies of one differentiation
- **AutoDiffException**: Base exception for autodiff errors

Key Features
------------
- Deterministic topological traversal of multi-output DAGs
- Pluggable aggregation of fan-in gradients
- Mirroring strategies (store vs recompute tradeoffs)
- Extensible gradient implementations for operators
"""

from .base_abc import (GradientImplementation, GradientConfig, AutoDiffException, GradientPreconditionError,
                       MissingGradientError, GradientContractError, MirrorMapError, find_gradient_implementation)
from .aggregate import default_aggregate
from .mirror import MirrorStrategy, build_mirror_map, make_mirror_fun, register_mirror_strategy
from .gradient import GradEntry, GradientPassGenerator
from .autodiff import gradients

__all__ = [
    # Main API
    "gradients",
    # Core classes
    "GradientPassGenerator",
    "GradientConfig",
    "GradEntry",
    # Strategies
    "default_aggregate",
    "MirrorStrategy",
    "build_mirror_map",
    "make_mirror_fun",
    "register_mirror_strategy",
    # Extension points
    "GradientImplementation",
    "find_gradient_implementation",
    # Exceptions
    "AutoDiffException",
    "GradientPreconditionError",
    "MissingGradientError",
    "GradientContractError",
    "MirrorMapError",
]
