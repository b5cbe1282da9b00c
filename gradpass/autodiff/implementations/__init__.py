# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
"""
Gradient Implementations for Built-in Operators.

Each implementation defines how to build the gradient expressions of a
specific operator's inputs from the gradients of its outputs.

Implementation Categories
-------------------------
1. **Aggregation Operators** (aggregation_ops.py):
   - ``__zero__`` and ``__ewise_sum__``, used by gradient aggregation
   - Makes produced gradient graphs differentiable again

2. **Element-wise Operators** (elemwise_ops.py):
   - Arithmetic, unary math functions, and data movement operators
   - Registered using @autoregister_params decorator
"""

import gradpass.autodiff.implementations.aggregation_ops
import gradpass.autodiff.implementations.elemwise_ops
