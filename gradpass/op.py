# Copyright 2019-2025 ETH Zurich and the DaCe authors. All rights reserved.
""" The operator universe of gradpass graphs.

    Operators only carry the metadata the gradient pass needs: a unique name
    and the input/output arity. Gradient rules are registered separately,
    through ``gradpass.autodiff.GradientImplementation``.
"""
import dataclasses
from typing import Dict, List

from gradpass.graph.nodes import GraphError

#: Arity value for operators that accept any number of inputs
VARIADIC = -1


@dataclasses.dataclass(frozen=True)
class Op:
    """ An operator kind that can be applied by graph nodes. """
    name: str  #: Unique operator name
    num_inputs: int = 1  #: Number of inputs, or ``VARIADIC``
    num_outputs: int = 1  #: Number of outputs
    description: str = dataclasses.field(default='', compare=False)

    @staticmethod
    def get(name: str) -> 'Op':
        """ Returns the registered operator with the given name. """
        try:
            return _registry[name]
        except KeyError:
            raise GraphError('Operator "%s" is not registered' % name) from None


_registry: Dict[str, Op] = {}


def register_op(name: str, num_inputs: int = 1, num_outputs: int = 1, description: str = '') -> Op:
    """ Registers a new operator kind. Registering the same definition twice
        returns the existing operator.

        :return: The registered operator.
    """
    if num_outputs < 1:
        raise GraphError('Operator "%s" must have at least one output' % name)
    op = Op(name, num_inputs, num_outputs, description)
    existing = _registry.get(name)
    if existing is not None:
        if existing != op:
            raise GraphError('Operator "%s" is already registered with a different signature' % name)
        return existing
    _registry[name] = op
    return op


def list_ops() -> List[str]:
    return list(_registry.keys())


# Internal operators used by gradient aggregation
register_op('__zero__', 0, description='Zero-valued gradient (no gradient flows)')
register_op('__ewise_sum__', VARIADIC, description='Element-wise sum of all inputs')

# Built-in operators
register_op('ones_like', description='Ones in the shape of the input')
register_op('zeros_like', description='Zeros in the shape of the input')
register_op('copy', description='Identity')
register_op('negative', description='Element-wise negation')
register_op('exp', description='Element-wise exponential')
register_op('log', description='Element-wise natural logarithm')
register_op('relu', description='Rectified linear unit')
register_op('relu_backward', 2, description='Gradient of relu: (output gradient, relu input)')
register_op('elemwise_add', 2, description='Element-wise addition')
register_op('elemwise_sub', 2, description='Element-wise subtraction')
register_op('elemwise_mul', 2, description='Element-wise multiplication')
register_op('elemwise_div', 2, description='Element-wise division')
register_op('split', 1, 2, description='Split input into two halves')
register_op('concatenate', 2, description='Concatenate two inputs')
