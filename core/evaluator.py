"""
Holomorph — Expression Evaluator
Pure recursive evaluation of an expression tree at a complex input.

The same code path serves a single point (Python complex in, complex out)
and a whole pixel grid (complex128 array in, array out): each tree node is
evaluated once per call, element-wise over the grid.
"""

import numpy as np

from core.expression import Number, Variable, UnaryOp, BinaryOp, Call, parse
from functions import get_function


def _power(base: np.ndarray, exponent: np.ndarray) -> np.ndarray:
    """base ** Re(exponent) in polar form. The exponent's imaginary part is ignored."""
    e = np.real(exponent)
    r = np.abs(base)
    theta = np.angle(base)
    mag = np.power(r, e)
    return mag * np.cos(theta * e) + 1j * (mag * np.sin(theta * e))


_BINARY = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": _power,
}


def _eval(node, z: np.ndarray) -> np.ndarray:
    if isinstance(node, Number):
        return np.asarray(complex(node.value, 0.0), dtype=np.complex128)

    if isinstance(node, Variable):
        return z

    if isinstance(node, UnaryOp):
        if node.op != "-":
            raise ValueError(f"Unknown unary operator: {node.op}")
        return np.negative(_eval(node.operand, z))

    if isinstance(node, BinaryOp):
        fn = _BINARY.get(node.op)
        if fn is None:
            raise ValueError(f"Unknown binary operator: {node.op}")
        return np.asarray(fn(_eval(node.left, z), _eval(node.right, z)), dtype=np.complex128)

    if isinstance(node, Call):
        fn = get_function(node.name)
        return np.asarray(fn(_eval(node.argument, z)), dtype=np.complex128)

    raise TypeError(f"Unknown node type: {type(node).__name__}")


def evaluate(tree, z):
    """Evaluate a tree at z.

    Args:
        tree: Parsed expression.
        z: Python complex/float, or a numpy array of complex inputs.

    Returns:
        complex for scalar input, complex128 array (same shape as z) otherwise.
        Undefined points (division by zero, log(0), ...) come back as inf/NaN.
    """
    scalar = np.ndim(z) == 0 and not isinstance(z, np.ndarray)
    zs = np.asarray(z, dtype=np.complex128)

    with np.errstate(all="ignore"):
        result = _eval(tree, zs)

    if scalar:
        return complex(result)
    return np.broadcast_to(result, zs.shape).copy()


def compile_expression(text: str):
    """Parse once and return a pure callable f(z) -> complex.

    Raises:
        ParseError: If the expression is malformed.
    """
    tree = parse(text)

    def fn(z):
        return evaluate(tree, z)

    fn.tree = tree
    fn.expression = text
    return fn
