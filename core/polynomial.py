"""
Holomorph — Polynomial & Rational Constructors
Build expression trees from coefficient lists instead of hand-typed strings.

Coefficients are in ascending order: [c0, c1, c2] is c0 + c1*z + c2*z^2.
The result is an ordinary tree, so it works everywhere a parsed expression does.
"""

from core.expression import Number, Variable, BinaryOp


def _term(coef: float, power: int):
    if power == 0:
        return Number(float(coef))
    zpow = Variable() if power == 1 else BinaryOp(Variable(), "^", Number(float(power)))
    if coef == 1:
        return zpow
    return BinaryOp(Number(float(coef)), "*", zpow)


def polynomial(coefficients: list[float]):
    """Sum of coef * z^k, skipping zero coefficients.

    An empty or all-zero list gives Number(0.0).
    """
    terms = [_term(c, k) for k, c in enumerate(coefficients) if c != 0]
    if not terms:
        return Number(0.0)
    node = terms[0]
    for t in terms[1:]:
        node = BinaryOp(node, "+", t)
    return node


def rational(numerator: list[float], denominator: list[float]):
    """numerator(z) / denominator(z).

    Zeros of the denominator produce inf/NaN at evaluation time and are
    rendered with the fallback color, like any other singularity.
    """
    return BinaryOp(polynomial(numerator), "/", polynomial(denominator))


def parse_coefficients(text: str) -> list[float]:
    """Parse "1, 0, -2.5" (commas or whitespace) into floats.

    Raises:
        ValueError: On a non-numeric or non-finite entry.
    """
    parts = [p for p in text.replace(",", " ").split() if p]
    coefficients = []
    for p in parts:
        value = float(p)
        if value != value or value in (float("inf"), float("-inf")):
            raise ValueError(f"NaN/Inf not allowed in coefficients: {text}")
        coefficients.append(value)
    return coefficients
