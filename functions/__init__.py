"""
Holomorph — Function Registry
The fixed table of named complex functions an expression may call.
Every function is: (z: complex128 ndarray) -> complex128 ndarray

The parser resolves call names against this table once, so a parsed tree
can only ever name a registered function.
"""

from functions.elementary import (
    exp,
    log,
    sqrt,
    magnitude,
    conjugate,
    real_part,
    imag_part,
    argument,
)
from functions.trig import sin, cos, tan, sec, csc, cot, asin, acos, atan
from functions.hyperbolic import sinh, cosh, tanh, asinh, acosh, atanh

# Master registry: name -> {fn, category, description}
FUNCTIONS = {
    # === ELEMENTARY ===
    "exp": {
        "fn": exp,
        "category": "elementary",
        "description": "Complex exponential e^z",
    },
    "log": {
        "fn": log,
        "category": "elementary",
        "description": "Principal natural logarithm",
    },
    "ln": {
        "fn": log,
        "category": "elementary",
        "description": "Principal natural logarithm",
        "alias_of": "log",
    },
    "sqrt": {
        "fn": sqrt,
        "category": "elementary",
        "description": "Principal square root",
    },
    "abs": {
        "fn": magnitude,
        "category": "elementary",
        "description": "Magnitude |z| (imaginary part zero)",
    },
    "conj": {
        "fn": conjugate,
        "category": "elementary",
        "description": "Complex conjugate (mirror across the real axis)",
    },
    "re": {
        "fn": real_part,
        "category": "elementary",
        "description": "Real part (imaginary part zero)",
    },
    "im": {
        "fn": imag_part,
        "category": "elementary",
        "description": "Imaginary part as a real value",
    },
    "arg": {
        "fn": argument,
        "category": "elementary",
        "description": "Phase angle in (-pi, pi]",
    },

    # === TRIG ===
    "sin": {
        "fn": sin,
        "category": "trig",
        "description": "Sine",
    },
    "cos": {
        "fn": cos,
        "category": "trig",
        "description": "Cosine",
    },
    "tan": {
        "fn": tan,
        "category": "trig",
        "description": "Tangent",
    },
    "sec": {
        "fn": sec,
        "category": "trig",
        "description": "Secant 1/cos(z)",
    },
    "csc": {
        "fn": csc,
        "category": "trig",
        "description": "Cosecant 1/sin(z)",
    },
    "cot": {
        "fn": cot,
        "category": "trig",
        "description": "Cotangent 1/tan(z)",
    },
    "asin": {
        "fn": asin,
        "category": "trig",
        "description": "Principal inverse sine",
    },
    "acos": {
        "fn": acos,
        "category": "trig",
        "description": "Principal inverse cosine",
    },
    "atan": {
        "fn": atan,
        "category": "trig",
        "description": "Principal inverse tangent",
    },

    # === HYPERBOLIC ===
    "sinh": {
        "fn": sinh,
        "category": "hyperbolic",
        "description": "Hyperbolic sine",
    },
    "cosh": {
        "fn": cosh,
        "category": "hyperbolic",
        "description": "Hyperbolic cosine",
    },
    "tanh": {
        "fn": tanh,
        "category": "hyperbolic",
        "description": "Hyperbolic tangent",
    },
    "asinh": {
        "fn": asinh,
        "category": "hyperbolic",
        "description": "Inverse hyperbolic sine",
    },
    "acosh": {
        "fn": acosh,
        "category": "hyperbolic",
        "description": "Inverse hyperbolic cosine",
    },
    "atanh": {
        "fn": atanh,
        "category": "hyperbolic",
        "description": "Inverse hyperbolic tangent",
    },
}

CATEGORIES = {
    "elementary": "Exponential, logarithm, roots, and real projections",
    "trig": "Circular functions, reciprocals, and inverses",
    "hyperbolic": "Hyperbolic functions and inverses",
}

CATEGORY_ORDER = list(CATEGORIES.keys())


def get_function(name: str):
    """Get a registered function by name.

    Raises ValueError if the name is not registered.
    """
    if name not in FUNCTIONS:
        available = ", ".join(sorted(FUNCTIONS.keys()))
        raise ValueError(f"Unknown function: {name}. Available: {available}")
    return FUNCTIONS[name]["fn"]


def is_function(name: str) -> bool:
    """Check whether a name is a registered function."""
    return name in FUNCTIONS


def list_functions(category: str = None) -> list[dict]:
    """List all registered functions with descriptions.

    Args:
        category: Optional filter — only return functions in this category.
    """
    results = []
    for name, entry in FUNCTIONS.items():
        if category and entry.get("category") != category:
            continue
        item = {
            "name": name,
            "description": entry["description"],
            "category": entry.get("category", "other"),
        }
        if entry.get("alias_of"):
            item["alias_of"] = entry["alias_of"]
        results.append(item)
    return results


def list_categories() -> list[str]:
    """Return ordered list of category keys."""
    return list(CATEGORIES.keys())


def search_functions(query: str, max_query_len: int = 200) -> list[dict]:
    """Search functions by name or description substring."""
    if len(query) > max_query_len:
        raise ValueError(f"Search query too long (max {max_query_len} chars)")
    query_lower = query.lower()
    return [
        item for item in list_functions()
        if query_lower in item["name"] or query_lower in item["description"].lower()
    ]
