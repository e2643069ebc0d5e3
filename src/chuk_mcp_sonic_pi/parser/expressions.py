"""
Numeric expressions - `0.5+swing`, `rrand(0.2, 0.4)`, `(60 - 12) * 2`.

Scripts write arithmetic wherever a number is expected. Expressions are
parsed with the standard `ast` module and walked over a small whitelist, so
nothing in a script is ever executed.
"""

from __future__ import annotations

import ast
import math
import operator
import random
from collections.abc import Callable, Mapping

_BIN_OPS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

# Random helpers callable from expressions
_RANDOM_CALLS = frozenset({"rrand", "rrand_i", "rand", "rand_i"})


class ExpressionError(ValueError):
    """Raised internally when an expression cannot be evaluated."""


def _parse(expr: str) -> ast.expr | None:
    text = expr.strip()
    if not text:
        return None
    try:
        return ast.parse(text, mode="eval").body
    except (SyntaxError, ValueError, RecursionError):
        return None


def _is_allowed(node: ast.AST) -> bool:
    if isinstance(node, ast.Constant):
        return isinstance(node.value, (int, float)) and not isinstance(node.value, bool)
    if isinstance(node, ast.Name):
        return True
    if isinstance(node, ast.BinOp):
        return (
            type(node.op) in _BIN_OPS and _is_allowed(node.left) and _is_allowed(node.right)
        )
    if isinstance(node, ast.UnaryOp):
        return type(node.op) in _UNARY_OPS and _is_allowed(node.operand)
    if isinstance(node, ast.Call):
        return (
            isinstance(node.func, ast.Name)
            and node.func.id in _RANDOM_CALLS
            and not node.keywords
            and len(node.args) <= 2
            and all(_is_allowed(a) for a in node.args)
        )
    return False


def is_numeric_expression(expr: str) -> bool:
    """True if the text is arithmetic over numbers, names and random helpers."""
    node = _parse(expr)
    return node is not None and _is_allowed(node)


def _random_call(name: str, args: list[float], rng: random.Random) -> float:
    if name in ("rand", "rand_i"):
        low, high = 0.0, (args[0] if args else 1.0)
    else:
        if not args:
            raise ExpressionError(f"{name} needs arguments")
        low = args[0]
        high = args[1] if len(args) > 1 else low
    if name.endswith("_i"):
        lo, hi = sorted((int(low), int(high)))
        return float(rng.randint(lo, hi))
    return low + rng.random() * (high - low)


def _eval(node: ast.AST, scope: Mapping[str, float], rng: random.Random) -> float:
    if isinstance(node, ast.Constant):
        return float(node.value)
    if isinstance(node, ast.Name):
        if node.id not in scope:
            raise ExpressionError(f"unbound name {node.id}")
        return float(scope[node.id])
    if isinstance(node, ast.BinOp):
        left = _eval(node.left, scope, rng)
        right = _eval(node.right, scope, rng)
        try:
            return _BIN_OPS[type(node.op)](left, right)
        except ZeroDivisionError as e:
            raise ExpressionError("division by zero") from e
    if isinstance(node, ast.UnaryOp):
        return _UNARY_OPS[type(node.op)](_eval(node.operand, scope, rng))
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
        args = [_eval(a, scope, rng) for a in node.args]
        return _random_call(node.func.id, args, rng)
    raise ExpressionError(f"unsupported expression: {ast.dump(node)}")


def evaluate_number(
    expr: str | None,
    scope: Mapping[str, float] | None = None,
    rng: random.Random | None = None,
) -> float | None:
    """
    Evaluate a numeric expression.

    Args:
        expr: Expression text
        scope: Scalar variable bindings visible to the expression
        rng: Random source for rrand/rand calls

    Returns:
        The value, or None if the expression is not numeric, refers to an
        unbound name, divides by zero or overflows
    """
    if expr is None:
        return None
    node = _parse(expr)
    if node is None or not _is_allowed(node):
        return None
    try:
        value = _eval(node, scope or {}, rng or random.Random())
    except (ExpressionError, OverflowError, RecursionError):
        return None
    return value if math.isfinite(value) else None
