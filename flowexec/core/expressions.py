"""Template interpolation and safe expression evaluation.

Templates (``"Hello {{input.name}}"``) only support path lookups.
Expressions used by condition and transform nodes are parsed with ``ast``
and walked by a whitelist evaluator: literals, names, member and index
access, arithmetic, comparisons and boolean logic. Function calls,
assignment, comprehensions and lambdas are rejected.
"""

import ast
import json
import operator
import re
from collections.abc import Mapping
from typing import Any

import structlog

from flowexec.core.paths import get_value_by_path
from flowexec.models.execution import ExecutionContext

logger = structlog.get_logger()

_TEMPLATE_PATTERN = re.compile(r"\{\{([^}]+)\}\}")

# Bounds that keep a single expression from exhausting CPU or memory
MAX_EXPONENT = 1000
MAX_SEQUENCE_LENGTH = 100_000
# Integer results stay well below the int-to-str conversion limit
MAX_INT_BITS = 10_000

SAFE_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

SAFE_UNARY_OPERATORS = {
    ast.Not: lambda x: not is_truthy(x),
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

SAFE_COMPARISONS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda x, y: x in y,
    ast.NotIn: lambda x, y: x not in y,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}

# JavaScript literals written by the workflow editor
LITERAL_NAMES = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}

Scope = Mapping[str, Any]


def _scope_of(context: ExecutionContext | Scope) -> Scope:
    if isinstance(context, ExecutionContext):
        return context.as_scope()
    return context


def is_truthy(value: Any) -> bool:
    """Truthiness as the workflow editor sees it: empty lists and objects are true."""
    if isinstance(value, (list, tuple, dict)):
        return True
    return bool(value)


def stringify(value: Any) -> str:
    """Render a value for insertion into a template."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def interpolate_string(template: str, context: ExecutionContext | Scope) -> str:
    """Replace every ``{{ path }}`` with the value found at ``path``.

    Missing values render as an empty string.
    """
    scope = _scope_of(context)

    def _replace(match: re.Match[str]) -> str:
        return stringify(get_value_by_path(scope, match.group(1).strip()))

    return _TEMPLATE_PATTERN.sub(_replace, template)


def interpolate_object(value: Any, context: ExecutionContext | Scope) -> Any:
    """Interpolate every string inside a JSON-like structure.

    Keys are left untouched; non-string leaves are returned as-is.
    """
    scope = _scope_of(context)
    if isinstance(value, str):
        return interpolate_string(value, scope)
    if isinstance(value, list):
        return [interpolate_object(item, scope) for item in value]
    if isinstance(value, dict):
        return {key: interpolate_object(item, scope) for key, item in value.items()}
    return value


def normalize_operators(expression: str) -> str:
    """Rewrite JavaScript operators into their Python spelling.

    ``===``/``!==``/``&&``/``||``/``!`` are rewritten outside of string
    literals; everything else is copied through unchanged.
    """
    out: list[str] = []
    quote: str | None = None
    i = 0
    length = len(expression)

    while i < length:
        ch = expression[i]

        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < length:
                out.append(expression[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch in ("'", '"'):
            quote = ch
            out.append(ch)
            i += 1
            continue

        three = expression[i : i + 3]
        two = expression[i : i + 2]
        if three in ("===", "!=="):
            out.append(three[:2])
            i += 3
        elif two == "&&":
            out.append(" and ")
            i += 2
        elif two == "||":
            out.append(" or ")
            i += 2
        elif ch == "!" and two != "!=":
            out.append(" not ")
            i += 1
        else:
            out.append(ch)
            i += 1

    return "".join(out)


class SafeEvaluator(ast.NodeVisitor):
    """AST-based evaluator for condition and transform expressions.

    Names resolve against ``scope``. Missing mapping keys evaluate to None;
    member access on anything that is not a mapping or sequence raises.
    Logical operators use ``is_truthy``, so empty lists and objects are true.
    """

    def __init__(self, scope: Scope) -> None:
        self.scope = scope

    def visit_Expression(self, node: ast.Expression) -> Any:
        return self.visit(node.body)

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> Any:
        if node.id in LITERAL_NAMES:
            return LITERAL_NAMES[node.id]
        if node.id in self.scope:
            return self.scope[node.id]
        raise ValueError(f"Undefined variable: {node.id}")

    def visit_List(self, node: ast.List) -> list[Any]:
        return [self.visit(item) for item in node.elts]

    def visit_Tuple(self, node: ast.Tuple) -> tuple[Any, ...]:
        return tuple(self.visit(item) for item in node.elts)

    def visit_Dict(self, node: ast.Dict) -> dict[Any, Any]:
        result = {}
        for key, value in zip(node.keys, node.values):
            if key is None:
                raise ValueError("Dictionary unpacking is not allowed")
            result[self.visit(key)] = self.visit(value)
        return result

    def visit_Attribute(self, node: ast.Attribute) -> Any:
        target = self.visit(node.value)
        if isinstance(target, Mapping):
            return target.get(node.attr)
        if node.attr == "length" and isinstance(target, (list, tuple, str)):
            return len(target)
        raise ValueError(
            f"Cannot read property '{node.attr}' of {type(target).__name__}"
        )

    def visit_Subscript(self, node: ast.Subscript) -> Any:
        target = self.visit(node.value)
        key = self.visit(node.slice)

        if isinstance(target, Mapping):
            if key in target:
                return target[key]
            return target.get(str(key))
        if isinstance(target, (list, tuple, str)):
            if isinstance(key, bool) or not isinstance(key, int):
                if isinstance(key, str) and key.isdecimal():
                    key = int(key)
                elif key == "length":
                    return len(target)
                else:
                    raise ValueError(f"Invalid index: {key!r}")
            return target[key] if 0 <= key < len(target) else None
        raise ValueError(f"Cannot index {type(target).__name__}")

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        op = SAFE_BINARY_OPERATORS.get(type(node.op))
        if op is None:
            raise ValueError(f"Operator not allowed: {type(node.op).__name__}")

        left = self.visit(node.left)
        right = self.visit(node.right)

        if isinstance(node.op, ast.Add) and (isinstance(left, str) or isinstance(right, str)):
            return stringify(left) + stringify(right)
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        if isinstance(node.op, ast.Mult):
            _check_repetition(left, right)
            _check_product(left, right)

        return op(left, right)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        op = SAFE_UNARY_OPERATORS.get(type(node.op))
        if op is None:
            raise ValueError(f"Operator not allowed: {type(node.op).__name__}")
        return op(self.visit(node.operand))

    def visit_Compare(self, node: ast.Compare) -> bool:
        left = self.visit(node.left)

        for op, comparator in zip(node.ops, node.comparators):
            compare = SAFE_COMPARISONS.get(type(op))
            if compare is None:
                raise ValueError(f"Operator not allowed: {type(op).__name__}")

            right = self.visit(comparator)
            if not compare(left, right):
                return False
            left = right

        return True

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        # Short-circuits and returns the deciding operand, like `and`/`or`
        result: Any = None
        for value in node.values:
            result = self.visit(value)
            if isinstance(node.op, ast.And) and not is_truthy(result):
                return result
            if isinstance(node.op, ast.Or) and is_truthy(result):
                return result
        return result

    def visit_IfExp(self, node: ast.IfExp) -> Any:
        if is_truthy(self.visit(node.test)):
            return self.visit(node.body)
        return self.visit(node.orelse)

    def generic_visit(self, node: ast.AST) -> Any:
        raise ValueError(f"Expression element not allowed: {type(node).__name__}")


def _check_repetition(left: Any, right: Any) -> None:
    for seq, count in ((left, right), (right, left)):
        if isinstance(seq, (str, list, tuple)) and isinstance(count, int):
            if len(seq) * count > MAX_SEQUENCE_LENGTH:
                raise ValueError("Sequence repetition too large")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_power(left: Any, right: Any) -> None:
    if isinstance(right, (int, float)) and abs(right) > MAX_EXPONENT:
        raise ValueError("Exponent too large")
    # Checked before computing: a large integer power cannot be interrupted
    if _is_int(left) and _is_int(right) and right > 0 and abs(left) > 1:
        if abs(left).bit_length() * right > MAX_INT_BITS:
            raise ValueError("Power result too large")


def _check_product(left: Any, right: Any) -> None:
    if _is_int(left) and _is_int(right):
        if abs(left).bit_length() + abs(right).bit_length() > MAX_INT_BITS:
            raise ValueError("Product too large")


def evaluate_expression(expression: str, context: ExecutionContext | Scope) -> Any:
    """Evaluate a condition/transform expression against the context.

    If parsing or evaluation fails, the whole expression is treated as a
    dotted path instead. Never raises; unresolvable input yields None.

    Examples:
        >>> evaluate_expression("input.score > 60", {"input": {"score": 75}})
        True
        >>> evaluate_expression("nodeOutputs['http-1'].data", {"nodeOutputs": {"http-1": {"data": [1]}}})
        [1]
    """
    scope = _scope_of(context)

    try:
        tree = ast.parse(normalize_operators(expression).strip(), mode="eval")
        return SafeEvaluator(scope).visit(tree)
    except Exception as e:
        logger.debug(
            "expression_fallback_to_path",
            expression=expression,
            error_type=type(e).__name__,
            error=str(e),
        )
        return get_value_by_path(scope, expression.strip())
