# ABOUTME: Inline expression evaluator for <%= expr %> fragments in templates.
# ABOUTME: Walks a whitelisted subset of Python expression syntax with the record bound to `book`.

"""Inline expressions.

Template authors can write small Python expressions such as::

    <%= ", ".join(book.authors) %>
    <%= book.title.upper() %>
    <%= book.totalPage or "?" %>

The expression is parsed with :mod:`ast` and evaluated by a tree walker that
only understands literals, the name ``book``, attribute/subscript access,
operators, conditional expressions, f-strings, a handful of builtins and the
public methods of ``str``, ``list`` and ``dict`` values. Nothing is passed to
``eval``. Template files are still trusted input: they are written by the
same person who owns the notes, never fetched from a provider.
"""

import ast
import json
import logging
import operator
import re
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

_FRAGMENT_RE = re.compile(r"<%=(.+?)%>")

_MAX_REPEAT = 10_000

_BINARY_OPS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Not: operator.not_,
}

_COMPARE_OPS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}

_BUILTINS: dict[str, Callable[..., Any]] = {
    "len": len,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "round": round,
    "abs": abs,
    "min": min,
    "max": max,
    "sorted": sorted,
    "list": list,
}

_METHOD_TYPES = (str, list, dict)

# str.format can walk attributes of its arguments; the rest mutate the record.
_BLOCKED_METHODS = frozenset(
    {
        "format",
        "format_map",
        "append",
        "extend",
        "insert",
        "remove",
        "pop",
        "popitem",
        "clear",
        "update",
        "setdefault",
        "sort",
        "reverse",
    }
)


class ExpressionError(Exception):
    """Raised when an inline expression cannot be parsed or is not allowed."""


def _check_repeat(sequence: Any, count: Any) -> None:
    if isinstance(sequence, (str, list, tuple)) and isinstance(count, int):
        if len(sequence) * count > _MAX_REPEAT:
            raise ExpressionError("repeated sequence too long")


class _Evaluator:
    def __init__(self, record: Mapping[str, Any]) -> None:
        self._record = record

    def evaluate(self, source: str) -> Any:
        try:
            tree = ast.parse(source.strip(), mode="eval")
        except SyntaxError as exc:
            raise ExpressionError(f"invalid expression: {exc.msg}") from exc
        try:
            return self._eval(tree.body)
        except ExpressionError:
            raise
        except RecursionError as exc:
            raise ExpressionError("expression is nested too deeply") from exc
        except Exception as exc:
            raise ExpressionError(f"{type(exc).__name__}: {exc}") from exc

    def _eval(self, node: ast.AST) -> Any:
        handler = getattr(self, f"_eval_{type(node).__name__}", None)
        if handler is None:
            raise ExpressionError(f"{type(node).__name__} is not allowed")
        return handler(node)

    def _eval_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def _eval_Name(self, node: ast.Name) -> Any:
        if node.id == "book":
            return self._record
        raise ExpressionError(f"unknown name {node.id!r}")

    def _eval_Attribute(self, node: ast.Attribute) -> Any:
        if node.attr.startswith("_") or node.attr in _BLOCKED_METHODS:
            raise ExpressionError(f"attribute {node.attr!r} is not allowed")
        target = self._eval(node.value)
        if target is self._record:
            return self._record.get(node.attr)
        if isinstance(target, _METHOD_TYPES) and callable(getattr(target, node.attr, None)):
            return getattr(target, node.attr)
        if isinstance(target, Mapping):
            return target.get(node.attr)
        raise ExpressionError(f"cannot read {node.attr!r} of {type(target).__name__}")

    def _eval_Subscript(self, node: ast.Subscript) -> Any:
        target = self._eval(node.value)
        key = self._eval(node.slice)
        try:
            return target[key]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExpressionError(f"bad subscript: {exc}") from exc

    def _eval_Slice(self, node: ast.Slice) -> slice:
        lower = self._eval(node.lower) if node.lower else None
        upper = self._eval(node.upper) if node.upper else None
        step = self._eval(node.step) if node.step else None
        return slice(lower, upper, step)

    def _eval_List(self, node: ast.List) -> list[Any]:
        return [self._eval(el) for el in node.elts]

    def _eval_Tuple(self, node: ast.Tuple) -> tuple[Any, ...]:
        return tuple(self._eval(el) for el in node.elts)

    def _eval_Dict(self, node: ast.Dict) -> dict[Any, Any]:
        if any(k is None for k in node.keys):
            raise ExpressionError("dict unpacking is not allowed")
        return {self._eval(k): self._eval(v) for k, v in zip(node.keys, node.values)}

    def _eval_BinOp(self, node: ast.BinOp) -> Any:
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"operator {type(node.op).__name__} is not allowed")
        left = self._eval(node.left)
        right = self._eval(node.right)
        if isinstance(node.op, ast.Mult):
            _check_repeat(left, right)
            _check_repeat(right, left)
        try:
            return op(left, right)
        except (TypeError, ValueError, ZeroDivisionError) as exc:
            raise ExpressionError(str(exc)) from exc

    def _eval_UnaryOp(self, node: ast.UnaryOp) -> Any:
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"operator {type(node.op).__name__} is not allowed")
        try:
            return op(self._eval(node.operand))
        except TypeError as exc:
            raise ExpressionError(str(exc)) from exc

    def _eval_BoolOp(self, node: ast.BoolOp) -> Any:
        value: Any = None
        for operand in node.values:
            value = self._eval(operand)
            if isinstance(node.op, ast.And) and not value:
                return value
            if isinstance(node.op, ast.Or) and value:
                return value
        return value

    def _eval_Compare(self, node: ast.Compare) -> bool:
        left = self._eval(node.left)
        for op_node, comparator in zip(node.ops, node.comparators):
            right = self._eval(comparator)
            try:
                if not _COMPARE_OPS[type(op_node)](left, right):
                    return False
            except TypeError as exc:
                raise ExpressionError(str(exc)) from exc
            left = right
        return True

    def _eval_IfExp(self, node: ast.IfExp) -> Any:
        return self._eval(node.body) if self._eval(node.test) else self._eval(node.orelse)

    def _eval_JoinedStr(self, node: ast.JoinedStr) -> str:
        return "".join(str(self._eval(value)) for value in node.values)

    def _eval_FormattedValue(self, node: ast.FormattedValue) -> str:
        value = self._eval(node.value)
        spec = self._eval(node.format_spec) if node.format_spec else ""
        try:
            return format(value, spec)
        except (TypeError, ValueError) as exc:
            raise ExpressionError(str(exc)) from exc

    def _eval_Call(self, node: ast.Call) -> Any:
        if any(isinstance(arg, ast.Starred) for arg in node.args) or any(
            kw.arg is None for kw in node.keywords
        ):
            raise ExpressionError("argument unpacking is not allowed")

        if isinstance(node.func, ast.Name):
            func = _BUILTINS.get(node.func.id)
            if func is None:
                raise ExpressionError(f"function {node.func.id!r} is not allowed")
        elif isinstance(node.func, ast.Attribute):
            func = self._eval(node.func)
            if not callable(func):
                raise ExpressionError(f"{node.func.attr!r} is not callable")
        else:
            raise ExpressionError("only named functions and methods can be called")

        args = [self._eval(arg) for arg in node.args]
        kwargs = {kw.arg: self._eval(kw.value) for kw in node.keywords}
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            raise ExpressionError(str(exc)) from exc


def evaluate_expression(record: Mapping[str, Any], source: str) -> Any:
    """Evaluate one expression against the record bound to the name `book`.

    Raises:
        ExpressionError: When the expression is malformed, uses syntax outside
            the allowed subset, or fails while evaluating.
    """
    return _Evaluator(record).evaluate(source)


def _to_output(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as exc:
        raise ExpressionError(f"result cannot be written as JSON: {exc}") from exc


def execute_inline_scripts(record: Mapping[str, Any], text: str) -> str:
    """Replace every <%= expr %> fragment with the evaluated result.

    Strings are inserted verbatim, anything else as JSON. A fragment that
    fails is logged and left in place; the remaining fragments still run.
    """

    def substitute(match: re.Match[str]) -> str:
        try:
            return _to_output(evaluate_expression(record, match.group(1)))
        except ExpressionError as exc:
            logger.warning("Inline expression %r failed: %s", match.group(1).strip(), exc)
            return match.group(0)

    return _FRAGMENT_RE.sub(substitute, text)
