"""SandboxInterpreter — walks block-generated programs without ``exec``.

The block editor generates a small Python subset (statements, loops,
procedures, arithmetic) whose only side effect is calling an injected
capability. Programs are parsed with :mod:`ast` and evaluated node by node,
so a program can reach nothing but the names handed to the interpreter.

Limits:
  - ``max_steps``      — statement/expression evaluations per run
  - ``timeout_seconds``— wall clock per run
  - ``max_depth``      — procedure call nesting
Ranges, sequences, integers and the source text itself are size-capped.
Every failure surfaces as a :class:`ProgramFault` subclass.
"""

from __future__ import annotations

import ast
import logging
import operator
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

_MAX_SEQUENCE_LEN = 10_000
_MAX_EXPONENT = 64
_MAX_INT_BITS = 4096
_MAX_SOURCE_LEN = 100_000


class ProgramFault(Exception):
    """The program could not run to completion."""


class ProgramSyntaxError(ProgramFault):
    """The program text does not parse."""


class ForbiddenConstruct(ProgramFault):
    """The program uses a construct outside the supported subset."""


class ProgramBudgetExceeded(ProgramFault):
    """The program ran out of steps, time, depth, or memory headroom."""


class ProgramRaised(ProgramFault):
    """The program executed a ``raise`` statement."""


# Control-flow signals; never escape the interpreter.
class _Break(Exception):
    pass


class _Continue(Exception):
    pass


class _Return(Exception):
    def __init__(self, value: Any) -> None:
        super().__init__()
        self.value = value


def _bounded_range(*args: Any) -> range:
    """``range`` that refuses to build more than _MAX_SEQUENCE_LEN items.

    min, max and len consume a range without ticking the step budget.
    """
    result = range(*args)
    try:
        size = len(result)
    except OverflowError:
        size = _MAX_SEQUENCE_LEN + 1
    if size > _MAX_SEQUENCE_LEN:
        raise ProgramBudgetExceeded(f"range of more than {_MAX_SEQUENCE_LEN} items")
    return result


_SAFE_BUILTINS: dict[str, Callable[..., Any]] = {
    "range": _bounded_range,
    "len": len,
    "abs": abs,
    "min": min,
    "max": max,
}

_BIN_OPS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type, Callable[[Any], Any]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Not: operator.not_,
}

_CMP_OPS: dict[type, Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}


@dataclass(slots=True)
class _Procedure:
    """A ``def`` declared by the program."""

    name: str
    params: tuple[str, ...]
    body: list[ast.stmt]


@dataclass(slots=True)
class _Frame:
    names: dict[str, Any]
    global_names: set[str] = field(default_factory=set)


class SandboxInterpreter:
    """Evaluates one program against a fixed set of capabilities."""

    __slots__ = (
        "_capabilities", "_max_steps", "_timeout", "_max_depth",
        "_steps", "_deadline", "_depth", "_globals",
    )

    def __init__(
        self,
        capabilities: Mapping[str, Callable[..., Any]],
        *,
        max_steps: int = 10_000,
        timeout_seconds: float = 1.0,
        max_depth: int = 50,
    ) -> None:
        self._capabilities = dict(capabilities)
        self._max_steps = max_steps
        self._timeout = timeout_seconds
        self._max_depth = max_depth
        self._steps = 0
        self._deadline = 0.0
        self._depth = 0
        self._globals: dict[str, Any] = {}

    @property
    def steps(self) -> int:
        return self._steps

    def run(self, source: str) -> None:
        """Parse and execute *source*. Raises ProgramFault on any failure."""
        if len(source) > _MAX_SOURCE_LEN:
            raise ProgramBudgetExceeded(f"program longer than {_MAX_SOURCE_LEN} characters")
        try:
            tree = ast.parse(source, mode="exec")
        except SyntaxError as exc:
            raise ProgramSyntaxError(f"line {exc.lineno}: {exc.msg}") from exc
        except ValueError as exc:
            raise ProgramSyntaxError(str(exc)) from exc
        except (MemoryError, RecursionError) as exc:
            raise ProgramBudgetExceeded("program nested too deeply to parse") from exc

        self._steps = 0
        self._depth = 0
        self._deadline = time.monotonic() + self._timeout
        self._globals = {}
        frame = _Frame(self._globals)
        try:
            self._exec_block(tree.body, frame)
        except ProgramFault:
            raise
        except (_Break, _Continue) as exc:
            raise ForbiddenConstruct("'break' or 'continue' outside a loop") from exc
        except _Return as exc:
            raise ForbiddenConstruct("'return' outside a procedure") from exc
        except RecursionError as exc:
            raise ProgramBudgetExceeded("nesting too deep") from exc
        except (ArithmeticError, TypeError, ValueError, IndexError) as exc:
            raise ProgramFault(f"{type(exc).__name__}: {exc}") from exc

    # -- bookkeeping --

    def _tick(self, node: ast.AST) -> None:
        self._steps += 1
        if self._steps > self._max_steps:
            raise ProgramBudgetExceeded(f"step budget of {self._max_steps} exhausted at line {_line(node)}")
        if time.monotonic() > self._deadline:
            raise ProgramBudgetExceeded(f"time limit of {self._timeout}s exceeded at line {_line(node)}")

    # -- statements --

    def _exec_block(self, body: list[ast.stmt], frame: _Frame) -> None:
        for stmt in body:
            self._exec(stmt, frame)

    def _exec(self, node: ast.stmt, frame: _Frame) -> None:
        self._tick(node)
        if isinstance(node, ast.Expr):
            self._eval(node.value, frame)
        elif isinstance(node, ast.Assign):
            value = self._eval(node.value, frame)
            for target in node.targets:
                self._store(target, value, frame)
        elif isinstance(node, ast.AugAssign):
            op = _BIN_OPS.get(type(node.op))
            if op is None or not isinstance(node.target, ast.Name):
                raise ForbiddenConstruct(f"unsupported augmented assignment at line {_line(node)}")
            current = self._load(node.target.id, node.target, frame)
            self._store(node.target, self._binop(op, current, self._eval(node.value, frame), node), frame)
        elif isinstance(node, ast.For):
            self._exec_for(node, frame)
        elif isinstance(node, ast.While):
            self._exec_while(node, frame)
        elif isinstance(node, ast.If):
            branch = node.body if self._eval(node.test, frame) else node.orelse
            self._exec_block(branch, frame)
        elif isinstance(node, ast.Pass):
            pass
        elif isinstance(node, ast.Break):
            raise _Break()
        elif isinstance(node, ast.Continue):
            raise _Continue()
        elif isinstance(node, ast.FunctionDef):
            self._define(node, frame)
        elif isinstance(node, ast.Return):
            raise _Return(self._eval(node.value, frame) if node.value is not None else None)
        elif isinstance(node, ast.Global):
            frame.global_names.update(node.names)
        elif isinstance(node, ast.Raise):
            detail = ast.unparse(node.exc) if node.exc is not None else "raise"
            raise ProgramRaised(f"program raised {detail} at line {_line(node)}")
        else:
            raise ForbiddenConstruct(f"{type(node).__name__} is not allowed (line {_line(node)})")

    def _exec_for(self, node: ast.For, frame: _Frame) -> None:
        iterable = self._eval(node.iter, frame)
        if not isinstance(iterable, (range, list, tuple)):
            raise ForbiddenConstruct(f"can only loop over ranges and lists (line {_line(node)})")
        for item in iterable:
            self._tick(node)
            self._store(node.target, item, frame)
            try:
                self._exec_block(node.body, frame)
            except _Break:
                return
            except _Continue:
                continue
        self._exec_block(node.orelse, frame)

    def _exec_while(self, node: ast.While, frame: _Frame) -> None:
        while self._eval(node.test, frame):
            self._tick(node)
            try:
                self._exec_block(node.body, frame)
            except _Break:
                return
            except _Continue:
                continue
        self._exec_block(node.orelse, frame)

    def _define(self, node: ast.FunctionDef, frame: _Frame) -> None:
        args = node.args
        if (node.decorator_list or args.vararg or args.kwarg or args.kwonlyargs
                or args.defaults or args.posonlyargs):
            raise ForbiddenConstruct(f"procedure {node.name!r} uses unsupported parameters (line {_line(node)})")
        proc = _Procedure(node.name, tuple(a.arg for a in args.args), node.body)
        self._bind(node.name, proc, frame)

    # -- names --

    def _bind(self, name: str, value: Any, frame: _Frame) -> None:
        if name in self._capabilities or name in _SAFE_BUILTINS:
            raise ForbiddenConstruct(f"cannot rebind {name!r}")
        if name in frame.global_names:
            self._globals[name] = value
        else:
            frame.names[name] = value

    def _store(self, target: ast.expr, value: Any, frame: _Frame) -> None:
        if not isinstance(target, ast.Name):
            raise ForbiddenConstruct(f"can only assign to plain names (line {_line(target)})")
        self._bind(target.id, value, frame)

    def _load(self, name: str, node: ast.AST, frame: _Frame) -> Any:
        if name not in frame.global_names and name in frame.names:
            return frame.names[name]
        if name in self._globals:
            return self._globals[name]
        if name in self._capabilities:
            return self._capabilities[name]
        if name in _SAFE_BUILTINS:
            return _SAFE_BUILTINS[name]
        raise ProgramFault(f"name {name!r} is not defined (line {_line(node)})")

    # -- expressions --

    def _eval(self, node: ast.expr, frame: _Frame) -> Any:
        self._tick(node)
        if isinstance(node, ast.Constant):
            if not isinstance(node.value, (int, float, str, bool, type(None))):
                raise ForbiddenConstruct(f"unsupported literal at line {_line(node)}")
            return node.value
        if isinstance(node, ast.Name):
            return self._load(node.id, node, frame)
        if isinstance(node, ast.BinOp):
            op = _BIN_OPS.get(type(node.op))
            if op is None:
                raise ForbiddenConstruct(f"operator {type(node.op).__name__} is not allowed (line {_line(node)})")
            return self._binop(op, self._eval(node.left, frame), self._eval(node.right, frame), node)
        if isinstance(node, ast.UnaryOp):
            op = _UNARY_OPS.get(type(node.op))
            if op is None:
                raise ForbiddenConstruct(f"operator {type(node.op).__name__} is not allowed (line {_line(node)})")
            return op(self._eval(node.operand, frame))
        if isinstance(node, ast.BoolOp):
            return self._boolop(node, frame)
        if isinstance(node, ast.Compare):
            left = self._eval(node.left, frame)
            for op_node, comparator in zip(node.ops, node.comparators):
                op = _CMP_OPS.get(type(op_node))
                if op is None:
                    raise ForbiddenConstruct(f"comparison {type(op_node).__name__} is not allowed (line {_line(node)})")
                right = self._eval(comparator, frame)
                if not op(left, right):
                    return False
                left = right
            return True
        if isinstance(node, ast.IfExp):
            return self._eval(node.body if self._eval(node.test, frame) else node.orelse, frame)
        if isinstance(node, ast.List):
            return [self._eval(elt, frame) for elt in node.elts]
        if isinstance(node, ast.Tuple):
            return tuple(self._eval(elt, frame) for elt in node.elts)
        if isinstance(node, ast.Call):
            return self._call(node, frame)
        raise ForbiddenConstruct(f"{type(node).__name__} is not allowed (line {_line(node)})")

    def _boolop(self, node: ast.BoolOp, frame: _Frame) -> Any:
        is_and = isinstance(node.op, ast.And)
        value: Any = is_and
        for operand in node.values:
            value = self._eval(operand, frame)
            if is_and and not value:
                return value
            if not is_and and value:
                return value
        return value

    def _binop(self, op: Callable[[Any, Any], Any], left: Any, right: Any, node: ast.AST) -> Any:
        if op is operator.pow and isinstance(right, (int, float)) and abs(right) > _MAX_EXPONENT:
            raise ProgramBudgetExceeded(f"exponent too large at line {_line(node)}")
        if (op is operator.pow and isinstance(left, int) and isinstance(right, int)
                and left.bit_length() * abs(right) > _MAX_INT_BITS):
            raise ProgramBudgetExceeded(f"number too large at line {_line(node)}")
        if op is operator.mul:
            for seq, count in ((left, right), (right, left)):
                if isinstance(seq, (str, list, tuple)) and isinstance(count, int):
                    if len(seq) * count > _MAX_SEQUENCE_LEN:
                        raise ProgramBudgetExceeded(f"sequence too long at line {_line(node)}")
        result = op(left, right)
        if isinstance(result, int) and result.bit_length() > _MAX_INT_BITS:
            raise ProgramBudgetExceeded(f"number too large at line {_line(node)}")
        if isinstance(result, (str, list, tuple)) and len(result) > _MAX_SEQUENCE_LEN:
            raise ProgramBudgetExceeded(f"sequence too long at line {_line(node)}")
        return result

    def _call(self, node: ast.Call, frame: _Frame) -> Any:
        if not isinstance(node.func, ast.Name):
            raise ForbiddenConstruct(f"only named calls are allowed (line {_line(node)})")
        if any(isinstance(a, ast.Starred) for a in node.args) or any(k.arg is None for k in node.keywords):
            raise ForbiddenConstruct(f"argument unpacking is not allowed (line {_line(node)})")
        func = self._load(node.func.id, node.func, frame)
        args = [self._eval(a, frame) for a in node.args]
        kwargs = {k.arg: self._eval(k.value, frame) for k in node.keywords}

        if isinstance(func, _Procedure):
            return self._invoke(func, args, kwargs, node)

        try:
            return func(*args, **kwargs)
        except ProgramFault:
            raise
        except Exception as exc:
            raise ProgramFault(f"{node.func.id}() failed at line {_line(node)}: {exc}") from exc

    def _invoke(self, proc: _Procedure, args: list[Any], kwargs: dict[str, Any], node: ast.AST) -> Any:
        bound = dict(zip(proc.params, args))
        for key, value in kwargs.items():
            if key not in proc.params or key in bound:
                raise ProgramFault(f"{proc.name}() got an unexpected argument {key!r} (line {_line(node)})")
            bound[key] = value
        if len(args) > len(proc.params) or len(bound) != len(proc.params):
            raise ProgramFault(f"{proc.name}() takes {len(proc.params)} arguments (line {_line(node)})")

        self._depth += 1
        if self._depth > self._max_depth:
            raise ProgramBudgetExceeded(f"procedures nested deeper than {self._max_depth}")
        try:
            self._exec_block(proc.body, _Frame(bound))
        except _Return as ret:
            return ret.value
        except (_Break, _Continue) as exc:
            raise ForbiddenConstruct(f"'break' or 'continue' outside a loop in {proc.name}()") from exc
        finally:
            self._depth -= 1
        return None


def _line(node: ast.AST) -> int:
    return getattr(node, "lineno", 0)
