"""
Sandboxed evaluation of workflow-authored code.

Conditions are single expressions evaluated with simpleeval (no eval() or
exec()). Transform code is a Python function body executed with restricted
builtins in a worker thread under a timeout. Both only see the bindings they
are given, normally ``input`` and ``previousNodes``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from simpleeval import DEFAULT_OPERATORS, SimpleEval

from ..core.exceptions import CodeEvaluationError

logger = logging.getLogger(__name__)


class ScriptValue(dict):
    """Mapping exposed to scripts; keys are also readable as attributes.

    Keys win over dict methods, so ``input.items`` is the ``items`` field
    when the data has one. Dunder names always resolve normally.
    """

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("__") and dict.__contains__(self, name):
            return dict.__getitem__(self, name)
        return super().__getattribute__(name)

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


def to_script_value(value: Any) -> Any:
    """Copy JSON-like data into script-facing containers."""
    if isinstance(value, Mapping):
        return ScriptValue({str(k): to_script_value(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return [to_script_value(v) for v in value]
    return value


def to_plain_value(value: Any) -> Any:
    """Convert script results back to plain dicts and lists."""
    if isinstance(value, Mapping):
        # .items may be shadowed by a data key on ScriptValue
        pairs = dict.items(value) if isinstance(value, dict) else value.items()
        return {str(k): to_plain_value(v) for k, v in pairs}
    if isinstance(value, (list, tuple, set)):
        return [to_plain_value(v) for v in value]
    return value


SAFE_BUILTINS: dict[str, Any] = {
    "len": len,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": list,
    "dict": dict,
    "tuple": tuple,
    "set": set,
    "range": range,
    "enumerate": enumerate,
    "zip": zip,
    "map": map,
    "filter": filter,
    "sorted": sorted,
    "reversed": reversed,
    "sum": sum,
    "min": min,
    "max": max,
    "abs": abs,
    "round": round,
    "any": any,
    "all": all,
    "isinstance": isinstance,
    "None": None,
    "True": True,
    "False": False,
    "Exception": Exception,
    "ValueError": ValueError,
    "KeyError": KeyError,
    "TypeError": TypeError,
}


class SandboxedEvaluator:
    """Default code evaluation collaborator."""

    def __init__(self, timeout: float | None = 5.0) -> None:
        self._timeout = timeout

    def evaluate(self, expression: str, bindings: Mapping[str, Any]) -> Any:
        """Evaluate a single expression against ``bindings``."""
        evaluator = SimpleEval()
        evaluator.operators = DEFAULT_OPERATORS.copy()
        evaluator.functions = {
            "len": len,
            "str": str,
            "int": int,
            "float": float,
            "bool": bool,
            "abs": abs,
            "min": min,
            "max": max,
            "round": round,
            "lower": lambda s: str(s).lower(),
            "upper": lambda s: str(s).upper(),
            "includes": lambda s, search: search in s if s is not None else False,
        }
        evaluator.names = {
            "true": True,
            "false": False,
            "null": None,
            **{name: to_script_value(value) for name, value in bindings.items()},
        }

        try:
            return to_plain_value(evaluator.eval(expression.strip()))
        except Exception as e:
            logger.debug("Expression evaluation failed: %s (expression: %s)", e, expression)
            raise CodeEvaluationError(str(e) or type(e).__name__) from e

    async def run(self, code: str, bindings: Mapping[str, Any]) -> Any:
        """Run a function body against ``bindings`` and return its result."""
        indented_lines = []
        for line in code.split("\n"):
            indented_lines.append("    " + line if line.strip() else "")
        indented_code = "\n".join(indented_lines) or "    pass"

        wrapped_code = f"""def __user_code__():
{indented_code}
    return None

__result__ = __user_code__()
"""
        restricted_globals: dict[str, Any] = {"__builtins__": dict(SAFE_BUILTINS)}
        for name, value in bindings.items():
            restricted_globals[name] = to_script_value(value)

        def execute_code() -> Any:
            exec_locals: dict[str, Any] = {}
            exec(compile(wrapped_code, "<transform>", "exec"), restricted_globals, exec_locals)
            return exec_locals.get("__result__")

        try:
            if self._timeout:
                result = await asyncio.wait_for(
                    asyncio.to_thread(execute_code), timeout=self._timeout
                )
            else:
                result = await asyncio.to_thread(execute_code)
        except asyncio.TimeoutError:
            raise CodeEvaluationError(
                f"Code execution timed out ({self._timeout:g} second limit)"
            ) from None
        except Exception as e:
            raise CodeEvaluationError(str(e) or type(e).__name__) from e

        return to_plain_value(result)
