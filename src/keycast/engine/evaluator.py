"""Shape script evaluator.

Scripts are Python source, compiled once at load time. A script is either
a single expression::

    value * 2

or a function body that returns its result::

    if value > 64:
        return [[5, value]]
    return None

Every call sees the names ``device``, ``type``, ``key``, ``value``, ``data``
and ``shared``, plus ``math`` and a restricted set of builtins.
"""

import builtins
import itertools
import logging
import math
import textwrap
import threading
from dataclasses import dataclass
from types import FunctionType
from typing import Any, Optional

from keycast.exceptions import ShapeScriptError

logger = logging.getLogger(__name__)

SAFE_BUILTINS = {
    name: getattr(builtins, name)
    for name in (
        "abs", "all", "any", "bool", "dict", "divmod", "enumerate", "filter",
        "float", "int", "isinstance", "len", "list", "map", "max", "min",
        "pow", "range", "reversed", "round", "set", "sorted", "str", "sum",
        "tuple", "zip", "ArithmeticError", "IndexError", "KeyError",
        "TypeError", "ValueError", "ZeroDivisionError",
    )
}

SCRIPT_ARGUMENTS = ("device", "type", "key", "value", "data", "shared")

_ENTRY_POINT = "__shape__"


@dataclass(frozen=True)
class ShapeHandle:
    """Opaque reference to a compiled script."""

    name: str
    id: int


def _wrap_source(source: str) -> str:
    """Turn an expression or a function body into a function definition."""
    try:
        compile(source, "<shape>", "eval")
        body = f"return (\n{source}\n)"
    except SyntaxError:
        body = source
    signature = ", ".join(SCRIPT_ARGUMENTS)
    return f"def {_ENTRY_POINT}({signature}):\n{textwrap.indent(body, '    ')}\n"


class Evaluator:
    """
    Compiles and runs shape scripts.

    One instance per process, passed to the shaper. Calls are serialized by
    a lock so ``shared`` is only ever touched by one script at a time.
    """

    def __init__(self, shared: Optional[dict[str, Any]] = None):
        """
        Args:
            shared: Script globals, mutable and persistent between calls
        """
        self.shared: dict[str, Any] = shared if shared is not None else {}
        self._functions: dict[int, FunctionType] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def register(self, name: str, source: str) -> ShapeHandle:
        """
        Compile a script.

        Args:
            name: Registration name, ``<device>_<key>`` by convention
            source: Script source

        Returns:
            Handle to pass to ``call``

        Raises:
            ShapeScriptError: If the source does not compile
        """
        namespace: dict[str, Any] = {"__builtins__": SAFE_BUILTINS, "math": math}
        try:
            code = compile(_wrap_source(source), f"<shape {name}>", "exec")
            exec(code, namespace)
        except SyntaxError as e:
            raise ShapeScriptError(name, f"syntax error on line {e.lineno}: {e.msg}") from e

        handle = ShapeHandle(name=name, id=next(self._ids))
        with self._lock:
            self._functions[handle.id] = namespace[_ENTRY_POINT]
        logger.debug(f"Registered shape script {name}")
        return handle

    def call(self, handle: ShapeHandle, **names: Any) -> Any:
        """
        Run a script.

        Args:
            handle: Handle returned by ``register``
            **names: Values for ``device``, ``type``, ``key``, ``value`` and ``data``

        Returns:
            Whatever the script returns

        Raises:
            ShapeScriptError: If the script raises or the handle is unknown
        """
        with self._lock:
            function = self._functions.get(handle.id)
            if function is None:
                raise ShapeScriptError(handle.name, "not registered")

            arguments = {arg: names.get(arg) for arg in SCRIPT_ARGUMENTS}
            arguments["shared"] = self.shared
            try:
                return function(**arguments)
            except Exception as e:
                raise ShapeScriptError(handle.name, f"{type(e).__name__}: {e}") from e

    def __contains__(self, handle: ShapeHandle) -> bool:
        return handle.id in self._functions

    def __len__(self) -> int:
        return len(self._functions)
