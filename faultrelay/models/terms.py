"""
Runtime Term Values

Python encoding of the values found inside fault reports:

- atoms are ``str``, binaries are ``bytes``
- tuples, lists and maps are ``tuple``, ``list`` and ``dict``
- ``None`` stands for the ``undefined`` atom
- process identifiers and funs get the small value types below

Proplists are lists of 2-tuples; a bare atom entry means ``{atom, true}``.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


@dataclass(frozen=True)
class Pid:
    """Process identifier, rendered as ``<node.number.serial>``."""
    node: int = 0
    number: int = 0
    serial: int = 0

    def __str__(self) -> str:
        return f"<{self.node}.{self.number}.{self.serial}>"


@dataclass(frozen=True)
class Fun:
    """Reference to an anonymous function with a declared arity."""
    module: str
    name: str
    arity: int

    def __str__(self) -> str:
        return f"#Fun<{self.module}.{self.name}.{self.arity}>"


FunLike = Union[Fun, Callable[..., Any]]


def fun_arity(fun: FunLike) -> Optional[int]:
    """Declared arity of a fun, or None when it cannot be determined."""
    if isinstance(fun, Fun):
        return fun.arity
    if callable(fun):
        try:
            params = inspect.signature(fun).parameters.values()
        except (TypeError, ValueError):
            return None
        return sum(
            1 for p in params
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        )
    return None


def is_proplist(value: Any) -> bool:
    """True for values that ``get_value`` can read."""
    return isinstance(value, (list, dict))


def get_value(props: Any, key: str, default: Any = None) -> Any:
    """Return the first value stored under *key* in a proplist or dict."""
    if isinstance(props, dict):
        return props.get(key, default)
    if not isinstance(props, list):
        return default
    for entry in props:
        if isinstance(entry, tuple) and len(entry) >= 1 and entry[0] == key:
            return entry[1] if len(entry) == 2 else default
        if isinstance(entry, str) and entry == key:
            return True
    return default


def iter_items(props: Any) -> list[tuple[Any, Any]]:
    """Key/value pairs of a proplist or dict, in their original order."""
    if isinstance(props, dict):
        return list(props.items())
    items: list[tuple[Any, Any]] = []
    if not isinstance(props, list):
        return items
    for entry in props:
        if isinstance(entry, tuple) and len(entry) == 2:
            items.append(entry)
        elif isinstance(entry, str):
            items.append((entry, True))
    return items


def is_frame(value: Any) -> bool:
    """True for a 3- or 4-element call frame tuple."""
    return isinstance(value, tuple) and len(value) in (3, 4)


def is_trace_like(value: Any) -> bool:
    """True for a list or a single frame, i.e. something that may carry a trace."""
    return isinstance(value, list) or is_frame(value)
