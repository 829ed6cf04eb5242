"""
Term Dumping & Format-String Utilities

Provides:
- ``format_term()``: a depth/width-bounded printer for runtime terms
  with deterministic truncation.
- ``format_string()``: literal rendering of names and text-like terms.
- ``format_message()``: a formatter for ``~``-directive format strings
  as emitted by the supervision runtime.

All components that need to put a term into a human-readable message
should use these helpers instead of ``repr()`` or ``str()``.
"""

from __future__ import annotations
import re
from typing import Any, Optional

from faultrelay.models.terms import Fun, Pid

DEFAULT_WIDTH = 120
MAX_DEPTH = 8
MAX_ITEMS = 30
ELLIPSIS = "..."

_BARE_ATOM_RE = re.compile(r"^[a-z][A-Za-z0-9_@]*$")

# ~[width][.precision[.pad]][modifiers]control
_DIRECTIVE_RE = re.compile(r"~(\*|-?\d+)?(?:\.(\*|\d+)?)?(?:\.(.))?([tlk]*)(.)")


def truncate_at_item_boundary(
    text: str,
    max_chars: int,
    *,
    suffix: str = ELLIPSIS,
    min_chars: int = 20,
) -> str:
    """Truncate *text* at an element boundary without splitting a term.

    Parameters
    ----------
    text:
        The rendered term to (possibly) truncate.
    max_chars:
        Maximum length of the returned string, **including** the suffix.
    suffix:
        Appended when truncation occurs.
    min_chars:
        If no ``", "`` boundary lies past this point, hard-cut instead.

    Examples
    --------
    >>> truncate_at_item_boundary("[alpha, beta, gamma]", 16, min_chars=4)
    '[alpha...'
    >>> truncate_at_item_boundary("short", 100)
    'short'
    """
    if len(text) <= max_chars:
        return text

    budget = max_chars - len(suffix)
    if budget <= 0:
        return text[:max_chars]

    candidate = text[:budget]
    boundary = candidate.rfind(", ")
    if boundary >= min_chars:
        return candidate[:boundary] + suffix

    return candidate.rstrip() + suffix


def format_atom(atom: str) -> str:
    """Render an atom bare when possible, single-quoted otherwise."""
    if _BARE_ATOM_RE.match(atom):
        return atom
    escaped = atom.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _format_binary(value: bytes) -> str:
    try:
        text = value.decode("utf-8")
    except UnicodeDecodeError:
        return "<<" + ",".join(str(b) for b in value) + ">>"
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'<<"{escaped}">>'


def _dump(term: Any, depth: int) -> str:
    if depth > MAX_DEPTH:
        return ELLIPSIS
    if term is None:
        return "undefined"
    if isinstance(term, bool):
        return "true" if term else "false"
    if isinstance(term, str):
        return format_atom(term)
    if isinstance(term, (int, float)):
        return repr(term)
    if isinstance(term, (bytes, bytearray)):
        return _format_binary(bytes(term))
    if isinstance(term, (Pid, Fun)):
        return str(term)
    if isinstance(term, tuple):
        return "{" + _dump_items(term, depth) + "}"
    if isinstance(term, list):
        return "[" + _dump_items(term, depth) + "]"
    if isinstance(term, dict):
        pairs = list(term.items())
        rendered = [
            f"{_dump(k, depth + 1)} => {_dump(v, depth + 1)}"
            for k, v in pairs[:MAX_ITEMS]
        ]
        if len(pairs) > MAX_ITEMS:
            rendered.append(ELLIPSIS)
        return "#{" + ", ".join(rendered) + "}"
    return repr(term)


def _dump_items(items: Any, depth: int) -> str:
    rendered = [_dump(item, depth + 1) for item in list(items)[:MAX_ITEMS]]
    if len(items) > MAX_ITEMS:
        rendered.append(ELLIPSIS)
    return ", ".join(rendered)


def format_term(term: Any, width: int = DEFAULT_WIDTH) -> str:
    """Render any term on a single line, bounded to *width* characters.

    >>> format_term(("shutdown", "foo"))
    '{shutdown, foo}'
    >>> format_term([b"bin", None])
    '[<<"bin">>, undefined]'
    """
    return truncate_at_item_boundary(_dump(term, 0), width)


def _as_charlist(term: Any) -> Optional[str]:
    if (
        isinstance(term, list)
        and term
        and all(isinstance(c, int) and not isinstance(c, bool) for c in term)
        and all(c in (9, 10, 13) or 32 <= c <= 0x10FFFF for c in term)
    ):
        return "".join(chr(c) for c in term)
    return None


def format_string(term: Any, width: int = DEFAULT_WIDTH) -> str:
    """Render a name or text-like term literally, else as a term dump."""
    if isinstance(term, str):
        return term
    if isinstance(term, (bytes, bytearray)):
        return bytes(term).decode("utf-8", errors="replace")
    if isinstance(term, Pid):
        return str(term)
    text = _as_charlist(term)
    if text is not None:
        return text
    return format_term(term, width)


def format_message(fmt: Any, data: Any, width: int = DEFAULT_WIDTH) -> str:
    """Expand a ``~``-directive format string with its data list.

    Unknown directives or a directive/argument mismatch degrade to a dump
    of the format and data instead of raising.

    >>> format_message("~s failed: ~p~n", ["job", ("error", 1)])
    'job failed: {error, 1}\\n'
    """
    text = format_string(fmt, width) if not isinstance(fmt, str) else fmt
    args = data if isinstance(data, list) else None
    rendered = _expand(text, args, width) if args is not None else None
    if rendered is None:
        return f"{format_term(fmt, width)}: {format_term(data, width)}"
    return rendered


def _expand(fmt: str, args: list[Any], width: int) -> Optional[str]:
    out: list[str] = []
    remaining = list(args)
    pos = 0
    for match in _DIRECTIVE_RE.finditer(fmt):
        out.append(fmt[pos:match.start()])
        pos = match.end()
        control = match.group(5)
        if control == "~":
            out.append("~")
            continue
        if control == "n":
            out.append("\n")
            continue
        if match.group(1) == "*" and _take_int(remaining) is None:
            return None
        precision: Optional[int] = None
        if match.group(2) == "*":
            precision = _take_int(remaining)
            if precision is None or precision < 0:
                return None
        elif match.group(2):
            precision = int(match.group(2))
        needed = 2 if control in ("P", "W") else 1
        if len(remaining) < needed:
            return None
        arg = remaining.pop(0)
        if needed == 2:
            remaining.pop(0)
        piece = _directive(control, arg, width, precision)
        if piece is None:
            return None
        out.append(piece)
    if remaining:
        return None
    out.append(fmt[pos:])
    return "".join(out)


def _take_int(remaining: list[Any]) -> Optional[int]:
    """Pop a leading integer argument consumed by a ``*`` field."""
    if not remaining or not isinstance(remaining[0], int) or isinstance(remaining[0], bool):
        return None
    return remaining.pop(0)


def _directive(control: str, arg: Any, width: int, precision: Optional[int] = None) -> Optional[str]:
    if control in ("p", "P", "w", "W"):
        return format_term(arg, width)
    if control == "s":
        if isinstance(arg, (str, bytes, bytearray)) or _as_charlist(arg) is not None:
            return format_string(arg, width)
        return None
    if control == "i":
        return ""
    if control == "c":
        if isinstance(arg, int) and not isinstance(arg, bool) and 0 <= arg <= 0x10FFFF:
            return chr(arg)
        return None
    if control in ("b", "B"):
        return str(arg) if isinstance(arg, int) and not isinstance(arg, bool) else None
    if control in ("e", "f", "g"):
        if isinstance(arg, (int, float)) and not isinstance(arg, bool):
            format_spec = f".{precision}{control}" if precision is not None else control
            return format(float(arg), format_spec)
        return None
    return None
