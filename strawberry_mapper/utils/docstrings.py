from __future__ import annotations

import dataclasses
import inspect
import re
from typing import Any, Optional

_SECTION_RE = re.compile(r"^(\w[\w ]*):\s*$")
_ARG_RE = re.compile(r"^(\*{0,2}\w+)\s*(?:\([^)]*\))?\s*:\s*(.*)$")


def get_docstring(obj: Any) -> Optional[str]:
    """Return the docstring declared on the object itself, if any.

    Docstrings generated by `dataclasses` are ignored.
    """
    doc = obj.__dict__.get("__doc__") if isinstance(obj, type) else getattr(obj, "__doc__", None)
    if not doc:
        return None

    doc = inspect.cleandoc(doc)
    if isinstance(obj, type) and dataclasses.is_dataclass(obj) and doc.startswith(f"{obj.__name__}("):
        return None
    return doc


def get_summary(obj: Any) -> Optional[str]:
    """The description part of a docstring, before any section."""
    doc = get_docstring(obj)
    if doc is None:
        return None

    lines = []
    for line in doc.splitlines():
        if _SECTION_RE.match(line.strip()):
            break
        lines.append(line)
    summary = "\n".join(lines).strip()
    return summary or None


def get_arguments_descriptions(obj: Any) -> dict[str, str]:
    """Parse the `Args:` section of a Google style docstring.

    >>> def f(limit):
    ...     '''Do things.
    ...
    ...     Args:
    ...         limit: The maximum number of things.
    ...     '''
    >>> get_arguments_descriptions(f)
    {'limit': 'The maximum number of things.'}
    """
    doc = get_docstring(obj)
    if doc is None:
        return {}

    descriptions: dict[str, list[str]] = {}
    in_args = False
    current: Optional[str] = None
    args_indent: Optional[int] = None
    for line in doc.splitlines():
        stripped = line.strip()
        section = _SECTION_RE.match(stripped)
        if section and len(line) - len(line.lstrip()) == 0:
            in_args = section.group(1) in ("Args", "Arguments", "Parameters")
            current = None
            args_indent = None
            continue

        if not in_args or not stripped:
            continue

        indent = len(line) - len(line.lstrip())
        if args_indent is None:
            args_indent = indent

        match = _ARG_RE.match(stripped)
        if indent == args_indent and match:
            current = match.group(1).lstrip("*")
            descriptions[current] = [match.group(2)]
        elif current is not None:
            descriptions[current].append(stripped)

    return {k: " ".join(v).strip() for k, v in descriptions.items()}
