"""
Netorch — Template Expressions

Extension commands are written as templates against the interface's
configuration document, e.g.

    /usr/sbin/dhclient -pf /run/dhclient-%{interface.name}.pid %{interface.name}

The supervisor only depends on the ExpressionEvaluator contract:
evaluate(template, document) returns zero or more strings, and raises
ExpressionError when evaluation itself fails. Zero results is a valid answer,
distinct from an error.

TemplateEvaluator is the built-in implementation:
  %{a.b.c}  — dotted lookup through nested mappings (digits index sequences)
  %%        — a literal percent sign
A missing or None value makes the whole template yield nothing. A list value
yields one result per element; several list-valued placeholders expand to
their cartesian product.
"""

from __future__ import annotations

import functools
import itertools
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from netorch.systems.extensions.errors import ExpressionError

_Segment = str | tuple[str, ...]


class ExpressionEvaluator(Protocol):
    def evaluate(self, template: str, document: Mapping[str, Any]) -> list[str]:
        """Expand *template* against *document*. Raises ExpressionError on failure."""
        ...


@functools.lru_cache(maxsize=256)
def parse_template(template: str) -> tuple[_Segment, ...]:
    """
    Split a template into literal strings and placeholder paths.

    Raises ExpressionError for unterminated or empty placeholders.
    """
    segments: list[_Segment] = []
    literal: list[str] = []
    i = 0
    while i < len(template):
        ch = template[i]
        if ch == "%" and i + 1 < len(template):
            nxt = template[i + 1]
            if nxt == "%":
                literal.append("%")
                i += 2
                continue
            if nxt == "{":
                end = template.find("}", i + 2)
                if end < 0:
                    raise ExpressionError(f"unterminated placeholder in {template!r}")
                path = template[i + 2:end].strip()
                keys = tuple(path.split("."))
                if not path or any(not key for key in keys):
                    raise ExpressionError(f"empty placeholder path in {template!r}")
                if literal:
                    segments.append("".join(literal))
                    literal = []
                segments.append(keys)
                i = end + 1
                continue
        literal.append(ch)
        i += 1

    if literal:
        segments.append("".join(literal))
    return tuple(segments)


def _lookup(document: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    node: Any = document
    for key in keys:
        if isinstance(node, Mapping):
            node = node.get(key)
        elif isinstance(node, Sequence) and not isinstance(node, str) and key.isdigit():
            index = int(key)
            node = node[index] if index < len(node) else None
        else:
            return None
        if node is None:
            return None
    return node


def _render(value: Any, path: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (str, int, float)):
        return [str(value)]
    if isinstance(value, Sequence):
        rendered: list[str] = []
        for item in value:
            if isinstance(item, (Mapping, list, tuple)):
                raise ExpressionError(f"%{{{path}}} holds a nested structure")
            rendered.extend(_render(item, path))
        return rendered
    raise ExpressionError(f"%{{{path}}} does not resolve to a scalar or list")


class TemplateEvaluator:
    def evaluate(self, template: str, document: Mapping[str, Any]) -> list[str]:
        choices: list[list[str]] = []
        for segment in parse_template(template):
            if isinstance(segment, str):
                choices.append([segment])
                continue
            values = _render(_lookup(document, segment), ".".join(segment))
            if not values:
                return []
            choices.append(values)

        return ["".join(parts) for parts in itertools.product(*choices)]
