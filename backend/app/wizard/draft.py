"""Draft accumulator: immutable merges into a nested draft mapping.

A draft is a plain dict tree. `merge()` never mutates its input: every
dict along the addressed path is copied, everything else is shared with
the previous draft.

Paths are dotted strings (``"address.city"``) or tuples of keys.
Numeric path segments address list items (``"photos.0"``).
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

PathLike = str | Sequence[str | int] | None


def split_path(path: PathLike) -> tuple[str | int, ...]:
    if path is None or path == "":
        return ()
    if isinstance(path, str):
        parts = path.split(".")
    else:
        parts = list(path)
    return tuple(int(p) if isinstance(p, str) and p.isdigit() else p for p in parts)


def get_path(draft: Mapping, path: PathLike, default: Any = None) -> Any:
    """Read a value at `path`, returning `default` if any segment is absent."""
    node: Any = draft
    for part in split_path(path):
        if isinstance(part, int) and isinstance(node, list):
            if part >= len(node):
                return default
            node = node[part]
        elif isinstance(node, Mapping) and part in node:
            node = node[part]
        else:
            return default
    return node


def _set_in(node: Any, parts: tuple[str | int, ...], value: Any) -> Any:
    """Return a copy of `node` with `value` placed at `parts`."""
    if not parts:
        return value
    head, rest = parts[0], parts[1:]

    if isinstance(head, int) and isinstance(node, list):
        copy = list(node)
        if head >= len(copy):
            copy.extend([None] * (head + 1 - len(copy)))
        copy[head] = _set_in(copy[head], rest, value)
        return copy

    copy = dict(node) if isinstance(node, Mapping) else {}
    copy[head] = _set_in(copy.get(head), rest, value)
    return copy


def merge(draft: Mapping, partial: Mapping, path: PathLike = None) -> dict:
    """Shallow-merge `partial` into the mapping addressed by `path`.

    Keys of `partial` may themselves be dotted paths, so
    ``merge(d, {"address.city": "Lyon"})`` and
    ``merge(d, {"city": "Lyon"}, path="address")`` are equivalent.
    A plain key replaces the value stored under it; sibling keys at the
    same level are kept.
    """
    prefix = split_path(path)
    result: Any = dict(draft)
    for key, value in partial.items():
        result = _set_in(result, prefix + split_path(key), value)
    return result
