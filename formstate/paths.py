"""Deep-path access and immutable updates for nested values.

A deep path is a string of segments joined by ``"."``. Segments made of
digits address list indices, every other segment addresses a dict key. The
empty path ``""`` addresses the root itself.

Writes never mutate their input. ``set_in`` and ``update_in`` return a new
root in which only the containers along the path are shallow-copied; every
other branch is shared with the old root.

Examples:
    >>> root = {"user": {"name": "Ann"}, "tags": ["a", "b"]}
    >>> get_in(root, "tags.1")
    'b'
    >>> new = set_in(root, "user.name", "Bob")
    >>> new["user"]["name"], root["user"]["name"]
    ('Bob', 'Ann')
    >>> new["tags"] is root["tags"]
    True
"""

from typing import Any, List, Union

from formstate.types import UNSET, Updater

PATH_SEPARATOR = "."

Segment = Union[str, int]

_MISSING = object()


def split_path(path: str) -> List[Segment]:
    """Split a path string into a list of keys.

    Keys made only of digits are parsed as ints.

    Examples:
        >>> split_path("a.1.b")
        ['a', 1, 'b']
    """
    return [
        int(part) if part.isascii() and part.isdigit() else part
        for part in path.split(PATH_SEPARATOR)
    ]


def clone(obj: Any) -> Any:
    """Shallow-copy a list, tuple or dict."""
    if isinstance(obj, list):
        return list(obj)
    if isinstance(obj, tuple):
        return tuple(obj)
    if isinstance(obj, dict):
        return dict(obj)
    raise TypeError(f"cannot clone a value of type {type(obj).__name__}")


def _dict_key(container: dict, segment: Segment) -> Segment:
    if isinstance(segment, int) and segment not in container:
        return str(segment)
    return segment


def _child(container: Any, segment: Segment) -> Any:
    """Read one level down, returning ``_MISSING`` when there is nothing."""
    if isinstance(container, dict):
        return container.get(_dict_key(container, segment), _MISSING)
    if isinstance(container, (list, tuple)):
        if isinstance(segment, int) and 0 <= segment < len(container):
            return container[segment]
        return _MISSING
    return _MISSING


def get_in(root: Any, path: str, default: Any = None) -> Any:
    """Get the value at ``path`` inside ``root``.

    Returns ``default`` if any segment along the path is missing. A stored
    ``None`` is returned as is.
    """
    if path == "":
        return root

    node = root
    for segment in split_path(path):
        node = _child(node, segment)
        if node is _MISSING:
            return default
    return node


def _new_container(next_segment: Segment) -> Any:
    return [] if isinstance(next_segment, int) else {}


def _assign(container: Any, segment: Segment, value: Any) -> Any:
    """Return a copy of ``container`` with ``segment`` set to ``value``."""
    if isinstance(container, dict):
        copy = clone(container)
        copy[_dict_key(container, segment)] = value
        return copy

    if isinstance(container, (list, tuple)):
        if not isinstance(segment, int):
            raise TypeError(f"cannot index a sequence with key {segment!r}")
        items = list(container)
        if segment >= len(items):
            items.extend([None] * (segment + 1 - len(items)))
        items[segment] = value
        return tuple(items) if isinstance(container, tuple) else items

    raise TypeError(
        f"cannot set key {segment!r} on a value of type {type(container).__name__}"
    )


def _update(node: Any, segments: List[Segment], updater: Updater) -> Any:
    segment = segments[0]
    if node is None or node is _MISSING or node is UNSET:
        node = _new_container(segment)

    if len(segments) == 1:
        current = _child(node, segment)
        return _assign(node, segment, updater(None if current is _MISSING else current))

    return _assign(node, segment, _update(_child(node, segment), segments[1:], updater))


def update_in(root: Any, path: str, updater: Updater) -> Any:
    """Return a copy of ``root`` with the value at ``path`` replaced by
    ``updater(old_value)``.

    Missing intermediate containers are created as lists when the following
    segment is numeric and as dicts otherwise. A missing terminal slot is
    passed to ``updater`` as ``None``.
    """
    if path == "":
        return updater(root)
    return _update(root, split_path(path), updater)


def set_in(root: Any, path: str, value: Any) -> Any:
    """Return a copy of ``root`` with the value at ``path`` set to ``value``."""
    return update_in(root, path, lambda _: value)


__all__ = [
    "PATH_SEPARATOR",
    "split_path",
    "clone",
    "get_in",
    "set_in",
    "update_in",
]
