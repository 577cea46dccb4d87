"""Slash-delimited path addressing for nested dicts.

A stash is a plain dict whose values are terminals (str, numbers, bools,
None, lists) or further dicts. Keys like "sports/baseball/stats" address a
value any number of levels down.

All functions here are pure: set_path() and delete_path() return a new root
dict and leave their input untouched. Only the dicts along the addressed
path are copied; untouched subtrees are shared with the input.

Example:
    doc = set_path({}, "a/b/c", 5)
    # {'a': {'b': {'c': 5}}}

    get_path(doc, "a/b")         # {'c': 5}
    get_path(doc, "a/x")         # NOT_FOUND

    doc, removed = delete_path(doc, "a/b/c")
    # doc == {'a': {'b': {}}}, removed == 5
"""

from typing import Any, Dict, Iterable, Sequence, Tuple, Union

from .exceptions import InvalidPathError, TypeMismatchError

Document = Dict[str, Any]
Path = Tuple[str, ...]
PathLike = Union[str, Sequence[str]]

SEPARATOR = "/"


class _NotFound:
    """Sentinel for "no value at this path".

    Distinct from None, which is a legitimate stored value.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_NotFound, ())


NOT_FOUND = _NotFound()


def parse_path(key: PathLike) -> Path:
    """Split a raw key into path segments.

    Whitespace around the whole string is ignored. An empty key, or one
    producing an empty segment ("a//b", "/a", "a/"), is rejected.

    Args:
        key: Slash-delimited string, or an already-split sequence of segments

    Returns:
        Tuple of one or more non-empty segments

    Raises:
        InvalidPathError: If the key is empty or has an empty segment
    """
    if isinstance(key, str):
        stripped = key.strip()
        if not stripped:
            raise InvalidPathError(key)
        segments = tuple(stripped.split(SEPARATOR))
    else:
        segments = tuple(key)
        if not segments:
            raise InvalidPathError(key)

    for segment in segments:
        if not isinstance(segment, str):
            raise InvalidPathError(key, f"segment {segment!r} is not a string")
        if not segment:
            raise InvalidPathError(key, "empty segment")
    return segments


def join_path(segments: Iterable[str]) -> str:
    """Join segments back into a slash-delimited key."""
    return SEPARATOR.join(segments)


def get_path(doc: Document, key: PathLike) -> Any:
    """Get the value at a path.

    Returns NOT_FOUND if any segment is missing or an intermediate value
    is not a dict. An explicitly stored None is returned as None.
    """
    path = parse_path(key)
    node: Any = doc
    for segment in path:
        if not isinstance(node, dict) or segment not in node:
            return NOT_FOUND
        node = node[segment]
    return node


def set_path(doc: Document, key: PathLike, value: Any) -> Document:
    """Return a copy of doc with value assigned at the path.

    Missing intermediates (and intermediates holding None) are created as
    empty dicts. Whatever was at the final segment is overwritten.

    Raises:
        TypeMismatchError: If an intermediate holds a non-dict terminal
    """
    path = parse_path(key)
    root = dict(doc)
    node = root
    for depth, segment in enumerate(path[:-1]):
        child = node.get(segment)
        if child is None:
            child = {}
        elif isinstance(child, dict):
            child = dict(child)
        else:
            raise TypeMismatchError(
                join_path(path[: depth + 1]),
                f"cannot set {join_path(path)!r} through a {type(child).__name__} value",
            )
        node[segment] = child
        node = child
    node[path[-1]] = value
    return root


def delete_path(doc: Document, key: PathLike) -> Tuple[Document, Any]:
    """Remove the value at a path.

    Returns:
        (new_doc, removed). If nothing is at the path, doc itself is
        returned unchanged together with NOT_FOUND.

    Raises:
        TypeMismatchError: If an intermediate holds a non-dict terminal
    """
    path = parse_path(key)
    chain = [doc]
    node = doc
    for depth, segment in enumerate(path[:-1]):
        child = node.get(segment)
        # None counts as absent, as in set_path()
        if child is None:
            return doc, NOT_FOUND
        if not isinstance(child, dict):
            raise TypeMismatchError(
                join_path(path[: depth + 1]),
                f"cannot delete {join_path(path)!r} through a {type(child).__name__} value",
            )
        chain.append(child)
        node = child

    if path[-1] not in node:
        return doc, NOT_FOUND

    # Rebuild the chain bottom-up so the input is never mutated
    updated = dict(node)
    removed = updated.pop(path[-1])
    for parent, segment in zip(reversed(chain[:-1]), reversed(path[:-1])):
        parent = dict(parent)
        parent[segment] = updated
        updated = parent
    return updated, removed
