"""
Pseudo-XPath lookups over parsed XML documents.

Parsed responses are nested dicts and lists (every element is a list of its
occurrences), so paths look like ``Envelope/Body/0/Shell/0/ShellId/0``.
"""

from __future__ import annotations

from typing import Any

from winrmexec.domain.errors import PathNotFoundError

_MISSING = object()


def _step(node: Any, segment: str) -> Any:
    """Resolve one segment, returning _MISSING when it does not exist."""
    if isinstance(node, dict):
        return node.get(segment, _MISSING)
    if isinstance(node, (list, tuple)):
        try:
            index = int(segment)
        except ValueError:
            return _MISSING
        if 0 <= index < len(node):
            return node[index]
    return _MISSING


def extract(document: Any, path: str) -> Any:
    """
    Walk ``path`` through ``document``.

    Args:
        document: parsed XML tree
        path: ``/``-delimited keys and list indices

    Returns:
        The value found at the end of the path.

    Raises:
        PathNotFoundError: naming the first missing segment and the full path
    """
    node = document
    walked: list[str] = []
    for segment in path.split("/"):
        walked.append(segment)
        node = _step(node, segment)
        if node is _MISSING:
            raise PathNotFoundError(segment, "/".join(walked), path)
    return node


def extract_optional(document: Any, path: str, default: Any = None) -> Any:
    """Like extract() but returns ``default`` for missing paths."""
    try:
        return extract(document, path)
    except PathNotFoundError:
        return default
