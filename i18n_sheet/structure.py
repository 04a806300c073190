"""
Conversion between nested translation trees and flat dotted keys.

A translation tree is a ``dict`` whose values are either strings (leaves) or
further dicts (branches). Flattening joins branch keys with ``.``; nesting
rebuilds the tree from ``(dotted_key, value)`` pairs.
"""
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Tuple

from i18n_sheet.errors import InvalidStructureError

logger = logging.getLogger("i18n_sheet.structure")

KEY_SEPARATOR = '.'


def _type_name(value: Any) -> str:
    """Name a value's type the way JSON tooling reports it."""
    if isinstance(value, list):
        return 'Array'
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    return type(value).__name__


def validate_structure(tree: Any, path: str = '') -> None:
    """
    Check that ``tree`` only contains strings and nested objects.

    Args:
        tree: The parsed JSON document (or a sub-tree of it).
        path: Dotted path of ``tree`` within the document, used in messages.

    Raises:
        InvalidStructureError: On the first node that is neither a string nor an object.
    """
    if not isinstance(tree, dict):
        raise InvalidStructureError(
            f'Invalid structure at "{path or "<root>"}": Must be an object.',
            path=path,
            found_type=_type_name(tree),
        )

    for key, value in tree.items():
        current_path = f"{path}{KEY_SEPARATOR}{key}" if path else str(key)
        if isinstance(value, str):
            continue
        if isinstance(value, dict):
            validate_structure(value, current_path)
            continue
        found_type = _type_name(value)
        raise InvalidStructureError(
            f'Invalid value at "{current_path}": Only strings and nested objects allowed, '
            f'but found: {found_type}',
            path=current_path,
            found_type=found_type,
        )


def iter_flat_items(tree: Dict[str, Any], prefix: str = '') -> Iterator[Tuple[str, Any]]:
    """Yield ``(dotted_key, value)`` for every leaf, depth first, in insertion order."""
    for key, value in tree.items():
        new_key = f"{prefix}{KEY_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, dict):
            yield from iter_flat_items(value, new_key)
        else:
            yield new_key, value


def flatten_translations(tree: Dict[str, Any], prefix: str, visit: Callable[[str, Any], None]) -> None:
    """
    Walk ``tree`` and call ``visit(dotted_key, value)`` for every leaf.

    Args:
        tree: A validated translation tree.
        prefix: Key prefix for the top level ('' for a whole document).
        visit: Callback receiving each flattened key and its value.
    """
    for key, value in iter_flat_items(tree, prefix):
        visit(key, value)


def set_nested_value(tree: Dict[str, Any], path_parts: List[str], value: Any) -> None:
    """
    Set ``value`` at ``path_parts`` inside ``tree``, creating branches as needed.

    A segment that currently holds a non-dict value is replaced by a fresh
    dict, discarding the old value.
    """
    node = tree
    for part in path_parts[:-1]:
        branch = node.get(part)
        if not isinstance(branch, dict):
            if branch is not None:
                logger.debug("Replacing non-object value at '%s' with a nested object.", part)
            branch = {}
            node[part] = branch
        node = branch
    node[path_parts[-1]] = value


class TreeBuilder:
    """Accumulates dotted keys into a single nested translation tree."""

    def __init__(self):
        self._tree: Dict[str, Any] = {}

    def set(self, key: str, value: Any) -> "TreeBuilder":
        set_nested_value(self._tree, key.split(KEY_SEPARATOR), value)
        return self

    def build(self) -> Dict[str, Any]:
        return self._tree


def nest_translations(pairs: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Rebuild a tree from ``(dotted_key, value)`` pairs."""
    builder = TreeBuilder()
    for key, value in pairs:
        builder.set(key, value)
    return builder.build()
