# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Predicate-driven search over BeautifulSoup trees and class-token selectors."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from bs4.element import NavigableString, PageElement, PreformattedString, Tag

Predicate = Callable[[PageElement], bool]


def is_text(node: PageElement) -> bool:
    """True for character data; comments, doctypes and CDATA do not count."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def is_element(node: PageElement, name: str | None = None) -> bool:
    """True for element nodes, optionally only those with tag *name*."""
    if not isinstance(node, Tag):
        return False
    return name is None or node.name == name


def walk(root: PageElement | None, descend: Predicate | None = None) -> Iterator[PageElement]:
    """Yield *root* and its descendants in pre-order.

    ``descend`` is checked before a node is yielded; when it returns False the
    node and its whole subtree are skipped. Uses an explicit stack, so nesting
    depth is not limited by the recursion limit.
    """
    if root is None:
        return
    stack: list[PageElement] = [root]
    while stack:
        node = stack.pop()
        if descend is not None and not descend(node):
            continue
        yield node
        if isinstance(node, Tag) and node.contents:
            # reversed so the first child is popped first
            stack.extend(reversed(node.contents))


def search(
    root: PageElement | None,
    matches: Predicate,
    descend: Predicate | None = None,
) -> list[PageElement]:
    """Return every node under *root* (inclusive) for which *matches* holds.

    Args:
        root: Node to start from; None gives an empty result
        matches: Selects the nodes to return
        descend: Pruning hook; a node it rejects is neither matched nor
            traversed further

    Returns:
        Matching nodes in pre-order
    """
    return [node for node in walk(root, descend) if matches(node)]


def classes_of(node: PageElement) -> list[str]:
    """Return the class tokens of *node* in document order, duplicates kept."""
    if not isinstance(node, Tag) or not node.attrs:
        return []
    value = node.attrs.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    # BeautifulSoup stores class as a list of already-split tokens
    return " ".join(str(v) for v in value).split()


def has_class(node: PageElement, name: str) -> bool:
    return name in classes_of(node)


def find_by_class(root: PageElement | None, name: str) -> list[PageElement]:
    """All nodes under *root* carrying class token *name*, in pre-order."""
    return search(root, lambda node: has_class(node, name))
