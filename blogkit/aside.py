from __future__ import annotations

import re
from typing import Optional

from .tree import Node, Visit, element, is_element, is_text, visit

MARKER_RE = re.compile(r"^\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\]\s*", re.IGNORECASE)


def strip_marker(paragraph: Node) -> tuple[Optional[str], Node]:
    """Find the callout marker in a paragraph's text children.

    Returns the lowercased callout type (or ``None``) and the paragraph with
    the marker removed. A text node left blank by the removal is dropped.
    """
    children = paragraph.get("children") or []
    for i, child in enumerate(children):
        if not is_text(child):
            continue
        value = child.get("value") or ""
        match = MARKER_RE.match(value)
        if not match:
            continue
        cleaned = value[match.end() :]
        if cleaned.strip():
            replacement = [{**child, "value": cleaned}]
        else:
            replacement = []
        new_children = children[:i] + replacement + children[i + 1 :]
        return match.group(1).lower(), {**paragraph, "children": new_children}
    return None, paragraph


def classify(blockquote: Node) -> tuple[str, list[Node]]:
    callout = "quote"
    found = False
    children = []
    for child in blockquote.get("children") or []:
        if not found and is_element(child, "p") and child.get("children"):
            marker, child = strip_marker(child)
            if marker:
                callout = marker
                found = True
        children.append(child)
    return callout, children


def _rewrite(node: Node, index: Optional[int], parent: Optional[Node]) -> Optional[Visit]:
    if node.get("tagName") != "blockquote" or parent is None:
        return None
    callout, children = classify(node)
    if callout == "quote":
        replacement = element("blockquote", {"class": "quote"}, children)
    else:
        replacement = element("aside", {"class": f"aside {callout}"}, children)
    return Visit(replacement=[replacement])


def rehype_aside(tree: Node) -> Node:
    """Turn ``> [!NOTE]`` style blockquotes into ``aside`` callouts.

    Blockquotes without a marker become ``blockquote.quote``. Rewritten nodes
    are not revisited, so quotes nested inside them are left as they are.
    """
    return visit(tree, "element", _rewrite)
