"""Document tree nodes and an immutable visitor.

Nodes are plain unist-style dicts (``{"type": ..., "children": [...]}``) so a
tree exported as JSON by any Markdown parser can be fed straight in.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

Node = dict
Test = Union[str, Callable[[Node], bool], None]


class Action(enum.Enum):
    CONTINUE = "continue"
    SKIP = "skip"
    STOP = "stop"


@dataclass(frozen=True)
class Visit:
    """What a visitor wants done with the node it was handed.

    ``replacement`` swaps the node for zero or more nodes in its parent. The
    replacement nodes are never descended into, whatever the action.
    """

    action: Action = Action.CONTINUE
    replacement: Optional[Sequence[Node]] = None


SKIP = Visit(Action.SKIP)
STOP = Visit(Action.STOP)

Visitor = Callable[[Node, Optional[int], Optional[Node]], Optional[Visit]]


def element(tag: str, properties: Optional[dict] = None, children: Optional[list] = None) -> Node:
    return {
        "type": "element",
        "tagName": tag,
        "properties": dict(properties or {}),
        "children": list(children or []),
    }


def text(value: str) -> Node:
    return {"type": "text", "value": value}


def raw_html(value: str) -> Node:
    return {"type": "html", "value": value}


def is_element(node: object, tag: Optional[str] = None) -> bool:
    if not isinstance(node, dict) or node.get("type") != "element":
        return False
    return tag is None or node.get("tagName") == tag


def is_text(node: object) -> bool:
    return isinstance(node, dict) and node.get("type") == "text"


def is_code(node: object) -> bool:
    return isinstance(node, dict) and node.get("type") == "code"


def is_directive(node: object, name: Optional[str] = None) -> bool:
    if not isinstance(node, dict) or node.get("type") != "containerDirective":
        return False
    return name is None or node.get("name") == name


def _matches(node: Node, test: Test) -> bool:
    if test is None:
        return True
    if callable(test):
        return bool(test(node))
    return node.get("type") == test


class _Walk:
    def __init__(self, test: Test, visitor: Visitor):
        self.test = test
        self.visitor = visitor
        self.stopped = False

    def run(self, node: Node, index: Optional[int], parent: Optional[Node]) -> list[Node]:
        if _matches(node, self.test):
            result = self.visitor(node, index, parent) or Visit()
            if result.action is Action.STOP:
                self.stopped = True
            if result.replacement is not None:
                return list(result.replacement)
            if result.action is not Action.CONTINUE:
                return [node]

        children = node.get("children")
        if not children:
            return [node]

        rebuilt: list[Node] = []
        changed = False
        for i, child in enumerate(children):
            if self.stopped:
                rebuilt.append(child)
                continue
            out = self.run(child, i, node)
            if len(out) != 1 or out[0] is not child:
                changed = True
            rebuilt.extend(out)
        if not changed:
            return [node]
        return [{**node, "children": rebuilt}]


def visit(tree: Node, test: Test, visitor: Visitor) -> Node:
    """Walk ``tree`` depth-first and return the rewritten tree.

    ``test`` selects nodes by type name or predicate (``None`` matches all).
    The input tree is never mutated; only containers on the path to a
    replaced node are rebuilt, everything else keeps its identity.
    """
    out = _Walk(test, visitor).run(tree, None, None)
    if len(out) != 1:
        raise ValueError("the root node must be replaced by exactly one node")
    return out[0]
