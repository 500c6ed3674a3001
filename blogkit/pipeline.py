from __future__ import annotations

from typing import Callable, Sequence

from .aside import rehype_aside
from .tabbed_code import remark_tabbed_code
from .tree import Node

Stage = Callable[[Node], Node]

DEFAULT_STAGES: tuple[Stage, ...] = (rehype_aside, remark_tabbed_code)


def run_pipeline(tree: Node, stages: Sequence[Stage] = DEFAULT_STAGES) -> Node:
    for stage in stages:
        tree = stage(tree)
    return tree
