from __future__ import annotations

import html
import itertools
import re
import secrets
import string
from dataclasses import dataclass
from typing import Callable, Optional

from .tree import Node, Visit, is_code, is_directive, raw_html, visit

DIRECTIVE_NAME = "tabbed-code"
TAB_META_RE = re.compile(r'tab="([^"]+)"')
ID_ALPHABET = string.ascii_lowercase + string.digits
# 36**12 ids; collisions among n instances are roughly n**2 / 9.5e18.
ID_LENGTH = 12

IdFactory = Callable[[], str]

SCRIPT_TEMPLATE = """<script>
(function() {{
    const container = document.querySelector('[data-component="{component_id}"]');
    if (!container) return;
    const buttons = container.querySelectorAll('.tab-button');
    buttons.forEach((button, index) => {{
        button.addEventListener('click', () => {{
            container.querySelectorAll('.tab-button, .tab-pane').forEach(el => {{
                el.classList.remove('active');
            }});
            button.classList.add('active');
            container.querySelector('.tab-pane[data-tab="' + index + '"]').classList.add('active');
        }});
    }});
}})();
</script>"""


@dataclass
class Tab:
    label: str
    language: str
    node: Node


def make_component_id() -> str:
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
    return f"{DIRECTIVE_NAME}-{suffix}"


def counter_ids(prefix: str = DIRECTIVE_NAME) -> IdFactory:
    """Deterministic ids for a single build: ``tabbed-code-1``, ``-2``..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def tab_label(code: Node) -> str:
    meta = code.get("meta") or ""
    match = TAB_META_RE.search(meta)
    if match:
        return match.group(1)
    return code.get("lang") or "Code"


def collect_tabs(directive: Node) -> list[Tab]:
    return [
        Tab(label=tab_label(child), language=child.get("lang") or "text", node=child)
        for child in directive.get("children") or []
        if is_code(child)
    ]


def wrapper_start(tabs: list[Tab], component_id: str) -> str:
    buttons = []
    for index, tab in enumerate(tabs):
        active = " active" if index == 0 else ""
        buttons.append(
            f'<button class="tab-button{active}" type="button" data-tab="{index}">'
            f"{html.escape(tab.label)}</button>"
        )
    return (
        f'<div class="tabbed-code-container" data-component="{component_id}">'
        f'<div class="tab-buttons">{"".join(buttons)}</div>'
        '<div class="tab-content">'
    )


def wrapper_end(component_id: str) -> str:
    return "</div></div>\n" + SCRIPT_TEMPLATE.format(component_id=component_id)


def build_tabbed_nodes(tabs: list[Tab], component_id: str) -> list[Node]:
    nodes = [raw_html(wrapper_start(tabs, component_id))]
    for index, tab in enumerate(tabs):
        active = " active" if index == 0 else ""
        nodes.append(raw_html(f'<div class="tab-pane{active}" data-tab="{index}">'))
        nodes.append(tab.node)
        nodes.append(raw_html("</div>"))
    nodes.append(raw_html(wrapper_end(component_id)))
    return nodes


def remark_tabbed_code(tree: Node, id_factory: Optional[IdFactory] = None) -> Node:
    """Expand ``:::tabbed-code`` directives into a tab bar and panes.

    The code nodes are moved into the panes as-is so a later highlighting
    stage still sees them. Directives without code blocks are left untouched.
    """
    new_id = id_factory or make_component_id

    def rewrite(node: Node, index: Optional[int], parent: Optional[Node]) -> Optional[Visit]:
        if not is_directive(node, DIRECTIVE_NAME) or parent is None:
            return None
        tabs = collect_tabs(node)
        if not tabs:
            return None
        return Visit(replacement=build_tabbed_nodes(tabs, new_id()))

    return visit(tree, "containerDirective", rewrite)
