from __future__ import annotations

import html
from typing import Iterable

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .tree import Node

VOID_ELEMENTS = {"area", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}


def highlight_code(code: str, language: str) -> str:
    try:
        lexer = get_lexer_by_name(language or "text")
    except ClassNotFound:
        return f"<pre><code>{html.escape(code)}</code></pre>"
    formatter = HtmlFormatter(cssclass="codehilite")
    return highlight(code, lexer, formatter)


def render_attributes(properties: dict) -> str:
    parts = []
    for key, value in properties.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {key}")
            continue
        if isinstance(value, (list, tuple)):
            value = " ".join(str(item) for item in value)
        parts.append(f' {key}="{html.escape(str(value))}"')
    return "".join(parts)


def render_node(node: Node) -> str:
    kind = node.get("type")
    if kind == "text":
        return html.escape(node.get("value") or "", quote=False)
    if kind == "html":
        return node.get("value") or ""
    if kind == "code":
        return highlight_code(node.get("value") or "", node.get("lang") or "text")
    if kind == "element":
        tag = node.get("tagName") or "div"
        attrs = render_attributes(node.get("properties") or {})
        if tag in VOID_ELEMENTS:
            return f"<{tag}{attrs} />"
        return f"<{tag}{attrs}>{render_nodes(node.get('children') or [])}</{tag}>"
    if kind == "containerDirective":
        name = html.escape(node.get("name") or "")
        return f'<div class="directive-{name}">{render_nodes(node.get("children") or [])}</div>'
    return render_nodes(node.get("children") or [])


def render_nodes(nodes: Iterable[Node]) -> str:
    return "".join(render_node(node) for node in nodes)


def render_tree(tree: Node) -> str:
    return render_node(tree)
