"""Python-Markdown extensions running the aside and tabbed-code passes.

``AsideExtension`` works on the parsed element tree; ``TabbedCodeExtension``
picks up ``:::tabbed-code`` containers before fenced code is parsed, so the
fences inside are still plain lines.
"""

from __future__ import annotations

import copy
import re
import xml.etree.ElementTree as etree
from typing import Optional

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from .aside import rehype_aside
from .render import render_nodes
from .tabbed_code import DIRECTIVE_NAME, IdFactory, remark_tabbed_code
from .tree import Node, element, text

DIRECTIVE_OPEN_RE = re.compile(r"^\s*:::\s*(?P<name>[A-Za-z][\w-]*)\s*(?:\{(?P<attrs>[^}]*)\})?\s*$")
DIRECTIVE_CLOSE_RE = re.compile(r"^\s*:::\s*$")
FENCE_RE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})[ \t]*(?P<lang>[^\s`{]*)[ \t]*(?P<meta>[^`]*?)\s*$")
ATTR_RE = re.compile(r'(?P<key>[\w-]+)="(?P<value>[^"]*)"')


def _join_text(current: Optional[str], value: str) -> str:
    return value if current is None else current + value


def from_etree(el: etree.Element) -> Node:
    children: list[Node] = []
    if el.text:
        children.append(text(el.text))
    for child in el:
        if isinstance(child.tag, str):
            children.append(from_etree(child))
        else:
            # Comments and processing instructions pass through untouched.
            children.append({"type": "etree", "element": child})
        if child.tail:
            children.append(text(child.tail))
    return element(el.tag, dict(el.attrib), children)


def to_etree(node: Node) -> etree.Element:
    el = etree.Element(node.get("tagName") or "div")
    for key, value in (node.get("properties") or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = " ".join(str(item) for item in value)
        el.set(key, str(value))
    last = None
    for child in node.get("children") or []:
        kind = child.get("type")
        if kind == "text":
            value = child.get("value") or ""
            if last is None:
                el.text = _join_text(el.text, value)
            else:
                last.tail = _join_text(last.tail, value)
        elif kind == "element":
            last = to_etree(child)
            el.append(last)
        elif kind == "etree":
            last = copy.copy(child["element"])
            last.tail = None
            el.append(last)
    return el


class AsideTreeprocessor(Treeprocessor):
    def run(self, root):
        return to_etree(rehype_aside(from_etree(root)))


class AsideExtension(Extension):
    def extendMarkdown(self, md):
        # After inline processing (20) so marker text is final.
        md.treeprocessors.register(AsideTreeprocessor(md), "aside", 15)


def _fence_closes(line: str, fence: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= len(fence) and set(stripped) == {fence[0]}


def _fence_end(lines: list[str], start: int, fence: str) -> int:
    """Index of the closing fence line, or ``len(lines)`` if never closed."""
    i = start
    while i < len(lines) and not _fence_closes(lines[i], fence):
        i += 1
    return i


def find_directive_end(lines: list[str], start: int) -> Optional[int]:
    i = start
    while i < len(lines):
        fence_match = FENCE_RE.match(lines[i])
        if fence_match:
            i = _fence_end(lines, i + 1, fence_match.group("fence")) + 1
            continue
        if DIRECTIVE_CLOSE_RE.match(lines[i]):
            return i
        i += 1
    return None


def parse_attributes(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    return {m.group("key"): m.group("value") for m in ATTR_RE.finditer(raw)}


def parse_children(lines: list[str]) -> list[Node]:
    children: list[Node] = []
    i = 0
    while i < len(lines):
        fence_match = FENCE_RE.match(lines[i])
        if not fence_match:
            if lines[i].strip():
                children.append(text(lines[i]))
            i += 1
            continue
        end = _fence_end(lines, i + 1, fence_match.group("fence"))
        children.append(
            {
                "type": "code",
                "lang": fence_match.group("lang") or None,
                "meta": fence_match.group("meta") or None,
                "value": "\n".join(lines[i + 1 : end]),
            }
        )
        i = end + 1
    return children


class TabbedCodePreprocessor(Preprocessor):
    def __init__(self, md, id_factory: Optional[IdFactory] = None):
        super().__init__(md)
        self.id_factory = id_factory

    def run(self, lines):
        out = []
        i = 0
        while i < len(lines):
            line = lines[i]
            fence_match = FENCE_RE.match(line)
            if fence_match:
                end = _fence_end(lines, i + 1, fence_match.group("fence"))
                out.extend(lines[i : end + 1])
                i = end + 1
                continue
            open_match = DIRECTIVE_OPEN_RE.match(line)
            end = find_directive_end(lines, i + 1) if open_match else None
            if not open_match or open_match.group("name") != DIRECTIVE_NAME or end is None:
                out.append(line)
                i += 1
                continue
            directive = {
                "type": "containerDirective",
                "name": DIRECTIVE_NAME,
                "attributes": parse_attributes(open_match.group("attrs")),
                "children": parse_children(lines[i + 1 : end]),
            }
            root = {"type": "root", "children": [directive]}
            result = remark_tabbed_code(root, id_factory=self.id_factory)
            if result is root:
                out.extend(lines[i : end + 1])
            else:
                placeholder = self.md.htmlStash.store(render_nodes(result["children"]))
                out.extend(["", placeholder, ""])
            i = end + 1
        return out


class TabbedCodeExtension(Extension):
    def __init__(self, id_factory: Optional[IdFactory] = None, **kwargs):
        super().__init__(**kwargs)
        self.id_factory = id_factory

    def extendMarkdown(self, md):
        # Between normalize_whitespace (30) and fenced_code_block (25).
        md.preprocessors.register(TabbedCodePreprocessor(md, self.id_factory), "tabbed_code", 27)


def render_markdown(source: str, id_factory: Optional[IdFactory] = None) -> str:
    md = markdown.Markdown(
        extensions=[
            "fenced_code",
            "tables",
            "codehilite",
            TabbedCodeExtension(id_factory=id_factory),
            AsideExtension(),
        ]
    )
    return md.convert(source)
