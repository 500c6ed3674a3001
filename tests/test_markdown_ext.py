"""
Tests for the Python-Markdown extensions.
"""

import xml.etree.ElementTree as etree

import markdown

from blogkit.markdown_ext import (
    AsideExtension,
    find_directive_end,
    from_etree,
    parse_children,
    render_markdown,
    to_etree,
)
from blogkit.tabbed_code import counter_ids

TABBED_SOURCE = """Install it:

:::tabbed-code
```js tab="Node"
const answer = 42;
```
```python
answer = 42
```
:::

Done.
"""


class TestAsideExtension:
    def test_note_becomes_aside(self):
        html = render_markdown("> [!NOTE]\n> Read this first.")
        assert '<aside class="aside note">' in html
        assert "<p>Read this first.</p>" in html
        assert "[!NOTE]" not in html

    def test_plain_quote(self):
        html = render_markdown("> Just words.")
        assert '<blockquote class="quote">' in html
        assert "<p>Just words.</p>" in html

    def test_extension_on_its_own(self):
        md = markdown.Markdown(extensions=[AsideExtension()])
        html = md.convert("Intro\n\n> [!caution] Hot surface")
        assert html.startswith("<p>Intro</p>")
        assert '<aside class="aside caution">' in html
        assert "<p>Hot surface</p>" in html

    def test_inline_markup_survives(self):
        html = render_markdown("> [!TIP] Use *emphasis* wisely")
        assert '<aside class="aside tip">' in html
        assert "<em>emphasis</em>" in html


class TestTabbedCodeExtension:
    def test_directive_is_rendered_as_tabs(self):
        html = render_markdown(TABBED_SOURCE, id_factory=counter_ids())
        assert 'data-component="tabbed-code-1"' in html
        assert '<button class="tab-button active" type="button" data-tab="0">Node</button>' in html
        assert '<button class="tab-button" type="button" data-tab="1">python</button>' in html
        assert '<div class="tab-pane active" data-tab="0">' in html
        assert 'class="codehilite"' in html
        assert ":::" not in html
        assert "<p>Install it:</p>" in html
        assert "<p>Done.</p>" in html

    def test_directive_without_code_passes_through(self):
        html = render_markdown(":::tabbed-code\nNothing to show.\n:::\n")
        assert "tabbed-code-container" not in html
        assert "Nothing to show." in html

    def test_directive_inside_fence_is_literal(self):
        source = "~~~\n:::tabbed-code\n```py\nx = 1\n```\n:::\n~~~\n"
        html = render_markdown(source)
        assert "tabbed-code-container" not in html
        assert "tabbed" in html

    def test_unclosed_directive_is_left_alone(self):
        html = render_markdown(":::tabbed-code\n```py\nx = 1\n```\n")
        assert "tabbed-code-container" not in html


class TestDirectiveParsing:
    def test_closing_marker_inside_fence_is_skipped(self):
        lines = [":::tabbed-code", "```text", ":::", "```", ":::"]
        assert find_directive_end(lines, 1) == 4

    def test_parse_children(self):
        children = parse_children(['```js tab="Web"', "let a;", "```", "", "note", "~~~", "plain", "~~~"])
        assert children[0] == {"type": "code", "lang": "js", "meta": 'tab="Web"', "value": "let a;"}
        assert children[1] == {"type": "text", "value": "note"}
        assert children[2] == {"type": "code", "lang": None, "meta": None, "value": "plain"}


class TestEtreeConversion:
    def test_text_and_tails_are_preserved(self):
        source = etree.fromstring('<div><p class="lead">a<em>b</em>c</p>tail</div>')
        node = from_etree(source)
        assert node["children"][0]["properties"] == {"class": "lead"}
        assert etree.tostring(to_etree(node)) == etree.tostring(source)

    def test_comments_and_instructions_pass_through(self):
        source = etree.Element("div")
        para = etree.SubElement(source, "p")
        para.text = "a"
        comment = etree.Comment(" keep me ")
        comment.tail = "after comment"
        source.append(comment)
        instruction = etree.ProcessingInstruction("php", "echo 1;")
        instruction.tail = "after pi"
        source.append(instruction)

        node = from_etree(source)
        kinds = [child["type"] for child in node["children"]]
        assert kinds == ["element", "etree", "text", "etree", "text"]

        rebuilt = to_etree(node)
        assert etree.tostring(rebuilt) == etree.tostring(source)
        assert comment.tail == "after comment"
        assert instruction.tail == "after pi"
