"""
Tests for the immutable tree visitor.
"""

import pytest

from blogkit.pipeline import run_pipeline
from blogkit.tree import SKIP, STOP, Action, Visit, element, is_directive, is_element, text, visit


def root(*children):
    return {"type": "root", "children": list(children)}


class TestVisit:
    def test_untouched_tree_is_returned_as_is(self):
        tree = root(element("p", {}, [text("a")]))
        assert visit(tree, "element", lambda node, index, parent: None) is tree

    def test_visitor_receives_index_and_parent(self):
        first = element("p")
        second = element("div")
        tree = root(first, second)
        seen = []
        visit(tree, "element", lambda node, index, parent: seen.append((node["tagName"], index, parent)))
        assert seen == [("p", 0, tree), ("div", 1, tree)]

    def test_replacement_splices_and_keeps_siblings(self):
        before = element("p", {}, [text("before")])
        target = element("hr")
        after = element("p", {}, [text("after")])
        tree = root(before, target, after)

        def expand(node, index, parent):
            if node["tagName"] == "hr":
                return Visit(replacement=[text("x"), text("y")])
            return None

        out = visit(tree, "element", expand)
        assert [child.get("value") or child.get("tagName") for child in out["children"]] == [
            "p",
            "x",
            "y",
            "p",
        ]
        assert out["children"][0] is before
        assert out["children"][3] is after

    def test_input_tree_is_not_mutated(self):
        target = element("hr")
        tree = root(target)
        out = visit(tree, "element", lambda node, index, parent: Visit(replacement=[]))
        assert out["children"] == []
        assert tree["children"] == [target]

    def test_replacement_is_not_descended(self):
        calls = []

        def wrap(node, index, parent):
            calls.append(node["tagName"])
            if node["tagName"] == "p":
                return Visit(replacement=[element("section", {}, [element("p")])])
            return None

        visit(root(element("p")), "element", wrap)
        assert calls == ["p"]

    def test_skip_does_not_descend(self):
        inner = element("span")
        tree = root(element("div", {}, [inner]))
        calls = []

        def skip_div(node, index, parent):
            calls.append(node["tagName"])
            return SKIP if node["tagName"] == "div" else None

        visit(tree, "element", skip_div)
        assert calls == ["div"]

    def test_stop_ends_the_walk(self):
        tree = root(element("p"), element("div"), element("hr"))
        calls = []

        def stop_at_div(node, index, parent):
            calls.append(node["tagName"])
            return STOP if node["tagName"] == "div" else None

        out = visit(tree, "element", stop_at_div)
        assert calls == ["p", "div"]
        assert out is tree

    def test_stop_with_replacement_applies_it(self):
        tree = root(element("p"), element("hr"))
        out = visit(
            tree,
            "element",
            lambda node, index, parent: Visit(Action.STOP, [text("done")]),
        )
        assert out["children"][0] == text("done")
        assert out["children"][1] is tree["children"][1]

    def test_predicate_test(self):
        tree = root(element("p"), text("t"))
        seen = []
        visit(tree, lambda node: node["type"] == "text", lambda node, index, parent: seen.append(node))
        assert seen == [text("t")]

    def test_root_replacement_with_many_nodes_is_rejected(self):
        with pytest.raises(ValueError):
            visit(root(), "root", lambda node, index, parent: Visit(replacement=[root(), root()]))


class TestPredicates:
    def test_is_element(self):
        assert is_element(element("p"))
        assert is_element(element("p"), "p")
        assert not is_element(element("p"), "div")
        assert not is_element(text("p"))

    def test_is_directive(self):
        node = {"type": "containerDirective", "name": "tabbed-code", "children": []}
        assert is_directive(node, "tabbed-code")
        assert not is_directive(node, "other")


class TestPipeline:
    def test_default_stages_run_in_order(self):
        tree = root(
            element("blockquote", {}, [element("p", {}, [text("[!TIP] try this")])]),
            {
                "type": "containerDirective",
                "name": "tabbed-code",
                "attributes": {},
                "children": [{"type": "code", "lang": "sh", "meta": None, "value": "ls"}],
            },
        )
        out = run_pipeline(tree)
        assert out["children"][0]["tagName"] == "aside"
        assert out["children"][1]["type"] == "html"
        assert any(child["type"] == "code" for child in out["children"])

    def test_custom_stages(self):
        tree = root()
        marker = root(text("replaced"))
        assert run_pipeline(tree, [lambda t: marker]) is marker
