from __future__ import annotations

import pytest

from edge_config.hast import element, html_to_hast, markdown_to_hast, text_node


class TestMarkdownToHast:
    def test_paragraph_with_inline_markup(self) -> None:
        tree = markdown_to_hast("Some **bold** text")
        assert tree == {
            "type": "root",
            "children": [
                element("p", [text_node("Some "), element("strong", [text_node("bold")]), text_node(" text")]),
            ],
        }

    def test_block_separators_are_dropped(self) -> None:
        tree = markdown_to_hast("# Title\n\n- one\n- two")
        assert [child["tagName"] for child in tree["children"]] == ["h1", "ul"]
        items = tree["children"][1]["children"]
        assert [item["children"][0]["value"] for item in items] == ["one", "two"]

    def test_link_properties(self) -> None:
        tree = markdown_to_hast("[docs](https://example.com/docs)")
        link = tree["children"][0]["children"][0]
        assert link["tagName"] == "a"
        assert link["properties"] == {"href": "https://example.com/docs"}

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_input_rejected(self, value) -> None:
        with pytest.raises(ValueError):
            markdown_to_hast(value)


class TestHtmlToHast:
    def test_property_names(self) -> None:
        tree = html_to_hast('<label class="a b" for="field">Name</label>')
        label = tree["children"][0]
        assert label["properties"] == {"className": ["a", "b"], "htmlFor": "field"}

    def test_comments_skipped_and_inline_spaces_kept(self) -> None:
        tree = html_to_hast("<p><!-- note --><em>a</em> <em>b</em></p>")
        children = tree["children"][0]["children"]
        assert [child.get("tagName", child.get("value")) for child in children] == ["em", " ", "em"]
