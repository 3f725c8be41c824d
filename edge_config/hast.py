"""
edge_config/hast.py

Markdown to HAST (HTML abstract syntax tree) conversion for tree-valued
patches. Markdown is rendered to HTML with markdown-it, then walked with
BeautifulSoup into plain dict nodes.
"""

from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from markdown_it import MarkdownIt

HastNode = dict[str, Any]

_PROPERTY_NAMES = {"class": "className", "for": "htmlFor"}

_markdown = MarkdownIt("commonmark")


def text_node(value: str) -> HastNode:
    return {"type": "text", "value": value}


def element(tag_name: str, children: list[HastNode] | None = None, **properties: Any) -> HastNode:
    return {
        "type": "element",
        "tagName": tag_name,
        "properties": dict(properties),
        "children": list(children or []),
    }


def root(children: list[HastNode]) -> HastNode:
    return {"type": "root", "children": children}


def _properties(tag: Tag) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    for name, value in tag.attrs.items():
        key = _PROPERTY_NAMES.get(name, name)
        if key == "className" and isinstance(value, str):
            value = value.split()
        properties[key] = list(value) if isinstance(value, (list, tuple)) else value
    return properties


def _convert_children(parent: Tag) -> list[HastNode]:
    nodes: list[HastNode] = []
    for child in parent.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            # Inter-block newlines emitted by the renderer carry no content.
            if not text.strip() and "\n" in text:
                continue
            nodes.append(text_node(text))
        elif isinstance(child, Tag):
            nodes.append(
                {
                    "type": "element",
                    "tagName": child.name,
                    "properties": _properties(child),
                    "children": _convert_children(child),
                }
            )
    return nodes


def html_to_hast(html: str) -> HastNode:
    soup = BeautifulSoup(html, "html.parser")
    return root(_convert_children(soup))


def markdown_to_hast(markdown_text: str) -> HastNode:
    """
    Render markdown and return a HAST `root` node.

    Raises ValueError for a non-string or blank input.
    """

    if not isinstance(markdown_text, str) or not markdown_text.strip():
        raise ValueError("Markdown text is required")
    return html_to_hast(_markdown.render(markdown_text))
