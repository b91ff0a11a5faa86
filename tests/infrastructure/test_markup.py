"""Tests for placeholder markup."""

from __future__ import annotations

import pytest
from markupsafe import Markup

from lazyfrag.infrastructure.markup import (
    PlaceholderNode,
    RenderedFragment,
    attribute_pairs,
    join_markup,
    serialize_attributes,
)


class TestSerializeAttributes:
    def test_reserved_attributes_become_data_attributes(self) -> None:
        html = serialize_attributes({"sgid": "abc", "eager": True, "is": "lazyfrag-li"})
        assert html == ' data-sgid="abc" data-eager="true" is="lazyfrag-li"'

    def test_data_namespace(self) -> None:
        html = serialize_attributes({"data": {"controller": "feed", "post_id": 3, "skip": None}})
        assert html == ' data-controller="feed" data-post-id="3"'

    def test_boolean_and_empty_attributes(self) -> None:
        html = serialize_attributes({"hidden": True, "disabled": False, "title": None})
        assert html == " hidden"

    def test_lists_and_mappings(self) -> None:
        pairs = attribute_pairs({"class": ["card", "wide"], "aria": {"label": "Post"}})
        assert pairs == [("class", "card wide"), ("aria-label", "Post")]

    def test_values_are_escaped(self) -> None:
        html = serialize_attributes({"title": '"><script>'})
        assert html == ' title="&#34;&gt;&lt;script&gt;"'


class TestPlaceholderNode:
    def test_renders_element(self) -> None:
        node = PlaceholderNode("lazyfrag-element", {"sgid": "t", "class": "card"}, Markup("<b>…</b>"))
        assert str(node) == '<lazyfrag-element data-sgid="t" class="card"><b>…</b></lazyfrag-element>'
        assert node.deferred

    def test_plain_content_is_escaped(self) -> None:
        node = PlaceholderNode("lazyfrag-element", {}, "<script>")
        assert str(node) == "<lazyfrag-element>&lt;script&gt;</lazyfrag-element>"

    def test_attributes_are_read_only(self) -> None:
        node = PlaceholderNode("li", {"sgid": "t"})
        with pytest.raises(TypeError):
            node.attributes["sgid"] = "forged"

    def test_attributes_are_copied(self) -> None:
        attributes = {"sgid": "t"}
        node = PlaceholderNode("li", attributes)
        attributes["sgid"] = "forged"
        assert node.attributes["sgid"] == "t"

    def test_markup_attributes(self) -> None:
        node = PlaceholderNode("tr", {"signed_params": "p", "is": "lazyfrag-table-row"})
        assert node.markup_attributes() == {"data-signed-params": "p", "is": "lazyfrag-table-row"}


class TestRenderedFragment:
    def test_not_deferred(self) -> None:
        fragment = RenderedFragment(Markup("<p>Hi</p>"))
        assert not fragment.deferred
        assert dict(fragment.attributes) == {}
        assert str(fragment) == "<p>Hi</p>"


class TestJoinMarkup:
    def test_concatenates(self) -> None:
        nodes = [PlaceholderNode("li", {"sgid": "a"}), RenderedFragment(Markup("<p>x</p>"))]
        joined = join_markup(nodes)
        assert isinstance(joined, Markup)
        assert joined == '<li data-sgid="a"></li><p>x</p>'
