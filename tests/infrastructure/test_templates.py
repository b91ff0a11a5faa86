"""Tests for the Jinja2 rendering collaborator."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound

from lazyfrag.infrastructure.templates import JinjaRenderer, build_template_environment
from tests.entities import ActionItem, Post


class TestJinjaRenderer:
    def test_template_name(self, renderer: JinjaRenderer) -> None:
        assert renderer.template_name("posts/card") == "posts/_card.html"
        assert renderer.template_name("card") == "_card.html"

    def test_custom_naming(self) -> None:
        renderer = JinjaRenderer(build_template_environment(), partial_prefix="", template_suffix=".j2")
        assert renderer.template_name("posts/card") == "posts/card.j2"

    def test_render_partial(self, renderer: JinjaRenderer) -> None:
        html = renderer.render_partial("posts/card", {"post": Post(id=1, title="Hi"), "extra": "!"})
        assert html == '<div class="card">Hi!</div>'

    def test_render_entity(self, renderer: JinjaRenderer) -> None:
        assert renderer.render_entity(Post(id=1, title="Hi")) == "<p>Hi</p>"
        assert renderer.render_entity(ActionItem(id=1, title="Do")) == "<li>Do</li>"

    def test_autoescape(self, renderer: JinjaRenderer) -> None:
        assert renderer.render_entity(Post(id=1, title="<b>")) == "<p>&lt;b&gt;</p>"

    def test_missing_template(self, renderer: JinjaRenderer) -> None:
        with pytest.raises(TemplateNotFound):
            renderer.render_partial("posts/missing", {})

    def test_template_dirs(self, tmp_path: Path) -> None:
        (tmp_path / "posts").mkdir()
        (tmp_path / "posts" / "_post.html").write_text("<h1>{{ post.title }}</h1>")
        renderer = JinjaRenderer(build_template_environment([tmp_path]))
        assert renderer.render_entity(Post(id=1, title="Disk")) == "<h1>Disk</h1>"
