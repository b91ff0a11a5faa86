"""Shared pytest fixtures for lazyfrag tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner
from jinja2 import DictLoader

from lazyfrag.config.settings import LazyfragSettings
from lazyfrag.infrastructure.kit import RenderKit
from lazyfrag.infrastructure.locator import Locator
from lazyfrag.infrastructure.templates import JinjaRenderer, build_template_environment
from lazyfrag.services.builder import DescriptorBuilder
from lazyfrag.services.emitter import PlaceholderEmitter
from lazyfrag.services.resolver import PlaceholderResolver
from tests.entities import ActionItem, Draft, Post, reset_stores

SECRET = "test-secret-key-0123456789abcdef"
APP = "dummy"

TEMPLATES: dict[str, str] = {
    "posts/_post.html": "<p>{{ post.title }}</p>",
    "posts/_card.html": "<div class=\"card\">{{ post.title }}{{ extra }}</div>",
    "posts/_row.html": "<tr><td>{{ entry_counter }}</td><td>{{ entry.title }}</td></tr>",
    "action_items/_action_item.html": "<li>{{ action_item.title }}</li>",
}


@pytest.fixture(autouse=True)
def _clear_stores() -> Generator[None]:
    """Start every test with empty entity stores."""
    reset_stores()
    yield
    reset_stores()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Isolate CLI runs: no config discovery, a fixed secret and app.

    The CLI reconfigures logging on every invocation; root logger state
    is restored afterwards. Use via ``@pytest.mark.usefixtures("_cli_env")``
    on command test classes.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LAZYFRAG_CONFIG", raising=False)
    monkeypatch.setenv("LAZYFRAG_SIGNING__SECRET_KEY", SECRET)
    monkeypatch.setenv("LAZYFRAG_ENTITIES__APP", APP)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("lazyfrag").setLevel(logging.NOTSET)


@pytest.fixture
def settings() -> LazyfragSettings:
    return LazyfragSettings(signing={"secret_key": SECRET}, entities={"app": APP})


@pytest.fixture
def locator() -> Locator:
    loc = Locator()
    loc.register(Post)
    loc.register(ActionItem)
    loc.register(Draft)
    return loc


@pytest.fixture
def renderer() -> JinjaRenderer:
    env = build_template_environment(loaders=[DictLoader(TEMPLATES)])
    return JinjaRenderer(env)


@pytest.fixture
def kit(settings: LazyfragSettings, locator: Locator, renderer: JinjaRenderer) -> RenderKit:
    """RenderKit with a fixed secret, the test entities registered and dict templates."""
    return RenderKit(settings, locator=locator, renderer=renderer)


@pytest.fixture
def builder(kit: RenderKit) -> DescriptorBuilder:
    return DescriptorBuilder(kit)


@pytest.fixture
def emitter(kit: RenderKit) -> PlaceholderEmitter:
    return PlaceholderEmitter(kit)


@pytest.fixture
def resolver(kit: RenderKit) -> PlaceholderResolver:
    return PlaceholderResolver(kit)
