"""Shared test fixtures for tierconf tests."""

from __future__ import annotations

import json
import pathlib

import pytest

import tierconf.config


@pytest.fixture(autouse=True)
def _isolate_global_config(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch):
    """Keep the user's ~/.config/tierconf out of every test."""
    global_toml = tmp_path / "global_config" / "config.toml"
    monkeypatch.setattr(tierconf.config, "_global_path", lambda: global_toml)
    return global_toml


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def settings_file(project_dir: pathlib.Path):
    """Factory for the project's opencode.json."""

    def _create(settings: dict | str | None = None) -> pathlib.Path:
        path = project_dir / "opencode.json"
        if settings is None:
            settings = {}
        if isinstance(settings, str):
            path.write_text(settings)
        else:
            path.write_text(json.dumps(settings, indent=2))
        return path

    return _create


@pytest.fixture
def agent_doc(project_dir: pathlib.Path):
    """Factory for an installed agent document with a ``model:`` frontmatter key."""

    def _create(name: str, model: str = "anthropic/old-model") -> pathlib.Path:
        agents = project_dir / ".opencode" / "agents"
        agents.mkdir(parents=True, exist_ok=True)
        path = agents / f"{name}.md"
        path.write_text(
            "---\n"
            f"description: {name} agent\n"
            "mode: subagent\n"
            f"model: {model}\n"
            "---\n"
            "\n"
            f"# {name}\n"
            "\n"
            "model: this line is body text, not frontmatter\n"
        )
        return path

    return _create


@pytest.fixture
def local_config(project_dir: pathlib.Path):
    """Factory that writes TOML text to a project's ``.tierconf/config.toml``."""

    def _create(text: str, root: pathlib.Path | None = None) -> pathlib.Path:
        path = (root or project_dir) / ".tierconf" / "config.toml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return _create
