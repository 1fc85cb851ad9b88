"""Tests for tierconf.rewriter — applying tier models to installed agents."""

from __future__ import annotations

import json
import pathlib

import pytest

import tierconf.resolver.catalog
import tierconf.rewriter

RESOLVED = tierconf.resolver.catalog.ResolvedConfig(
    strong="p/claude-opus-4.6",
    medium="p/claude-sonnet-4.6",
    weak="p/claude-haiku-4.5",
)


class TestReplaceFrontmatterModel:
    def test_replaces_value(self) -> None:
        content = "---\ndescription: x\nmodel: old/one\n---\nbody\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "new/two") == (
            "---\ndescription: x\nmodel: new/two\n---\nbody\n"
        )

    def test_body_model_line_untouched(self) -> None:
        content = "---\nmode: subagent\n---\nmodel: stays\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "n/m") == content

    def test_no_frontmatter(self) -> None:
        content = "# Title\nmodel: stays\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "n/m") == content

    def test_only_first_model_line(self) -> None:
        content = "---\nmodel: a\nmodel: b\n---\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "n/m") == (
            "---\nmodel: n/m\nmodel: b\n---\n"
        )

    def test_crlf(self) -> None:
        content = "---\r\nmodel: old\r\n---\r\nbody"
        assert tierconf.rewriter.replace_frontmatter_model(content, "n/m") == (
            "---\r\nmodel: n/m\r\n---\r\nbody"
        )

    def test_crlf_model_line_keeps_carriage_return(self) -> None:
        content = "---\r\nmodel: old\r\nmode: subagent\r\n---\r\nbody\r\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "n/m") == (
            "---\r\nmodel: n/m\r\nmode: subagent\r\n---\r\nbody\r\n"
        )

    def test_empty_model_value_gets_separator(self) -> None:
        content = "---\nmodel:\n---\nbody\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "a/b") == (
            "---\nmodel: a/b\n---\nbody\n"
        )

    def test_value_without_space_normalized(self) -> None:
        content = "---\nmodel:\told/one\n---\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, "a/b") == (
            "---\nmodel: a/b\n---\n"
        )

    def test_replacement_with_backslash_literal(self) -> None:
        content = "---\nmodel: old\n---\n"
        assert tierconf.rewriter.replace_frontmatter_model(content, r"a\1b") == (
            "---\nmodel: a\\1b\n---\n"
        )


class TestRewriteAgentModels:
    def test_not_installed_returns_false(self, project_dir: pathlib.Path, settings_file) -> None:
        path = settings_file({"agent": {"j.planner": {"model": "old"}}})
        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is False
        assert json.loads(path.read_text())["agent"]["j.planner"]["model"] == "old"

    def test_rewrites_agent_docs_by_tier(self, project_dir: pathlib.Path, agent_doc) -> None:
        planner = agent_doc("j.planner")
        reviewer = agent_doc("j.reviewer")
        librarian = agent_doc("j.librarian")

        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is True

        assert "model: p/claude-opus-4.6\n" in planner.read_text()
        assert "model: p/claude-sonnet-4.6\n" in reviewer.read_text()
        assert "model: p/claude-haiku-4.5\n" in librarian.read_text()
        assert "model: this line is body text" in planner.read_text()

    def test_unknown_agent_docs_ignored(self, project_dir: pathlib.Path, agent_doc) -> None:
        custom = agent_doc("my-agent")
        before = custom.read_text()
        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is False
        assert custom.read_text() == before

    def test_already_current_reports_unchanged(
        self, project_dir: pathlib.Path, agent_doc
    ) -> None:
        agent_doc("j.planner", model="p/claude-opus-4.6")
        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is False

    def test_rewrites_settings_agents(
        self, project_dir: pathlib.Path, agent_doc, settings_file
    ) -> None:
        agent_doc("j.planner", model="p/claude-opus-4.6")
        path = settings_file(
            {
                "theme": "dark",
                "agent": {
                    "j.validator": {"model": "old", "temperature": 0.1},
                    "j.explore": {"model": "old"},
                    "j.unify": "not-an-object",
                    "custom": {"model": "mine"},
                },
            }
        )

        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is True

        data = json.loads(path.read_text())
        assert data["theme"] == "dark"
        assert data["agent"]["j.validator"] == {
            "model": "p/claude-sonnet-4.6",
            "temperature": 0.1,
        }
        assert data["agent"]["j.explore"]["model"] == "p/claude-haiku-4.5"
        assert data["agent"]["j.unify"] == "not-an-object"
        assert data["agent"]["custom"]["model"] == "mine"
        assert path.read_text().endswith("\n")

    def test_settings_without_agent_section_untouched(
        self, project_dir: pathlib.Path, agent_doc, settings_file
    ) -> None:
        agent_doc("j.planner", model="p/claude-opus-4.6")
        path = settings_file({"theme": "dark"})
        before = path.read_text()
        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is False
        assert path.read_text() == before

    def test_malformed_settings_skipped(
        self, project_dir: pathlib.Path, agent_doc, settings_file
    ) -> None:
        agent_doc("j.planner")
        path = settings_file("{nope")
        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is True
        assert path.read_text() == "{nope"

    def test_crlf_agent_doc_keeps_line_endings(
        self, project_dir: pathlib.Path, agent_doc
    ) -> None:
        path = agent_doc("j.planner")
        path.write_bytes(b"---\r\nmodel: old/one\r\nmode: primary\r\n---\r\nbody\r\n")

        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is True
        assert path.read_bytes() == (
            b"---\r\nmodel: p/claude-opus-4.6\r\nmode: primary\r\n---\r\nbody\r\n"
        )

    def test_undecodable_agent_doc_skipped(
        self, project_dir: pathlib.Path, agent_doc
    ) -> None:
        planner = agent_doc("j.planner")
        planner.write_bytes(b"---\nmodel: \xff\xfe\n---\n")
        explore = agent_doc("j.explore")

        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is True
        assert planner.read_bytes() == b"---\nmodel: \xff\xfe\n---\n"
        assert "model: p/claude-haiku-4.5\n" in explore.read_text()

    @pytest.mark.parametrize(
        "raw",
        [b'{"agent": {"j.planner": {"model": "\xff"}}}', b"[" * 100000],
        ids=["invalid-utf8", "deeply-nested"],
    )
    def test_unparseable_settings_skipped(
        self, project_dir: pathlib.Path, agent_doc, raw: bytes
    ) -> None:
        agent_doc("j.planner", model="p/claude-opus-4.6")
        path = project_dir / "opencode.json"
        path.write_bytes(raw)
        assert tierconf.rewriter.rewrite_agent_models(project_dir, RESOLVED) is False
        assert path.read_bytes() == raw
