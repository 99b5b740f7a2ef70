"""Integration tests for the CLI commands (import -> export pipeline)"""

import json

import pytest
from typer.testing import CliRunner

from draftkit.cli.cli import app


ARTICLE_MD = """\
---
title: Hello CLI
tags: news, cli
excerpt: Short summary.
date: 2024-05-02
---

Body paragraph.

![Diagram](diagram.png)
"""


@pytest.fixture(name="runner")
def runner_fixture(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("OUTPUT_DIR", "ARCHIVE_DIR", "STAGING_DIR", "SITE_BASE_URL"):
        monkeypatch.delenv(f"DRAFTKIT_{name}", raising=False)
    return CliRunner()


def test_build_cmd_runs_full_pipeline(runner, tmp_path):
    """build writes the page, archive, feed, and copied assets."""
    (tmp_path / "hello.md").write_text(ARTICLE_MD)
    (tmp_path / "diagram.png").write_bytes(b"\x89PNG\r\n\x1a\ndiagram")

    result = runner.invoke(app, ["build", "hello.md", "--out-dir", "dist", "--base-url", "https://cli.dev"])

    assert result.exit_code == 0, result.output
    page = tmp_path / "dist" / "article" / "2024" / "05" / "hello-cli" / "index.html"
    assert page.exists()
    assert (tmp_path / "articles" / "2024-05-hello-cli.md").exists()
    assert any((tmp_path / "dist" / "article-assets" / "hello-cli").glob("hello-cli-image-*.png"))
    feed = json.loads((tmp_path / "dist" / "article" / "feed.json").read_text())
    assert feed[0]["url"] == "https://cli.dev/article/2024/05/hello-cli/"
    assert "Import complete - 1 imported, 0 failed" in result.output


def test_import_then_export(runner, tmp_path):
    (tmp_path / "posts").mkdir()
    (tmp_path / "posts" / "hello.md").write_text(ARTICLE_MD)

    result = runner.invoke(app, ["import", "posts", "--staging-dir", "stage"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "stage" / "hello-cli.json").exists()

    result = runner.invoke(app, ["export", "--staging-dir", "stage", "--out-dir", "public"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "public" / "article" / "feed.json").exists()


def test_import_reports_failures_and_continues(runner, tmp_path):
    (tmp_path / "bad.json").write_text("{oops")
    (tmp_path / "good.md").write_text("# Good\n\nFine.")

    result = runner.invoke(app, ["import", ".", "--staging-dir", "stage", "--yes"])

    assert result.exit_code == 1
    assert (tmp_path / "stage" / "good.json").exists()


def test_import_yes_cancels_mapping_prompt(runner, tmp_path):
    (tmp_path / "odd.json").write_text('{"foo": "X", "bar": "Y"}')
    result = runner.invoke(app, ["import", "odd.json", "--staging-dir", "stage", "--yes"])
    assert result.exit_code == 1
    assert not (tmp_path / "stage").exists() or not any((tmp_path / "stage").iterdir())


def test_import_prompts_for_mapping(runner, tmp_path):
    (tmp_path / "odd.json").write_text('{"foo": "Mapped Title", "bar": "Mapped body."}')
    result = runner.invoke(app, ["import", "odd.json", "--staging-dir", "stage"], input="foo\nbar\n")
    assert result.exit_code == 0, result.output
    staged = json.loads((tmp_path / "stage" / "mapped-title.json").read_text())
    assert staged["source"]["field_map"] == {"title": "foo", "body": "bar"}


def test_export_nothing_staged(runner):
    result = runner.invoke(app, ["export", "--staging-dir", "empty"])
    assert result.exit_code == 1
    assert "Nothing staged" in result.output


def test_export_missing_metadata_fails(runner, tmp_path):
    (tmp_path / "untagged.md").write_text("---\ntitle: No Tags\nexcerpt: E\n---\nBody.")
    assert runner.invoke(app, ["import", "untagged.md", "--staging-dir", "stage"]).exit_code == 0
    result = runner.invoke(app, ["export", "--staging-dir", "stage", "--out-dir", "dist"])
    assert result.exit_code == 1
    assert not (tmp_path / "dist").exists()


def test_preview_html_and_markdown(runner, tmp_path):
    (tmp_path / "note.md").write_text("# Note\n\n## Part\n\nText & more.")
    html = runner.invoke(app, ["preview", "note.md"])
    assert html.exit_code == 0, html.output
    assert "<h2>Part</h2>" in html.output
    assert "<p>Text &amp; more.</p>" in html.output

    md = runner.invoke(app, ["preview", "note.md", "--markdown"])
    assert "## Part\n\nText & more." in md.output


def test_detect(runner, tmp_path):
    (tmp_path / "data.txt").write_text('{"a": 1}')
    result = runner.invoke(app, ["detect", "data.txt"])
    assert result.exit_code == 0
    assert result.output.strip() == "json"


def test_missing_path_fails(runner):
    result = runner.invoke(app, ["import", "nope.md"])
    assert result.exit_code == 1


def test_global_log_level_option(runner, tmp_path):
    (tmp_path / "a.md").write_text("x")
    result = runner.invoke(app, ["--log-level", "debug", "detect", "a.md"])
    assert result.exit_code == 0
    assert result.output.strip().endswith("markdown")
