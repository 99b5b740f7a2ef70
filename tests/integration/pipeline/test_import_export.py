"""Integration tests for the import -> stage -> export pipeline.

Each test runs the pipeline against the canonical sources below and asserts
stable expected values. Read this file top-to-bottom as a reference for what
each stage produces with default settings.

Canonical sources
-----------------
    launch.md     frontmatter with aliases (date, thumbnail), H1 title in body
    launch.json   same article as JSON with non-standard keys (needs mapping)

Draft layout after import of launch.md (3 blocks):
    [heading h2]  "What changed"
    [paragraph]   "Everything, mostly."
    [image]       "cover.png"

Export layout (out/ and archive/ under tmp_path):
    out/article/2025/01/launch-day/index.html
    out/article-assets/launch-day/launch-day-hero-<sha6>.png
    out/article/feed.json
    archive/2025-01-launch-day.md
"""

import asyncio
import json

import pytest

from draftkit.config import Settings
from draftkit.core.decisions import DecisionChannel, FieldMappingRequest
from draftkit.core.pipeline import import_batch, load_staged, run_export


LAUNCH_MD = """\
---
tags: [launch, news]
date: 2025-01-20T08:00:00+01:00
thumbnail: cover.png
excerpt: We shipped.
---

# Launch Day

## What changed

Everything, mostly.

![Cover](cover.png)
"""

LAUNCH_JSON = {
    "Heading Text": "Launch Day (JSON)",
    "Copy": [{"type": "paragraph", "text": "From JSON."}],
    "keywords": ["launch"],
    "summary": "Mapped.",
    "published": "2025-01-21",
}


@pytest.fixture(name="workspace")
def workspace_fixture(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "launch.md").write_text(LAUNCH_MD)
    (tmp_path / "launch.json").write_text(json.dumps(LAUNCH_JSON))
    (tmp_path / "cover.png").write_bytes(b"\x89PNG\r\n\x1a\ncover")
    return tmp_path


@pytest.fixture(name="settings")
def settings_fixture(workspace):
    return Settings(
        output_dir=str(workspace / "out"),
        archive_dir=str(workspace / "archive"),
        staging_dir=str(workspace / "stage"),
        site_base_url="https://example.org",
    )


async def _answer_mapping(channel: DecisionChannel) -> FieldMappingRequest:
    pending = await channel.next_decision()
    pending.resolve({"title": "Heading Text", "body": "Copy"})
    return pending.request


@pytest.mark.asyncio
async def test_import_markdown_layout(workspace, settings):
    result = await import_batch([workspace / "launch.md"], DecisionChannel(), settings)
    draft = result.outcomes[0].draft
    assert draft.metadata.title == "Launch Day"
    assert draft.metadata.published_at == "2025-01-20T07:00:00Z"
    assert draft.metadata.hero_image == "cover.png"
    assert [(b.type, getattr(b, "text", None)) for b in draft.blocks] == [
        ("heading", "What changed"), ("paragraph", "Everything, mostly."), ("image", None),
    ]
    assert draft.warnings == []


@pytest.mark.asyncio
async def test_mapping_answered_through_channel(workspace, settings):
    """The batch suspends on the JSON file until a consumer answers the mapping."""
    channel = DecisionChannel()
    batch = asyncio.create_task(
        import_batch([workspace / "launch.md", workspace / "launch.json"], channel, settings, workspace / "stage")
    )
    request = await _answer_mapping(channel)
    result = await batch

    assert request.file_name == "launch.json"
    assert request.missing == ["title", "body"]
    assert request.suggested == {"tags": "keywords", "published_at": "published", "excerpt": "summary"}
    assert all(o.ok for o in result.outcomes)
    assert sorted(p.name for p in (workspace / "stage").iterdir()) == ["launch-day-json.json", "launch-day.json"]


@pytest.mark.asyncio
async def test_export_staged_drafts(workspace, settings):
    channel = DecisionChannel()
    batch = asyncio.create_task(
        import_batch([workspace / "launch.md", workspace / "launch.json"], channel, settings, workspace / "stage")
    )
    await _answer_mapping(channel)
    await batch

    results = run_export(load_staged(workspace / "stage"), settings)
    assert all(not isinstance(r, Exception) for _, r in results)

    page = workspace / "out" / "article" / "2025" / "01" / "launch-day" / "index.html"
    html = page.read_text()
    assert '<figure class="article__hero">' in html
    hero = [p.name for p in (workspace / "out" / "article-assets" / "launch-day").iterdir()]
    assert len(hero) == 1 and hero[0].startswith("launch-day-hero-")
    assert f"/article-assets/launch-day/{hero[0]}" in html

    feed = json.loads((workspace / "out" / "article" / "feed.json").read_text())
    assert [e["slug"] for e in feed] == ["launch-day-json", "launch-day"]

    archive = (workspace / "archive" / "2025-01-launch-day.md").read_text()
    assert archive.startswith('---\ntitle: "Launch Day"\n')
    assert f'hero_image: "/article-assets/launch-day/{hero[0]}"' in archive
    assert "## What changed\n\nEverything, mostly." in archive
