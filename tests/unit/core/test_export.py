"""Unit tests for core/export.py"""

import json

import pytest

from draftkit.core.errors import MissingFieldError
from draftkit.core.export import build_archive, build_frontmatter, enforce_required_metadata, export_draft
from draftkit.core.markdown import parse_markdown
from draftkit.core.models import ArticleLink, ArticleMetadata, ImageBlock


PNG_BYTES = b"\x89PNG\r\n\x1a\nexport-test"


def _export(draft, tmp_path, **kwargs):
    return export_draft(
        draft, out_dir=tmp_path / "dist", archive_dir=tmp_path / "articles",
        base_url="https://site.dev/", source_root=tmp_path, **kwargs,
    )


@pytest.mark.parametrize("field,update", [
    ("title", {"title": " "}),
    ("excerpt", {"excerpt": ""}),
    ("tags", {"tags": []}),
])
def test_enforce_required_metadata(field, update):
    meta = ArticleMetadata(title="T", excerpt="E", published_at="2024-01-01T00:00:00Z", tags=["t"])
    with pytest.raises(MissingFieldError) as exc:
        enforce_required_metadata(meta.model_copy(update=update))
    assert exc.value.field == field


def test_missing_tags_writes_nothing(draft, tmp_path):
    bad = draft.model_copy(update={"metadata": draft.metadata.model_copy(update={"tags": []})})
    with pytest.raises(MissingFieldError):
        _export(bad, tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_export_writes_page_archive_and_feed(draft, tmp_path):
    result = _export(draft, tmp_path)

    assert result.page_path == tmp_path / "dist" / "article" / "2024" / "03" / "hello-world" / "index.html"
    assert result.archive_path == tmp_path / "articles" / "2024-03-hello-world.md"
    assert result.canonical_url == "https://site.dev/article/2024/03/hello-world/"

    html = result.page_path.read_text()
    assert '<h1 class="article__title">Hello World</h1>' in html
    assert '<link rel="canonical" href="https://site.dev/article/2024/03/hello-world/">' in html
    assert '<meta property="article:tag" content="news">' in html
    assert "March 5, 2024 · By Ada" in html
    assert "<h2>Section</h2>" in html
    assert "<p>First line<br>second line</p>" in html
    assert '"@type": "Article"' in html

    feed = json.loads(result.feed_path.read_text())
    assert feed == [{
        "title": "Hello World", "slug": "hello-world", "url": result.canonical_url,
        "hero": None, "excerpt": "A short excerpt.", "published_at": "2024-03-05T10:00:00Z",
    }]


def test_export_escapes_metadata(draft, tmp_path):
    meta = draft.metadata.model_copy(update={"title": "<script>alert(1)</script>", "slug": "x"})
    html = _export(draft.model_copy(update={"metadata": meta}), tmp_path).page_path.read_text()
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_export_rewrites_assets_on_a_copy(draft, tmp_path):
    """Hero and block images share one asset file; the input draft keeps its sources."""
    (tmp_path / "hero.png").write_bytes(PNG_BYTES)
    meta = draft.metadata.model_copy(update={"hero_image": "hero.png"})
    source = draft.model_copy(update={
        "metadata": meta,
        "blocks": draft.blocks + [ImageBlock(src="hero.png"), ImageBlock(src="https://cdn.dev/x.png")],
    })
    result = _export(source, tmp_path)

    assert len(result.assets) == 1
    url = result.assets[0].url
    assert url.startswith("/article-assets/hello-world/hello-world-hero-")
    assert result.draft.metadata.hero_image == url
    assert result.draft.blocks[2].src == url
    assert result.draft.blocks[3].src == "https://cdn.dev/x.png"
    assert source.metadata.hero_image == "hero.png"
    assert source.blocks[2].src == "hero.png"

    html = result.page_path.read_text()
    assert f'<meta property="og:image" content="https://site.dev{url}">' in html
    assert json.loads(result.feed_path.read_text())[0]["hero"] == url


def test_build_frontmatter_quotes_and_links():
    meta = ArticleMetadata(
        title='Say "hi"', tags=["a", "b"], published_at="2024-01-01T00:00:00Z", slug="say-hi",
        links=[ArticleLink(label="Docs", url="https://d.dev"), ArticleLink(url="/x")],
    )
    fm = build_frontmatter(meta, {"reading_time": 4, "title": "shadowed", "seo": {"noindex": True}})
    assert fm.splitlines() == [
        'title: "Say \\"hi\\""',
        'published_at: "2024-01-01T00:00:00Z"',
        'slug: "say-hi"',
        "tags:",
        '- "a"',
        '- "b"',
        "links:",
        '- label: "Docs"',
        '  url: "https://d.dev"',
        '- url: "/x"',
        'reading_time: "4"',
        "seo:",
        '  noindex: "True"',
    ]


def test_archive_reimports_to_same_metadata(draft):
    """The Markdown archive parses back into the exported metadata and blocks."""
    meta = draft.metadata.model_copy(update={
        "subtitle": "Commas, kept", "links": [ArticleLink(label="Ref", url="https://r.dev")],
    })
    archive = build_archive(meta, draft.blocks, {"series": "Intro"})
    reparsed = parse_markdown(archive, "archive.md")
    assert reparsed.metadata == meta
    assert reparsed.additional_metadata == {"series": "Intro"}
    assert [b.type for b in reparsed.blocks] == ["heading", "paragraph"]


def test_archive_frontmatter_keeps_yaml_special_characters(draft):
    """Colons, hashes, quotes and leading dashes in values reload unchanged."""
    meta = draft.metadata.model_copy(update={
        "title": 'Part 1: "Intro" #1', "excerpt": "- starts with a dash, then commas",
    })
    reparsed = parse_markdown(build_archive(meta, draft.blocks), "archive.md")
    assert reparsed.metadata.title == meta.title
    assert reparsed.metadata.excerpt == meta.excerpt
    assert reparsed.metadata.tags == meta.tags
