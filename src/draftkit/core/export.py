"""Export pipeline: validate metadata, rewrite assets, write page, archive, and feed entry"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment
from markupsafe import Markup

from draftkit.core.assets import AssetRef, AssetStore
from draftkit.core.errors import MissingFieldError, RenderError
from draftkit.core.feed import update_feed
from draftkit.core.models import ArticleDraft, ArticleMetadata, FeedEntry, ImageBlock
from draftkit.core.normalize import normalize_metadata, parse_datetime
from draftkit.core.render import absolute_url, blocks_to_markdown, build_json_ld, build_meta_line, render_blocks
from draftkit.core.utils.slug import DEFAULT_SLUG


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.jeremyrobards.com"
FRONTMATTER_WIDTH = 4096
FRONTMATTER_ORDER = (
    "title", "subtitle", "author", "category", "published_at", "excerpt",
    "hero_image", "hero_caption", "slug", "tags", "links",
)

ARTICLE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="description" content="{{ description }}">
  <link rel="canonical" href="{{ canonical_url }}">
  <meta property="og:type" content="article">
  <meta property="og:title" content="{{ title }}">
  <meta property="og:description" content="{{ description }}">
  <meta property="og:url" content="{{ canonical_url }}">
  {%- if og_image %}
  <meta property="og:image" content="{{ og_image }}">
  {%- endif %}
  <meta property="article:published_time" content="{{ published_iso }}">
  {%- for tag in tags %}
  <meta property="article:tag" content="{{ tag }}">
  {%- endfor %}
  <script type="application/ld+json">{{ json_ld }}</script>
  <link rel="stylesheet" href="{{ stylesheet }}">
</head>
<body>
  <article class="article">
    <header class="article__header">
      {%- if category %}
      <p class="article__category">{{ category }}</p>
      {%- endif %}
      <h1 class="article__title">{{ title }}</h1>
      {%- if subtitle %}
      <p class="article__subtitle">{{ subtitle }}</p>
      {%- endif %}
      <p class="article__meta">{{ meta_line }}</p>
      <p class="article__excerpt">{{ description }}</p>
      {%- if hero_image %}
      <figure class="article__hero">
        <img src="{{ hero_image }}" alt="{{ hero_alt }}">
        {%- if hero_caption %}
        <figcaption>{{ hero_caption }}</figcaption>
        {%- endif %}
      </figure>
      {%- endif %}
    </header>
    <main class="article__body">
      {{ content }}
    </main>
    {%- if links %}
    <footer class="article__links">
      <ul>
        {%- for link in links %}
        <li><a href="{{ link.url }}">{{ link.label or link.url }}</a></li>
        {%- endfor %}
      </ul>
    </footer>
    {%- endif %}
  </article>
</body>
</html>
"""

_env = Environment(autoescape=True, keep_trailing_newline=True)
_template = _env.from_string(ARTICLE_TEMPLATE)


@dataclass
class ExportResult:
    slug: str
    page_path: Path
    archive_path: Path
    feed_path: Path
    canonical_url: str
    assets: list[AssetRef] = field(default_factory=list)
    draft: ArticleDraft = None


def enforce_required_metadata(metadata: ArticleMetadata) -> None:
    """Raise MissingFieldError unless title, excerpt, published_at and a tag are present."""
    for name in ("title", "excerpt", "published_at"):
        if not getattr(metadata, name).strip():
            raise MissingFieldError(name, f"Metadata.{name} is required.")
    if not metadata.tags:
        raise MissingFieldError("tags", "Metadata.tags must include at least one tag.")


class QuotedScalar(str):
    """Archive frontmatter scalar, always emitted in double-quoted style."""


class ArchiveDumper(yaml.SafeDumper):
    pass


ArchiveDumper.add_representer(
    QuotedScalar,
    lambda dumper, value: dumper.represent_scalar("tag:yaml.org,2002:str", value, style='"'),
)


def _archive_value(value: Any) -> Any:
    """Quote scalars for the archive; None, empty strings and empty containers become None."""
    if value is None or value == "":
        return None
    if isinstance(value, (list, tuple)):
        items = [v for v in (_archive_value(item) for item in value) if v is not None]
        return items or None
    if isinstance(value, dict):
        entries = {str(k): v for k, v in ((k, _archive_value(v)) for k, v in value.items()) if v is not None}
        return entries or None
    return QuotedScalar(value)


def build_frontmatter(metadata: ArticleMetadata, additional: dict[str, Any] = None) -> str:
    """Archive frontmatter with double-quoted scalars; additional keys never shadow metadata."""
    data = metadata.model_dump()
    fm = {key: _archive_value(data[key]) for key in FRONTMATTER_ORDER}
    for key, value in (additional or {}).items():
        if key not in data:
            fm[key] = _archive_value(value)
    fm = {k: v for k, v in fm.items() if v is not None}
    if not fm:
        return ""
    return yaml.dump(
        fm, Dumper=ArchiveDumper, default_flow_style=False, allow_unicode=True,
        sort_keys=False, width=FRONTMATTER_WIDTH,
    ).rstrip("\n")


def build_archive(metadata: ArticleMetadata, blocks: list, additional: dict[str, Any] = None) -> str:
    """Full Markdown archive document: frontmatter block plus serialized body."""
    text = f"---\n{build_frontmatter(metadata, additional)}\n---\n\n{blocks_to_markdown(blocks)}"
    return text.rstrip() + "\n"


def render_page(metadata: ArticleMetadata, content: str, canonical_url: str, base_url: str, stylesheet: str) -> str:
    """Render the standalone article page; raises RenderError on empty output."""
    html = _template.render(
        title=metadata.title,
        subtitle=metadata.subtitle,
        description=metadata.excerpt,
        canonical_url=canonical_url,
        og_image=absolute_url(metadata.hero_image, base_url) if metadata.hero_image else "",
        published_iso=metadata.published_at,
        tags=metadata.tags,
        json_ld=Markup(build_json_ld(metadata, canonical_url, base_url)),
        stylesheet=stylesheet,
        category=metadata.category,
        meta_line=build_meta_line(metadata),
        hero_image=metadata.hero_image,
        hero_caption=metadata.hero_caption,
        hero_alt=metadata.hero_caption or metadata.title or "Feature hero image",
        content=Markup(content),
        links=metadata.links,
    )
    if not html.strip():
        raise RenderError("Failed to render article template.")
    return html


def export_draft(
    draft: ArticleDraft,
    out_dir: Path,
    archive_dir: Path,
    base_url: str = DEFAULT_BASE_URL,
    stylesheet: str = "/css/style.css",
    source_root: Path = Path("."),
    default_slug: str = DEFAULT_SLUG,
    ) -> ExportResult:
    """Export one draft as page + archive + feed entry + assets.

    The input draft is never modified; rewritten asset URLs live on the
    returned copy. Nothing is written when required metadata is missing.

    Output layout:
      out_dir / article / YYYY / MM / slug / index.html
      out_dir / article-assets / slug / <name>-<sha6>.<ext>
      out_dir / article / feed.json
      archive_dir / YYYY-MM-slug.md
    """
    metadata = normalize_metadata(draft.metadata.model_dump(), default_slug=default_slug)
    enforce_required_metadata(metadata)

    published = parse_datetime(metadata.published_at)
    year, month, slug = f"{published.year:04d}", f"{published.month:02d}", metadata.slug
    base_url = base_url.rstrip("/")
    canonical_url = f"{base_url}/article/{year}/{month}/{slug}/"

    store = AssetStore(
        asset_dir=Path(out_dir) / "article-assets" / slug,
        url_base=f"/article-assets/{slug}",
        source_root=Path(source_root),
    )
    if metadata.hero_image:
        ref = store.ensure(metadata.hero_image, f"{slug}-hero")
        if ref:
            metadata = metadata.model_copy(update={"hero_image": ref.url})

    blocks = []
    for block in draft.blocks:
        if isinstance(block, ImageBlock) and block.src:
            ref = store.ensure(block.src, f"{slug}-image")
            if ref:
                block = block.model_copy(update={"src": ref.url})
        blocks.append(block)

    html = render_page(metadata, render_blocks(blocks), canonical_url, base_url, stylesheet)
    page_path = Path(out_dir) / "article" / year / month / slug / "index.html"
    page_path.parent.mkdir(parents=True, exist_ok=True)
    page_path.write_text(html, encoding="utf-8")

    archive_path = Path(archive_dir) / f"{year}-{month}-{slug}.md"
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    archive_path.write_text(build_archive(metadata, blocks, draft.additional_metadata), encoding="utf-8")

    feed_path = Path(out_dir) / "article" / "feed.json"
    update_feed(feed_path, FeedEntry(
        title=metadata.title,
        slug=slug,
        url=canonical_url,
        hero=metadata.hero_image or None,
        excerpt=metadata.excerpt,
        published_at=metadata.published_at,
    ))
    logger.info("Exported %s -> %s", slug, page_path)

    exported = draft.model_copy(update={"metadata": metadata, "blocks": blocks})
    return ExportResult(
        slug=slug,
        page_path=page_path,
        archive_path=archive_path,
        feed_path=feed_path,
        canonical_url=canonical_url,
        assets=store.written,
        draft=exported,
    )
