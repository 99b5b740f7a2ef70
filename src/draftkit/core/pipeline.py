"""Pipeline step functions: single-file import, batch import, staging, and export orchestration"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from draftkit.config import Settings
from draftkit.core.decisions import Resolver
from draftkit.core.detect import detect_format
from draftkit.core.errors import DraftError, UnsupportedInputError
from draftkit.core.export import ExportResult, export_draft
from draftkit.core.json_mapper import parse_json
from draftkit.core.markdown import parse_markdown
from draftkit.core.models import ArticleDraft, SourceFormat
from draftkit.core.parse import discover_files
from draftkit.core.pdf import parse_pdf


logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    path: Path
    draft: Optional[ArticleDraft] = None
    error: Optional[Exception] = None
    staged: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    outcomes: list[ImportOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ImportOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[ImportOutcome]:
        return [o for o in self.outcomes if not o.ok]


def _decode(data: bytes, file_name: str) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnsupportedInputError(f"{file_name} is neither a PDF nor UTF-8 text") from e


async def import_source(
    data: bytes,
    file_name: str,
    resolver: Resolver,
    settings: Settings = None,
    ) -> ArticleDraft:
    """Detect the format of raw bytes and run the matching importer."""
    settings = settings or Settings()
    fmt = detect_format(data, file_name)
    logger.debug("Detected %s as %s", file_name, fmt.value)

    if fmt is SourceFormat.pdf:
        return await parse_pdf(
            data, file_name, resolver,
            default_slug=settings.default_slug,
            heading_max_chars=settings.heading_max_chars,
            heading_max_words=settings.heading_max_words,
            heading_short_words=settings.heading_short_words,
        )
    text = _decode(data, file_name)
    if fmt is SourceFormat.json:
        return await parse_json(text, file_name, resolver, default_slug=settings.default_slug)
    return parse_markdown(text, file_name, settings.parser_config, default_slug=settings.default_slug)


async def import_file(path: Path, resolver: Resolver, settings: Settings = None) -> ArticleDraft:
    """Read path off the event loop and import it."""
    data = await asyncio.to_thread(Path(path).read_bytes)
    return await import_source(data, Path(path).name, resolver, settings)


def stage_draft(draft: ArticleDraft, staging_dir: Path) -> Path:
    """Write draft JSON to staging_dir/{slug}.json and return the path."""
    staging_dir.mkdir(parents=True, exist_ok=True)
    out_file = staging_dir / f"{draft.metadata.slug}.json"
    out_file.write_text(draft.model_dump_json(indent=2), encoding="utf-8")
    return out_file


async def import_batch(
    paths: Iterable[Path],
    resolver: Resolver,
    settings: Settings = None,
    staging_dir: Optional[Path] = None,
    ) -> BatchResult:
    """Import files one after another; a failing file is recorded and the batch continues.

    When staging_dir is given each successful draft is staged there.
    """
    result = BatchResult()
    for path in paths:
        outcome = ImportOutcome(path=Path(path))
        try:
            outcome.draft = await import_file(path, resolver, settings)
            if staging_dir is not None:
                outcome.staged = stage_draft(outcome.draft, staging_dir)
        except (DraftError, OSError) as e:
            logger.warning("Import failed for %s: %s", path, e)
            outcome.error = e
        result.outcomes.append(outcome)
    return result


def run_import(targets: Iterable[str], resolver: Resolver, settings: Settings) -> BatchResult:
    """Discover files under each target and import them into the staging directory."""
    paths = [p for target in targets for p in discover_files(Path(target))]
    return asyncio.run(import_batch(paths, resolver, settings, Path(settings.staging_dir)))


def load_staged(staging_dir: Path) -> list[tuple[Path, ArticleDraft]]:
    """Return (file, draft) pairs for every staged draft, sorted by file name."""
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    return [(f, ArticleDraft.model_validate_json(f.read_text(encoding="utf-8"))) for f in files]


def run_export(
    drafts: Iterable[tuple[Path, ArticleDraft]],
    settings: Settings,
    ) -> list[tuple[Path, ExportResult | Exception]]:
    """Export each staged draft; per-draft failures are returned, not raised."""
    results = []
    for staged, draft in drafts:
        try:
            result = export_draft(
                draft,
                out_dir=Path(settings.output_dir),
                archive_dir=Path(settings.archive_dir),
                base_url=settings.site_base_url,
                stylesheet=settings.stylesheet,
                default_slug=settings.default_slug,
            )
        except (DraftError, OSError) as e:
            logger.warning("Export failed for %s: %s", staged, e)
            results.append((staged, e))
            continue
        results.append((staged, result))
    return results
