"""Build pass orchestration: collect -> resolve -> index -> render -> write"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from mdsite.config import Settings
from mdsite.core.errors import BuildError
from mdsite.core.export import build_sidecar, check_reserved, write_site
from mdsite.core.index import SiteIndex, build_index
from mdsite.core.links import ResolvedLink, resolve_links
from mdsite.core.models import ContentItem, ItemKey
from mdsite.core.parse import discover_files, parse_file
from mdsite.core.render import (
    JinjaEngine, MarkdownConverter, MarkdownItConverter, TemplateEngine,
    build_site_context, render_item, render_redirect,
)
from mdsite.core.store import ContentStore


log = structlog.get_logger(__name__)


@dataclass
class BuildReport:
    items:       int = 0
    documents:   int = 0
    redirects:   int = 0
    skipped:     int = 0            # unpublished items left out
    collections: dict[str, int] = field(default_factory=dict)
    tags:        int = 0
    written:     list[Path] = field(default_factory=list)


def collect(
    content_dir: Path,
    default_collection: str = "pages",
    workers: int = 1,
    include_unpublished: bool = False,
    ) -> tuple[ContentStore, int]:
    """Parse every content file into a fresh, sealed store. Returns (store, skipped_unpublished).

    With workers > 1 files are parsed on a thread pool; each task adds its own
    item. The first failure cancels pending tasks and is re-raised.
    """
    if not content_dir.is_dir():
        raise BuildError("content directory not found", content_dir)
    files = discover_files(content_dir)
    store = ContentStore()

    def _ingest(path: Path) -> Optional[ContentItem]:
        item = parse_file(path, content_dir, default_collection)
        if not item.metadata.published and not include_unpublished:
            log.debug("unpublished item skipped", path=str(path))
            return None
        store.add(item)
        return item

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_ingest, p) for p in files]
            try:
                results = [f.result() for f in futures]
            except Exception:
                for f in futures:
                    f.cancel()
                raise
    else:
        results = [_ingest(p) for p in files]

    skipped = sum(1 for r in results if r is None)
    store.seal()
    log.info("content collected", files=len(files), items=len(store), skipped=skipped)
    return store, skipped


def render_documents(
    store: ContentStore,
    index: SiteIndex,
    links: dict[ItemKey, ResolvedLink],
    settings: Settings,
    engine: TemplateEngine,
    converter: MarkdownConverter,
    ) -> tuple[dict[str, str], int]:
    """Render every item and redirect into memory. Returns (output_path -> text, redirect_count)."""
    site = build_site_context(store, index, links, settings.site_title, settings.base_url)
    documents: dict[str, str] = {}
    redirects = 0
    for item in sorted(store, key=lambda i: i.key):
        link = links.get(item.key)
        html = render_item(item, link, index, links, site, engine, converter)
        documents[link.output_path] = html
        for alias in link.aliases:
            documents[alias.output_path] = render_redirect(alias, link, site, engine, item.source_path)
            redirects += 1
    return documents, redirects


def run_build(
    settings: Settings,
    write: bool = True,
    engine: Optional[TemplateEngine] = None,
    converter: Optional[MarkdownConverter] = None,
    ) -> BuildReport:
    """Run one complete build pass; any error aborts before output is published.

    write=False performs every step except writing (used by 'check').
    """
    content_dir = Path(settings.content_dir)
    store, skipped = collect(
        content_dir, settings.default_collection, settings.workers, settings.include_unpublished
    )
    links = resolve_links(store, settings.collection_roots)
    check_reserved(links)
    index = build_index(store)
    log.info("links resolved", documents=len(links), tags=len(index.by_tag))

    engine = engine or JinjaEngine(Path(settings.templates_dir) if settings.templates_dir else None)
    converter = converter or MarkdownItConverter(settings.parser_config)
    documents, redirects = render_documents(store, index, links, settings, engine, converter)

    report = BuildReport(
        items=len(store),
        documents=len(documents) - redirects,
        redirects=redirects,
        skipped=skipped,
        collections={name: len(store.all(name)) for name in store.collections()},
        tags=len(index.by_tag),
    )
    if write:
        report.written = write_site(
            documents,
            Path(settings.output_dir),
            sidecar=build_sidecar(store, index, links),
            protected=[content_dir, Path.cwd()],
        )
        log.info("build complete", output_dir=settings.output_dir, files=len(report.written))
    return report
