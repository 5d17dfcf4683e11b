"""Site output: sidecar index JSON and all-or-nothing document writing"""

import hashlib
import json
import shutil
from pathlib import Path

import structlog

from mdsite.core.errors import PathCollision
from mdsite.core.index import SiteIndex
from mdsite.core.links import ResolvedLink
from mdsite.core.models import ItemKey
from mdsite.core.store import ContentStore


SIDECAR_NAME = "site-index.json"

log = structlog.get_logger(__name__)


def build_sidecar(store: ContentStore, index: SiteIndex, links: dict[ItemKey, ResolvedLink]) -> dict:
    """JSON-ready description of the built site: collections in index order, tags, links, body hashes.

    Dated items come first (newest first), then undated items by identifier.
    """
    collections = {}
    for name in store.collections():
        dated = list(index.by_collection.get(name, ()))
        undated = sorted((i for i in store.all(name) if i.date is None), key=lambda i: i.identifier)
        collections[name] = [
            {
                "identifier": item.identifier,
                "title": item.title,
                "url": links[item.key].url,
                "output_path": links[item.key].output_path,
                "date": item.date.isoformat() if item.date else None,
                "tags": sorted(item.metadata.tags),
                "aliases": [a.url for a in links[item.key].aliases],
                "source_path": item.source_path.as_posix(),
                "hash": hashlib.sha256(item.body.encode("utf-8")).hexdigest(),
            }
            for item in dated + undated
        ]
    return {
        "collections": collections,
        "tags": {tag: [str(k) for k in sorted(keys)] for tag, keys in index.by_tag.items()},
    }


def check_reserved(links: dict[ItemKey, ResolvedLink]) -> None:
    """PathCollision if any document claims the sidecar's path."""
    for link in links.values():
        for url, out in [(link.url, link.output_path), *((a.url, a.output_path) for a in link.aliases)]:
            if out == SIDECAR_NAME or out.startswith(f"{SIDECAR_NAME}/"):
                raise PathCollision(f"{url} collides with the reserved {SIDECAR_NAME}")


def _check_output_dir(output_dir: Path, protected: list[Path]) -> None:
    out = output_dir.resolve()
    for p in protected:
        p = p.resolve()
        if out == p or p.is_relative_to(out):
            raise ValueError(f"Refusing to replace {output_dir}: it contains {p}")


def write_site(
    documents: dict[str, str],
    output_dir: Path,
    sidecar: dict | None = None,
    protected: list[Path] | None = None,
    ) -> list[Path]:
    """Write documents (relative path -> text) to output_dir, replacing it only after every write succeeds.

    Files go to a sibling staging directory first; a failure removes the staging
    directory and leaves any previous output untouched. protected paths (content
    root, working directory) may not live inside output_dir.
    """
    _check_output_dir(output_dir, protected or [])
    output_dir = output_dir.resolve()
    staging = output_dir.with_name(f".{output_dir.name}.staging")
    backup = output_dir.with_name(f".{output_dir.name}.previous")
    for leftover in (staging, backup):
        if leftover.exists():
            shutil.rmtree(leftover)

    written = []
    try:
        for rel, text in sorted(documents.items()):
            dest = staging / rel
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(text, encoding="utf-8")
            written.append(output_dir / rel)
        if sidecar is not None:
            staging.mkdir(parents=True, exist_ok=True)
            (staging / SIDECAR_NAME).write_text(json.dumps(sidecar, indent=2, ensure_ascii=False), encoding="utf-8")
            written.append(output_dir / SIDECAR_NAME)
        staging.mkdir(parents=True, exist_ok=True)
    except Exception:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    had_previous = output_dir.exists()
    if had_previous:
        output_dir.rename(backup)
    try:
        staging.rename(output_dir)
    except OSError:
        if had_previous:
            backup.rename(output_dir)
        shutil.rmtree(staging, ignore_errors=True)
        raise
    if backup.exists():
        shutil.rmtree(backup)
    log.debug("site written", output_dir=str(output_dir), files=len(written))
    return written
