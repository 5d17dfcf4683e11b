"""Canonical and alias output path resolution with collision detection"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from mdsite.core.errors import PathCollision, ValidationError
from mdsite.core.models import ContentItem, ItemKey
from mdsite.core.store import ContentStore


@dataclass(frozen=True)
class Alias:
    """A redirect path pointing at a canonical URL."""
    url:         str
    output_path: str


@dataclass(frozen=True)
class ResolvedLink:
    key:         ItemKey
    url:         str                # canonical path, e.g. /posts/hello/
    output_path: str                # relative file path, e.g. posts/hello/index.html
    aliases:     tuple[Alias, ...] = ()


def collection_root(collection: str, roots: Optional[dict[str, str]] = None) -> str:
    """URL root for a collection: configured value or /<collection>/, always slash-terminated."""
    root = (roots or {}).get(collection, f"/{collection}/")
    root = "/" + root.strip("/")
    return root if root == "/" else root + "/"


def default_permalink(collection: str, identifier: str, roots: Optional[dict[str, str]] = None) -> str:
    """Collection root plus identifier, as a directory URL."""
    return f"{collection_root(collection, roots)}{identifier}/"


def url_to_output_path(url: str) -> str:
    """Map a site URL to a relative output file.

    '/a/' -> 'a/index.html', '/a.html' -> 'a.html', '/a' -> 'a.html', '/' -> 'index.html'.
    """
    path = url.split("#", 1)[0].split("?", 1)[0]
    parts = [p for p in path.split("/") if p]
    if any(p in (".", "..") for p in parts):
        raise ValidationError(f"path segments '.' and '..' are not allowed: {url!r}")
    if not parts:
        return "index.html"
    rel = PurePosixPath(*parts)
    if path.endswith("/"):
        return str(rel / "index.html")
    if rel.suffix:
        return str(rel)
    return str(rel.with_name(rel.name + ".html"))


def canonical_url(item: ContentItem, roots: Optional[dict[str, str]] = None) -> str:
    return item.metadata.permalink or default_permalink(item.collection, item.identifier, roots)


def _output_path(url: str, item: ContentItem) -> str:
    try:
        return url_to_output_path(url)
    except ValidationError as e:
        raise ValidationError(e.cause, item.source_path) from e


def resolve_links(store: ContentStore, roots: Optional[dict[str, str]] = None) -> dict[ItemKey, ResolvedLink]:
    """Resolve every stored item to a unique output path plus its redirect aliases.

    Raises PathCollision when two documents (canonical or alias) land on one file,
    or when one document's file would have to be a directory for another.
    Items are visited in (collection, identifier) order so errors are reproducible.
    """
    items = sorted(store, key=lambda i: i.key)
    claimed: dict[str, tuple[ContentItem, str]] = {}
    canonical: dict[ItemKey, tuple[str, str]] = {}

    for item in items:
        url = canonical_url(item, roots)
        out = _output_path(url, item)
        if out in claimed:
            other, _ = claimed[out]
            raise PathCollision(
                f"canonical path {url} ({out}) is also claimed by {other.source_path}",
                item.source_path,
            )
        claimed[out] = (item, "canonical")
        canonical[item.key] = (url, out)

    links = {}
    for item in items:
        url, out = canonical[item.key]
        aliases = []
        for alias_url in item.metadata.redirect_from:
            alias_out = _output_path(alias_url, item)
            if alias_out in claimed:
                other, kind = claimed[alias_out]
                raise PathCollision(
                    f"redirect {alias_url} ({alias_out}) collides with the {kind} path of {other.source_path}",
                    item.source_path,
                )
            claimed[alias_out] = (item, "redirect")
            aliases.append(Alias(url=alias_url, output_path=alias_out))
        links[item.key] = ResolvedLink(key=item.key, url=url, output_path=out, aliases=tuple(aliases))

    # a file path may not also be needed as a directory by another output
    for out, (item, kind) in claimed.items():
        for parent in PurePosixPath(out).parents:
            if str(parent) in claimed:
                other, other_kind = claimed[str(parent)]
                raise PathCollision(
                    f"{kind} path {out} needs {parent} as a directory, "
                    f"but it is the {other_kind} path of {other.source_path}",
                    item.source_path,
                )
    return links
