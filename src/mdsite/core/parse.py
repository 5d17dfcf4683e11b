"""File discovery, collection assignment, and front matter validation into ContentItems"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from mdsite.core.errors import ValidationError
from mdsite.core.frontmatter import dump_front_matter, load_front_matter, split_front_matter
from mdsite.core.models import ContentItem, FieldValue, Metadata, to_field, to_plain
from mdsite.core.utils.slug import slugify


MD_EXTENSIONS = {'.md', '.markdown'}
TYPED_KEYS = ('title', 'date', 'tags', 'permalink', 'redirect_from', 'published')


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single file. Dot-directories are skipped."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(
        p for p in path.rglob('*')
        if p.is_file() and p.suffix in MD_EXTENSIONS
        and not any(part.startswith('.') for part in p.relative_to(path).parts)
    )


def collection_for(path: Path, root: Path, default: str = 'pages') -> str:
    """Return the first directory below root with a leading '_' removed, or default for root-level files."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        return default
    if len(parts) < 2:
        return default
    return parts[0].lstrip('_') or default


def _title(fm: dict[str, Any], path) -> str:
    title = fm.get('title')
    if title is None:
        raise ValidationError("missing required field 'title'", path)
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("'title' must be a non-empty string", path)
    return title


def _date(fm: dict[str, Any], path) -> Optional[date]:
    value = fm.get('date')
    if value is None or isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        parse = datetime.fromisoformat if any(c in text for c in "T :") else date.fromisoformat
        try:
            return parse(text)
        except ValueError:
            pass
    raise ValidationError(f"'date' is not a valid calendar date: {value!r}", path)


def _tags(fm: dict[str, Any], path) -> frozenset[str]:
    value = fm.get('tags')
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset([value])
    if isinstance(value, list) and all(isinstance(t, (str, int, float)) and not isinstance(t, bool) for t in value):
        return frozenset(str(t) for t in value)
    raise ValidationError("'tags' must be a string or a list of strings", path)


def _absolute_path(value: Any, field: str, path) -> str:
    if not isinstance(value, str) or not value.startswith('/'):
        raise ValidationError(f"'{field}' must be an absolute path starting with '/': {value!r}", path)
    return value


def _redirects(fm: dict[str, Any], path) -> tuple[str, ...]:
    value = fm.get('redirect_from')
    if value is None:
        return ()
    values = [value] if isinstance(value, str) else value
    if not isinstance(values, list):
        raise ValidationError("'redirect_from' must be a path or a list of paths", path)
    # dict.fromkeys: dedupe, keep declaration order
    return tuple(dict.fromkeys(_absolute_path(v, 'redirect_from', path) for v in values))


def _published(fm: dict[str, Any], path) -> bool:
    value = fm.get('published', True)
    if not isinstance(value, bool):
        raise ValidationError("'published' must be true or false", path)
    return value


def _extra(fm: dict[str, Any], path) -> dict[str, FieldValue]:
    extra = {}
    for key, raw in fm.items():
        if key in TYPED_KEYS:
            continue
        try:
            value = to_field(raw)
        except TypeError as e:
            raise ValidationError(f"field '{key}': {e}", path) from e
        if value is not None:
            extra[str(key)] = value
    return extra


def build_metadata(fm: dict[str, Any], path=None) -> Metadata:
    """Validate a loaded front matter mapping into Metadata."""
    permalink = fm.get('permalink')
    return Metadata(
        title=_title(fm, path),
        date=_date(fm, path),
        tags=_tags(fm, path),
        permalink=_absolute_path(permalink, 'permalink', path) if permalink is not None else None,
        redirect_from=_redirects(fm, path),
        published=_published(fm, path),
        extra=_extra(fm, path),
    )


def parse_text(text: str, path: Path, collection: str) -> ContentItem:
    """Parse raw file text into a ContentItem; identifier is the front matter slug or the file stem."""
    block, body = split_front_matter(text, path)
    fm = load_front_matter(block, path)
    metadata = build_metadata(fm, path)

    slug = fm.get('slug')
    if slug is not None and not isinstance(slug, (str, int)):
        raise ValidationError("'slug' must be a string", path)
    identifier = slugify(str(slug) if slug is not None else Path(path).stem)
    if not identifier:
        raise ValidationError("identifier is empty after slugifying the slug or file name", path)

    return ContentItem(
        identifier=identifier,
        collection=collection,
        source_path=Path(path),
        metadata=metadata,
        body=body,
    )


def parse_file(path: Path, root: Path, default_collection: str = 'pages') -> ContentItem:
    """Read a UTF-8 content file below root and parse it."""
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise ValidationError(f"file is not valid UTF-8: {e}", path) from e
    return parse_text(text, path, collection_for(path, root, default_collection))


def front_matter_of(item: ContentItem) -> dict[str, Any]:
    """Plain front matter mapping for an item, typed fields first."""
    meta = item.metadata
    fm: dict[str, Any] = {'title': meta.title}
    if meta.date is not None:
        fm['date'] = meta.date
    if meta.tags:
        fm['tags'] = sorted(meta.tags)
    if meta.permalink is not None:
        fm['permalink'] = meta.permalink
    if meta.redirect_from:
        fm['redirect_from'] = list(meta.redirect_from)
    if not meta.published:
        fm['published'] = False
    fm.update({k: to_plain(v) for k, v in meta.extra.items()})
    return fm


def dump_item(item: ContentItem) -> str:
    """Re-serialize an item to file text; parse_text(dump_item(item)) == item."""
    return dump_front_matter(front_matter_of(item), item.body)
