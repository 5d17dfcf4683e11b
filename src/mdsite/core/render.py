"""Render context assembly and the template/markdown capability interfaces"""

import datetime as dt
from pathlib import Path
from typing import Any, Optional, Protocol, Union

import pydantic
from jinja2 import (
    ChoiceLoader, Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound,
    TemplateSyntaxError, UndefinedError, select_autoescape,
)
from markdown_it import MarkdownIt
from pydantic import BaseModel, ConfigDict, Field

from mdsite.core.errors import MissingRenderContext
from mdsite.core.index import SiteIndex
from mdsite.core.links import Alias, ResolvedLink
from mdsite.core.models import ContentItem, ItemKey, to_plain
from mdsite.core.store import ContentStore


DEFAULT_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"
REQUIRED_VARIABLES = ("site", "page", "nav")


class TemplateEngine(Protocol):
    """Renders a context mapping of declared shape into markup."""

    def has_template(self, name: str) -> bool: ...

    def render(self, name: str, context: dict[str, Any]) -> str: ...


class MarkdownConverter(Protocol):
    def convert(self, body: str) -> str: ...

    def excerpt(self, body: str) -> str: ...


class MarkdownItConverter:
    """markdown-it-py backed converter; preset names follow MarkdownIt."""

    def __init__(self, preset: str = "gfm-like"):
        self.md = MarkdownIt(preset, options_update={"linkify": False})

    def convert(self, body: str) -> str:
        return self.md.render(body)

    def excerpt(self, body: str) -> str:
        """HTML of the first paragraph, or '' when the body has none."""
        env: dict = {}
        tokens = self.md.parse(body, env)
        for i, tok in enumerate(tokens):
            if tok.type != "paragraph_open":
                continue
            for j in range(i + 1, len(tokens)):
                if tokens[j].type == "paragraph_close":
                    return self.md.renderer.render(tokens[i:j + 1], self.md.options, env).strip()
        return ""


class JinjaEngine:
    """Jinja2 engine: user templates first, packaged defaults second. Undefined variables raise."""

    def __init__(self, templates_dir: Optional[Path] = None):
        loaders = []
        if templates_dir is not None:
            loaders.append(FileSystemLoader(str(templates_dir)))
        loaders.append(FileSystemLoader(str(DEFAULT_TEMPLATES)))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def has_template(self, name: str) -> bool:
        try:
            self.env.get_template(name)
        except TemplateNotFound:
            return False
        except TemplateError as e:
            raise _template_error(name, e) from e
        return True

    def render(self, name: str, context: dict[str, Any]) -> str:
        try:
            return self.env.get_template(name).render(**context)
        except TemplateError as e:
            raise _template_error(name, e) from e


def _template_error(name: str, e: TemplateError) -> MissingRenderContext:
    """MissingRenderContext naming the template (and line, for syntax errors)."""
    if isinstance(e, TemplateNotFound):
        return MissingRenderContext(f"template not found: {e.name}")
    if isinstance(e, TemplateSyntaxError):
        return MissingRenderContext(f"template {e.name or name} line {e.lineno}: {e.message}")
    if isinstance(e, UndefinedError):
        return MissingRenderContext(f"template {name}: {e.message}")
    return MissingRenderContext(f"template {name}: {e}")


# --- context shape ---

class LinkContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    date: Optional[Union[dt.datetime, dt.date]] = None


class SiteContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    base_url: str = ""
    collections: dict[str, list[LinkContext]] = Field(default_factory=dict)
    tags: dict[str, list[LinkContext]] = Field(default_factory=dict)


class PageContext(BaseModel):
    identifier: str
    collection: str
    title: str
    url: str
    content: str                    # rendered HTML
    excerpt: str = ""
    date: Optional[Union[dt.datetime, dt.date]] = None
    tags: list[str] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)
    source_path: str
    extra: dict[str, Any] = Field(default_factory=dict)


class NavContext(BaseModel):
    previous: Optional[LinkContext] = None     # newer item in the collection
    next: Optional[LinkContext] = None         # older item in the collection


class RenderContext(BaseModel):
    model_config = ConfigDict(extra="forbid")

    site: SiteContext
    page: PageContext
    nav: NavContext

    def as_template_vars(self) -> dict[str, Any]:
        variables = {"site": self.site.model_dump(), "page": self.page.model_dump(), "nav": self.nav.model_dump()}
        ensure_variables(variables)
        return variables


def ensure_variables(variables: dict[str, Any], path=None) -> None:
    """MissingRenderContext unless every required top-level variable is present."""
    missing = [name for name in REQUIRED_VARIABLES if variables.get(name) is None]
    if missing:
        raise MissingRenderContext(f"missing template variables: {', '.join(missing)}", path)


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    if not base:
        return path
    return f"{base}/{path.lstrip('/')}"


def _link_for(item: ContentItem, links: dict[ItemKey, ResolvedLink]) -> LinkContext:
    link = links.get(item.key)
    if link is None:
        raise MissingRenderContext(f"no resolved link for {item.key}", item.source_path)
    return LinkContext(title=item.title, url=link.url, date=item.date)


def build_site_context(
    store: ContentStore,
    index: SiteIndex,
    links: dict[ItemKey, ResolvedLink],
    title: str,
    base_url: str = "",
    ) -> SiteContext:
    """Site-wide navigation: per-collection links (dated newest first, then undated by identifier) and tag links."""
    collections = {}
    for name in store.collections():
        dated = list(index.by_collection.get(name, ()))
        undated = sorted((i for i in store.all(name) if i.date is None), key=lambda i: i.identifier)
        collections[name] = [_link_for(i, links) for i in dated + undated]

    tags = {}
    for tag, keys in index.by_tag.items():
        items = [store.get(*key) for key in sorted(keys)]
        tags[tag] = [_link_for(i, links) for i in items if i is not None]

    return SiteContext(title=title, base_url=base_url, collections=collections, tags=tags)


def build_context(
    item: ContentItem,
    link: ResolvedLink,
    index: SiteIndex,
    links: dict[ItemKey, ResolvedLink],
    site: SiteContext,
    converter: MarkdownConverter,
    ) -> RenderContext:
    """Assemble the render context for one item, failing with MissingRenderContext on gaps."""
    if link is None or link.key != item.key:
        raise MissingRenderContext(
            f"resolved link {link.key if link else None} does not belong to {item.key}", item.source_path
        )
    newer, older = index.neighbours(item)
    meta = item.metadata
    excerpt = meta.get("excerpt")
    try:
        page = PageContext(
            identifier=item.identifier,
            collection=item.collection,
            title=meta.title,
            url=link.url,
            content=converter.convert(item.body),
            excerpt=excerpt if isinstance(excerpt, str) else converter.excerpt(item.body),
            date=meta.date,
            tags=sorted(meta.tags),
            aliases=[a.url for a in link.aliases],
            source_path=str(item.source_path),
            extra={k: to_plain(v) for k, v in meta.extra.items()},
        )
        nav = NavContext(
            previous=_link_for(newer, links) if newer else None,
            next=_link_for(older, links) if older else None,
        )
        return RenderContext(site=site, page=page, nav=nav)
    except pydantic.ValidationError as e:
        raise MissingRenderContext(f"incomplete render context: {e}", item.source_path) from e


def template_for(item: ContentItem, engine: TemplateEngine) -> str:
    """Template named by the 'layout' field, else post.html for dated items, else page.html."""
    layout = item.metadata.get("layout")
    if layout is not None:
        name = f"{layout}.html"
        if not engine.has_template(name):
            raise MissingRenderContext(f"layout '{layout}' has no template {name}", item.source_path)
        return name
    return "post.html" if item.date is not None else "page.html"


def render_item(
    item: ContentItem,
    link: ResolvedLink,
    index: SiteIndex,
    links: dict[ItemKey, ResolvedLink],
    site: SiteContext,
    engine: TemplateEngine,
    converter: MarkdownConverter,
    ) -> str:
    """Render one item through the template engine."""
    context = build_context(item, link, index, links, site, converter)
    try:
        return engine.render(template_for(item, engine), context.as_template_vars())
    except MissingRenderContext as e:
        if e.path is None:
            raise MissingRenderContext(e.cause, item.source_path) from e
        raise


def render_redirect(
    alias: Alias,
    link: ResolvedLink,
    site: SiteContext,
    engine: TemplateEngine,
    path=None,
    ) -> str:
    """Minimal document sending alias.url to the canonical URL; path names the declaring file in errors."""
    context = {
        "site": site.model_dump(),
        "redirect": {"from": alias.url, "to": join_url(site.base_url, link.url)},
    }
    try:
        return engine.render("redirect.html", context)
    except MissingRenderContext as e:
        raise MissingRenderContext(f"redirect {alias.url}: {e.cause}", e.path or path) from e
