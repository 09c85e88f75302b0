"""Document graph: feed order, sequential navigation, and cross-post references"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

from markdown_it import MarkdownIt

from postpub.core.errors import DanglingReference
from postpub.core.models import FeedEntry, Link, Post, Site
from postpub.core.taxonomy import build_category_index, build_tag_index


logger = logging.getLogger(__name__)

POST_URL_RE = re.compile(r'\{%-?\s*post_url\s+([^\s%]+)\s*-?%\}')
BREAKS = {'softbreak', 'hardbreak'}


@dataclass(frozen=True)
class Reference:
    """One occurrence of a cross-post reference in a body."""
    name: str               # slug, or file stem for post_url tags
    href: str               # as written
    line: int               # 1-based file line
    post_url: bool = False


@lru_cache(maxsize=None)
def _parser(preset: str) -> MarkdownIt:
    return MarkdownIt(preset, options_update={"linkify": False})


def order_feed(posts: Iterable[Post]) -> list[Post]:
    """Newest first; equal timestamps fall back to slug ascending."""
    by_slug = sorted(posts, key=lambda p: p.slug)
    return sorted(by_slug, key=lambda p: p.published_at, reverse=True)


def build_navigation(feed: list[Post]) -> dict[str, FeedEntry]:
    """previous/next are the adjacent feed entries; None at either end."""
    nav = {}
    for i, post in enumerate(feed):
        nav[post.slug] = FeedEntry(
            slug=post.slug,
            previous=feed[i - 1].slug if i > 0 else None,
            next=feed[i + 1].slug if i + 1 < len(feed) else None,
        )
    return nav


def _link_target(href: str, link_prefix: str) -> Optional[str]:
    """'/posts/some-slug/#intro' -> 'some-slug'; None for other URLs."""
    if not link_prefix or not href.startswith(link_prefix):
        return None
    path = re.split(r'[?#]', href[len(link_prefix):], maxsplit=1)[0]
    name = path.strip('/').split('/')[0]
    if name.endswith('.html'):
        name = name[:-len('.html')]
    return name or None


def find_references(body: str, link_prefix: str, body_line: int = 1, preset: str = 'gfm-like') -> list[Reference]:
    """Collect prefixed Markdown links and post_url tags from a body; code is skipped."""
    refs: list[Reference] = []

    def _scan(text: str, line: int) -> None:
        for m in POST_URL_RE.finditer(text):
            name = m.group(1).rsplit('/', 1)[-1]
            refs.append(Reference(name=name, href=m.group(0), line=line + text.count('\n', 0, m.start()),
                                  post_url=True))

    for tok in _parser(preset).parse(body):
        if tok.type != 'inline' or not tok.children:
            continue
        line = body_line + (tok.map[0] if tok.map else 0)
        buffer, buffer_line = [], line
        for child in tok.children:
            if child.type == 'text':
                if not buffer:
                    buffer_line = line
                buffer.append(child.content)
                continue
            _scan(''.join(buffer), buffer_line)
            buffer = []
            if child.type in BREAKS:
                line += 1
            elif child.type == 'link_open':
                href = child.attrGet('href') or ''
                name = _link_target(href, link_prefix)
                if name:
                    refs.append(Reference(name=name, href=href, line=line))
        _scan(''.join(buffer), buffer_line)
    return refs


def resolve_links(
    feed: list[Post],
    link_prefix: str,
    preset: str = 'gfm-like',
    ) -> tuple[list[Link], list[DanglingReference]]:
    """Resolve every reference independently; unknown targets are reported per occurrence."""
    slugs = {p.slug for p in feed}
    stems = {p.stem: p.slug for p in feed}
    links, dangling = [], []

    for post in sorted(feed, key=lambda p: p.source_path):
        for ref in find_references(post.body, link_prefix, post.body_line, preset):
            target = ref.name if ref.name in slugs else (stems.get(ref.name) if ref.post_url else None)
            if target is None:
                logger.warning("%s:%d: dangling reference to '%s'", post.source_path, ref.line, ref.name)
                dangling.append(DanglingReference(post.slug, ref.name, post.source_path, ref.line))
            else:
                links.append(Link(source=post.slug, target=target, href=ref.href, line=ref.line))
    return links, dangling


def build_site(
    posts: Iterable[Post],
    link_prefix: str = '/posts/',
    preset: str = 'gfm-like',
    ) -> tuple[Site, list[DanglingReference]]:
    """Assemble feed, navigation, taxonomy indices and links from a slug-unique collection."""
    feed = order_feed(posts)
    links, dangling = resolve_links(feed, link_prefix, preset)
    site = Site(
        posts=tuple(feed),
        navigation=build_navigation(feed),
        tag_index=build_tag_index(feed),
        category_index=build_category_index(feed),
        links=tuple(links),
    )
    logger.info("built site: %d posts, %d tags, %d categories, %d links",
                len(feed), len(site.tag_index), len(site.category_index), len(links))
    return site, dangling
