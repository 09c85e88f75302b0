"""Validation pass: re-check the assembled collection and produce the full violation report"""

import logging
from collections import Counter
from typing import Iterable

from postpub.core.errors import MalformedFrontMatter, MissingRequiredField, SlugCollision
from postpub.core.graph import build_navigation, order_feed, resolve_links
from postpub.core.models import Severity, Site, Violation
from postpub.core.taxonomy import build_category_index, build_tag_index


logger = logging.getLogger(__name__)


def _check_derived(site: Site, link_prefix: str, preset: str) -> list[Violation]:
    """Re-resolve references; raise ValueError if feed, navigation, indices or links drifted."""
    feed = order_feed(site.posts)
    if [p.slug for p in feed] != site.feed:
        raise ValueError("feed is not in publish order")
    if build_navigation(feed) != site.navigation:
        raise ValueError("navigation does not match the feed")
    if build_tag_index(feed) != site.tag_index:
        raise ValueError("tag index is out of date")
    if build_category_index(feed) != site.category_index:
        raise ValueError("category index is out of date")

    links, dangling = resolve_links(feed, link_prefix, preset)
    if tuple(links) != site.links:
        raise ValueError("links are out of date")
    return [d.to_violation() for d in dangling]


def _check_posts(site: Site) -> list[Violation]:
    found = []
    counts = Counter(p.slug for p in site.posts)
    for slug, n in sorted(counts.items()):
        if n > 1:
            sources = [p.source_path for p in site.posts if p.slug == slug]
            found.append(SlugCollision(slug, sources).to_violation())

    for post in site.posts:
        if not post.title.strip():
            found.append(MissingRequiredField('title', post.source_path).to_violation())
        if post.published_at.tzinfo is None:
            found.append(MalformedFrontMatter(
                "date has no timezone offset", post.source_path, field='date').to_violation())
        if list(post.tags) != sorted({t.strip().lower() for t in post.tags if t.strip()}):
            raise ValueError(f"{post.source_path}: tags are not normalized")
    return found


def validate(
    site: Site,
    findings: Iterable[Violation] = (),
    link_prefix: str = '/posts/',
    preset: str = 'gfm-like',
    ) -> list[Violation]:
    """Merge stage findings with a fresh check of the whole collection.

    Never stops at the first problem. A re-check only adds what the findings
    lack: equal violations count as separate occurrences (two identical links
    on one line), and each is kept as many times as the findings or a re-check
    report it, whichever is more. The report is sorted, so validating
    unchanged input twice, or its own report again, yields the same list.
    """
    merged = Counter(findings)
    merged |= Counter(_check_posts(site))
    merged |= Counter(_check_derived(site, link_prefix, preset))
    report = sorted(merged.elements(), key=Violation.sort_key)
    logger.info("validation: %d error(s), %d warning(s), %d info",
                *(sum(v.severity == s for v in report) for s in Severity))
    return report


def has_errors(violations: Iterable[Violation], strict: bool = False) -> bool:
    """True when an error (or, if strict, a warning) was reported."""
    failing = {Severity.error, Severity.warning} if strict else {Severity.error}
    return any(v.severity in failing for v in violations)
