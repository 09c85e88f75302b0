"""Tag and category normalization, and the derived taxonomy indices"""

import logging
from collections import defaultdict
from typing import Iterable, Mapping

from postpub.core.models import SEVERITY, Post, Violation, ViolationKind


logger = logging.getLogger(__name__)


def normalize_tags(raw: Iterable[str]) -> tuple[tuple[str, ...], dict[str, str]]:
    """Trim, lower-case, drop empties, dedupe.

    Returns (sorted tags, tag -> first-seen original spelling).
    """
    labels: dict[str, str] = {}
    for label in raw:
        label = label.strip()
        if label:
            labels.setdefault(label.lower(), label)
    return tuple(sorted(labels)), labels


def normalize_categories(raw: Iterable[str]) -> tuple[str, ...]:
    """Trim, drop empties and exact duplicates; case and order are kept."""
    return tuple(dict.fromkeys(c.strip() for c in raw if c.strip()))


def _build_index(posts: Iterable[Post], keys) -> dict[str, tuple[str, ...]]:
    index: dict[str, list[str]] = defaultdict(list)
    for post in posts:
        for key in keys(post):
            index[key].append(post.slug)
    return {k: tuple(index[k]) for k in sorted(index)}


def build_tag_index(feed: Iterable[Post]) -> dict[str, tuple[str, ...]]:
    """Tag -> slugs, recomputed wholesale. Pass posts in feed order."""
    return _build_index(feed, lambda p: p.tags)


def build_category_index(feed: Iterable[Post]) -> dict[str, tuple[str, ...]]:
    """Category -> slugs, recomputed wholesale. Pass posts in feed order."""
    return _build_index(feed, lambda p: p.categories)


def tag_casing_findings(raw_tags: Mapping[str, Iterable[str]]) -> list[Violation]:
    """One DuplicateTagCasing per tag spelled more than one way across the collection.

    raw_tags maps source path -> tags exactly as written in front matter.
    """
    spellings: dict[str, set[str]] = defaultdict(set)
    sources: dict[str, set[str]] = defaultdict(set)
    for source, tags in raw_tags.items():
        for label in tags:
            label = label.strip()
            if label:
                spellings[label.lower()].add(label)
                sources[label.lower()].add(source)

    findings = []
    for tag in sorted(spellings):
        if len(spellings[tag]) < 2:
            continue
        variants = ', '.join(repr(s) for s in sorted(spellings[tag]))
        logger.info("tag '%s' written as %s; merged", tag, variants)
        findings.append(Violation(
            kind=ViolationKind.duplicate_tag_casing,
            severity=SEVERITY[ViolationKind.duplicate_tag_casing],
            source=min(sources[tag]),
            message=f"tag '{tag}' is written as {variants}; indexed as '{tag}'",
            target=tag,
            related=tuple(sorted(sources[tag])),
        ))
    return findings
