"""Post identity: slug derivation, filename dates, and collision detection"""

import logging
import re
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Optional

from postpub.core.errors import SlugCollision
from postpub.core.models import SEVERITY, ParsedPost, Post, Violation, ViolationKind
from postpub.core.taxonomy import normalize_categories, normalize_tags
from postpub.core.utils.slug import slugify


logger = logging.getLogger(__name__)

FILENAME_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:-(.*))?$')


def _split_stem(path: Path) -> tuple[Optional[date], str]:
    """'2025-11-23-custom-back-button' -> (date(2025, 11, 23), 'custom-back-button')."""
    m = FILENAME_RE.match(path.stem)
    if not m:
        return None, path.stem
    year, month, day, fragment = m.groups()
    try:
        return date(int(year), int(month), int(day)), fragment or ''
    except ValueError:
        return None, path.stem


def filename_date(path: Path) -> Optional[date]:
    """Calendar date embedded in a Jekyll-style filename, or None."""
    return _split_stem(path)[0]


def derive_slug(path: Path, title: str, explicit: Optional[str] = None) -> str:
    """Slug from an explicit front matter slug, else the title, else the filename."""
    for candidate in (explicit, title, _split_stem(path)[1], path.stem):
        if candidate and (slug := slugify(candidate)):
            return slug
    return 'post'


def build_post(parsed: ParsedPost, source: Optional[str] = None) -> tuple[Post, list[Violation]]:
    """Create the immutable Post for a parsed file plus any DateMismatch warning."""
    source = source or str(parsed.path)
    front = parsed.front
    tags, labels = normalize_tags(front.tags)

    post = Post(
        slug=derive_slug(parsed.path, front.title, front.slug),
        source_path=source,
        title=front.title,
        published_at=front.date,
        description=front.description,
        categories=normalize_categories(front.categories),
        tags=tags,
        tag_labels=labels,
        body=parsed.body,
        body_line=parsed.body_line,
        extra=front.extra,
    )

    findings = []
    file_day = filename_date(parsed.path)
    if file_day is not None and file_day != front.date.date():
        logger.warning("%s: filename date %s differs from front matter date %s",
                       source, file_day.isoformat(), front.date.date().isoformat())
        findings.append(Violation(
            kind=ViolationKind.date_mismatch,
            severity=SEVERITY[ViolationKind.date_mismatch],
            source=source,
            field='date',
            slug=post.slug,
            message=(f"filename date {file_day.isoformat()} differs from front matter date "
                     f"{front.date.date().isoformat()}; using front matter"),
        ))
    return post, findings


def resolve_slugs(posts: list[Post]) -> tuple[list[Post], list[SlugCollision]]:
    """Keep posts with a unique slug; every post sharing a slug is excluded and reported once."""
    by_slug: dict[str, list[Post]] = defaultdict(list)
    for post in posts:
        by_slug[post.slug].append(post)

    unique, collisions = [], []
    for slug in sorted(by_slug):
        claimants = by_slug[slug]
        if len(claimants) == 1:
            unique.append(claimants[0])
            continue
        err = SlugCollision(slug, [p.source_path for p in claimants])
        logger.warning("slug collision: %s", err.message)
        collisions.append(err)
    return unique, collisions
