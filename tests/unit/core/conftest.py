"""Shared fixtures for core unit tests"""

from datetime import datetime

import pytest

from postpub.core.models import Post


@pytest.fixture(name="make_post")
def make_post_fixture():
    """Build a Post directly, bypassing parsing."""
    def _make(slug, date="2025-11-23T10:00:00+08:00", tags=(), categories=(), body="Body.\n",
              title=None, source=None, body_line=1):
        return Post(
            slug=slug,
            source_path=source or f"{slug}.md",
            title=title or slug.replace("-", " ").title(),
            published_at=datetime.fromisoformat(date),
            tags=tuple(sorted(tags)),
            categories=tuple(categories),
            body=body,
            body_line=body_line,
        )
    return _make
