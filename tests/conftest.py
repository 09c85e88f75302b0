"""Root test configuration: post-writing helper and cleanup of runtime artifacts"""

import os
import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = ["dist"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove export directories created during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Keep POSTPUB_* variables from the developer shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("POSTPUB_"):
            monkeypatch.delenv(name)


@pytest.fixture(name="posts_dir")
def posts_dir_fixture(tmp_path):
    d = tmp_path / "_posts"
    d.mkdir()
    return d


@pytest.fixture(name="write_post")
def write_post_fixture(posts_dir):
    """Write a post file; None for title/date omits the field, extra kwargs become YAML lines."""
    def _write(name, title="Custom Back Button", date="2025-11-23 10:00:00 +08:00", body="\nBody.\n", **fields):
        lines = ["---"]
        if title is not None:
            lines.append(f"title: {title}")
        if date is not None:
            lines.append(f"date: {date}")
        lines.extend(f"{k}: {v}" for k, v in fields.items())
        lines.append("---")
        path = posts_dir / name
        path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
        return path
    return _write
