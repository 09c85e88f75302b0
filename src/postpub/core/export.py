"""Export: normalized post Markdown, sidecar JSON, and the site manifest"""

import json
import logging
from pathlib import Path

import yaml

from postpub.core.models import Post, Site
from postpub.core.utils.hashing import sha256


logger = logging.getLogger(__name__)

POSTS_DIR = "posts"
MANIFEST = "site.json"


def _dumps(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def build_markdown(post: Post) -> str:
    """Return the untouched body with a normalized YAML front matter block prepended."""
    fm = {
        "title": post.title,
        "date": post.published_at.isoformat(),
    }
    if post.description:
        fm["description"] = post.description
    fm["categories"] = list(post.categories)
    fm["tags"] = list(post.tags)
    fm["slug"] = post.slug
    fm.update(post.extra)
    header = yaml.safe_dump(fm, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n{post.body}"


def build_sidecar(post: Post, site: Site) -> dict:
    """Metadata, navigation and outgoing/incoming links for one post."""
    nav = site.navigation[post.slug]
    data = post.model_dump(mode="json", include={"tag_labels", "extra"})
    return {
        "slug": post.slug,
        "path": post.source_path,
        "title": post.title,
        "date": post.published_at.isoformat(),
        "description": post.description,
        "categories": list(post.categories),
        "tags": list(post.tags),
        "tag_labels": data["tag_labels"],
        "previous": nav.previous,
        "next": nav.next,
        "links": [
            {"target": link.target, "href": link.href, "line": link.line}
            for link in site.links if link.source == post.slug
        ],
        "backlinks": sorted({link.source for link in site.links if link.target == post.slug}),
        "hash": sha256(post.body),
        "extra": data["extra"],
    }


def build_manifest(site: Site) -> dict:
    """Feed, taxonomy indices and the violation report for the whole collection."""
    return {
        "feed": [
            {"slug": p.slug, "title": p.title, "date": p.published_at.isoformat(), "path": p.source_path}
            for p in site.posts
        ],
        "tags": {k: list(v) for k, v in site.tag_index.items()},
        "categories": {k: list(v) for k, v in site.category_index.items()},
        "violations": [v.model_dump(mode="json", exclude_none=True) for v in site.violations],
    }


def write_site(site: Site, output_dir: Path) -> list[tuple[str, Path]]:
    """Write <slug>.md + <slug>.json per post and site.json.

    Output is a pure function of the Site, so unchanged input rewrites identical bytes.
    Returns (slug, md_path) pairs in feed order.
    """
    posts_dir = output_dir / POSTS_DIR
    posts_dir.mkdir(parents=True, exist_ok=True)

    results = []
    for post in site.posts:
        md_path = posts_dir / f"{post.slug}.md"
        md_path.write_text(build_markdown(post), encoding="utf-8")
        (posts_dir / f"{post.slug}.json").write_text(_dumps(build_sidecar(post, site)), encoding="utf-8")
        results.append((post.slug, md_path))

    (output_dir / MANIFEST).write_text(_dumps(build_manifest(site)), encoding="utf-8")
    logger.info("exported %d post(s) to %s", len(results), output_dir)
    return results
