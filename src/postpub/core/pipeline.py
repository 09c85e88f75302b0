"""Pipeline orchestration: parse -> identity -> taxonomy -> graph -> validate"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import tzinfo
from itertools import repeat
from pathlib import Path
from typing import Optional, Union

from postpub.config import Settings
from postpub.core.errors import PostError
from postpub.core.graph import build_site
from postpub.core.identity import build_post, resolve_slugs
from postpub.core.models import ParsedPost, Site, Violation
from postpub.core.parse import discover_files, parse_file
from postpub.core.taxonomy import tag_casing_findings
from postpub.core.validate import validate


logger = logging.getLogger(__name__)

ParseResult = Union[ParsedPost, PostError]


def _source_label(path: Path, root: Path) -> str:
    """Path relative to the scanned directory, POSIX style."""
    if root.is_dir():
        return path.relative_to(root).as_posix()
    return path.name


def _parse_one(path: Path, source: str, tz: Optional[tzinfo]) -> ParseResult:
    try:
        return parse_file(path, source, tz)
    except PostError as e:
        return e
    # per-file data problems are all PostError; anything else is a bug and aborts the run
    except Exception as e:
        raise RuntimeError(f"Failed to parse {source}: {e}") from e


def parse_all(files: list[Path], root: Path, tz: Optional[tzinfo] = None, workers: int = 4) -> list[tuple[str, ParseResult]]:
    """Parse files on a worker pool. Results are merged in filename order."""
    sources = [_source_label(p, root) for p in files]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(_parse_one, files, sources, repeat(tz)))
    return sorted(zip(sources, results), key=lambda r: r[0])


def run_pipeline(path: Union[str, Path], settings: Optional[Settings] = None) -> Site:
    """Build the validated Site for a file or directory of posts.

    Files that fail to parse or collide on slug are excluded and reported;
    the run itself always completes. Site.violations holds the full report.
    """
    settings = settings or Settings()
    root = Path(path)
    files = discover_files(root)
    logger.info("discovered %d post file(s) under %s", len(files), root)

    findings: list[Violation] = []
    posts, raw_tags = [], {}
    for source, result in parse_all(files, root, settings.tz(), settings.workers):
        if isinstance(result, PostError):
            logger.warning("excluding %s", result)
            findings.append(result.to_violation())
            continue
        post, warnings = build_post(result, source)
        posts.append(post)
        raw_tags[source] = result.front.tags
        findings.extend(warnings)

    unique, collisions = resolve_slugs(posts)
    findings.extend(c.to_violation() for c in collisions)
    kept = {p.source_path for p in unique}
    findings.extend(tag_casing_findings({s: t for s, t in raw_tags.items() if s in kept}))

    site, dangling = build_site(unique, settings.link_prefix, settings.parser_config)
    findings.extend(d.to_violation() for d in dangling)

    report = validate(site, findings, settings.link_prefix, settings.parser_config)
    return site.model_copy(update={"violations": tuple(report)})
