"""File discovery and front matter extraction"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Any, Optional

import yaml

from postpub.core.errors import MalformedFrontMatter, MissingRequiredField
from postpub.core.models import FrontMatter, ParsedPost


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown', '.mdx'}
OPEN_DELIMITER = '---'
CLOSE_DELIMITERS = {'---', '...'}

REQUIRED_FIELDS = ('title', 'date')
KNOWN_FIELDS = {'title', 'date', 'description', 'categories', 'category', 'tags', 'tag', 'slug'}

DATE_RE = re.compile(
    r'^(\d{4})-(\d{2})-(\d{2})'
    r'(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?)?'
    r'\s*(Z|[+-]\d{2}(?::?\d{2})?)?$'
)
KEY_RE = re.compile(r'^([\w-]+)\s*:')


class _TimestampError(yaml.constructor.ConstructorError):
    """A YAML timestamp that matches the syntax but is not a real date (2025-02-30, +25:00)."""


def _construct_timestamp(loader, node):
    try:
        return yaml.constructor.SafeConstructor.construct_yaml_timestamp(loader, node)
    except ValueError as e:
        raise _TimestampError(None, None, f"invalid timestamp '{node.value}': {e}", node.start_mark) from e


class _FrontMatterLoader(yaml.SafeLoader):
    pass


_FrontMatterLoader.add_constructor('tag:yaml.org,2002:timestamp', _construct_timestamp)


def discover_files(path: Path) -> list[Path]:
    """Return sorted post files under path, or [path] if a single file."""
    if not path.exists():
        raise FileNotFoundError(f"No such file or directory: {path}")
    if path.is_file():
        return [path] if path.suffix.lower() in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in MD_EXTENSIONS)


def split_front_matter(text: str, source: Optional[str] = None) -> tuple[dict[str, Any], str, int]:
    """Return (metadata, body, body_line) for text opening with a `---` delimited YAML block.

    body is everything after the closing delimiter line, untouched.
    body_line is the 1-based line of the file where body starts.
    """
    lines = text.lstrip('\ufeff').splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPEN_DELIMITER:
        raise MalformedFrontMatter("file does not start with a '---' front matter block", source)

    end_idx = next((i for i in range(1, len(lines)) if lines[i].rstrip() in CLOSE_DELIMITERS), None)
    if end_idx is None:
        raise MalformedFrontMatter("front matter block is never closed", source)

    try:
        meta = yaml.load(''.join(lines[1:end_idx]), Loader=_FrontMatterLoader) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, 'problem_mark', None)
        line = mark.line + 2 if mark is not None else None
        problem = getattr(e, 'problem', None) or str(e)
        field = None
        if isinstance(e, _TimestampError) and line is not None:
            key = KEY_RE.match(lines[line - 1])
            field = key.group(1) if key else None
        raise MalformedFrontMatter(f"invalid YAML front matter: {problem}", source, field=field, line=line) from e
    if not isinstance(meta, dict):
        raise MalformedFrontMatter(
            f"front matter must be a mapping, got {type(meta).__name__}", source)

    return {str(k): v for k, v in meta.items()}, ''.join(lines[end_idx + 1:]), end_idx + 2


def parse_date(value: Any, source: Optional[str] = None, tz: Optional[tzinfo] = None) -> datetime:
    """Coerce a front matter date to an aware datetime.

    Offset-less values take tz; without tz they are rejected as ambiguous.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        parsed = _parse_date_text(value.strip(), source)
    else:
        raise MalformedFrontMatter(f"date must be a timestamp, got {type(value).__name__}", source, field='date')

    if parsed.tzinfo is None:
        if tz is None:
            raise MalformedFrontMatter(
                f"date '{value}' has no timezone offset", source, field='date')
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _parse_date_text(text: str, source: Optional[str]) -> datetime:
    m = DATE_RE.match(text)
    if not m:
        raise MalformedFrontMatter(f"cannot parse date '{text}'", source, field='date')
    year, month, day, hour, minute, second, fraction, offset = m.groups()
    try:
        tz = _offset(offset) if offset else None
        return datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0),
            int((fraction or '0').ljust(6, '0')),
            tzinfo=tz,
        )
    except ValueError as e:
        raise MalformedFrontMatter(f"cannot parse date '{text}': {e}", source, field='date') from e


def _offset(text: str) -> timezone:
    """'Z', '+08', '+0800' or '+08:00' -> timezone."""
    if text == 'Z':
        return timezone.utc
    sign = -1 if text[0] == '-' else 1
    digits = text[1:].replace(':', '')
    hours, minutes = int(digits[:2]), int(digits[2:] or 0)
    if minutes >= 60:
        raise ValueError(f"invalid offset {text}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _labels(meta: dict[str, Any], keys: tuple[str, ...], source: Optional[str]) -> list[str]:
    """Collect a label list from a sequence or a comma/space separated string."""
    labels: list[str] = []
    for key in keys:
        value = meta.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            labels.extend(value.split(',') if ',' in value else value.split())
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, (dict, list)):
                    raise MalformedFrontMatter(f"{key} entries must be text", source, field=key)
                if item is not None:
                    labels.append(str(item))
        elif isinstance(value, dict):
            raise MalformedFrontMatter(f"{key} must be a list of text", source, field=key)
        else:
            labels.append(str(value))
    return labels


def _text(meta: dict[str, Any], key: str, source: Optional[str]) -> Optional[str]:
    value = meta.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise MalformedFrontMatter(f"{key} must be text", source, field=key)
    return str(value).strip()


def read_front_matter(meta: dict[str, Any], source: Optional[str] = None, tz: Optional[tzinfo] = None) -> FrontMatter:
    """Validate a raw metadata mapping; unrecognized keys land in extra."""
    for name in REQUIRED_FIELDS:
        value = meta.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingRequiredField(name, source)

    return FrontMatter(
        title=_text(meta, 'title', source),
        date=parse_date(meta['date'], source, tz),
        description=_text(meta, 'description', source) or None,
        categories=_labels(meta, ('categories', 'category'), source),
        tags=_labels(meta, ('tags', 'tag'), source),
        slug=_text(meta, 'slug', source) or None,
        extra={k: v for k, v in meta.items() if k not in KNOWN_FIELDS},
    )


def parse_text(text: str, path: Path, source: Optional[str] = None, tz: Optional[tzinfo] = None) -> ParsedPost:
    """Parse raw file content into a ParsedPost. Pure function of its input."""
    source = source or str(path)
    meta, body, body_line = split_front_matter(text, source)
    return ParsedPost(path=path, front=read_front_matter(meta, source, tz), body=body, body_line=body_line)


def parse_file(path: Path, source: Optional[str] = None, tz: Optional[tzinfo] = None) -> ParsedPost:
    """Read and parse a single post file."""
    source = source or str(path)
    try:
        raw = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedFrontMatter(f"cannot read file: {e}", source) from e
    logger.debug("parsing %s", source)
    return parse_text(raw, path, source, tz)
