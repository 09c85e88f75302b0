"""Data models for the parse, identity, taxonomy and graph stages"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ViolationKind(str, Enum):
    """Every kind of finding a pipeline run can report"""
    malformed_front_matter = "MalformedFrontMatter"
    missing_required_field = "MissingRequiredField"
    slug_collision = "SlugCollision"
    dangling_reference = "DanglingReference"
    date_mismatch = "DateMismatch"
    duplicate_tag_casing = "DuplicateTagCasing"


class Severity(str, Enum):
    error = "error"
    warning = "warning"
    info = "info"


SEVERITY: dict[ViolationKind, Severity] = {
    ViolationKind.malformed_front_matter: Severity.error,
    ViolationKind.missing_required_field: Severity.error,
    ViolationKind.slug_collision:         Severity.error,
    ViolationKind.dangling_reference:     Severity.error,
    ViolationKind.date_mismatch:          Severity.warning,
    ViolationKind.duplicate_tag_casing:   Severity.info,
}


class Violation(BaseModel):
    """A single reported problem, tied to the file it was found in where there is one."""
    model_config = ConfigDict(frozen=True)

    kind: ViolationKind
    severity: Severity
    source: Optional[str] = None
    message: str
    field: Optional[str] = None
    slug: Optional[str] = None
    target: Optional[str] = None
    line: Optional[int] = None
    related: tuple[str, ...] = ()

    def sort_key(self) -> tuple:
        return (self.source or "", self.kind.value, self.line or 0, self.message, self.related)

    def __str__(self) -> str:
        where = self.source or "<collection>"
        if self.line:
            where = f"{where}:{self.line}"
        return f"{where}: {self.severity.value}: {self.kind.value}: {self.message}"


class FrontMatter(BaseModel):
    """Validated metadata block; tags and categories are still raw here."""
    title: str
    date: datetime
    description: Optional[str] = None
    categories: list[str] = []
    tags: list[str] = []
    slug: Optional[str] = None
    extra: dict[str, Any] = {}


@dataclass
class ParsedPost:
    """Per-file parse result; not yet assigned an identity."""
    path:        Path
    front:       FrontMatter
    body:        str        # everything after the closing delimiter, untouched
    body_line:   int        # 1-based file line where body starts


class Post(BaseModel):
    """One immutable content entry."""
    model_config = ConfigDict(frozen=True)

    slug: str
    source_path: str
    title: str
    published_at: datetime
    description: Optional[str] = None
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()              # lower-case, unique, sorted
    tag_labels: dict[str, str] = {}         # tag -> first-seen original spelling
    body: str
    body_line: int = 1
    extra: dict[str, Any] = {}

    @property
    def stem(self) -> str:
        return Path(self.source_path).stem


class Link(BaseModel):
    """A resolved cross-post reference; lookup only, cycles are legal."""
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    href: str
    line: Optional[int] = None


class FeedEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    previous: Optional[str] = None
    next: Optional[str] = None


class Site(BaseModel):
    """The normalized document set handed to a renderer."""
    model_config = ConfigDict(frozen=True)

    posts: tuple[Post, ...] = ()                        # feed order
    navigation: dict[str, FeedEntry] = {}
    tag_index: dict[str, tuple[str, ...]] = {}
    category_index: dict[str, tuple[str, ...]] = {}
    links: tuple[Link, ...] = ()
    violations: tuple[Violation, ...] = Field(default=())

    @property
    def feed(self) -> list[str]:
        return [p.slug for p in self.posts]

    def get(self, slug: str) -> Optional[Post]:
        return next((p for p in self.posts if p.slug == slug), None)
