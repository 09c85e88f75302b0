"""Exception taxonomy for post ingestion; every error converts to a Violation"""

from typing import Optional, Sequence

from postpub.core.models import SEVERITY, Violation, ViolationKind


class PostError(Exception):
    """Base class for failures tied to one or more content files."""
    kind: ViolationKind

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.source = source
        self.line = line

    def __str__(self) -> str:
        return f"{self.source}: {self.message}" if self.source else self.message

    def _fields(self) -> dict:
        return {}

    def to_violation(self) -> Violation:
        return Violation(
            kind=self.kind,
            severity=SEVERITY[self.kind],
            source=self.source,
            message=self.message,
            line=self.line,
            **self._fields(),
        )


class MalformedFrontMatter(PostError):
    """No delimited metadata block, or the block is not a well-formed mapping."""
    kind = ViolationKind.malformed_front_matter

    def __init__(self, message: str, source: Optional[str] = None, field: Optional[str] = None,
                 line: Optional[int] = None):
        super().__init__(message, source, line)
        self.field = field

    def _fields(self) -> dict:
        return {"field": self.field}


class MissingRequiredField(PostError):
    kind = ViolationKind.missing_required_field

    def __init__(self, field: str, source: Optional[str] = None):
        super().__init__(f"missing required field '{field}'", source)
        self.field = field

    def _fields(self) -> dict:
        return {"field": self.field}


class SlugCollision(PostError):
    """Two or more posts resolved to the same slug; all of them are excluded."""
    kind = ViolationKind.slug_collision

    def __init__(self, slug: str, sources: Sequence[str]):
        self.slug = slug
        self.sources = tuple(sorted(sources))
        super().__init__(f"slug '{slug}' is claimed by {', '.join(self.sources)}", self.sources[0])

    def _fields(self) -> dict:
        return {"slug": self.slug, "related": self.sources}


class DanglingReference(PostError):
    """A body reference names a post that is not in the collection."""
    kind = ViolationKind.dangling_reference

    def __init__(self, slug: str, target: str, source: Optional[str] = None, line: Optional[int] = None):
        super().__init__(f"reference to unknown post '{target}'", source, line)
        self.slug = slug
        self.target = target

    def _fields(self) -> dict:
        return {"slug": self.slug, "target": self.target}
