"""Slug generation for post identifiers"""

import re
import unicodedata


_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+')


def strip_diacritics(text: str) -> str:
    """Decompose accented characters and drop the combining marks ('Café' -> 'Cafe')."""
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = strip_diacritics(text).lower()
    return _NON_ALNUM_RE.sub('-', text).strip('-')
