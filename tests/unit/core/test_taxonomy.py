"""Unit tests for core/taxonomy.py"""

from postpub.core.models import Severity, ViolationKind
from postpub.core.taxonomy import (
    build_category_index,
    build_tag_index,
    normalize_categories,
    normalize_tags,
    tag_casing_findings,
)


def test_normalize_tags_lowercases_and_dedupes():
    tags, labels = normalize_tags([" Swift", "swift", "SwiftUI", "", "   "])
    assert tags == ("swift", "swiftui")
    assert labels == {"swift": "Swift", "swiftui": "SwiftUI"}


def test_normalize_tags_empty():
    assert normalize_tags([]) == ((), {})


def test_normalize_categories_keeps_case_and_order():
    """Only exact duplicates are dropped; 'iOS' and 'ios' are distinct categories."""
    assert normalize_categories([" iOS ", "iOS", "ios", "", "Design"]) == ("iOS", "ios", "Design")


def test_build_tag_index_follows_feed_order(make_post):
    newer = make_post("newer", date="2025-11-24T10:00:00+00:00", tags=["swift"])
    older = make_post("older", date="2025-11-20T10:00:00+00:00", tags=["swift", "design"])
    index = build_tag_index([newer, older])
    assert index == {"design": ("older",), "swift": ("newer", "older")}
    assert list(index) == ["design", "swift"]


def test_build_category_index_is_case_sensitive(make_post):
    a = make_post("a", categories=["iOS"])
    b = make_post("b", categories=["ios", "iOS"])
    assert build_category_index([a, b]) == {"iOS": ("a", "b"), "ios": ("b",)}


def test_build_index_empty_collection():
    assert build_tag_index([]) == {}


def test_tag_casing_findings_across_posts():
    findings = tag_casing_findings({"b.md": ["swift"], "a.md": ["Swift", "design"]})
    assert len(findings) == 1
    f = findings[0]
    assert f.kind == ViolationKind.duplicate_tag_casing
    assert f.severity == Severity.info
    assert f.target == "swift"
    assert f.source == "a.md"
    assert f.related == ("a.md", "b.md")


def test_tag_casing_findings_within_one_post():
    assert len(tag_casing_findings({"a.md": ["SwiftUI", "swiftui"]})) == 1


def test_tag_casing_findings_same_spelling_is_quiet():
    assert tag_casing_findings({"a.md": ["swift"], "b.md": ["swift "]}) == []
