"""Unit tests for core/validate.py"""

import pytest

from postpub.core.errors import MissingRequiredField
from postpub.core.graph import build_site
from postpub.core.models import Severity, Violation, ViolationKind
from postpub.core.validate import has_errors, validate


def _warning(source):
    return Violation(kind=ViolationKind.date_mismatch, severity=Severity.warning, source=source, message="m")


def test_validate_clean_site(make_post):
    site, _ = build_site([make_post("a", tags=["swift"]), make_post("b", body="[a](/posts/a/)\n")])
    assert validate(site) == []


def test_validate_rechecks_references(make_post):
    """Dangling references are found again even if the caller passed no findings."""
    site, dangling = build_site([make_post("a", body="[x](/posts/missing/)\n")])
    report = validate(site)
    assert [v.kind for v in report] == [ViolationKind.dangling_reference]
    assert report == [d.to_violation() for d in dangling]


def test_validate_merges_findings_with_recheck(make_post):
    """The re-checked dangling reference is not reported a second time."""
    site, dangling = build_site([make_post("a", body="[x](/posts/missing/)\n")])
    parse_error = MissingRequiredField("date", "broken.md").to_violation()
    findings = [parse_error, *(d.to_violation() for d in dangling)]
    report = validate(site, findings)
    assert len(report) == 2
    assert report[0].source == "a.md" and report[1].source == "broken.md"


def test_validate_keeps_identical_occurrences(make_post):
    site, dangling = build_site([make_post("a", body="See [one](/posts/nope/) and [two](/posts/nope/).\n")])
    assert len(dangling) == 2
    assert len(validate(site)) == 2
    assert len(validate(site, [d.to_violation() for d in dangling])) == 2


def test_validate_is_idempotent(make_post):
    site, dangling = build_site([make_post("a", body="[x](/posts/missing/)\n"), make_post("b")])
    findings = [_warning("z.md"), _warning("b.md"), *(d.to_violation() for d in dangling)]
    report = validate(site, findings)
    assert report == validate(site, list(reversed(findings)))
    assert validate(site, report) == report


def test_validate_reports_empty_title(make_post):
    site, _ = build_site([make_post("a", title=" ")])
    report = validate(site)
    assert [(v.kind, v.field) for v in report] == [(ViolationKind.missing_required_field, "title")]


def test_validate_detects_stale_tag_index(make_post):
    site, _ = build_site([make_post("a", tags=["swift"])])
    stale = site.model_copy(update={"tag_index": {}})
    with pytest.raises(ValueError, match="tag index"):
        validate(stale)


def test_validate_detects_feed_out_of_order(make_post):
    site, _ = build_site([
        make_post("new", date="2025-06-01T00:00:00+00:00"),
        make_post("old", date="2025-01-01T00:00:00+00:00"),
    ])
    shuffled = site.model_copy(update={"posts": tuple(reversed(site.posts))})
    with pytest.raises(ValueError, match="feed"):
        validate(shuffled)


def test_validate_detects_unnormalized_tags(make_post):
    post = make_post("a").model_copy(update={"tags": ("Swift",)})
    site, _ = build_site([make_post("a")])
    with pytest.raises(ValueError, match="tags are not normalized"):
        validate(site.model_copy(update={"posts": (post,)}))


@pytest.mark.parametrize("severity,strict,expected", [
    (Severity.error, False, True),
    (Severity.warning, False, False),
    (Severity.warning, True, True),
    (Severity.info, True, False),
])
def test_has_errors(severity, strict, expected):
    v = Violation(kind=ViolationKind.date_mismatch, severity=severity, message="m")
    assert has_errors([v], strict) is expected


def test_has_errors_empty():
    assert has_errors([]) is False
