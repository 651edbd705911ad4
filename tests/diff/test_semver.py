from __future__ import annotations

import pytest

from doccov.diff import SpecDiff, calculate_next_version, recommend_semver_bump


@pytest.mark.parametrize(
    ("current", "bump", "expected"),
    [
        ("1.2.3", "major", "2.0.0"),
        ("1.2.3", "minor", "1.3.0"),
        ("1.2.3", "patch", "1.2.4"),
        ("0.4.1", "major", "0.5.0"),
        ("v1.2.3", "patch", "v1.2.4"),
        ("1.2.3", "none", "1.2.3"),
        ("not-a-version", "major", "not-a-version"),
    ],
)
def test_calculate_next_version(current: str, bump: str, expected: str) -> None:
    assert calculate_next_version(current, bump) == expected


def test_unknown_bump_is_rejected() -> None:
    with pytest.raises(ValueError):
        calculate_next_version("1.0.0", "huge")


def test_recommendation_prefers_most_severe_change() -> None:
    major = recommend_semver_bump(SpecDiff(breaking=["a", "b"], non_breaking=["c"]))
    minor = recommend_semver_bump(SpecDiff(non_breaking=["c"]))
    patch = recommend_semver_bump(SpecDiff(docs_only=["d", "e"]))
    none = recommend_semver_bump(SpecDiff())

    assert (major.bump, major.reason, major.breaking_count, major.addition_count) == (
        "major",
        "2 breaking changes detected",
        2,
        1,
    )
    assert (minor.bump, minor.reason) == ("minor", "1 non-breaking change or addition")
    assert patch.to_dict() == {
        "bump": "patch",
        "reason": "2 documentation-only changes",
        "breakingCount": 0,
        "additionCount": 0,
        "docsOnlyChanges": True,
    }
    assert none.bump == "none"
