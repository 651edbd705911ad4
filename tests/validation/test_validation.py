from __future__ import annotations

import pytest

from doccov.models import OpenPkgSpec
from doccov.validation import SpecValidationError, collect_issues, load_schema, validate_spec
from tests._fixtures.specs import add_export, spec_document


def test_valid_spec_passes() -> None:
    document = spec_document([add_export()])

    validate_spec(document)
    validate_spec(OpenPkgSpec.from_dict(document).to_dict())


def test_issues_carry_json_paths() -> None:
    document = spec_document([{"id": "", "name": "broken", "kind": "widget"}])

    issues = collect_issues(document, "openpkg")

    assert {issue.path for issue in issues} == {"$.exports[0].id", "$.exports[0].kind"}


def test_validation_error_summarizes_first_issue() -> None:
    with pytest.raises(SpecValidationError) as excinfo:
        validate_spec({"openpkg": "0.4.0", "meta": {"name": "x"}})

    error = excinfo.value
    assert error.kind == "openpkg"
    assert str(error).startswith("Invalid openpkg document: $: ")
    assert error.issues[0].to_dict()["path"] == "$"


def test_unknown_schema_kind() -> None:
    with pytest.raises(ValueError):
        load_schema("nope")
