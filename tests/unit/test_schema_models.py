import pytest
from pydantic import ValidationError

from packages.schema.errors import MalformedInput
from packages.schema.models import Diagnostic, ResultRecord, RuleDescriptor, Severity


def sample_payload(**overrides):
    data = {
        "file": "Dockerfile",
        "line": 3,
        "column": 1,
        "rule_id": "DL3006",
        "severity": "warning",
        "message": "Always tag the version of an image explicitly",
    }
    data.update(overrides)
    return data


def test_diagnostic_accepts_spec_keys() -> None:
    diag = Diagnostic.model_validate(sample_payload())
    assert diag.rule_id == "DL3006"
    assert diag.severity is Severity.WARNING
    assert diag.column == 1


def test_diagnostic_accepts_hadolint_keys() -> None:
    diag = Diagnostic.model_validate(
        {
            "file": "Dockerfile",
            "line": 7,
            "column": 1,
            "code": "DL3008",
            "level": "info",
            "message": "Pin versions in apt get install",
        }
    )
    assert diag.rule_id == "DL3008"
    assert diag.severity is Severity.INFO


def test_column_is_optional() -> None:
    payload = sample_payload()
    del payload["column"]
    assert Diagnostic.model_validate(payload).column is None
    assert Diagnostic.model_validate(sample_payload(column=None)).column is None


def test_unknown_severity_is_kept_as_unknown() -> None:
    diag = Diagnostic.model_validate(sample_payload(severity="catastrophic"))
    assert diag.severity is Severity.UNKNOWN


def test_severity_is_case_insensitive() -> None:
    assert Diagnostic.model_validate(sample_payload(severity=" Error ")).severity is Severity.ERROR


@pytest.mark.parametrize(
    "overrides",
    [
        {"line": "3"},
        {"line": 3.0},
        {"line": True},
        {"line": 0},
        {"column": 0},
        {"column": "1"},
        {"file": 12},
        {"rule_id": None},
        {"severity": 2},
        {"message": None},
    ],
)
def test_diagnostic_rejects_mistyped_fields(overrides) -> None:
    with pytest.raises(ValidationError):
        Diagnostic.model_validate(sample_payload(**overrides))


def test_diagnostic_ignores_extra_fields() -> None:
    diag = Diagnostic.model_validate(sample_payload(fix="FROM debian:12"))
    assert not hasattr(diag, "fix")


def test_diagnostic_is_frozen() -> None:
    diag = Diagnostic.model_validate(sample_payload())
    with pytest.raises(ValidationError):
        diag.line = 4  # type: ignore[misc]


def test_descriptor_and_result_reject_negative_indices() -> None:
    with pytest.raises(ValidationError):
        RuleDescriptor(id="DL3006", index=-1)
    with pytest.raises(ValidationError):
        ResultRecord(
            rule_id="DL3006",
            rule_index=-1,
            level="warning",
            message="",
            uri="Dockerfile",
            line=1,
        )


def test_malformed_input_message_includes_location() -> None:
    exc = MalformedInput("required field is missing", index=2, field="line")
    assert exc.index == 2
    assert exc.field == "line"
    assert str(exc) == "diagnostic #2, field 'line': required field is missing"
    assert isinstance(exc, ValueError)
