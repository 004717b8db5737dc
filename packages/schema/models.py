"""Core schema models shared across the parser, exporters, and CLI."""
from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

SarifLevel = Literal["error", "warning", "note", "none"]


class Severity(str, Enum):
    """hadolint severity vocabulary, plus a catch-all for anything else."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "Severity":
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class Diagnostic(BaseModel):
    """One hadolint finding as read from ``hadolint -f json``.

    hadolint spells the rule and severity keys ``code`` and ``level``; both
    spellings are accepted.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    file: StrictStr
    line: StrictInt = Field(ge=1)
    column: Optional[StrictInt] = Field(default=None, ge=1)
    rule_id: StrictStr = Field(validation_alias=AliasChoices("rule_id", "code"))
    severity: Severity = Field(validation_alias=AliasChoices("severity", "level"))
    message: StrictStr

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> Severity:
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            raise ValueError("severity must be a string")
        return Severity.parse(value)

    @field_validator("file", "rule_id", "message")
    @classmethod
    def _require_encodable(cls, value: str) -> str:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError(f"string is not valid Unicode ({exc.reason})") from exc
        return value


class RuleDescriptor(BaseModel):
    """Catalog entry for a distinct rule id."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    index: int = Field(ge=0)
    help_uri: Optional[str] = None


class ResultRecord(BaseModel):
    """A SARIF result derived from exactly one diagnostic."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule_id: str
    rule_index: int = Field(ge=0)
    level: SarifLevel
    message: str
    uri: str
    line: int = Field(ge=1)
    column: Optional[int] = Field(default=None, ge=1)
