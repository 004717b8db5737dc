"""Errors raised by the hadolint to SARIF conversion."""
from __future__ import annotations

from typing import Optional


class ConversionError(Exception):
    """Base class for every failure the converter reports."""


class MalformedInput(ConversionError, ValueError):
    """The input is not a JSON array of well-formed hadolint diagnostics."""

    def __init__(
        self,
        message: str,
        *,
        index: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        self.index = index
        self.field = field
        location = []
        if index is not None:
            location.append(f"diagnostic #{index}")
        if field is not None:
            location.append(f"field '{field}'")
        prefix = ", ".join(location)
        super().__init__(f"{prefix}: {message}" if prefix else message)


class WriteError(ConversionError):
    """The output sink rejected the SARIF document."""


class ConfigurationError(Exception):
    """A configuration file the converter reads at startup is unusable."""


__all__ = ["ConfigurationError", "ConversionError", "MalformedInput", "WriteError"]
