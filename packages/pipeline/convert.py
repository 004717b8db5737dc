"""Stream-level entry point: hadolint JSON in, SARIF out.

Callers own the streams. Nothing here knows about paths, stdin, or stdout;
the CLI resolves those and hands in binary handles.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Union

from packages.exporters.sarif import render_sarif, to_sarif
from packages.hadolint_adapter.parse_hadolint import parse_diagnostics
from packages.schema.errors import WriteError
from packages.schema.models import Diagnostic

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conversion:
    """Everything one conversion produced, for callers that report on it."""

    diagnostics: List[Diagnostic]
    sarif_log: Dict[str, object]
    payload: bytes

    @property
    def rule_ids(self) -> List[str]:
        rules = self.sarif_log["runs"][0]["tool"]["driver"]["rules"]  # type: ignore[index]
        return [rule["id"] for rule in rules]


def render(raw: Union[bytes, str]) -> Conversion:
    """Convert raw hadolint output into a serialized SARIF document."""

    diagnostics = parse_diagnostics(raw)
    sarif_log = to_sarif(diagnostics)
    return Conversion(diagnostics=diagnostics, sarif_log=sarif_log, payload=render_sarif(sarif_log))


def write_output(payload: bytes, sink: BinaryIO) -> None:
    try:
        sink.write(payload)
        sink.flush()
    except OSError as exc:
        raise WriteError(f"Failed to write SARIF output: {exc}") from exc
    _LOG.debug("Wrote %s bytes of SARIF", len(payload))


def convert(source: BinaryIO, sink: BinaryIO) -> Conversion:
    """Read all of ``source`` and write the SARIF document to ``sink``.

    ``sink`` is not written to when the input is malformed.
    """

    conversion = render(source.read())
    write_output(conversion.payload, sink)
    return conversion


__all__ = ["Conversion", "convert", "render", "write_output"]
