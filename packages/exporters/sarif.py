"""SARIF exporter for hadolint diagnostics."""
from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Dict, Iterable, Mapping

from packages.hadolint_adapter.parse_hadolint import help_uri
from packages.schema.models import Diagnostic, ResultRecord, RuleDescriptor, SarifLevel, Severity

_LOG = logging.getLogger(__name__)

try:
    __version__ = version("hadolint-sarif")
except PackageNotFoundError:  # source checkout without an install
    __version__ = "0+unknown"

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
DRIVER_NAME = "hadolint"
DRIVER_INFORMATION_URI = "https://github.com/hadolint/hadolint"
CONVERTER_NAME = "hadolint-sarif"

DEFAULT_LEVEL: SarifLevel = "warning"

_LEVEL_MAP: Dict[Severity, SarifLevel] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
    Severity.STYLE: "note",
    Severity.UNKNOWN: DEFAULT_LEVEL,
}


def level_for(severity: Severity) -> SarifLevel:
    return _LEVEL_MAP.get(severity, DEFAULT_LEVEL)


def build_rules(diagnostics: Iterable[Diagnostic]) -> Dict[str, RuleDescriptor]:
    """Distinct rule ids keyed in first-seen order, each with its catalog index."""

    rules: Dict[str, RuleDescriptor] = {}
    for diag in diagnostics:
        if diag.rule_id in rules:
            continue
        rules[diag.rule_id] = RuleDescriptor(
            id=diag.rule_id,
            index=len(rules),
            help_uri=help_uri(diag.rule_id),
        )
    return rules


def map_result(diagnostic: Diagnostic, rules: Mapping[str, RuleDescriptor]) -> ResultRecord:
    return ResultRecord(
        rule_id=diagnostic.rule_id,
        rule_index=rules[diagnostic.rule_id].index,
        level=level_for(diagnostic.severity),
        message=diagnostic.message,
        uri=diagnostic.file,
        line=diagnostic.line,
        column=diagnostic.column,
    )


def to_sarif(
    diagnostics: Iterable[Diagnostic],
    *,
    converter_name: str = CONVERTER_NAME,
    converter_version: str = __version__,
) -> Dict[str, object]:
    diag_list = list(diagnostics)
    rules = build_rules(diag_list)
    results = [map_result(diag, rules) for diag in diag_list]
    _LOG.debug("Built %s rules and %s results", len(rules), len(results))

    return {
        "version": SARIF_VERSION,
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": DRIVER_NAME,
                        "informationUri": DRIVER_INFORMATION_URI,
                        "rules": [_rule_to_sarif(rule) for rule in rules.values()],
                    }
                },
                "results": [_result_to_sarif(result) for result in results],
                "conversion": {
                    "tool": {
                        "driver": {
                            "name": converter_name,
                            "version": converter_version,
                        }
                    }
                },
            }
        ],
    }


def render_sarif(log: Mapping[str, object]) -> bytes:
    """Serialize a SARIF log; equal logs always give equal bytes."""

    return (json.dumps(log, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def _rule_to_sarif(rule: RuleDescriptor) -> Dict[str, object]:
    entry: Dict[str, object] = {"id": rule.id}
    if rule.help_uri:
        entry["helpUri"] = rule.help_uri
    return entry


def _result_to_sarif(result: ResultRecord) -> Dict[str, object]:
    region: Dict[str, int] = {"startLine": result.line}
    if result.column is not None:
        region["startColumn"] = result.column

    return {
        "ruleId": result.rule_id,
        "ruleIndex": result.rule_index,
        "level": result.level,
        "message": {"text": result.message},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": result.uri},
                    "region": region,
                }
            }
        ],
    }


__all__ = [
    "build_rules",
    "level_for",
    "map_result",
    "render_sarif",
    "to_sarif",
    "DEFAULT_LEVEL",
]
