"""Adapter that decodes ``hadolint -f json`` output into ``Diagnostic`` objects."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from packages.schema.errors import ConfigurationError, MalformedInput
from packages.schema.models import Diagnostic, Severity

_LOG = logging.getLogger(__name__)

_HELP_LINKS_PATH = Path(
    os.environ.get("HADOLINT_SARIF_HELP_LINKS", str(Path(__file__).with_name("help_links.yaml")))
)


def _load_help_links(path: Path) -> Dict[str, str]:
    """Read and check the ``prefixes`` table of a help links file."""

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read help links file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Help links file {path} is not valid YAML: {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Help links file {path} must contain a mapping")
    prefixes = document.get("prefixes") or {}
    if not isinstance(prefixes, dict):
        raise ConfigurationError(f"'prefixes' in {path} must be a mapping of prefix to URL template")

    links: Dict[str, str] = {}
    for prefix, template in prefixes.items():
        if not isinstance(prefix, str) or not isinstance(template, str):
            raise ConfigurationError(f"Help link entry {prefix!r} in {path} must map a string to a string")
        try:
            template.format(rule_id=prefix)
        except (AttributeError, IndexError, KeyError, ValueError) as exc:
            raise ConfigurationError(
                f"Help link template for {prefix!r} in {path} may only use {{rule_id}}: {template!r}"
            ) from exc
        links[prefix] = template
    return links


_RAW_LINKS: Dict[str, str] = _load_help_links(_HELP_LINKS_PATH)

_JSON_TYPES = {
    dict: "object",
    list: "array",
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    type(None): "null",
}


def parse_diagnostics(raw: Union[bytes, str]) -> List[Diagnostic]:
    """Decode a JSON array of hadolint findings, in input order."""

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedInput(f"input is not valid JSON ({exc})") from exc

    if not isinstance(payload, list):
        raise MalformedInput(
            f"expected a JSON array of diagnostics, got a JSON {_json_type(payload)}"
        )

    diagnostics: List[Diagnostic] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise MalformedInput(
                f"expected a JSON object, got a JSON {_json_type(entry)}", index=index
            )
        try:
            diagnostic = Diagnostic.model_validate(entry)
        except ValidationError as exc:
            raise _malformed_from_validation(index, exc) from exc
        if diagnostic.severity is Severity.UNKNOWN:
            _LOG.warning(
                "Unrecognised severity %r for %s at %s:%s",
                entry.get("severity", entry.get("level")),
                diagnostic.rule_id,
                diagnostic.file,
                diagnostic.line,
            )
        diagnostics.append(diagnostic)

    _LOG.debug("Parsed %s diagnostics", len(diagnostics))
    return diagnostics


def help_uri(rule_id: str) -> Optional[str]:
    """Documentation link for ``rule_id`` based on its prefix, if one is known."""

    for prefix in sorted(_RAW_LINKS, key=len, reverse=True):
        if rule_id.startswith(prefix):
            return _RAW_LINKS[prefix].format(rule_id=rule_id)
    return None


def _malformed_from_validation(index: int, exc: ValidationError) -> MalformedInput:
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else None
    message = error.get("msg", "invalid value")
    if error.get("type") == "missing":
        message = "required field is missing"
    return MalformedInput(message, index=index, field=field)


def _json_type(value: Any) -> str:
    return _JSON_TYPES.get(type(value), type(value).__name__)


__all__ = ["parse_diagnostics", "help_uri"]
