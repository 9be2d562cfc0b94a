from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from evidex.core.models import EvidenceEntry


logger = logging.getLogger(__name__)

FINDING_KEYS = ("rules", "steps")
EVIDENCE_KEYS = ("evidence", "evidences")
NESTED_KEY = "transactionDetails"


def parse_int(value: Any) -> int | None:
    """Parse user-entered text as an integer, returning None when it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _findings(result: Mapping[str, Any] | Iterable[Any] | None) -> list[Any]:
    if result is None:
        return []
    if isinstance(result, Mapping):
        for key in FINDING_KEYS:
            findings = result.get(key)
            if isinstance(findings, list):
                return findings
        return []
    return list(result)


def _raw_entries(finding: Any) -> list[Any]:
    if not isinstance(finding, Mapping):
        return []

    nested = finding.get(NESTED_KEY)
    if isinstance(nested, list):
        entries: list[Any] = []
        for transaction in nested:
            if isinstance(transaction, Mapping) and isinstance(transaction.get("evidence"), list):
                entries.extend(transaction["evidence"])
        return entries

    for key in EVIDENCE_KEYS:
        value = finding.get(key)
        if isinstance(value, list):
            return value
    return []


def coerce_entries(raw_entries: Iterable[Any]) -> list[EvidenceEntry]:
    entries: list[EvidenceEntry] = []
    for raw in raw_entries:
        if isinstance(raw, EvidenceEntry):
            entries.append(raw)
            continue
        try:
            entries.append(EvidenceEntry.model_validate(raw))
        except ValidationError:
            logger.debug("Skipping malformed evidence entry: %r", raw)
    return entries


def flatten_evidence(result: Mapping[str, Any] | Iterable[Any] | None) -> list[EvidenceEntry]:
    """Flatten an evaluation result (flat or per-transaction evidence) into entries."""
    raw_entries: list[Any] = []
    for finding in _findings(result):
        raw_entries.extend(_raw_entries(finding))
    return coerce_entries(raw_entries)
