"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Loads YAML configuration sets and parses them into typed
``billing_config.schema`` dataclass instances.  Runtime callers go through
``billing_config.get_active_config()``; this module is its plumbing.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  set for configuration identity and change detection.
* ``validate_policy`` collects every problem before failing, so a bad set
  reports all of its errors at once.

Failure modes
-------------
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Malformed shift times -> ``InvalidShiftTimeError`` propagates.
* Wrong value types -> ``InvalidConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from billing_config.schema import AlertThresholds, LibraryPolicy
from billing_kernel.domain.records import Shift
from billing_kernel.exceptions import InvalidConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a raw configuration mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _as_int(name: str, data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigurationError(name, [f"{key} must be an integer, got {value!r}"])
    return value


def parse_alerts(name: str, data: dict[str, Any]) -> AlertThresholds:
    """Parse the ``alerts`` block; missing keys take the defaults."""
    defaults = AlertThresholds()
    return AlertThresholds(
        window_days=_as_int(name, data, "window_days", defaults.window_days),
        highlight_days=_as_int(name, data, "highlight_days", defaults.highlight_days),
        deactivation_days=_as_int(name, data, "deactivation_days", defaults.deactivation_days),
    )


def parse_shifts(raw: list[dict[str, Any]]) -> tuple[Shift, ...]:
    """Parse shift entries written as ``{id, name, start, end}``."""
    return tuple(
        Shift.from_dict({
            "id": entry.get("id"),
            "name": entry.get("name"),
            "startTime": entry.get("start"),
            "endTime": entry.get("end"),
        })
        for entry in raw
    )


def parse_policy(name: str, data: dict[str, Any]) -> LibraryPolicy:
    """
    Parse a ``LibraryPolicy`` from a raw set.

    Postconditions:
        - Returns a populated, not yet validated ``LibraryPolicy``.
    """
    billing = data.get("billing") or {}
    defaults = LibraryPolicy(name=name)
    return LibraryPolicy(
        name=data.get("name", name),
        timezone=data.get("timezone", defaults.timezone),
        max_billing_cycles=_as_int(
            name, billing, "max_cycles", defaults.max_billing_cycles
        ),
        alerts=parse_alerts(name, data.get("alerts") or {}),
        shifts=parse_shifts(data.get("shifts") or []),
        checksum=compute_checksum(data),
    )


def validate_policy(policy: LibraryPolicy) -> list[str]:
    """Return every validation problem in ``policy`` (empty when valid)."""
    errors: list[str] = []

    try:
        ZoneInfo(policy.timezone)
    except (ZoneInfoNotFoundError, ValueError, TypeError):
        errors.append(f"unknown timezone {policy.timezone!r}")

    if policy.max_billing_cycles <= 0:
        errors.append("billing.max_cycles must be positive")

    alerts = policy.alerts
    if alerts.window_days < 0:
        errors.append("alerts.window_days cannot be negative")
    if alerts.highlight_days <= 0 or alerts.deactivation_days <= 0:
        errors.append("alert thresholds must be positive")
    if alerts.highlight_days > alerts.deactivation_days:
        errors.append("alerts.highlight_days cannot exceed alerts.deactivation_days")

    seen: set[str] = set()
    for shift in policy.shifts:
        if not shift.id:
            errors.append("every shift needs an id")
        elif shift.id in seen:
            errors.append(f"duplicate shift id {shift.id!r}")
        seen.add(shift.id)

    return errors


def load_policy(path: Path) -> LibraryPolicy:
    """
    Load, parse and validate one configuration set file.

    Raises:
        InvalidConfigurationError: if the set fails validation.
    """
    name = path.stem
    data = load_yaml_file(path)
    if not isinstance(data, dict):
        raise InvalidConfigurationError(name, ["top level must be a mapping"])
    policy = parse_policy(name, data)
    errors = validate_policy(policy)
    if errors:
        raise InvalidConfigurationError(policy.name, errors)
    return policy
