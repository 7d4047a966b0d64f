"""
billing_config -- single public entrypoint for library policy configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Engines never read files; the host loads a
    ``LibraryPolicy`` here and passes its values (clock, cycle cap,
    thresholds, shifts) into engine calls.

Architecture position:
    Configuration -- YAML-driven, validated at load time.  Sits above
    ``billing_kernel``; ``billing_kernel`` and ``billing_engines`` MUST
    NEVER import from ``billing_config``.

Failure modes:
    - ``ConfigurationNotFoundError`` -- no set with the requested name.
    - ``InvalidConfigurationError`` -- the set failed validation.
    - ``yaml.YAMLError`` -- the set is not valid YAML.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``BILLING_CONFIG_TRACE`` log entry with the set name, checksum,
    timezone, thresholds and shift count.
"""

from __future__ import annotations

import logging
from pathlib import Path

from billing_config.loader import load_policy
from billing_config.schema import AlertThresholds, LibraryPolicy
from billing_kernel.exceptions import ConfigurationNotFoundError

_logger = logging.getLogger("billing_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(
    name: str = "default",
    config_dir: Path | None = None,
) -> LibraryPolicy:
    """The ONLY public configuration entrypoint.

    Args:
        name: Configuration set name (file stem under ``config_dir``).
        config_dir: Override path to configuration sets directory.
            Defaults to billing_config/sets/.

    Returns:
        A validated, frozen ``LibraryPolicy``.

    Raises:
        ConfigurationNotFoundError: If no ``<name>.yaml``/``<name>.yml`` exists.
        InvalidConfigurationError: If validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR

    path = _find_set(sets_dir, name)
    policy = load_policy(path)

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "config_name": policy.name,
            "checksum": policy.checksum,
            "timezone": policy.timezone,
            "max_billing_cycles": policy.max_billing_cycles,
            "highlight_days": policy.alerts.highlight_days,
            "deactivation_days": policy.alerts.deactivation_days,
            "shift_count": len(policy.shifts),
        },
    )
    return policy


def _find_set(sets_dir: Path, name: str) -> Path:
    for suffix in (".yaml", ".yml"):
        candidate = sets_dir / f"{name}{suffix}"
        if candidate.is_file():
            return candidate
    raise ConfigurationNotFoundError(name, sets_dir)


__all__ = [
    "AlertThresholds",
    "LibraryPolicy",
    "get_active_config",
]
