"""
Typed Exception Hierarchy for the Billing Kernel.

===============================================================================
WHERE EXCEPTIONS ARE RAISED
===============================================================================

The dues engine is total: missing or malformed billing data degrades to a
zero summary or a zero amount, never to an exception. Exceptions exist only
at the two boundaries where the host application hands us data it owns:

  1. Record construction (``billing_kernel.domain.records``) -- a shift time
     that is not ``HH:MM`` or a date string that cannot be parsed.
  2. Configuration loading (``billing_config``) -- a missing set or a set
     that fails validation.

Every exception carries a machine-readable ``code`` class attribute and the
structured data needed to act on it, so callers catch by type:

    try:
        policy = get_active_config("branch-2")
    except ConfigurationNotFoundError as e:
        log.warning("missing set", extra={"name": e.name})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingKernelError (base)
    |
    +-- RecordError
    |   +-- InvalidShiftTimeError
    |   +-- InvalidRecordDateError
    |
    +-- ConfigurationError
        +-- ConfigurationNotFoundError
        +-- InvalidConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------
Record          | INVALID_SHIFT_TIME          | Shift time is not HH:MM
                | INVALID_RECORD_DATE         | Date value cannot be parsed
----------------|-----------------------------|-----------------------------------
Configuration   | CONFIGURATION_NOT_FOUND     | No YAML set with the given name
                | INVALID_CONFIGURATION       | Set parsed but failed validation
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class BillingKernelError(Exception):
    """
    Base exception for all billing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_KERNEL_ERROR"


# Record-related exceptions


class RecordError(BillingKernelError):
    """Base exception for host-supplied record errors."""

    code: str = "RECORD_ERROR"


class InvalidShiftTimeError(RecordError):
    """Shift start or end time is not a valid 24-hour HH:MM string."""

    code: str = "INVALID_SHIFT_TIME"

    def __init__(self, shift_id: str | None, field_name: str, value: Any):
        self.shift_id = shift_id
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Shift {shift_id!r} has invalid {field_name}: {value!r} "
            f"(expected HH:MM)"
        )


class InvalidRecordDateError(RecordError):
    """A date or timestamp field could not be parsed."""

    code: str = "INVALID_RECORD_DATE"

    def __init__(self, field_name: str, value: Any):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Cannot parse {field_name} from {value!r}")


# Configuration-related exceptions


class ConfigurationError(BillingKernelError):
    """Base exception for library policy configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigurationNotFoundError(ConfigurationError):
    """No configuration set with the requested name exists."""

    code: str = "CONFIGURATION_NOT_FOUND"

    def __init__(self, name: str, config_dir: Path):
        self.name = name
        self.config_dir = config_dir
        super().__init__(
            f"No configuration set named '{name}' in {config_dir}"
        )


class InvalidConfigurationError(ConfigurationError):
    """A configuration set was loaded but failed validation."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, name: str, errors: list[str]):
        self.name = name
        self.errors = errors
        super().__init__(
            f"Configuration '{name}' is invalid: {'; '.join(errors)}"
        )
