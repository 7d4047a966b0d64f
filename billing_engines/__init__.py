"""
Module: billing_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for the host application.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel (and sibling engine modules).
    MUST NOT import billing_config; the host passes policy values in.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Time comes from an injected ``Clock`` (``SystemClock`` when omitted).
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are traced via the ``@traced_engine`` decorator
    (see ``billing_engines.tracer``), emitting BILLING_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from billing_engines import compute_financials, resolve_seat_status
    from billing_engines import build_dues_alerts, summarize_outstanding
"""

from billing_kernel.logging_config import get_logger

logger = get_logger("engines")

from billing_engines.alerts import (
    DEFAULT_ALERT_WINDOW_DAYS,
    DEFAULT_DEACTIVATION_THRESHOLD_DAYS,
    DEFAULT_HIGHLIGHT_THRESHOLD_DAYS,
    DuesAlerts,
    DuesOverview,
    StudentDues,
    build_dues_alerts,
    is_deactivation_eligible,
    summarize_outstanding,
)
from billing_engines.dues import (
    MAX_BILLING_CYCLES,
    BillingCycle,
    FeeRate,
    FeeTimeline,
    FinancialSummary,
    compute_financials,
    is_billable,
    iter_billing_cycles,
    residual_balance_at,
    resolve_limit_date,
    total_credit,
)
from billing_engines.predicates import (
    get_days_due,
    get_due_amount,
    get_due_since,
    get_overpaid,
    get_paid_until_date,
)
from billing_engines.seat_status import (
    SeatOccupancy,
    SeatStatus,
    find_occupant,
    is_shift_complete,
    resolve_seat_status,
)

__all__ = [
    # Dues engine
    "MAX_BILLING_CYCLES",
    "BillingCycle",
    "FeeRate",
    "FeeTimeline",
    "FinancialSummary",
    "compute_financials",
    "is_billable",
    "iter_billing_cycles",
    "residual_balance_at",
    "resolve_limit_date",
    "total_credit",
    # Predicates
    "get_due_amount",
    "get_paid_until_date",
    "get_days_due",
    "get_overpaid",
    "get_due_since",
    # Seat status
    "SeatStatus",
    "SeatOccupancy",
    "find_occupant",
    "is_shift_complete",
    "resolve_seat_status",
    # Alerts
    "DEFAULT_ALERT_WINDOW_DAYS",
    "DEFAULT_HIGHLIGHT_THRESHOLD_DAYS",
    "DEFAULT_DEACTIVATION_THRESHOLD_DAYS",
    "StudentDues",
    "DuesAlerts",
    "DuesOverview",
    "build_dues_alerts",
    "is_deactivation_eligible",
    "summarize_outstanding",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 4,
    "modules": ["dues", "predicates", "seat_status", "alerts"],
})
