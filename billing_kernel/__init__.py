"""
Billing Kernel

Domain records, calendar arithmetic, clock abstraction, typed exceptions and
structured logging shared by the library seat billing engines:
- Read-only Student / Payment / Shift records
- Anchor-day month arithmetic with end-of-month clamping
- Injectable clocks (no hidden ``date.today()`` in engine code)
- JSON log records with request-scoped context
"""

__version__ = "0.1.0"
