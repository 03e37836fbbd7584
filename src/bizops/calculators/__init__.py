"""Pure money, hours and pricing calculations.

``bizops.calculators.cost_history`` needs the ORM and is imported directly.
"""

from bizops.calculators.order_financials import OrderFinancials, compute_order_financials
from bizops.calculators.price_input import PriceEdit, apply_key, submitted_price
from bizops.calculators.rounding import round_precise, round_to_cents, to_decimal
from bizops.calculators.time_summary import TimeSummary, summarize_entries

__all__ = [
    "OrderFinancials",
    "PriceEdit",
    "TimeSummary",
    "apply_key",
    "compute_order_financials",
    "round_precise",
    "round_to_cents",
    "submitted_price",
    "summarize_entries",
    "to_decimal",
]
