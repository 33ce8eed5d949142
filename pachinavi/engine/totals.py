"""Statement totals calculation.

Amounts are Japanese yen. Tax is truncated to the whole yen (floor), never
rounded. All arithmetic runs in ``Decimal`` so binary float error cannot
shift the floor, under a context that never traps so malformed or
out-of-range input degrades to 0 instead of raising.
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_FLOOR, ROUND_HALF_EVEN, Context, Decimal, localcontext
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TAX_RATE = Decimal("0.10")

_ZERO = Decimal(0)

# Nothing traps: overflow and invalid input yield Infinity or NaN, which
# _finite() turns into 0.
_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN, traps=[])


class Totals(BaseModel):
    """Computed settlement figures for a list of line items."""

    subtotal: Decimal = Field(..., description="Sum of all line amounts")
    taxable_subtotal: Decimal = Field(..., description="Sum of taxable line amounts")
    tax: Decimal = Field(..., description="floor(taxable_subtotal x tax_rate)")
    surcharge: Decimal = Field(default=_ZERO, description="Untaxed surcharge added after tax")
    total: Decimal = Field(..., description="subtotal + tax + surcharge")

    model_config = {"frozen": True}


def _finite(value: Decimal) -> Decimal:
    return value if value.is_finite() else _ZERO


def to_decimal(value: Any) -> Decimal:
    """Coerce a loosely typed number to Decimal.

    Missing, non-numeric, non-finite and out-of-range values become 0.
    """
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, float):
        value = repr(value)
    elif not isinstance(value, (Decimal, int)):
        value = str(value).strip().replace(",", "")
    try:
        result = _CONTEXT.create_decimal(value)
    except (ArithmeticError, ValueError):
        return _ZERO
    return _finite(result)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def line_amount(item: Any) -> Decimal:
    """Return the explicit amount of a line, else quantity x unit price."""
    amount = _field(item, "amount")
    if amount is not None:
        return to_decimal(amount)
    quantity = _field(item, "quantity")
    if quantity is None:
        quantity = _field(item, "qty")
    # A line without a quantity is a single unit.
    quantity = Decimal(1) if quantity is None else to_decimal(quantity)
    with localcontext(_CONTEXT):
        return _finite(quantity * to_decimal(_field(item, "unit_price")))


def _is_taxable(item: Any) -> bool:
    return _field(item, "is_taxable") is not False


def compute_tax(taxable_subtotal: Any, tax_rate: Any = DEFAULT_TAX_RATE) -> Decimal:
    """Return floor(taxable_subtotal x tax_rate) in whole yen."""
    with localcontext(_CONTEXT):
        raw = to_decimal(taxable_subtotal) * to_decimal(tax_rate)
        return _finite(raw.to_integral_value(rounding=ROUND_FLOOR))


def compute_totals(
    items: Iterable[Any],
    tax_rate: Any = DEFAULT_TAX_RATE,
    surcharge: Any = 0,
) -> Totals:
    """Compute subtotal, tax and total for line items.

    Args:
        items: LineItem models or plain mappings with the same keys.
        tax_rate: Tax rate (e.g., 0.1).
        surcharge: Shipping/insurance surcharge added after tax, not taxed.

    Returns:
        Totals for the items. Never raises on malformed numbers; a sum that
        overflows the yen range is reported as 0.
    """
    with localcontext(_CONTEXT):
        subtotal = _ZERO
        taxable_subtotal = _ZERO
        for item in items or ():
            amount = line_amount(item)
            subtotal += amount
            if _is_taxable(item):
                taxable_subtotal += amount
        subtotal = _finite(subtotal)
        taxable_subtotal = _finite(taxable_subtotal)

        tax = compute_tax(taxable_subtotal, tax_rate)
        extra = to_decimal(surcharge)
        total = _finite(subtotal + tax + extra)

    return Totals(
        subtotal=subtotal,
        taxable_subtotal=taxable_subtotal,
        tax=tax,
        surcharge=extra,
        total=total,
    )


def format_yen(value: Any) -> str:
    """Format an amount as whole yen, e.g. ``¥1,408,000``."""
    amount = to_decimal(value).to_integral_value(rounding=ROUND_FLOOR)
    sign = "-" if amount < 0 else ""
    return f"{sign}¥{abs(amount):,.0f}"
