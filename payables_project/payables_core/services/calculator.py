from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")


def to_decimal(value, field="value"):
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a number")
    return result


def round2(value):
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round4(value):
    return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def calculate_line(item):
    """
    Derive tax and total for one bill line.

    The supplied price (``cost_price``, or ``unit_price`` when no cost price
    is sent) is tax exclusive. Client supplied totals are ignored.
    """
    price = item.get("cost_price")
    if price is None or price == "":
        price = item.get("unit_price")

    quantity = to_decimal(item.get("quantity"), "quantity")
    actual_unit_price = round4(to_decimal(price, "cost_price"))
    tax_rate = to_decimal(item.get("tax_rate"), "tax_rate")

    subtotal = actual_unit_price * quantity
    tax_amount = round2(subtotal * tax_rate / Decimal("100"))
    total_price = round2(subtotal + tax_amount)

    line = dict(item)
    line.update(
        quantity=quantity,
        actual_unit_price=actual_unit_price,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total_price=total_price,
    )
    return line


def calculate_lines(items):
    """Return (recalculated lines, bill total)."""
    lines = [calculate_line(item) for item in items]
    total = round2(sum((line["total_price"] for line in lines), Decimal("0")))
    return lines, total
