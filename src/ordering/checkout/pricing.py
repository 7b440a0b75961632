"""Order pricing: line pricing at the product's current price plus a flat tax."""

TAX_RATE = 0.10


def line_total(unit_price, quantity):
    return unit_price * quantity


def compute_totals(lines):
    """Subtotal, tax and total for ``(unit_price, quantity)`` pairs.

    Each figure is rounded to two decimals, and the total is derived from the
    rounded subtotal and tax so that ``total == subtotal + tax`` holds exactly
    for the stored values.
    """
    subtotal = round(sum(line_total(price, qty) for price, qty in lines), 2)
    tax = round(subtotal * TAX_RATE, 2)
    total = round(subtotal + tax, 2)
    return {"subtotal": subtotal, "tax": tax, "total": total}
