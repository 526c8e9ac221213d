from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ...core.line_items import LineItem, is_below_cost
from ...utils.helpers import round2


@dataclass(frozen=True)
class CartTotals:
    pallets: float = 0.0
    cartons: float = 0.0
    pieces: float = 0.0
    area: float = 0.0
    amount: float = 0.0
    below_cost_count: int = 0


def summarize(lines: Iterable[LineItem]) -> CartTotals:
    """Footer figures for a cart. Amount is the sum of the rounded line totals."""
    pallets = cartons = pieces = area = amount = 0.0
    below = 0
    for ln in lines:
        pallets += ln.pallets
        cartons += ln.cartons
        pieces += ln.pieces
        area += ln.area
        amount += ln.line_total
        if is_below_cost(ln):
            below += 1
    return CartTotals(
        pallets=round2(pallets),
        cartons=round2(cartons),
        pieces=round2(pieces),
        area=round2(area),
        amount=round2(amount),
        below_cost_count=below,
    )
