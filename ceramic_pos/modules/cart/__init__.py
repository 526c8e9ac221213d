"""
Cart module package exports.

- CartController: one cart session (lines, customer, pricing)
- CartItemsModel: editable Qt table model over the cart lines
- CartTotals / summarize: footer figures
"""

from .controller import CartController, DOC_KINDS
from .model import CartItemsModel
from .totals import CartTotals, summarize

__all__ = [
    "CartController",
    "DOC_KINDS",
    "CartItemsModel",
    "CartTotals",
    "summarize",
]
