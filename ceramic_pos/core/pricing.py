"""
Unit price resolution for a product/customer pair.

Waterfall, first match wins:
  1. prior sale to this customer       -> HISTORY
  2. customer-specific price           -> CUSTOM
  3. contract rule / price list        -> CONTRACT / PRICELIST
  4. purchase cost + channel margin    -> MARGIN_RETAIL / MARGIN_WHOLESALE
  5. listed base price                 -> BASE
Steps 1-3 come from the pricing lookup (remote or database). A lookup that
fails or times out counts as "nothing on file" and the waterfall moves on.
Lines typed without a product use `manual_price` and skip the waterfall.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional

from ..constants import PRICE_LOOKUP_TIMEOUT, PRICE_LOOKUP_WORKERS

_log = logging.getLogger(__name__)


class PriceSource(str, Enum):
    HISTORY = "HISTORY"
    CUSTOM = "CUSTOM"
    CONTRACT = "CONTRACT"
    PRICELIST = "PRICELIST"
    MARGIN_RETAIL = "MARGIN_RETAIL"
    MARGIN_WHOLESALE = "MARGIN_WHOLESALE"
    BASE = "BASE"
    MANUAL = "MANUAL"
    NOT_FOUND = "NOT_FOUND"


# sources a pricing lookup may answer with, strongest first
LOOKUP_SOURCES = (
    PriceSource.HISTORY,
    PriceSource.CUSTOM,
    PriceSource.CONTRACT,
    PriceSource.PRICELIST,
)


class MarginType(str, Enum):
    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"


class Channel(str, Enum):
    RETAIL = "RETAIL"
    WHOLESALE = "WHOLESALE"


@dataclass(frozen=True)
class MarginSetting:
    value: float = 0.0
    type: MarginType = MarginType.PERCENT


@dataclass(frozen=True)
class MarginSettings:
    retail: MarginSetting = field(default_factory=MarginSetting)
    wholesale: MarginSetting = field(default_factory=MarginSetting)

    def for_channel(self, channel: Channel) -> MarginSetting:
        return self.wholesale if channel is Channel.WHOLESALE else self.retail


@dataclass(frozen=True)
class PriceQuote:
    """Answer of a pricing lookup for one customer/product pair."""
    price: float
    source: PriceSource
    last_sale_price: float | None = None
    last_sale_date: str | None = None
    custom_price: float | None = None


@dataclass(frozen=True)
class ResolvedPrice:
    unit_price: float
    price_source: PriceSource
    detail: str = ""


def apply_margin(purchase_price: float, setting: MarginSetting | None) -> float | None:
    """
    Margin-adjusted sale price from purchase cost, or None when there is no
    cost or no margin to apply.
    """
    cost = float(purchase_price or 0)
    if setting is None or cost <= 0 or setting.value <= 0:
        return None
    if setting.type is MarginType.AMOUNT:
        return cost + setting.value
    return cost * (1 + setting.value / 100)


def manual_price(price: float) -> ResolvedPrice:
    return ResolvedPrice(float(price or 0), PriceSource.MANUAL, "typed by operator")


def _checked_quote(quote, product) -> Optional[PriceQuote]:
    """Coerce the source tag of an incoming quote; unknown tags count as no quote."""
    if quote is None or isinstance(quote.source, PriceSource):
        return quote
    try:
        return replace(quote, source=PriceSource(str(quote.source).strip().upper()))
    except ValueError:
        _log.warning("unknown price source %r for product %s", quote.source, product.product_id)
        return None


class PriceResolver:
    """
    Resolves unit prices through the waterfall.

    `lookup` is any object with get_customer_product_price(customer_id,
    product_id) -> PriceQuote | None (PricingRepo, an API client, ...).
    Products need `product_id`, `base_price` and `purchase_price`; customers
    need `customer_id` and `channel`.

    Lookups run on a small thread pool and are abandoned after `timeout`
    seconds. timeout=None runs them inline in the caller's thread.
    """

    def __init__(
        self,
        lookup: Any,
        margins: MarginSettings | None = None,
        *,
        timeout: float | None = PRICE_LOOKUP_TIMEOUT,
        max_workers: int = PRICE_LOOKUP_WORKERS,
    ):
        self.lookup = lookup
        self.margins = margins or MarginSettings()
        self.timeout = timeout
        self._pool: ThreadPoolExecutor | None = None
        self._max_workers = max_workers

    # ---------------------------- lifecycle ----------------------------

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _executor(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="PriceLookup"
            )
        return self._pool

    # ---------------------------- lookup ----------------------------

    def _call_lookup(self, customer_id, product_id) -> Optional[PriceQuote]:
        return self.lookup.get_customer_product_price(customer_id, product_id)

    def _start(self, product, customer) -> Future | None:
        if customer is None or self.lookup is None or self.timeout is None:
            return None
        return self._executor().submit(self._call_lookup, customer.customer_id, product.product_id)

    def _quote(self, product, customer, future: Future | None) -> Optional[PriceQuote]:
        if customer is None or self.lookup is None:
            return None
        try:
            if future is None:
                quote = self._call_lookup(customer.customer_id, product.product_id)
            else:
                quote = future.result(timeout=self.timeout)
            return _checked_quote(quote, product)
        except FuturesTimeout:
            if future is not None:
                future.cancel()
            _log.warning(
                "price lookup timed out after %ss (customer=%s, product=%s)",
                self.timeout, customer.customer_id, product.product_id,
            )
        except Exception as e:
            _log.warning(
                "price lookup failed (customer=%s, product=%s): %s",
                customer.customer_id, product.product_id, e,
            )
        return None

    # ---------------------------- waterfall ----------------------------

    @staticmethod
    def _channel(customer, channel: Channel | None) -> Channel:
        if channel is None:
            channel = getattr(customer, "channel", None) or Channel.RETAIL
        return Channel(channel)

    def _settle(self, product, quote: Optional[PriceQuote], channel: Channel) -> ResolvedPrice:
        if quote is not None and quote.source in LOOKUP_SOURCES:
            if quote.price is not None and quote.price > 0:
                return ResolvedPrice(float(quote.price), quote.source)
            _log.warning(
                "ignoring %s price %r for product %s", quote.source.value, quote.price, product.product_id
            )

        setting = self.margins.for_channel(channel)
        margined = apply_margin(getattr(product, "purchase_price", 0), setting)
        if margined is not None:
            source = (
                PriceSource.MARGIN_WHOLESALE if channel is Channel.WHOLESALE else PriceSource.MARGIN_RETAIL
            )
            _log.info(
                "margin applied to product %s: cost %s, %s %s -> %.2f",
                product.product_id, product.purchase_price, setting.value, setting.type.value, margined,
            )
            return ResolvedPrice(margined, source, f"{setting.value:g} {setting.type.value}")

        base = getattr(product, "base_price", None)
        if base is None:
            return ResolvedPrice(0.0, PriceSource.NOT_FOUND, "no price source")
        if float(base) == 0:
            _log.warning("product %s resolves to a zero base price", product.product_id)
        return ResolvedPrice(float(base), PriceSource.BASE)

    def resolve(self, product, customer=None, channel: Channel | None = None) -> ResolvedPrice:
        quote = self._quote(product, customer, self._start(product, customer))
        return self._settle(product, quote, self._channel(customer, channel))

    def resolve_many(self, requests: Iterable[tuple]) -> list[ResolvedPrice]:
        """
        Resolve several (product, customer[, channel]) requests. Lookups are
        issued together; results keep the input order.
        """
        reqs = [tuple(r) + (None,) * (3 - len(r)) for r in requests]
        futures = [self._start(product, customer) for product, customer, _ in reqs]
        out = []
        for (product, customer, channel), fut in zip(reqs, futures):
            quote = self._quote(product, customer, fut)
            out.append(self._settle(product, quote, self._channel(customer, channel)))
        return out
