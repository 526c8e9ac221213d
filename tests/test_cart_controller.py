import pytest

from ceramic_pos.core.line_items import CartonPolicy
from ceramic_pos.core.pricing import MarginSetting, MarginType, PriceSource
from ceramic_pos.core.units import UnitKind
from ceramic_pos.database.repositories.products_repo import DomainError
from ceramic_pos.modules.cart import CartController, summarize


@pytest.fixture()
def make_cart(qapp, conn):
    made = []

    def _make(**kw):
        kw.setdefault("timeout", 2.0)
        c = CartController.from_connection(conn, **kw)
        made.append(c)
        return c

    yield _make
    for c in made:
        c.close()


def test_sale_line_priced_before_insert(make_cart, ids):
    cart = make_cart()
    row = cart.add_product(ids["marble"])
    ln = cart.model.at(row)
    assert ln.unit is UnitKind.AREA
    assert ln.packaging.pieces_per_carton == 4
    assert (ln.unit_price, ln.price_source) == (1000, PriceSource.BASE)
    assert ln.line_total == 1000


def test_duplicate_product_ignored(make_cart, ids):
    cart = make_cart()
    assert cart.add_product(ids["glue"]) == 0
    assert cart.add_product(ids["glue"]) is None
    assert cart.model.rowCount() == 1


def test_unknown_product(make_cart):
    with pytest.raises(DomainError):
        make_cart().add_product(424242)


def test_customer_switch_reprices(make_cart, pricing, ids, record_sale):
    pricing.set_custom_price(ids["retail"], ids["marble"], 900)
    record_sale(ids["retail"], ids["porcelain"], 2400)

    cart = make_cart()
    cart.add_product(ids["marble"], quantity=14.4)
    cart.add_product(ids["porcelain"])
    cart.add_manual_line("Delivery", "150")

    cart.set_customer(ids["retail"])
    marble, porcelain, delivery = cart.model.lines()
    assert (marble.unit_price, marble.price_source) == (900, PriceSource.CUSTOM)
    assert marble.line_total == 12960
    assert (porcelain.unit_price, porcelain.price_source) == (2400, PriceSource.HISTORY)
    assert (delivery.unit_price, delivery.price_source) == (150, PriceSource.MANUAL)

    cart.set_customer(None)
    assert cart.model.at(0).price_source is PriceSource.BASE


def test_unknown_customer(make_cart):
    with pytest.raises(DomainError):
        make_cart().set_customer(424242)


def test_margins_read_once_per_session(make_cart, settings, ids):
    settings.update_margins(retail=MarginSetting(25, MarginType.PERCENT))
    cart = make_cart()
    settings.update_margins(retail=MarginSetting(0, MarginType.PERCENT))

    ln = cart.model.at(cart.add_product(ids["marble"]))
    assert ln.price_source is PriceSource.MARGIN_RETAIL
    assert ln.unit_price == pytest.approx(1000)


def test_wholesale_customer_margin(make_cart, settings, ids):
    settings.update_margins(wholesale=MarginSetting(100, MarginType.AMOUNT))
    cart = make_cart()
    cart.set_customer(ids["wholesale"])
    ln = cart.model.at(cart.add_product(ids["glue"]))
    assert (ln.unit_price, ln.price_source) == (600, PriceSource.MARGIN_WHOLESALE)


def test_purchase_uses_cost_and_pallet_default(make_cart, ids):
    cart = make_cart(doc_kind="purchase")
    ln = cart.model.at(cart.add_product(ids["nopallet"]))
    assert (ln.unit_price, ln.price_source) == (200, PriceSource.BASE)
    assert ln.packaging.cartons_per_palette == 36
    assert ln.packaging.estimated

    sale = make_cart()
    assert sale.model.at(sale.add_product(ids["nopallet"])).packaging.cartons_per_palette == 0


def test_return_counts_whole_cartons(make_cart, ids):
    cart = make_cart(doc_kind="return")
    assert cart.policy is CartonPolicy.FLOOR
    ln = cart.model.at(cart.add_product(ids["marble"], quantity=14.5))
    assert ln.cartons == 10
    assert ln.pallets == 0


def test_bad_doc_kind(qapp, conn):
    with pytest.raises(ValueError):
        CartController.from_connection(conn, doc_kind="quotation")


@pytest.mark.parametrize(
    "args",
    [("", "10"), ("Cutting", "-5"), ("Cutting", "x"), ("Cutting", "10", "kg")],
)
def test_manual_line_validation(make_cart, args):
    with pytest.raises(DomainError):
        make_cart().add_manual_line(*args)


def test_totals(qtbot, make_cart, ids):
    cart = make_cart()
    cart.add_product(ids["marble"], quantity=14.4)       # 10 ctn, 40 pcs
    with qtbot.waitSignal(cart.totals_changed) as blocker:
        cart.add_manual_line("Delivery", 150)
    t = blocker.args[0]
    assert t.amount == 14550
    assert t.cartons == 10
    assert t.pieces == pytest.approx(41)
    assert t.area == pytest.approx(14.4)
    assert t.below_cost_count == 0

    cart.model.setData(cart.model.index(0, 7), "700")
    assert cart.totals().below_cost_count == 1
    cart.remove(0)
    assert cart.totals() == summarize(cart.model.lines())
    assert cart.totals().amount == 150
