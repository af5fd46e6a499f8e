from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import T0
from services.sales import get_sales


def _by_key(sales):
    return {(s.menu_item_id, s.portion_name): s for s in sales}


class TestSalesAggregation:

    @pytest.mark.asyncio
    async def test_orders_are_summed_per_menu_item_and_portion(self, db_session, burger_setup):
        sales = _by_key(await get_sales(db_session, burger_setup["work_period"]))

        burger = sales[(burger_setup["burger"].id, "Regular")]
        assert burger.total == Decimal("5")
        assert burger.menu_item_name == "Burger"

    @pytest.mark.asyncio
    async def test_tag_values_add_tag_quantity_times_order_quantity(self, db_session, burger_setup):
        sales = _by_key(await get_sales(db_session, burger_setup["work_period"]))

        extra = sales[(burger_setup["extra_beef"].id, "Regular")]
        assert extra.total == Decimal("2")
        assert extra.menu_item_name == "Extra Beef"
        assert len(sales) == 2

    @pytest.mark.asyncio
    async def test_tag_value_merges_into_existing_sale(self, db_session, factory, make_order, make_tag, burger_setup):
        extra_beef = burger_setup["extra_beef"]
        await factory.ticket(
            T0 + timedelta(hours=3),
            make_order(extra_beef, "Regular", "4"),
            make_order(burger_setup["burger"], "Regular", "1", make_tag(extra_beef.id, "Regular", "3")),
        )

        sales = await get_sales(db_session, burger_setup["work_period"])
        extras = [s for s in sales if s.menu_item_id == extra_beef.id]

        assert len(extras) == 1
        # 4 sold directly, 2 x 1 and 1 x 3 via tags
        assert extras[0].total == Decimal("9")

    @pytest.mark.asyncio
    async def test_unknown_tag_portion_falls_back_to_first_portion(self, db_session, factory, make_order, make_tag):
        bun = await factory.inventory_item("Bun")
        burger = await factory.menu_item("Burger")
        cheese = await factory.menu_item("Cheese", ("Slice", "Double"))
        await factory.recipe(burger.portions[0], [(bun, "1")])
        wp = await factory.work_period(T0)
        await factory.ticket(
            T0 + timedelta(hours=1),
            make_order(burger, "Regular", "2", make_tag(cheese.id, "Jumbo", "1.5")),
        )

        sales = _by_key(await get_sales(db_session, wp))

        assert sales[(cheese.id, "Slice")].total == Decimal("3")
        assert (cheese.id, "Jumbo") not in sales

    @pytest.mark.asyncio
    async def test_label_tags_are_ignored(self, db_session, factory, make_order, make_tag):
        bun = await factory.inventory_item("Bun")
        burger = await factory.menu_item("Burger")
        await factory.recipe(burger.portions[0], [(bun, "1")])
        wp = await factory.work_period(T0)
        await factory.ticket(T0 + timedelta(hours=1), make_order(burger, "Regular", "2", make_tag(0, None, "1", "No onions")))

        sales = await get_sales(db_session, wp)

        assert [(s.menu_item_id, s.total) for s in sales] == [(burger.id, Decimal("2"))]

    @pytest.mark.asyncio
    async def test_orders_without_recipe_or_inventory_flag_are_excluded(self, db_session, factory, make_order):
        bun = await factory.inventory_item("Bun")
        burger = await factory.menu_item("Burger")
        soda = await factory.menu_item("Soda")
        await factory.recipe(burger.portions[0], [(bun, "1")])
        wp = await factory.work_period(T0)
        await factory.ticket(
            T0 + timedelta(hours=1),
            make_order(burger, "Regular", "2"),
            make_order(burger, "Regular", "7", decrease_inventory=False),
            make_order(soda, "Regular", "5"),
        )

        sales = await get_sales(db_session, wp)

        assert [(s.menu_item_id, s.total) for s in sales] == [(burger.id, Decimal("2"))]

    @pytest.mark.asyncio
    async def test_only_tickets_inside_the_period_count(self, db_session, factory, make_order):
        bun = await factory.inventory_item("Bun")
        burger = await factory.menu_item("Burger")
        await factory.recipe(burger.portions[0], [(bun, "1")])
        wp = await factory.work_period(T0, T0 + timedelta(hours=8))
        await factory.ticket(T0 - timedelta(hours=1), make_order(burger, "Regular", "10"))
        await factory.ticket(T0 + timedelta(hours=1), make_order(burger, "Regular", "1"))
        await factory.ticket(T0 + timedelta(hours=9), make_order(burger, "Regular", "100"))

        sales = await get_sales(db_session, wp)

        assert sales[0].total == Decimal("1")
