from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import T0
from core.events import (
    WorkPeriodStatus,
    WorkPeriodStatusChanged,
    emit_work_period_event,
    register_work_period_handler,
    utcnow,
    work_period_handlers,
)
from core.exceptions import CostingError, WorkPeriodStateError
from services import lifecycle
from services.consumption import get_current_periodic_consumption, get_periodic_consumption
from services.lifecycle import make_work_period_handler
from services.work_periods import end_work_period, get_current_work_period, start_work_period


class TestWorkPeriodEvents:

    @pytest.mark.asyncio
    async def test_handlers_receive_typed_payload_in_order(self):
        seen = []

        async def first(event):
            seen.append(("first", event.work_period_id, event.new_status))

        def second(event):
            seen.append(("second", event.work_period_id, event.new_status))

        register_work_period_handler(first)
        register_work_period_handler(second)
        register_work_period_handler(first)

        await emit_work_period_event(
            WorkPeriodStatusChanged(work_period_id=7, old_status=WorkPeriodStatus.OPENED, new_status=WorkPeriodStatus.CLOSED)
        )

        assert len(work_period_handlers) == 2
        assert seen == [("first", 7, WorkPeriodStatus.CLOSED), ("second", 7, WorkPeriodStatus.CLOSED)]

    def test_event_timestamp_is_naive_utc(self):
        event = WorkPeriodStatusChanged(work_period_id=1, old_status=None, new_status=WorkPeriodStatus.OPENED)

        assert event.timestamp.tzinfo is None
        assert abs(event.timestamp - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_period_start_defaults_to_now(self, db_session):
        wp = await start_work_period(db_session)

        assert wp.start_date.tzinfo is None
        assert abs(wp.start_date - utcnow()) < timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_handler_failure_propagates(self):
        async def broken(event):
            raise RuntimeError("boom")

        register_work_period_handler(broken)

        with pytest.raises(RuntimeError):
            await emit_work_period_event(
                WorkPeriodStatusChanged(work_period_id=1, old_status=None, new_status=WorkPeriodStatus.OPENED)
            )

    @pytest.mark.asyncio
    async def test_transitions_are_validated(self, db_session):
        await start_work_period(db_session, now=T0)

        with pytest.raises(WorkPeriodStateError):
            await start_work_period(db_session, now=T0 + timedelta(hours=1))

        await end_work_period(db_session, now=T0 + timedelta(hours=8))

        with pytest.raises(WorkPeriodStateError):
            await end_work_period(db_session, now=T0 + timedelta(hours=9))


class TestCostingLifecycle:

    @pytest.mark.asyncio
    async def test_closing_a_period_creates_its_consumption_record(self, db_session, session_maker, burger_setup):
        register_work_period_handler(make_work_period_handler(session_maker))
        await db_session.commit()

        wp = await end_work_period(db_session, now=T0 + timedelta(hours=8))

        async with session_maker() as check:
            pc = await get_periodic_consumption(check, wp.id)
            assert pc is not None
            assert pc.end_date == T0 + timedelta(hours=8)
            assert len(pc.items) == 2
            assert {ci.portion_id for ci in pc.cost_items} == {
                burger_setup["burger"].portions[0].id,
                burger_setup["extra_beef"].portions[0].id,
            }

    @pytest.mark.asyncio
    async def test_opening_a_period_reconciles_the_previous_one(self, db_session, session_maker, burger_setup):
        register_work_period_handler(make_work_period_handler(session_maker))
        await db_session.commit()
        closed = await end_work_period(db_session, now=T0 + timedelta(hours=8))

        async with session_maker() as counting:
            pc = await get_periodic_consumption(counting, closed.id)
            beef = next(p for p in pc.items if p.inventory_item_id == burger_setup["beef"].id)
            beef.physical_inventory = Decimal("18.2")
            await counting.commit()

        opened = await start_work_period(db_session, now=T0 + timedelta(days=1))

        async with session_maker() as check:
            pc = await get_periodic_consumption(check, closed.id)
            burger_ci = next(ci for ci in pc.cost_items if ci.portion_id == burger_setup["burger"].portions[0].id)
            assert burger_ci.cost == Decimal("4.15")
            # the new period has no record until it closes or is asked for
            assert await get_periodic_consumption(check, opened.id) is None

    @pytest.mark.asyncio
    async def test_nothing_happens_without_recipes(self, db_session, session_maker, factory):
        register_work_period_handler(make_work_period_handler(session_maker))
        await factory.inventory_item("Bun")
        await factory.work_period(T0)
        await db_session.commit()

        wp = await end_work_period(db_session, now=T0 + timedelta(hours=8))

        async with session_maker() as check:
            assert await get_periodic_consumption(check, wp.id) is None

    @pytest.mark.asyncio
    async def test_opening_the_first_period_is_a_no_op(self, db_session, session_maker, factory):
        register_work_period_handler(make_work_period_handler(session_maker))
        bun = await factory.inventory_item("Bun")
        burger = await factory.menu_item("Burger")
        await factory.recipe(burger.portions[0], [(bun, "1")])
        await db_session.commit()

        wp = await start_work_period(db_session, now=T0)

        async with session_maker() as check:
            current = await get_current_work_period(check)
            assert current.id == wp.id
            assert current.is_open
            assert await get_periodic_consumption(check, wp.id) is None

    @pytest.mark.asyncio
    async def test_closing_a_period_without_sales(self, db_session, session_maker, factory):
        register_work_period_handler(make_work_period_handler(session_maker))
        bun = await factory.inventory_item("Bun")
        burger = await factory.menu_item("Burger")
        await factory.recipe(burger.portions[0], [(bun, "1")])
        await factory.work_period(T0)
        await db_session.commit()

        wp = await end_work_period(db_session, now=T0 + timedelta(hours=8))

        async with session_maker() as check:
            pc = await get_periodic_consumption(check, wp.id)
            assert pc is not None
            assert [pci.inventory_item_id for pci in pc.items] == [bun.id]
            assert pc.cost_items == []

    @pytest.mark.asyncio
    async def test_closing_stamps_a_record_created_while_open(self, db_session, session_maker, burger_setup):
        register_work_period_handler(make_work_period_handler(session_maker))
        await db_session.commit()
        async with session_maker() as session:
            created = await get_current_periodic_consumption(session, burger_setup["work_period"])
            await session.commit()
        assert created.end_date is None

        wp = await end_work_period(db_session, now=T0 + timedelta(hours=8))

        async with session_maker() as check:
            pc = await get_periodic_consumption(check, wp.id)
            assert pc.id == created.id
            assert pc.end_date == T0 + timedelta(hours=8)
            assert pc.name == "2026-01-05 08:00 - 2026-01-05 16:00"
            assert len(pc.cost_items) == 2

    @pytest.mark.asyncio
    async def test_database_failure_is_reported_as_costing_error(self, db_session, session_maker, burger_setup, monkeypatch):
        async def failing(db, work_period):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(lifecycle, "get_current_periodic_consumption", failing)
        register_work_period_handler(make_work_period_handler(session_maker))
        await db_session.commit()

        with pytest.raises(CostingError):
            await end_work_period(db_session, now=T0 + timedelta(hours=8))

        async with session_maker() as check:
            assert not (await get_current_work_period(check)).is_open
            assert await get_periodic_consumption(check, burger_setup["work_period"].id) is None
