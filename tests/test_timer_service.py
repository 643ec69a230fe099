"""
Tests for the timer service.
"""

import datetime
import pytest
import pytest_asyncio

from timekeeper.domain.models import ProjectCreate, UserPreferences
from timekeeper.infra.bootstrap import initialize_database
from timekeeper.infra.repository import Database
from timekeeper.services.timer_service import DEFAULT_DESCRIPTION, TimerService


@pytest_asyncio.fixture
async def db(local_store):
    database = Database(local_store)
    await initialize_database(database)  # demo customers c1..c3, projects p1..p4
    return database


@pytest.fixture
def timer(db, clock):
    return TimerService(db, UserPreferences(user_id="u1"), clock=clock)


@pytest.mark.asyncio
async def test_stop_creates_entry_with_inherited_customer(timer, db, clock):
    timer.start("Homepage layout")
    clock.advance(125)
    stop_time = clock.now

    entry = await timer.stop(project_id="p1")

    assert entry.duration == 125
    assert entry.end_time == stop_time
    assert entry.start_time == stop_time - datetime.timedelta(seconds=125)
    project = await db.projects.get_by_id("p1")
    assert entry.customer_id == project.customer_id == "c1"
    assert entry.user_id == "u1"
    assert entry.description == "Homepage layout"
    assert await db.time_entries.get_all() == [entry]
    assert not timer.is_tracking()


@pytest.mark.asyncio
async def test_project_chosen_at_start(timer, clock):
    timer.start(project_id="p3", billable=False)
    clock.advance(60)

    entry = await timer.stop()

    assert entry.project_id == "p3"
    assert entry.customer_id == "c2"
    assert entry.billable is False
    assert entry.description == DEFAULT_DESCRIPTION


@pytest.mark.asyncio
async def test_explicit_customer_overrides_project(timer, clock):
    timer.start(project_id="p1")
    clock.advance(30)

    entry = await timer.stop(customer_id="c3")

    assert entry.customer_id == "c3"


@pytest.mark.asyncio
async def test_elapsed_seconds(timer, clock):
    assert timer.elapsed_seconds() == 0
    timer.start()
    clock.advance(90)
    assert timer.elapsed_seconds() == 90


@pytest.mark.asyncio
async def test_stop_without_elapsed_time_saves_nothing(timer, db):
    timer.start(project_id="p1")

    assert await timer.stop() is None
    assert await db.time_entries.get_all() == []
    assert not timer.is_tracking()


@pytest.mark.asyncio
async def test_stop_when_idle(timer):
    assert await timer.stop() is None


@pytest.mark.asyncio
async def test_start_twice_is_an_error(timer):
    timer.start()
    with pytest.raises(RuntimeError):
        timer.start()


@pytest.mark.asyncio
async def test_unknown_project_is_rejected(timer, db, clock):
    timer.start()
    clock.advance(10)

    with pytest.raises(ValueError):
        await timer.stop(project_id="nope")
    assert await db.time_entries.get_all() == []


@pytest.mark.asyncio
async def test_missing_project_is_rejected(timer, clock):
    timer.start()
    clock.advance(10)

    with pytest.raises(ValueError):
        await timer.stop()


@pytest.mark.asyncio
async def test_internal_project_needs_explicit_customer(timer, db, clock):
    internal = await db.projects.create(ProjectCreate(name="Admin"))

    with pytest.raises(ValueError):
        await timer.add_manual_entry(minutes=15, project_id=internal.id)

    entry = await timer.add_manual_entry(minutes=15, project_id=internal.id, customer_id="c1")
    assert entry.customer_id == "c1"


@pytest.mark.asyncio
async def test_manual_entry(timer, clock):
    entry = await timer.add_manual_entry(hours=2, minutes=15, description="Workshop", project_id="p2")

    assert entry.duration == 8100
    assert entry.end_time == clock.now
    assert entry.end_time - entry.start_time == datetime.timedelta(seconds=8100)
    assert entry.customer_id == "c1"


@pytest.mark.asyncio
async def test_manual_entry_of_zero_time(timer, db):
    assert await timer.add_manual_entry(project_id="p1") is None
    assert await db.time_entries.get_all() == []


@pytest.mark.asyncio
async def test_manual_entry_rejects_negative_values(timer):
    with pytest.raises(ValueError):
        await timer.add_manual_entry(hours=-1, minutes=30, project_id="p1")
