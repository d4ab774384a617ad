import pytest

from diski.exceptions import UnknownStatusError
from diski.states import UnitState
from diski.tracker import UnitTracker
from tests.conftest import FakeUnit


async def test_initial_state_is_read_at_creation():
    unit = FakeUnit("mnt-backup.mount", "mounted")

    tracker = await UnitTracker.create(unit, "mount")

    assert tracker.state is UnitState.MOUNTED
    assert unit.reads == 1


async def test_unchanged_status_emits_nothing():
    unit = FakeUnit("mnt-backup.mount", "dead")
    tracker = await UnitTracker.create(unit, "mount")

    assert [await tracker.observe() for _ in range(5)] == [None] * 5
    assert unit.reads == 6


async def test_alternating_status_emits_each_transition_in_order():
    unit = FakeUnit("mnt-backup.automount", "dead")
    tracker = await UnitTracker.create(unit, "automount")
    emitted = []

    for token in ("dead", "waiting", "waiting", "dead", "dead"):
        unit.token = token
        state = await tracker.observe()
        if state is not None:
            emitted.append(state)

    assert emitted == [UnitState.WAITING, UnitState.DEAD]
    assert tracker.state is UnitState.DEAD


async def test_sub_states_with_the_same_classification_are_not_transitions():
    unit = FakeUnit("mnt-backup.mount", "mounting-done")
    tracker = await UnitTracker.create(unit, "mount")

    unit.token = "mounted"

    assert await tracker.observe() is None


async def test_unknown_sub_state_is_fatal():
    unit = FakeUnit("mnt-backup.mount", "dead")
    tracker = await UnitTracker.create(unit, "mount")
    unit.token = "reloading"

    with pytest.raises(UnknownStatusError):
        await tracker.observe()
