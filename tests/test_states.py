import pytest

from diski.exceptions import UnknownStatusError
from diski.states import UnitState, classify


def test_mounted_and_mounting_done_are_both_mounted():
    assert classify("mounted") is UnitState.MOUNTED
    assert classify("mounting-done") is UnitState.MOUNTED


@pytest.mark.parametrize(
    "token,state",
    [
        ("mounting", UnitState.MOUNTING),
        ("unmounting", UnitState.UNMOUNTING),
        ("dead", UnitState.DEAD),
        ("waiting", UnitState.WAITING),
        ("running", UnitState.RUNNING),
        ("failed", UnitState.FAILED),
    ],
)
def test_known_sub_states(token, state):
    assert classify(token) is state


def test_each_state_has_one_source_except_mounted():
    states = [classify(t) for t in ("mounting", "unmounting", "dead", "waiting", "running", "failed")]
    assert len(set(states)) == 6
    assert UnitState.MOUNTED not in states


@pytest.mark.parametrize("token", ["", "Mounted", "active", "auto-restart", "mounted "])
def test_unknown_sub_state_is_rejected(token):
    with pytest.raises(UnknownStatusError) as excinfo:
        classify(token)
    assert excinfo.value.token == token


def test_unknown_sub_state_is_a_value_error():
    with pytest.raises(ValueError):
        classify("elapsed")


def test_state_renders_like_the_menu_label():
    assert f"Mount: {UnitState.MOUNTED}" == "Mount: Mounted"
