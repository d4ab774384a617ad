import dataclasses
import enum

from diski.exceptions import UnknownStatusError


class UnitState(enum.Enum):
    MOUNTED = "Mounted"
    MOUNTING = "Mounting"
    UNMOUNTING = "Unmounting"
    DEAD = "Dead"
    WAITING = "Waiting"
    RUNNING = "Running"
    FAILED = "Failed"

    def __str__(self) -> str:
        return self.value


# systemd SubState -> UnitState. "mounting-done" is the short window after
# the mount syscall returned but before the unit settles on "mounted".
_SUB_STATES = {
    "mounted": UnitState.MOUNTED,
    "mounting-done": UnitState.MOUNTED,
    "mounting": UnitState.MOUNTING,
    "unmounting": UnitState.UNMOUNTING,
    "dead": UnitState.DEAD,
    "waiting": UnitState.WAITING,
    "running": UnitState.RUNNING,
    "failed": UnitState.FAILED,
}


def classify(token: str) -> UnitState:
    # The sub-state vocabulary is assumed closed; anything else is fatal.
    try:
        return _SUB_STATES[token]
    except KeyError:
        raise UnknownStatusError(token) from None


class UserIntent(enum.Enum):
    PREPARE_DISCONNECT = "PrepareDisconnect"
    ENABLE_AUTOMOUNTING = "EnableAutomounting"


@dataclasses.dataclass(frozen=True)
class DisplayState:
    """What the tray shows. Only ever replaced field-wise, never read back."""

    mount: UnitState
    automount: UnitState
    display_name: str
