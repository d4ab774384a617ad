import logging
from typing import Any

from diski.states import UnitState, classify

logger = logging.getLogger(__name__)


class UnitTracker:
    """
    Last known state of one unit, deduplicating systemd's change signals.

    systemd fires PropertiesChanged for many reasons that leave SubState where
    it was, and a mount passes through sub-states that classify the same
    (mounting-done and mounted). observe() reads the current value after each
    signal and reports a transition only when the classified state moved.
    """

    def __init__(self, unit: Any, field: str, state: UnitState) -> None:
        self.unit = unit
        self.field = field  # DisplayState attribute this unit feeds
        self.state = state

    def __repr__(self) -> str:
        return f"<UnitTracker {self.unit.name}={self.state}>"

    @classmethod
    async def create(cls, unit: Any, field: str) -> "UnitTracker":
        state = classify(await unit.sub_state())
        logger.info("%s is %s", unit.name, state)
        return cls(unit, field, state)

    async def observe(self) -> UnitState | None:
        new = classify(await self.unit.sub_state())
        previous, self.state = self.state, new
        if new == previous:
            logger.debug("%s still %s", self.unit.name, new)
            return None
        logger.info("%s: %s -> %s", self.unit.name, previous, new)
        return new
