import asyncio
import logging
from typing import Any

from diski.jobs import join, wait_for_job
from diski.states import UserIntent
from diski.streams import Stream
from diski.tracker import UnitTracker

logger = logging.getLogger(__name__)

UNMOUNTED_MESSAGE = "Drive has been fully unmounted"
AUTOMOUNT_ENABLED_MESSAGE = "Automounting has been enabled"


class PrioritySelector:
    """
    Wait on several Streams, always taking from the first ready one.

    Sources are checked in the order given on every call, so a ready
    earlier source is served before a later one is even looked at.
    """

    def __init__(self, *sources: tuple[Any, Stream]) -> None:
        self._sources = sources
        self._wakeup = asyncio.Event()
        for _, stream in sources:
            stream.add_waker(self._wakeup)

    async def next(self) -> tuple[Any, Any]:
        while True:
            for key, stream in self._sources:
                if stream.ready():
                    return key, stream.get_nowait()
            self._wakeup.clear()
            await self._wakeup.wait()


class Dispatcher:
    """
    The applet's only control loop.

    Each iteration handles exactly one event, in priority order:
    mount SubState change, automount SubState change, then a tray request.
    Requests go through polkit and then run to completion,
    including waiting for their jobs, before the next event is taken.
    Nothing here recovers from errors; they end run().
    """

    def __init__(
        self,
        manager: Any,
        mount: UnitTracker,
        automount: UnitTracker,
        requests: Stream,
        gate: Any,
        notifier: Any,
        display: Any,
        display_name: str,
    ) -> None:
        self.manager = manager
        self.mount = mount
        self.automount = automount
        self.gate = gate
        self.notifier = notifier
        self.display = display
        self.display_name = display_name
        self.selector = PrioritySelector(
            (mount, mount.unit.changes),
            (automount, automount.unit.changes),
            (None, requests),
        )
        self._actions = {
            UserIntent.PREPARE_DISCONNECT: self.prepare_disconnect,
            UserIntent.ENABLE_AUTOMOUNTING: self.enable_automounting,
        }

    async def run(self) -> None:
        while True:
            await self.step()

    async def step(self) -> None:
        source, item = await self.selector.next()
        if source is None:
            await self.handle_request(item)
        else:
            await self.refresh(source)

    async def refresh(self, tracker: UnitTracker) -> None:
        state = await tracker.observe()
        if state is not None:
            self.display.update(**{tracker.field: state})

    async def handle_request(self, intent: UserIntent) -> None:
        logger.info("Requested %s", intent.value)
        if not await self.gate.allows():
            return
        await self._actions[intent]()

    async def prepare_disconnect(self) -> None:
        # No rollback if only one of the two stops succeeds.
        await join(
            wait_for_job(self.manager, self.automount.unit.stop),
            wait_for_job(self.manager, self.mount.unit.stop),
        )
        await self.notifier.show(self.display_name, UNMOUNTED_MESSAGE)

    async def enable_automounting(self) -> None:
        await wait_for_job(self.manager, self.automount.unit.start)
        await self.notifier.show(self.display_name, AUTOMOUNT_ENABLED_MESSAGE)
