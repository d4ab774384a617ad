import asyncio
import logging

from dbus_fast import Variant
from dbus_fast.aio import MessageBus, ProxyInterface

from diski.jobs import JobRemoved, JobSubscription
from diski.streams import Stream

SYSTEMD_BUS_NAME = "org.freedesktop.systemd1"
SYSTEMD_PATH = "/org/freedesktop/systemd1"
MANAGER_INTERFACE = "org.freedesktop.systemd1.Manager"
UNIT_INTERFACE = "org.freedesktop.systemd1.Unit"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
JOB_MODE = "replace"

logger = logging.getLogger(__name__)


class SystemdManager:
    """
    The systemd Manager object on the system bus.

    Owns every signal-fed Stream handed out for it so that all of them end
    together when the bus connection drops. JobRemoved is subscribed to once;
    each open JobSubscription gets its own copy of every event.
    """

    def __init__(self, bus: MessageBus, manager: ProxyInterface) -> None:
        self.bus = bus
        self._manager = manager
        self._streams: set[Stream] = set()
        self._job_streams: set[Stream] = set()
        self._manager.on_job_removed(self._on_job_removed)
        self._disconnect_watch = asyncio.ensure_future(self._watch_disconnect())

    @classmethod
    async def connect(cls, bus: MessageBus) -> "SystemdManager":
        introspection = await bus.introspect(SYSTEMD_BUS_NAME, SYSTEMD_PATH)
        proxy = bus.get_proxy_object(SYSTEMD_BUS_NAME, SYSTEMD_PATH, introspection)
        return cls(bus, proxy.get_interface(MANAGER_INTERFACE))

    async def subscribe(self) -> None:
        # systemd only broadcasts JobRemoved to clients that called Subscribe()
        await self._manager.call_subscribe()

    async def get_unit(self, name: str) -> "SystemdUnit":
        path = await self._manager.call_get_unit(name)
        introspection = await self.bus.introspect(SYSTEMD_BUS_NAME, path)
        proxy = self.bus.get_proxy_object(SYSTEMD_BUS_NAME, path, introspection)
        logger.info("Resolved %s to %s", name, path)
        return SystemdUnit(
            name,
            proxy.get_interface(UNIT_INTERFACE),
            proxy.get_interface(PROPERTIES_INTERFACE),
            self.open_stream(f"{name} SubState"),
        )

    def open_stream(self, name: str) -> Stream:
        stream = Stream(name)
        self._streams.add(stream)
        if not self.bus.connected:
            stream.close()
        return stream

    def job_removed(self) -> JobSubscription:
        stream = self.open_stream("JobRemoved")
        self._job_streams.add(stream)
        return JobSubscription(stream, self._release)

    def _release(self, stream: Stream) -> None:
        self._job_streams.discard(stream)
        self._streams.discard(stream)

    def _on_job_removed(self, job_id: int, job: str, unit: str, result: str) -> None:
        event = JobRemoved(id=job_id, job=job, unit=unit, result=result)
        for stream in list(self._job_streams):
            stream.push(event)

    async def _watch_disconnect(self) -> None:
        try:
            await self.bus.wait_for_disconnect()
        except Exception as e:
            logger.error("System bus connection lost: %s", e)
        else:
            logger.info("System bus disconnected")
        for stream in list(self._streams):
            stream.close()


class SystemdUnit:
    """
    One loaded unit. `changes` receives the unit name every time systemd
    announces that SubState changed; the value itself is re-read with
    sub_state() since the signal may only invalidate it.
    """

    def __init__(
        self,
        name: str,
        unit: ProxyInterface,
        properties: ProxyInterface,
        changes: Stream,
    ) -> None:
        self.name = name
        self._unit = unit
        self.changes = changes
        properties.on_properties_changed(self._on_properties_changed)

    def __repr__(self) -> str:
        return f"<SystemdUnit {self.name}>"

    def _on_properties_changed(
        self, interface: str, changed: dict[str, Variant], invalidated: list[str]
    ) -> None:
        if interface != UNIT_INTERFACE:
            return
        if "SubState" in changed or "SubState" in invalidated:
            self.changes.push(self.name)

    async def sub_state(self) -> str:
        return await self._unit.get_sub_state()

    async def start(self) -> str:
        return await self._unit.call_start(JOB_MODE)

    async def stop(self) -> str:
        return await self._unit.call_stop(JOB_MODE)
