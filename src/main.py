#!/usr/bin/python3
import asyncio
import logging
import sys

from dbus_fast import BusType
from dbus_fast.aio import MessageBus
from gi.events import GLibEventLoopPolicy  # type: ignore[import]

from diski.config import APP_ID, Settings
from diski.dispatcher import Dispatcher
from diski.logs import initialize_logging
from diski.notifications import Notifier
from diski.polkit import AuthorizationGate, Subject
from diski.streams import Stream
from diski.systemd import SystemdManager
from diski.tracker import UnitTracker
from diski.tray import DiskTray

logger = logging.getLogger(__name__)


async def run(settings: Settings) -> None:
    system_bus = await MessageBus(bus_type=BusType.SYSTEM).connect()
    session_bus = await MessageBus(bus_type=BusType.SESSION).connect()

    gate = await AuthorizationGate.connect(system_bus, Subject.for_process())
    notifier = await Notifier.connect(session_bus, APP_ID, settings.icon)

    manager = await SystemdManager.connect(system_bus)
    mount = await UnitTracker.create(await manager.get_unit(settings.mount_unit), "mount")
    automount = await UnitTracker.create(
        await manager.get_unit(settings.automount_unit), "automount"
    )

    requests = Stream("requests")
    tray = DiskTray(
        settings.display_name,
        mount.state,
        automount.state,
        requests,
        icon_name=settings.icon,
    )

    await manager.subscribe()

    dispatcher = Dispatcher(
        manager,
        mount,
        automount,
        requests,
        gate,
        notifier,
        tray,
        settings.display_name,
    )
    logger.info("Watching %s and %s", settings.mount_unit, settings.automount_unit)
    await dispatcher.run()


def main() -> None:
    settings = Settings.from_args()
    initialize_logging(settings)

    # GTK callbacks and the coroutines below share the GLib main loop
    asyncio.set_event_loop_policy(GLibEventLoopPolicy())
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception:
        logger.exception("%s stopped", APP_ID)
        sys.exit(1)


if __name__ == "__main__":
    main()
