from dbus_fast.aio import MessageBus, ProxyInterface

NOTIFICATIONS_BUS_NAME = "org.freedesktop.Notifications"
NOTIFICATIONS_PATH = "/org/freedesktop/Notifications"
NOTIFICATIONS_INTERFACE = "org.freedesktop.Notifications"


class Notifier:
    """Desktop notifications through the session bus notification daemon."""

    def __init__(self, notifications: ProxyInterface, app_name: str, icon: str) -> None:
        self._notifications = notifications
        self.app_name = app_name
        self.icon = icon

    @classmethod
    async def connect(cls, bus: MessageBus, app_name: str, icon: str) -> "Notifier":
        introspection = await bus.introspect(NOTIFICATIONS_BUS_NAME, NOTIFICATIONS_PATH)
        proxy = bus.get_proxy_object(NOTIFICATIONS_BUS_NAME, NOTIFICATIONS_PATH, introspection)
        return cls(proxy.get_interface(NOTIFICATIONS_INTERFACE), app_name, icon)

    async def show(self, summary: str, body: str) -> int:
        # replaces_id 0: always a new bubble; expire_timeout -1: server default
        return await self._notifications.call_notify(
            self.app_name, 0, self.icon, summary, body, [], {}, -1
        )
