import logging
from dataclasses import dataclass
from pathlib import Path

import psutil
from dbus_fast import Variant
from dbus_fast.aio import MessageBus, ProxyInterface

POLKIT_BUS_NAME = "org.freedesktop.PolicyKit1"
AUTHORITY_PATH = "/org/freedesktop/PolicyKit1/Authority"
AUTHORITY_INTERFACE = "org.freedesktop.PolicyKit1.Authority"
MANAGE_UNITS_ACTION = "org.freedesktop.systemd1.manage-units"
ALLOW_USER_INTERACTION = 0x1

logger = logging.getLogger(__name__)


def process_start_time(pid: int, proc_root: Path = Path("/proc")) -> int:
    """Start time of `pid` in clock ticks since boot, as polkit expects it."""
    stat = (proc_root / str(pid) / "stat").read_text()
    # comm may contain spaces and parentheses, so split after the last ')'.
    # What remains starts at field 3 (state); starttime is field 22.
    fields = stat[stat.rindex(")") + 2 :].split()
    return int(fields[19])


@dataclass(frozen=True)
class Subject:
    """polkit unix-process subject."""

    pid: int
    start_time: int
    uid: int

    @classmethod
    def for_process(cls, pid: int | None = None) -> "Subject":
        proc = psutil.Process(pid)
        return cls(pid=proc.pid, start_time=process_start_time(proc.pid), uid=proc.uids().real)

    def to_dbus(self) -> list:
        return [
            "unix-process",
            {
                "pid": Variant("u", self.pid),
                "start-time": Variant("t", self.start_time),
                "uid": Variant("i", self.uid),
            },
        ]


class AuthorizationGate:
    """
    Asks polkit whether this process may manage units, letting it prompt the
    user for credentials. Both tray actions share MANAGE_UNITS_ACTION.

    A "no" is an ordinary answer; transport errors propagate.
    """

    def __init__(
        self, authority: ProxyInterface, subject: Subject, action_id: str = MANAGE_UNITS_ACTION
    ) -> None:
        self._authority = authority
        self.subject = subject
        self.action_id = action_id

    @classmethod
    async def connect(cls, bus: MessageBus, subject: Subject) -> "AuthorizationGate":
        introspection = await bus.introspect(POLKIT_BUS_NAME, AUTHORITY_PATH)
        proxy = bus.get_proxy_object(POLKIT_BUS_NAME, AUTHORITY_PATH, introspection)
        return cls(proxy.get_interface(AUTHORITY_INTERFACE), subject)

    async def allows(self) -> bool:
        is_authorized, is_challenge, details = await self._authority.call_check_authorization(
            self.subject.to_dbus(), self.action_id, {}, ALLOW_USER_INTERACTION, ""
        )
        logger.debug(
            "polkit: %s for pid %d -> authorized=%s challenge=%s %s",
            self.action_id,
            self.subject.pid,
            is_authorized,
            is_challenge,
            details,
        )
        return bool(is_authorized)
