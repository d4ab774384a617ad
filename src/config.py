import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path

APP_ID = "diski"
DEFAULT_ICON = "drive-harddisk"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def default_log_dir() -> Path:
    if "DISKI_LOG_DIR" in os.environ:
        return Path(os.environ["DISKI_LOG_DIR"])
    if "XDG_STATE_HOME" in os.environ:
        return Path(os.environ["XDG_STATE_HOME"]) / APP_ID
    return Path("~").expanduser() / ".local/share" / APP_ID


def resolve_log_level(verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    name = os.environ.get("DISKI_LOG_LEVEL", "").strip().upper()
    return _LOG_LEVELS.get(name, logging.INFO)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=APP_ID,
        description="Tray icon showing the state of a systemd mount/automount pair.",
    )
    parser.add_argument("unit", help="unit base name, e.g. mnt-backup for mnt-backup.mount")
    parser.add_argument("display_name", help="name shown in the tray and in notifications")
    parser.add_argument("--icon", default=DEFAULT_ICON, help="icon name (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    parser.add_argument("--no-log-file", action="store_true", help="only log to the terminal")
    return parser.parse_args(argv)


@dataclass(frozen=True)
class Settings:
    unit: str
    display_name: str
    icon: str = DEFAULT_ICON
    log_level: int = logging.INFO
    log_dir: Path | None = None  # None disables the log file

    @property
    def mount_unit(self) -> str:
        return f"{self.unit}.mount"

    @property
    def automount_unit(self) -> str:
        return f"{self.unit}.automount"

    @property
    def log_file(self) -> Path | None:
        if self.log_dir is None:
            return None
        return self.log_dir / f"{self.unit}.log"

    @classmethod
    def from_args(cls, argv: list[str] | None = None) -> "Settings":
        args = parse_args(argv)
        return cls(
            unit=args.unit,
            display_name=args.display_name,
            icon=args.icon,
            log_level=resolve_log_level(args.verbose),
            log_dir=None if args.no_log_file else default_log_dir(),
        )
