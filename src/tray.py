import dataclasses

import gi  # type: ignore[import]

gi.require_version("Gtk", "3.0")

from gi.repository import Gtk  # type: ignore[import]

from diski.config import APP_ID, DEFAULT_ICON
from diski.states import DisplayState, UnitState, UserIntent
from diski.streams import Stream


class DiskTray:
    """
    Status icon with the two unit states and the two actions.

    The menu is informative only apart from "Disconnect" and
    "Enable automount", which push a UserIntent onto `requests` and return.
    """

    def __init__(
        self,
        display_name: str,
        mount: UnitState,
        automount: UnitState,
        requests: Stream,
        icon_name: str = DEFAULT_ICON,
    ) -> None:
        self.state = DisplayState(mount=mount, automount=automount, display_name=display_name)
        self.requests = requests

        self.icon = Gtk.StatusIcon.new_from_icon_name(icon_name)
        self.icon.set_name(APP_ID)
        self.icon.set_title(self.title)
        self.icon.set_tooltip_text(self.title)
        self.icon.connect("activate", self.on_activate)
        self.icon.connect("popup-menu", self.on_popup_menu)
        self.icon.set_visible(True)

        self.menu = self.build_menu()

    @property
    def title(self) -> str:
        return f"{self.state.display_name} Status"

    def update(self, **fields) -> None:
        self.state = dataclasses.replace(self.state, **fields)
        self.icon.set_title(self.title)
        self.icon.set_tooltip_text(f"{self.title}\nMount: {self.state.mount}\nAutomount: {self.state.automount}")
        self.menu = self.build_menu()

    def build_menu(self) -> Gtk.Menu:
        menu = Gtk.Menu()

        for label in (f"Mount: {self.state.mount}", f"Automount: {self.state.automount}"):
            item = Gtk.MenuItem(label=label)
            item.set_sensitive(False)
            menu.append(item)

        menu.append(Gtk.SeparatorMenuItem())

        disconnect = Gtk.MenuItem(label="Disconnect")
        disconnect.connect("activate", self.on_request, UserIntent.PREPARE_DISCONNECT)
        menu.append(disconnect)

        enable = Gtk.MenuItem(label="Enable automount")
        enable.connect("activate", self.on_request, UserIntent.ENABLE_AUTOMOUNTING)
        menu.append(enable)

        menu.show_all()
        return menu

    def on_request(self, widget, intent: UserIntent) -> None:
        self.requests.push(intent)

    # Left click opens the menu as well; there is no other action on the icon.
    def on_activate(self, icon) -> None:
        self.menu.popup(None, None, Gtk.StatusIcon.position_menu, icon, 0, Gtk.get_current_event_time())

    def on_popup_menu(self, icon, button, activate_time) -> None:
        self.menu.popup(None, None, Gtk.StatusIcon.position_menu, icon, button, activate_time)
