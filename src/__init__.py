# diski: tray applet supervising a systemd mount/automount unit pair
