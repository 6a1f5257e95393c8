"""System-tray icon setup via pystray."""

from datetime import date
from typing import Callable

import pystray
from PIL import Image
from pystray import MenuItem, Menu


def tray_title(holiday_names: list[str]) -> str:
    if not holiday_names:
        return "Holiday Calendar"
    return "Holiday Calendar – today: " + ", ".join(holiday_names)


def create_tray(
    icon_image: Image.Image,
    on_show: Callable[[], None],
    on_exit: Callable[[], None],
    on_refresh: Callable[[], None] | None = None,
    on_today: Callable[[], None] | None = None,
) -> pystray.Icon:
    """Build and return a pystray Icon (not yet started)."""
    items: list[MenuItem | Menu] = [
        MenuItem("Show Calendar", lambda _icon, _item: on_show(), default=True),
    ]
    if on_today is not None:
        items.append(MenuItem(f"Today ({date.today():%d/%m/%Y})",
                              lambda _icon, _item: on_today()))
    if on_refresh is not None:
        items.append(MenuItem("Refresh Holidays", lambda _icon, _item: on_refresh()))
    items.append(Menu.SEPARATOR)
    items.append(MenuItem("Exit", lambda _icon, _item: on_exit()))
    menu = Menu(*items)
    return pystray.Icon("holiday-calendar", icon_image, tray_title([]), menu)


def update_tray(icon: pystray.Icon, image: Image.Image, holiday_names: list[str]) -> None:
    """Swap the icon image and hover title after the holiday collection changed."""
    icon.icon = image
    icon.title = tray_title(holiday_names)
