"""Entry point — glues pystray (daemon thread) with tkinter (main thread)."""

import argparse
import ctypes
import logging
import sys
import threading
from datetime import date

from calendar_window import CalendarWindow
from controller import CalendarController, CalendarState
from icon_gen import create_icon_image
from settings import apply_env_overrides, load_settings, save_settings
from store_client import HttpHolidayStore
from tray_icon import create_tray, update_tray

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Month calendar with remote holidays.")
    parser.add_argument("--store-url", help="Base URL of the holiday store (overrides settings).")
    parser.add_argument("--week-start", type=int, choices=range(7), metavar="0-6",
                        help="First weekday column, 0=Monday .. 6=Sunday.")
    parser.add_argument("--save", action="store_true",
                        help="Remember --store-url / --week-start in the settings file.")
    parser.add_argument("--no-tray", action="store_true", help="Run without a tray icon.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.save:
        stored = load_settings()
        if args.store_url:
            stored["store_url"] = args.store_url
        if args.week_start is not None:
            stored["week_start"] = args.week_start
        save_settings(stored)

    settings = apply_env_overrides(load_settings())
    store_url = args.store_url or settings["store_url"]
    week_start = settings["week_start"] if args.week_start is None else args.week_start

    # DPI awareness so positions / fonts are crisp on Hi-DPI monitors
    if sys.platform == "win32":
        ctypes.windll.shcore.SetProcessDpiAwareness(1)

    store = HttpHolidayStore(store_url, timeout=settings["request_timeout"])
    controller = CalendarController(store)
    cal_win = CalendarWindow(controller, week_start=week_start, withdraw_on_hide=not args.no_tray)
    LOGGER.info("holiday store at %s", store.base_url)

    if args.no_tray:
        cal_win.root.protocol("WM_DELETE_WINDOW", cal_win.shutdown)
        cal_win.show()
        cal_win.refresh()
        cal_win.root.mainloop()
        store.close()
        return

    # Callbacks marshalled onto the tkinter main thread
    def on_show() -> None:
        cal_win.root.after(0, cal_win.toggle)

    def on_today() -> None:
        def _today() -> None:
            controller.go_today()
            cal_win.show()
        cal_win.root.after(0, _today)

    def on_refresh() -> None:
        cal_win.root.after(0, cal_win.refresh)

    def on_exit() -> None:
        def _quit() -> None:
            tray.stop()
            cal_win.shutdown()
        cal_win.root.after(0, _quit)

    tray = create_tray(create_icon_image(), on_show, on_exit,
                       on_refresh=on_refresh, on_today=on_today)

    shown: dict = {"names": None}

    def on_state(state: CalendarState) -> None:
        today = date.today()
        names = [h.name for h in state.index.holidays_on(today)]
        if names != shown["names"]:
            shown["names"] = names
            update_tray(tray, create_icon_image(today, len(names)), names)

    controller.subscribe(on_state)

    # Run pystray in a daemon thread so it doesn't block tkinter
    tray_thread = threading.Thread(target=tray.run, daemon=True)
    tray_thread.start()

    cal_win.show()
    cal_win.refresh()

    # tkinter main loop on the main thread
    cal_win.root.mainloop()
    store.close()


if __name__ == "__main__":
    main()
