"""Month calendar window (tkinter) with holiday badges and add/list dialogs.

The window is a pure rendering of ``CalendarState``: every click is forwarded
to the controller and the controller's listener call re-renders. The asyncio
loop that runs the controller's store calls is pumped from ``root.after`` so
all state changes happen on the tkinter thread.
"""

from __future__ import annotations

import asyncio
from datetime import date
from tkinter import font as tkfont
import tkinter as tk
from typing import Coroutine

from calendar_logic import (
    build_month_grid,
    format_exchange_date,
    month_title,
    weekday_headers,
    weeks,
)
from controller import Adding, CalendarController, CalendarState, Viewing

# Colours
ACCENT = "#0078D4"
HEADER_BG = "#F3F3F3"
GRID_BG = "white"
OUTSIDE_FG = "#AAAAAA"
WEEKEND_FG = "#CC0000"
BADGE_BG = "#D93025"
ADD_FG = "#2E7D32"
ERROR_FG = "#B00020"

CELL_W = 64
CELL_H = 48
_PUMP_MS = 20


class _MonthPanel:
    """Pre-allocated widget pool for one month (weekday header + 6 weeks max)."""

    __slots__ = ("frame", "day_headers", "day_cells")

    def __init__(self, parent: tk.Frame, fonts: dict, on_click) -> None:
        self.frame = tk.Frame(parent, bg=GRID_BG)

        self.day_headers: list[tk.Label] = []
        for col in range(7):
            lbl = tk.Label(self.frame, font=fonts["bold"], bg=GRID_BG, width=6)
            lbl.grid(row=0, column=col)
            self.day_headers.append(lbl)

        self.day_cells: list[list[tk.Canvas]] = []
        for r in range(6):
            row_cells: list[tk.Canvas] = []
            for c in range(7):
                cell = tk.Canvas(
                    self.frame, width=CELL_W, height=CELL_H, bg=GRID_BG,
                    highlightthickness=1, highlightbackground="#E0E0E0", borderwidth=0,
                )
                cell.grid(row=r + 1, column=c, padx=1, pady=1)
                cell.bind("<ButtonRelease-1>", on_click)
                row_cells.append(cell)
            self.day_cells.append(row_cells)


class CalendarWindow:
    """Single-month holiday calendar driven by a :class:`CalendarController`."""

    def __init__(self, controller: CalendarController, week_start: int = 0,
                 withdraw_on_hide: bool = True) -> None:
        self.controller = controller
        self.week_start = week_start
        # Without a tray icon a withdrawn window could not be brought back
        self._withdraw_on_hide = withdraw_on_hide

        self.root = tk.Tk()
        self.root.title("Holiday Calendar")
        self.root.resizable(False, False)
        self.root.configure(bg=GRID_BG)
        self._setup_fonts()

        self._loop = asyncio.new_event_loop()
        self._tasks: set[asyncio.Task] = set()
        self._pump_id: str | None = None

        # Widget-to-date mapping (filled during render)
        self._widget_dates: dict[int, date] = {}

        # Modal currently on screen and the state key it was built for
        self._dialog: tk.Toplevel | None = None
        self._dialog_key: tuple | None = None
        self._dialog_error: tk.Label | None = None
        self._save_button: tk.Button | None = None

        self._build_shell()
        self._unsubscribe = controller.subscribe(self.render)
        self.render(controller.state)

        self.root.bind("<Escape>", self._on_escape)
        self.root.protocol("WM_DELETE_WINDOW", self.hide)
        self.root.withdraw()
        self._pump()

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------
    def _setup_fonts(self) -> None:
        families = tkfont.families(self.root)
        base = "Segoe UI" if "Segoe UI" in families else "TkDefaultFont"
        self.font_normal = tkfont.Font(family=base, size=10)
        self.font_bold = tkfont.Font(family=base, size=10, weight="bold")
        self.font_header = tkfont.Font(family=base, size=12, weight="bold")
        self.font_nav = tkfont.Font(family=base, size=12, weight="bold")
        self.font_small = tkfont.Font(family=base, size=8, weight="bold")

    # ------------------------------------------------------------------
    # asyncio integration
    # ------------------------------------------------------------------
    def _pump(self) -> None:
        """Run one pass of ready asyncio callbacks, then reschedule."""
        self._loop.call_soon(self._loop.stop)
        self._loop.run_forever()
        self._pump_id = self.root.after(_PUMP_MS, self._pump)

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ------------------------------------------------------------------
    # Build shell (once) — nav bar + month panel + footer
    # ------------------------------------------------------------------
    def _build_shell(self) -> None:
        outer = tk.Frame(self.root, bg=GRID_BG)
        outer.pack(padx=8, pady=6)

        nav = tk.Frame(outer, bg=HEADER_BG)
        nav.pack(fill="x", pady=(0, 4))

        btn_prev = tk.Label(nav, text="◀", font=self.font_nav, bg=HEADER_BG, cursor="hand2")
        btn_prev.pack(side="left", padx=6)
        btn_prev.bind("<Button-1>", lambda _e: self.controller.navigate(-1))

        btn_today = tk.Label(
            nav, text="Today", font=self.font_bold, bg=HEADER_BG, fg=ACCENT, cursor="hand2",
        )
        btn_today.pack(side="left", padx=6)
        btn_today.bind("<Button-1>", lambda _e: self.controller.go_today())

        btn_next = tk.Label(nav, text="▶", font=self.font_nav, bg=HEADER_BG, cursor="hand2")
        btn_next.pack(side="right", padx=6)
        btn_next.bind("<Button-1>", lambda _e: self.controller.navigate(1))

        btn_refresh = tk.Label(
            nav, text="⟳", font=self.font_nav, bg=HEADER_BG, cursor="hand2",
        )
        btn_refresh.pack(side="right", padx=6)
        btn_refresh.bind("<Button-1>", lambda _e: self.refresh())

        self._title_label = tk.Label(nav, font=self.font_header, bg=HEADER_BG, fg="#333333")
        self._title_label.pack(side="left", expand=True)

        self._panel = _MonthPanel(outer, {"bold": self.font_bold}, self._on_cell_click)
        self._panel.frame.pack()

        self._footer_label = tk.Label(outer, font=self.font_normal, bg=GRID_BG, fg="#555555")
        self._footer_label.pack(pady=(4, 0))
        self._footer_label.bind("<Button-1>", lambda _e: self.controller.dismiss_error())

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------
    def render(self, state: CalendarState) -> None:
        self._title_label.configure(text=month_title(state.reference_month))
        self._fill_panel(state)
        self._footer_label.configure(**self._footer(state))
        self._sync_dialog(state)

    def _fill_panel(self, state: CalendarState) -> None:
        """Reconfigure the pooled cells — no widget creation."""
        panel = self._panel
        ws = self.week_start
        for col, abbr in enumerate(weekday_headers(ws)):
            is_weekend = (ws + col) % 7 >= 5
            panel.day_headers[col].configure(text=abbr, fg=WEEKEND_FG if is_weekend else "#333333")

        self._widget_dates.clear()
        rows = weeks(build_month_grid(state.reference_month, ws))
        today = date.today()
        month = state.reference_month.month

        for r in range(6):
            for c in range(7):
                cell = panel.day_cells[r][c]
                if r >= len(rows):
                    cell.delete("all")
                    cell.grid_remove()
                    continue
                cell.grid()
                d = rows[r][c]
                self._widget_dates[id(cell)] = d
                bg, fg = self._day_colors(d == today, d.weekday() >= 5, d.month == month)
                self._draw_cell(cell, d, bg, fg, state.index.count_on(d))

    @staticmethod
    def _day_colors(is_today: bool, is_weekend: bool, in_month: bool) -> tuple[str, str]:
        if is_today:
            return ACCENT, "white"
        if not in_month:
            return GRID_BG, OUTSIDE_FG
        if is_weekend:
            return GRID_BG, WEEKEND_FG
        return GRID_BG, "black"

    def _draw_cell(self, cell: tk.Canvas, d: date, bg: str, fg: str, count: int) -> None:
        cell.delete("all")
        cell.configure(bg=bg, cursor="hand2" if count else "")
        cell.create_text(6, 4, text=str(d.day), anchor="nw", fill=fg,
                         font=self.font_bold if fg == "white" else self.font_normal)
        if count:
            x, y, r = CELL_W - 12, 12, 9
            cell.create_oval(x - r, y - r, x + r, y + r, fill=BADGE_BG, outline="")
            cell.create_text(x, y, text=str(count), fill="white", font=self.font_small)
        cell.create_text(CELL_W - 6, CELL_H - 4, text="+", anchor="se",
                         fill=ADD_FG if fg != "white" else "white",
                         font=self.font_bold, tags=("add",))

    def _footer(self, state: CalendarState) -> dict:
        if state.error:
            return {"text": f"{state.error}  (click to dismiss)", "fg": ERROR_FG}
        if state.loading:
            return {"text": "Loading holidays…", "fg": "#555555"}
        in_month = sum(
            state.index.count_on(d) for d in state.index.days()
            if (d.year, d.month) == (state.reference_month.year, state.reference_month.month)
        )
        today_str = f"Today: {format_exchange_date(date.today())}"
        plural = "s" if in_month != 1 else ""
        return {"text": f"{in_month} holiday{plural} this month     {today_str}", "fg": "#555555"}

    # ------------------------------------------------------------------
    # Cell clicks: "+" opens the add form, anything else the holiday list
    # ------------------------------------------------------------------
    def _on_cell_click(self, event: tk.Event) -> None:
        d = self._widget_dates.get(id(event.widget))
        if d is None:
            return
        hit = event.widget.find_overlapping(event.x - 3, event.y - 3, event.x + 3, event.y + 3)
        if any("add" in event.widget.gettags(item) for item in hit):
            self.controller.open_add(d)
        else:
            self.controller.open_view(d)

    # ------------------------------------------------------------------
    # Dialogs
    # ------------------------------------------------------------------
    @staticmethod
    def _dialog_key_for(state: CalendarState) -> tuple | None:
        modal = state.active_modal
        if isinstance(modal, Adding):
            return ("add", modal.day)
        if isinstance(modal, Viewing):
            return ("view", modal.day, modal.holidays)
        return None

    def _sync_dialog(self, state: CalendarState) -> None:
        key = self._dialog_key_for(state)
        if key != self._dialog_key:
            self._destroy_dialog()
            if isinstance(state.active_modal, Adding):
                self._open_add_dialog(state.active_modal)
            elif isinstance(state.active_modal, Viewing):
                self._open_list_dialog(state.active_modal)
            self._dialog_key = key
        if self._dialog_error is not None:
            self._dialog_error.configure(text=state.error or "")
        if self._save_button is not None and isinstance(state.active_modal, Adding):
            saving = state.active_modal.saving
            self._save_button.configure(
                state="disabled" if saving else "normal", text="Saving…" if saving else "Save",
            )

    def _destroy_dialog(self) -> None:
        if self._dialog is not None:
            self._dialog.destroy()
        self._dialog = None
        self._dialog_error = None
        self._save_button = None

    def _new_dialog(self, title: str, on_close) -> tk.Frame:
        dlg = tk.Toplevel(self.root)
        dlg.title(title)
        dlg.resizable(False, False)
        dlg.transient(self.root)
        dlg.protocol("WM_DELETE_WINDOW", on_close)
        dlg.bind("<Escape>", lambda _e: on_close())
        self._dialog = dlg

        frame = tk.Frame(dlg, padx=12, pady=8)
        frame.pack(fill="both")
        return frame

    def _open_add_dialog(self, modal: Adding) -> None:
        frame = self._new_dialog("Add Holiday", self.controller.cancel_add)

        tk.Label(
            frame, text=f"Add Holiday for {format_exchange_date(modal.day)}",
            font=self.font_header,
        ).pack(anchor="w", pady=(0, 6))

        name_var = tk.StringVar(value=modal.draft_name)
        entry = tk.Entry(frame, textvariable=name_var, width=32, font=self.font_normal)
        entry.pack(fill="x", pady=(0, 4))
        name_var.trace_add("write", lambda *_a: self.controller.update_draft(name_var.get()))

        self._dialog_error = tk.Label(frame, fg=ERROR_FG, font=self.font_normal, anchor="w")
        self._dialog_error.pack(fill="x")

        btn_frame = tk.Frame(frame)
        btn_frame.pack(anchor="e", pady=(6, 0))
        tk.Button(btn_frame, text="Cancel", width=8, command=self.controller.cancel_add).pack(
            side="left", padx=4,
        )
        self._save_button = tk.Button(btn_frame, text="Save", width=8, command=self._on_save)
        self._save_button.pack(side="left", padx=4)
        entry.bind("<Return>", lambda _e: self._on_save())
        entry.focus_set()

    def _on_save(self) -> None:
        modal = self.controller.state.active_modal
        if isinstance(modal, Adding) and modal.saving:
            return
        self.spawn(self.controller.submit_add())

    def _open_list_dialog(self, modal: Viewing) -> None:
        frame = self._new_dialog("Holidays", self.controller.close_view)

        tk.Label(
            frame, text=f"Holidays for {format_exchange_date(modal.day)}",
            font=self.font_header,
        ).pack(anchor="w", pady=(0, 6))

        for holiday in modal.holidays:
            row = tk.Frame(frame)
            row.pack(fill="x")
            tk.Label(row, text=holiday.name, font=self.font_normal, anchor="w").pack(
                side="left", fill="x", expand=True,
            )
            tk.Button(
                row, text="×", fg=ERROR_FG, relief="flat", cursor="hand2",
                command=lambda hid=holiday.id: self.spawn(self.controller.delete_holiday(hid)),
            ).pack(side="right")

        self._dialog_error = tk.Label(frame, fg=ERROR_FG, font=self.font_normal, anchor="w")
        self._dialog_error.pack(fill="x", pady=(4, 0))

        btn_frame = tk.Frame(frame)
        btn_frame.pack(anchor="e", pady=(6, 0))
        tk.Button(
            btn_frame, text="Add…", width=8,
            command=lambda: self.controller.open_add(modal.day),
        ).pack(side="left", padx=4)
        tk.Button(btn_frame, text="Close", width=8, command=self.controller.close_view).pack(
            side="left", padx=4,
        )

    # ------------------------------------------------------------------
    # ESC closes the open dialog first, then hides
    # ------------------------------------------------------------------
    def _on_escape(self, _event: tk.Event) -> None:
        modal = self.controller.state.active_modal
        if isinstance(modal, Adding):
            self.controller.cancel_add()
        elif isinstance(modal, Viewing):
            self.controller.close_view()
        else:
            self.hide()

    # ------------------------------------------------------------------
    # Show / Hide / Toggle / Refresh
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        self.spawn(self.controller.refresh())

    def toggle(self) -> None:
        if self.root.state() == "withdrawn" or not self.root.winfo_viewable():
            self.show()
        else:
            self.hide()

    def show(self) -> None:
        self.root.deiconify()
        self.root.update_idletasks()
        self.root.lift()
        self.root.focus_force()

    def hide(self) -> None:
        if self._withdraw_on_hide:
            self.root.withdraw()
        else:
            self.root.iconify()

    def shutdown(self) -> None:
        """Cancel pending store calls, stop the pump and destroy the window."""
        self._unsubscribe()
        if self._pump_id is not None:
            self.root.after_cancel(self._pump_id)
            self._pump_id = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            self._loop.run_until_complete(asyncio.gather(*self._tasks, return_exceptions=True))
        self._loop.close()
        self.root.destroy()
