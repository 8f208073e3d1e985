"""
tkinter overlays: the countdown warning clock and the fullscreen break screen.

Runs on the tk thread. User input is never applied here; it is posted to
the scheduler queue (``escape_pressed``, ``request_skip``, ``skip`` ...)
and the scheduler calls back to show, update or hide.
"""
from __future__ import annotations

import logging
import math
import platform
import tkinter as tk
from typing import Callable, Optional

from screeninfo import get_monitors

from .content import break_content, format_remaining
from .skip import ESCAPES_TO_SKIP
from .techniques import Technique

logger = logging.getLogger(__name__)

IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"
FONT = "Helvetica Neue" if IS_MAC else "Segoe UI" if IS_WIN else "DejaVu Sans"

WARNING_ICON_SIZE = 124
WARNING_ICON_MARGIN = 18

# ─── Colours ──────────────────────────────────────────────────
C_CARD     = "#1e293b"
C_BTN_PRI  = "#1d4ed8";  C_BTN_SEC  = "#334155"
C_TEXT     = "#f1f5f9";  C_TEXT_DIM = "#94a3b8";  C_TEXT_MUT = "#64748b"
C_EYE_BG   = "#0c1222";  C_EYE_ACC  = "#22d3ee";  C_CD       = "#fbbf24"
C_W_BG     = "#1a1a2e";  C_W_GL     = "#0ea5e9"


def get_all_monitors() -> list:
    """All monitors as (x, y, width, height); tk's screen size if unknown."""
    try:
        return [(m.x, m.y, m.width, m.height) for m in get_monitors()] or [(0, 0, None, None)]
    except Exception as e:
        logger.debug("Monitor lookup failed: %s", e)
        return [(0, 0, None, None)]


def _destroy(w: Optional[tk.Misc]) -> None:
    if w is not None:
        try:
            w.destroy()
        except tk.TclError:
            pass


class TkOverlayPresenter:

    def __init__(self, root: tk.Tk, post: Callable[..., None],
                 multi_monitor: Callable[[], bool] = lambda: True):
        self.root = root
        self._post = post
        self._multi_monitor = multi_monitor
        self._warning_win: Optional[tk.Toplevel] = None
        self._warn_anim_id: Optional[str] = None
        self._warn_rem = 0;  self._warn_total = 0
        self._break_wins: list[tk.Toplevel] = []
        self._break_anim_id: Optional[str] = None
        self._break_rem = 0
        self._break_serial = 0
        self._cd_var: Optional[tk.StringVar] = None
        self._hint_var: Optional[tk.StringVar] = None
        self._buttons: Optional[tk.Frame] = None
        self._prompt: Optional[tk.Frame] = None
        self._hint_label: Optional[tk.Label] = None

    # ━━━ Advance Warning ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def show_countdown_warning(self, seconds_remaining: int) -> None:
        self.hide()
        self._warn_rem = seconds_remaining;  self._warn_total = max(1, seconds_remaining)

        w = tk.Toplevel(self.root)
        w.overrideredirect(True);  w.attributes("-topmost", True)
        try:
            w.attributes("-alpha", 0.92)
        except tk.TclError:
            pass
        w.configure(bg=C_W_BG)

        sz, mg = WARNING_ICON_SIZE, WARNING_ICON_MARGIN
        sw = w.winfo_screenwidth()
        w.geometry(f"{sz}x{sz}+{sw-sz-mg}+{mg}")

        c = tk.Canvas(w, width=sz, height=sz, bg=C_W_BG, highlightthickness=0, cursor="hand2")
        c.pack()
        # clicking the clock starts the break right away
        c.bind("<Button-1>", lambda e: self._post("take_break_now"))

        self._warning_win = w
        self._anim_warning(c, sz // 2, sz // 2, 40)

    def _draw_clock(self, c: tk.Canvas, cx: int, cy: int, r: int) -> None:
        c.delete("all")
        gr = r + 10
        c.create_oval(cx-gr, cy-gr, cx+gr, cy+gr, fill="", outline=C_W_GL, width=2)
        c.create_oval(cx-r, cy-r, cx+r, cy+r, fill=C_CARD, outline=C_W_GL, width=3)
        # Stopwatch style: fill clockwise as time elapses
        ext = (self._warn_total - self._warn_rem) / self._warn_total * 360
        c.create_arc(cx-r+8, cy-r+8, cx+r-8, cy+r-8,
                     start=90, extent=-ext, fill=C_W_GL, outline="", stipple="gray50")
        c.create_text(cx, cy, text=str(max(0, self._warn_rem)),
                      font=(FONT, 22, "bold"), fill=C_TEXT)

    def _anim_warning(self, c: tk.Canvas, cx: int, cy: int, r: int) -> None:
        if self._warning_win is None:
            return
        if self._warn_rem <= 0:
            self._warn_anim_id = None
            self._post("warning_timed_out")
            return
        self._draw_clock(c, cx, cy, r)
        phase = (self._warn_total - self._warn_rem) % 4 / 4.0
        try:
            self._warning_win.attributes("-alpha", 0.82 + 0.13 * math.sin(phase * 2 * math.pi))
        except tk.TclError:
            pass
        self._warn_rem -= 1
        self._warn_anim_id = self.root.after(1000, lambda: self._anim_warning(c, cx, cy, r))

    # ━━━ Break Screen ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def show_break(self, technique: Technique, cycle_count: int, break_seconds: float,
                   break_serial: int = 0) -> None:
        self.hide()
        self._break_serial = break_serial
        content = break_content(technique, cycle_count)
        self._break_rem = int(math.ceil(break_seconds))

        monitors = get_all_monitors() if self._multi_monitor() else [(0, 0, None, None)]
        ov = tk.Toplevel(self.root)
        ov.attributes("-topmost", True)
        ov.configure(bg=C_EYE_BG)
        mx, my, mw, mh = monitors[0]
        sw = mw if mw else ov.winfo_screenwidth()
        sh = mh if mh else ov.winfo_screenheight()
        ov.geometry(f"{sw}x{sh}+{mx}+{my}")
        ov.overrideredirect(True)
        try:
            ov.attributes("-alpha", 0.94)
        except tk.TclError:
            pass
        self._break_wins = [ov]

        # Secondary monitors only get a dimmed backdrop
        for sx, sy, smw, smh in monitors[1:]:
            if smw and smh:
                sec = tk.Toplevel(self.root)
                sec.overrideredirect(True)
                sec.attributes("-topmost", True)
                sec.configure(bg=C_EYE_BG)
                sec.geometry(f"{smw}x{smh}+{sx}+{sy}")
                try:
                    sec.attributes("-alpha", 0.85)
                except tk.TclError:
                    pass
                self._break_wins.append(sec)

        cf = tk.Frame(ov, bg=C_EYE_BG)
        cf.place(relx=0.5, rely=0.5, anchor="center")
        tk.Label(cf, text=content.emoji, font=(FONT, 56), fg=C_EYE_ACC, bg=C_EYE_BG).pack(pady=(0, 16))
        tk.Label(cf, text=content.title, font=(FONT, 28, "bold"),
                 fg=C_EYE_ACC, bg=C_EYE_BG).pack(pady=(0, 16))
        tk.Label(cf, text=content.description, font=(FONT, 14), fg=C_TEXT_DIM, bg=C_EYE_BG,
                 justify="center", wraplength=600).pack(pady=(0, 30))

        self._cd_var = tk.StringVar(value=format_remaining(self._break_rem))
        tk.Label(cf, textvariable=self._cd_var, font=(FONT, 64, "bold"),
                 fg=C_CD, bg=C_EYE_BG).pack(pady=(0, 24))

        self._buttons = tk.Frame(cf, bg=C_EYE_BG)
        self._btn(self._buttons, "Skip", C_BTN_SEC, lambda: self._post("request_skip"))
        self._buttons.pack()

        self._prompt = tk.Frame(cf, bg=C_EYE_BG)
        tk.Label(self._prompt, text="Skip this break?", font=(FONT, 16, "bold"),
                 fg=C_TEXT, bg=C_EYE_BG).pack(pady=(0, 12))
        row = tk.Frame(self._prompt, bg=C_EYE_BG)
        row.pack()
        self._btn(row, "Continue Break", C_BTN_PRI, lambda: self._post("cancel_skip"), bold=True)
        self._btn(row, "Skip", C_BTN_SEC, lambda: self._post("skip"))

        self._hint_var = tk.StringVar(value=f"Press esc {ESCAPES_TO_SKIP} times to skip")
        self._hint_label = tk.Label(cf, textvariable=self._hint_var, font=(FONT, 11),
                                    fg=C_TEXT_MUT, bg=C_EYE_BG)
        self._hint_label.pack(pady=(18, 0))

        for win in self._break_wins:
            win.bind("<Escape>", lambda e: self._post("escape_pressed"))
        ov.lift()
        ov.focus_force()
        self._break_countdown()

    def _btn(self, p: tk.Frame, text: str, bg: str, cmd: Callable, bold: bool = False) -> tk.Button:
        wt = "bold" if bold else "normal"
        b = tk.Button(p, text=text, font=(FONT, 12, wt), bg=bg, fg=C_TEXT,
                      relief="flat", padx=18, pady=6, cursor="hand2", command=cmd)
        b.pack(side="left", padx=6)
        return b

    def _break_countdown(self) -> None:
        if not self._break_wins:
            return
        if self._break_rem <= 0:
            self._break_anim_id = None
            self._post("break_finished", "completed", self._break_serial)
            return
        if self._cd_var is not None:
            self._cd_var.set(format_remaining(self._break_rem))
        self._break_rem -= 1
        self._break_anim_id = self.root.after(1000, self._break_countdown)

    def update_break(self, seconds_remaining: int, skip_hint: str) -> None:
        # the scheduler's clock wins over the local countdown
        self._break_rem = seconds_remaining
        if self._cd_var is not None:
            self._cd_var.set(format_remaining(seconds_remaining))
        if self._hint_var is not None:
            self._hint_var.set(skip_hint)

    def show_skip_prompt(self) -> None:
        if self._buttons is not None and self._prompt is not None:
            self._buttons.pack_forget()
            self._prompt.pack(before=self._hint_label)

    def hide_skip_prompt(self) -> None:
        if self._buttons is not None and self._prompt is not None:
            self._prompt.pack_forget()
            self._buttons.pack(before=self._hint_label)

    # ━━━ Teardown ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def hide(self) -> None:
        for anim in (self._warn_anim_id, self._break_anim_id):
            if anim:
                try:
                    self.root.after_cancel(anim)
                except (tk.TclError, ValueError):
                    pass
        self._warn_anim_id = self._break_anim_id = None
        _destroy(self._warning_win)
        self._warning_win = None
        for win in self._break_wins:
            _destroy(win)
        self._break_wins = []
        self._cd_var = self._hint_var = None
        self._buttons = self._prompt = None
        self._hint_label = None
