# nova/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen renders a `Snapshot` of the Nova editor with curses.

Screen layout, top to bottom:
- title bar (file name and modified marker),
- text area with an optional line-number gutter,
- status bar (mode text or cursor position, status message, language),
- optional help bar with the most common key chords.

Dialog modes (Input, Go to line, Confirm) are drawn as a centered box over
the text area, and Help mode replaces the text area with the key reference.
The renderer never mutates editor state. Wide Unicode characters are measured
with wcwidth and never split in half.
"""

import curses
import logging
from typing import Optional

from wcwidth import wcwidth

from nova.core.Nova import Dialog, Snapshot
from nova.utils.utils import get_display_width

HELP_BAR_TEXT = "^S Save  ^Q Quit  ^F Find  ^\\ Replace  ^G Go to  ^Z Undo  ^Y Redo  ^H Help"


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Paints one frame per call to `draw()`.

    Attributes:
        MIN_WINDOW_WIDTH (int): Minimum allowed width of the editor window.
        MIN_WINDOW_HEIGHT (int): Minimum allowed height of the editor window.
        stdscr (curses.window): The main curses window object.
        colors (dict[str, int]): Mapping of UI element names to curses attributes.
    """

    MIN_WINDOW_WIDTH = 20
    MIN_WINDOW_HEIGHT = 5

    def __init__(self, stdscr: "curses.window") -> None:
        self.stdscr = stdscr
        self.colors: dict[str, int] = {}
        self._text_start_x = 0
        self._init_colors()

    @staticmethod
    def reserved_rows(show_help_bar: bool) -> int:
        """Rows used by the title, status and (optional) help bars."""
        return 3 if show_help_bar else 2

    def text_rows(self, show_help_bar: bool) -> int:
        height, _ = self.stdscr.getmaxyx()
        return max(1, height - self.reserved_rows(show_help_bar))

    def _init_colors(self) -> None:
        """Creates color pairs where the terminal supports them, else uses attributes."""
        self.colors = {
            "title": curses.A_REVERSE | curses.A_BOLD,
            "status": curses.A_REVERSE,
            "help_bar": curses.A_DIM,
            "line_number": curses.A_DIM,
            "dialog": curses.A_NORMAL,
            "selected": curses.A_REVERSE,
            "text": curses.A_NORMAL,
        }
        try:
            if not curses.has_colors():
                return
            curses.start_color()
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK
            curses.init_pair(1, curses.COLOR_BLACK, curses.COLOR_CYAN)
            curses.init_pair(2, curses.COLOR_WHITE, curses.COLOR_BLUE)
            curses.init_pair(3, curses.COLOR_YELLOW, background)
            self.colors["title"] = curses.color_pair(1) | curses.A_BOLD
            self.colors["status"] = curses.color_pair(2)
            self.colors["line_number"] = curses.color_pair(3)
        except curses.error as e:
            logging.debug(f"DrawScreen: color setup skipped: {e}")

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`."""
        result: list[str] = []
        consumed = 0
        for ch in s:
            w = wcwidth(ch)
            if w < 0:
                w = 1
            if consumed + w > max_width:
                break
            result.append(ch)
            consumed += w
        return "".join(result)

    def _addstr(self, y: int, x: int, text: str, attr: int = 0) -> None:
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            # Writing the bottom-right cell raises even though the text is drawn.
            pass

    def _fill_row(self, y: int, text: str, width: int, attr: int) -> None:
        text = self.truncate_string(text, width)
        self._addstr(y, 0, text + " " * (width - get_display_width(text)), attr)

    def draw(self, snapshot: Snapshot) -> None:
        """The main screen drawing method."""
        try:
            height, width = self.stdscr.getmaxyx()
            if height < self.MIN_WINDOW_HEIGHT or width < self.MIN_WINDOW_WIDTH:
                self._show_small_window_error(height, width)
                return

            self.stdscr.erase()
            self._draw_title_bar(snapshot, width)
            if snapshot.help_entries:
                self._draw_help(snapshot, height, width)
            else:
                self._draw_text(snapshot, width)
            self._draw_status_bar(snapshot, height, width)
            if snapshot.show_help_bar:
                self._fill_row(height - 1, HELP_BAR_TEXT, width, self.colors["help_bar"])
            if snapshot.dialog is not None:
                self._draw_dialog(snapshot.dialog, height, width)
            else:
                self._position_cursor(snapshot, width)
            self._update_display()
        except curses.error as e:
            logging.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)

    def _show_small_window_error(self, height: int, width: int) -> None:
        """Displays a message that the window is too small."""
        msg = f"Window too small ({width}x{height}). Minimum is {self.MIN_WINDOW_WIDTH}x{self.MIN_WINDOW_HEIGHT}."
        try:
            self.stdscr.clear()
            self._addstr(height // 2, max(0, (width - len(msg)) // 2), msg[: max(0, width - 1)])
            self._update_display()
        except curses.error:
            pass

    def _draw_title_bar(self, snapshot: Snapshot, width: int) -> None:
        title = f" {snapshot.title}"
        self._fill_row(0, title, width, self.colors["title"])

    def _gutter_width(self, snapshot: Snapshot, width: int) -> int:
        if not snapshot.show_line_numbers:
            return 0
        gutter = len(str(max(1, snapshot.num_lines))) + 1
        if gutter >= width:
            logging.warning(f"Window too narrow to draw line numbers ({width} vs {gutter})")
            return 0
        return gutter

    def _draw_text(self, snapshot: Snapshot, width: int) -> None:
        self._text_start_x = self._gutter_width(snapshot, width)
        digits = self._text_start_x - 1
        text_width = width - self._text_start_x
        for row, (line_no, text) in enumerate(snapshot.lines):
            y = 1 + row
            if self._text_start_x:
                self._addstr(y, 0, f"{line_no + 1:>{digits}} ", self.colors["line_number"])
            visible = self.truncate_string(text.expandtabs(snapshot.tab_size), text_width)
            self._addstr(y, self._text_start_x, visible, self.colors["text"])

    def _draw_help(self, snapshot: Snapshot, height: int, width: int) -> None:
        self._text_start_x = 0
        self._addstr(1, 2, self.truncate_string("Nova - Key Reference (Esc to close)", width - 2), curses.A_BOLD)
        rows = height - 1 - self.reserved_rows(snapshot.show_help_bar)
        for i, (keys, description) in enumerate(snapshot.help_entries[: max(0, rows - 1)]):
            line = f"{keys:<22} {description}"
            self._addstr(3 + i, 2, self.truncate_string(line, width - 3))

    def _draw_status_bar(self, snapshot: Snapshot, height: int, width: int) -> None:
        y = height - (2 if snapshot.show_help_bar else 1)
        left = f" {snapshot.status_text}"
        right = f"{snapshot.language} | {snapshot.mode_name} "
        middle = snapshot.status_message
        spacing = width - get_display_width(left) - get_display_width(right)
        if spacing < get_display_width(middle) + 2:
            middle = self.truncate_string(middle, max(0, spacing - 2))
        pad = max(0, spacing - get_display_width(middle))
        line = left + " " * (pad // 2) + middle + " " * (pad - pad // 2) + right
        self._fill_row(y, line, width, self.colors["status"])

    def _draw_dialog(self, dialog: Dialog, height: int, width: int) -> None:
        body = [dialog.text] if dialog.kind == "input" else [dialog.text, ""] + [
            f"{'>' if i == dialog.selected else ' '} {option}" for i, option in enumerate(dialog.options)
        ]
        box_w = min(width - 2, max(40, max(get_display_width(s) for s in body + [dialog.title]) + 4))
        box_h = len(body) + 2
        top = max(1, (height - box_h) // 2)
        left = max(0, (width - box_w) // 2)
        attr = self.colors["dialog"]
        border = "+" + "-" * (box_w - 2) + "+"
        title = self.truncate_string(f" {dialog.title} ", box_w - 4)
        self._addstr(top, left, border, attr)
        self._addstr(top, left + 2, title, attr | curses.A_BOLD)
        for i, row in enumerate(body):
            inner = self.truncate_string(row.expandtabs(4), box_w - 4)
            inner += " " * (box_w - 4 - get_display_width(inner))
            row_attr = self.colors["selected"] if dialog.kind == "confirm" and i - 2 == dialog.selected else attr
            self._addstr(top + 1 + i, left, "| ", attr)
            self._addstr(top + 1 + i, left + 2, inner, row_attr)
            self._addstr(top + 1 + i, left + box_w - 2, " |", attr)
        self._addstr(top + box_h - 1, left, border, attr)

        if dialog.kind == "input":
            cursor_x = left + 2 + min(get_display_width(dialog.text.expandtabs(4)), box_w - 5)
            self._set_cursor(top + 1, cursor_x, True)
        else:
            self._set_cursor(0, 0, False)

    def _set_cursor(self, y: int, x: int, visible: bool) -> None:
        try:
            curses.curs_set(1 if visible else 0)
            if visible:
                self.stdscr.move(y, x)
        except curses.error:
            pass

    def _position_cursor(self, snapshot: Snapshot, width: int) -> Optional[tuple[int, int]]:
        """Places the hardware cursor; returns the screen position or None if hidden."""
        row = snapshot.cursor[0] - snapshot.scroll
        if snapshot.help_entries or not (0 <= row < snapshot.viewport_height):
            self._set_cursor(0, 0, False)
            return None
        x = min(self._text_start_x + snapshot.cursor_display_col, width - 1)
        y = 1 + row
        self._set_cursor(y, x, snapshot.cursor_visible)
        return (y, x) if snapshot.cursor_visible else None

    def _update_display(self) -> None:
        """Physically updates the screen contents using curses double-buffering."""
        try:
            self.stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            logging.error(f"Curses doupdate error: {e}")
