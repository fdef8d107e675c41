# nova/ui/TerminalApp.py
"""TerminalApp.py
==================
The cooperative draw/poll loop that drives the Nova editor in a terminal.

One iteration draws a frame from the controller's read-only snapshot, waits
for input with a bounded timeout, hands a decoded key press to the controller
and advances the cursor blink timer. Each key event is handled to completion
before the next frame is drawn. The loop stops once the controller stops
running.

The terminal is put into an application-friendly state for the lifetime of
the loop (raw input, no echo, keypad decoding, application cursor keys) and
restored afterwards.
"""
from __future__ import annotations

import curses
import logging
from typing import Optional

from nova.core.Nova import Nova
from nova.ui.DrawScreen import DrawScreen
from nova.ui.KeyBinder import KeyBinder

POLL_TIMEOUT_MS = 50


class TerminalApp:
    """
    Runs a `Nova` controller on a curses screen.

    Always pair `enter()` with `exit()` (try/finally); `run()` does this.
    """

    def __init__(self, stdscr: "curses.window", editor: Nova, poll_timeout_ms: int = POLL_TIMEOUT_MS) -> None:
        self.stdscr = stdscr
        self.editor = editor
        self.poll_timeout_ms = poll_timeout_ms
        self.screen = DrawScreen(stdscr)
        self.keys = KeyBinder(stdscr, poll_timeout_ms)
        self._entered = False

    # ── terminal modes ────────────────────────────────────────────────────────

    def enter(self) -> None:
        try:
            curses.raw()  # deliver ^Q, ^S, ^Z and friends to the editor
        except curses.error:
            curses.cbreak()
        curses.noecho()
        self.stdscr.keypad(True)
        try:
            curses.set_escdelay(25)
        except (AttributeError, curses.error):
            pass
        self._tputs("smkx")
        self.stdscr.timeout(self.poll_timeout_ms)
        self.stdscr.scrollok(False)
        self.stdscr.erase()
        self._entered = True
        logging.debug("TerminalApp: entered application mode.")

    def exit(self) -> None:
        if not self._entered:
            return
        try:
            self.stdscr.keypad(False)
            curses.noraw()
            curses.echo()
        except curses.error as e:
            logging.debug("TerminalApp: restoring terminal modes failed: %r", e)
        self._tputs("rmkx")
        self._entered = False
        logging.debug("TerminalApp: exited application mode.")

    def _tputs(self, capname: str) -> None:
        try:
            seq = curses.tigetstr(capname)
            if seq:
                curses.putp(seq)
        except curses.error as e:
            # Capability missing (e.g. on a bare console).
            logging.debug("tputs(%s) skipped: %r", capname, e)

    # ── loop ──────────────────────────────────────────────────────────────────

    def _sync_viewport(self) -> None:
        self.editor.resize(self.screen.text_rows(self.editor.show_help_bar))

    def run_once(self) -> Optional[bool]:
        """Draws one frame and processes at most one input event.

        Returns:
            bool | None: Whether a key was handled, or None on timeout/resize.
        """
        self._sync_viewport()
        self.screen.draw(self.editor.snapshot())
        event = self.keys.read_key()
        if self.keys.resized:
            curses.update_lines_cols()
            self._sync_viewport()
            return None
        handled = None
        if event is not None:
            handled = self.editor.handle_key(event)
        self.editor.tick()
        return handled

    def run(self) -> None:
        self.enter()
        try:
            while self.editor.running:
                self.run_once()
        except KeyboardInterrupt:
            logging.info("TerminalApp: interrupted, stopping.")
            self.editor.exit_editor()
        except Exception:
            logging.critical("TerminalApp: unhandled exception in the main loop.", exc_info=True)
            self.editor.exit_editor()
            raise
        finally:
            self.exit()
