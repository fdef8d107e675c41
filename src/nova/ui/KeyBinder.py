# nova/ui/KeyBinder.py
"""KeyBinder.py
==================
Translates raw curses input into the editor's `KeyEvent` values.

Terminals report keys in three shapes: single characters (including the C0
control characters produced by Ctrl chords), curses key constants for keys
the terminfo entry knows about, and ESC-prefixed CSI/SS3 sequences for
everything else. `KeyBinder.read_key()` reads one key in any of these shapes
and returns a `KeyEvent`, or None when the poll timed out or the terminal was
resized.
"""

import curses
import logging
import re
from typing import Dict, Optional, Union

from nova.core.KeyMap import KeyEvent, parse_key_spec
from nova.utils.logging_config import KEY_LOGGER

RawKey = Union[int, str]

ESC = "\x1b"


def _build_curses_key_map() -> Dict[int, str]:
    names = {
        "KEY_UP": "up", "KEY_DOWN": "down", "KEY_LEFT": "left", "KEY_RIGHT": "right",
        "KEY_HOME": "home", "KEY_END": "end", "KEY_PPAGE": "pageup", "KEY_NPAGE": "pagedown",
        "KEY_DC": "delete", "KEY_IC": "insert", "KEY_BACKSPACE": "backspace",
        "KEY_ENTER": "enter", "KEY_SR": "shift+up", "KEY_SF": "shift+down",
        "KEY_SLEFT": "shift+left", "KEY_SRIGHT": "shift+right",
        "KEY_SHOME": "shift+home", "KEY_SEND": "shift+end", "KEY_BTAB": "shift+tab",
    }
    key_map = {}
    for const, spec in names.items():
        code = getattr(curses, const, None)
        if isinstance(code, int):
            key_map[code] = spec
    key_f0 = getattr(curses, "KEY_F0", None)
    if isinstance(key_f0, int):
        for n in range(1, 13):
            key_map[key_f0 + n] = f"f{n}"
    return key_map


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Reads keys from a curses window and decodes them into `KeyEvent`s.

    Attributes:
        stdscr: The curses window keys are read from.
        poll_timeout_ms (int): Input timeout restored after reading an escape sequence.
        resized (bool): Set when the last read returned a terminal resize.
    """
    # Normalized escape sequences map. Keys do NOT include the leading ESC (0x1B),
    # because read_key() already consumed it.
    ESCAPE_SEQUENCE_MAP: Dict[str, str] = {
        # Arrows (CSI and SS3)
        "[A": "up", "[B": "down", "[C": "right", "[D": "left",
        "OA": "up", "OB": "down", "OC": "right", "OD": "left",

        # xterm modifiers for arrows: ;2=Shift, ;3=Alt, ;5=Ctrl
        "[1;2A": "shift+up", "[1;2B": "shift+down",
        "[1;2C": "shift+right", "[1;2D": "shift+left",
        "[1;3A": "alt+up", "[1;3B": "alt+down",
        "[1;3C": "alt+right", "[1;3D": "alt+left",
        "[1;5A": "ctrl+up", "[1;5B": "ctrl+down",
        "[1;5C": "ctrl+right", "[1;5D": "ctrl+left",

        # Home/End (CSI/SS3 and tilde variants)
        "[H": "home", "[F": "end", "OH": "home", "OF": "end",
        "[1~": "home", "[4~": "end", "[7~": "home", "[8~": "end",

        # Insert/Delete/PageUp/PageDown (~ style)
        "[2~": "insert", "[3~": "delete", "[5~": "pageup", "[6~": "pagedown",

        # Function keys (SS3 and tilde variants)
        "OP": "f1", "OQ": "f2", "OR": "f3", "OS": "f4",
        "[11~": "f1", "[12~": "f2", "[13~": "f3", "[14~": "f4",
        "[15~": "f5", "[17~": "f6", "[18~": "f7", "[19~": "f8",
        "[20~": "f9", "[21~": "f10", "[23~": "f11", "[24~": "f12",
    }

    # C0 control characters that are not plain Ctrl+letter chords.
    CONTROL_CHAR_MAP: Dict[int, str] = {
        9: "tab", 10: "enter", 13: "enter", 127: "backspace",
        28: "ctrl+\\", 29: "ctrl+]", 30: "ctrl+^", 31: "ctrl+_",
    }

    def __init__(self, stdscr: "curses.window", poll_timeout_ms: int = 50):
        self.stdscr = stdscr
        self.poll_timeout_ms = poll_timeout_ms
        self.resized = False
        self.curses_key_map = _build_curses_key_map()
        logging.debug("KeyBinder initialized with %d curses key codes.", len(self.curses_key_map))

    @staticmethod
    def _event_from_spec(spec: str) -> KeyEvent:
        code, modifiers = parse_key_spec(spec)
        return KeyEvent(code, modifiers)

    def translate(self, raw: RawKey) -> Optional[KeyEvent]:
        """Decodes a single raw key (no escape sequence) into a `KeyEvent`."""
        if isinstance(raw, int):
            if raw in self.curses_key_map:
                return self._event_from_spec(self.curses_key_map[raw])
            if 0 <= raw <= 0x10FFFF:
                return self.translate(chr(raw))
            return None

        if len(raw) != 1:
            return None
        code = ord(raw)
        if code in self.CONTROL_CHAR_MAP:
            return self._event_from_spec(self.CONTROL_CHAR_MAP[code])
        if code == 27:
            return KeyEvent.named("esc")
        if 1 <= code <= 26:
            return KeyEvent.ctrl(chr(ord("a") + code - 1))
        if code < 32:
            return None
        return KeyEvent.char(raw)

    def decode_escape(self, seq: str) -> KeyEvent:
        """Decodes the characters that followed an ESC."""
        if not seq:
            return KeyEvent.named("esc")

        # Some terminals deliver ESC-prefixed sequences: strip any leading ESC.
        if seq[0] == ESC:
            seq = seq[1:]

        # Alt chord: ESC + single printable
        if len(seq) == 1 and seq.isprintable():
            return KeyEvent.alt(seq)

        mapped = self.ESCAPE_SEQUENCE_MAP.get(seq)
        if not mapped:
            cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
            mapped = self.ESCAPE_SEQUENCE_MAP.get(cleaned)
        if mapped:
            return self._event_from_spec(mapped)

        logging.warning("KeyBinder: unknown escape sequence: ESC + %r", seq)
        return KeyEvent.named("esc")

    def _read_escape_tail(self, window: "curses.window") -> str:
        seq = ""
        window.timeout(0)
        try:
            while True:
                try:
                    nx = window.get_wch()
                except curses.error:
                    break
                seq += nx if isinstance(nx, str) else f"<{nx}>"
        finally:
            window.timeout(self.poll_timeout_ms)
        return seq

    def read_key(self, window: Optional["curses.window"] = None) -> Optional[KeyEvent]:
        """Reads one key from the terminal.

        Returns:
            KeyEvent | None: The decoded key, or None on timeout, resize or an
            undecodable input.
        """
        target = window or self.stdscr
        self.resized = False
        try:
            raw = target.get_wch()
        except curses.error:
            return None

        if raw == getattr(curses, "KEY_RESIZE", None):
            self.resized = True
            return None

        if raw == ESC:
            event = self.decode_escape(self._read_escape_tail(target))
        else:
            event = self.translate(raw)
        KEY_LOGGER.debug("raw=%r -> %r", raw, event)
        return event
