# nova/core/Nova.py
"""Nova Editor Controller
=======================
This module provides the `Nova` class, the orchestrator of the editing core.

For every key event the controller:

1. builds a read-only `ModeContext` and feeds the event to the mode machine;
2. stores the returned mode;
3. executes the returned editor command (edits push exactly one operation to
   the history, cursor movements update the cursor);
4. executes the returned pending action, if any: first the document mutation
   (save, save-as, replace-all), then quit-or-continue;
5. clamps the cursor and recomputes the scroll offset.

Rendering is read-only: the terminal front end asks for a `Snapshot` and
paints it. The cursor blink phase advances through `tick()`, driven by the
event loop's poll timeout.
"""
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from nova.core.History import History
from nova.core.KeyMap import KeyEvent, KeyMap
from nova.core.ModeMachine import (
    Command, Confirm, DeleteBackward, DeleteForward, DeleteLine, DeleteToLineStart,
    Find, GoTo, GoToLine, Help, Input, InsertText, Mode, ModeContext, MoveCursor, Normal,
    OpenFile, PendingAction, Quit, Redo, ReplaceAll, ReplaceOnce, Save, SaveAndQuit, SaveAs,
    QuitWithoutSave, SplitLine, ToggleHelpBar, ToggleLineNumbers, Undo, status_text, step,
)
from nova.core.TextDocument import TextDocument
from nova.utils.logging_config import KEY_LOGGER
from nova.utils.utils import (
    DEFAULT_CONFIG, Settings, deep_merge, get_display_width, has_known_extension,
    list_candidate_files,
)

logger = logging.getLogger("nova")

PathLike = Union[str, Path]

BLINK_INTERVAL = 0.5

HELP_ENTRIES: Tuple[Tuple[str, str], ...] = (
    ("help", "Show or hide this help"),
    ("save_file", "Save file"),
    ("open_file", "Open the first known file in the current directory"),
    ("quit", "Quit"),
    ("undo", "Undo"),
    ("redo", "Redo"),
    ("find", "Search (Ctrl+C case, Ctrl+R direction)"),
    ("replace", "Replace (Tab seeds/switches field, Ctrl+A all)"),
    ("goto_line", "Go to line"),
    ("delete_line", "Delete line"),
    ("delete_to_line_start", "Delete to line start"),
    ("delete_char", "Delete character under cursor"),
    ("toggle_line_numbers", "Toggle line numbers"),
    ("toggle_help_bar", "Toggle help bar"),
)


@dataclass(frozen=True)
class Dialog:
    kind: str
    title: str
    text: str = ""
    options: Tuple[str, ...] = ()
    selected: int = 0


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the editor state for one frame."""

    lines: Tuple[Tuple[int, str], ...]
    scroll: int
    cursor: Tuple[int, int]
    cursor_display_col: int
    cursor_visible: bool
    mode_name: str
    status_text: str
    status_message: str
    dialog: Optional[Dialog]
    modified: bool
    file_name: str
    language: str
    num_lines: int
    viewport_height: int
    show_line_numbers: bool
    show_help_bar: bool
    tab_size: int = 4
    help_entries: Tuple[Tuple[str, str], ...] = ()

    @property
    def title(self) -> str:
        return f"Nova - {self.file_name}{' [Modified]' if self.modified else ''}"


## ==================== Nova Class ====================
class Nova:
    """Class Nova
    ===================
    Editor controller owning the document, cursor, scroll, history and mode.

    Attributes:
        document (TextDocument): The active document.
        history (History): Undo/redo log of the active document.
        mode (Mode): The active mode value.
        cursor_line, cursor_col (int): Cursor position (byte column).
        scroll_offset (int): First visible line.
        viewport_height (int): Number of visible text lines.
        running (bool): False once the editor has been asked to quit.
        status_message (str): Outcome of the last command, for the status bar.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        viewport_height: int = 24,
        document: Optional[TextDocument] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config: Dict[str, Any] = deep_merge(DEFAULT_CONFIG, config or {})
        self.settings = Settings.from_config(self.config)
        self.keymap = KeyMap(self.config)

        editor_cfg = self.config.get("editor", {})
        self.show_line_numbers = bool(editor_cfg.get("show_line_numbers", True))
        self.show_help_bar = bool(editor_cfg.get("show_help_bar", True))
        files_cfg = self.config.get("files", {})
        self.known_extensions = list(files_cfg.get("known_extensions", []))
        self.open_candidates_limit = int(files_cfg.get("open_candidates_limit", 10))
        self.working_dir: PathLike = "."

        self.document = document if document is not None else TextDocument()
        self.history = History(self.document)
        self.mode: Mode = Normal()
        self.cursor_line = 0
        self.cursor_col = 0
        self.scroll_offset = 0
        self.viewport_height = max(1, viewport_height)
        self.running = True
        self.status_message = ""
        self.save_as_history: list[str] = []

        self._clock = clock
        self.cursor_visible = True
        self._last_blink = clock()
        logger.debug(f"Nova: controller created for {self.document!r}.")

    @classmethod
    def from_path(cls, path: Optional[PathLike], config: Optional[Dict[str, Any]] = None, **kwargs: Any) -> "Nova":
        document = TextDocument.open_or_create(path) if path else None
        return cls(config, document=document, **kwargs)

    # --- Documents ---

    def open_document(self, document: TextDocument) -> None:
        """Replaces the active document wholesale; cursor, scroll and history are reset."""
        self.document = document
        self.history.rebind(document)
        self.cursor_line = 0
        self.cursor_col = 0
        self.scroll_offset = 0
        logger.info(f"Nova: opened {document!r}.")

    def open_path(self, path: PathLike) -> None:
        self.open_document(TextDocument.open_or_create(path))

    def open_first(self, candidates: Iterable[PathLike]) -> bool:
        """Opens the first candidate with a known extension that loads."""
        for candidate in candidates:
            if not has_known_extension(candidate, self.known_extensions):
                continue
            try:
                document = TextDocument.from_file(candidate)
            except OSError as e:
                logger.warning(f"Nova: could not open '{candidate}': {e}")
                continue
            self.open_document(document)
            self.status_message = f"Opened '{document.file_name}'"
            return True
        self.status_message = "No file to open"
        return False

    # --- Key handling ---

    def _context(self) -> ModeContext:
        return ModeContext(
            has_path=self.document.path is not None,
            modified=self.document.modified,
            file_name=self.document.file_name,
            current_line=self.document.get_line(self.cursor_line),
            cursor=(self.cursor_line, self.cursor_col),
            settings=self.settings,
            keymap=self.keymap,
            save_as_history=tuple(self.save_as_history),
        )

    def handle_key(self, event: KeyEvent) -> bool:
        """Processes one key event to completion. Returns True if it was handled."""
        KEY_LOGGER.debug(f"key={event.spec()!r} kind={event.kind} mode={self.mode.name}")
        if not event.is_press:
            return False
        self._reset_blink()
        self.status_message = ""
        result = step(self.mode, event, self._context())
        self.mode = result.mode
        if result.command is not None:
            self._execute_command(result.command)
        if result.action is not None:
            self._execute_action(result.action)
        self._clamp_cursor()
        self._clamp_scroll()
        return True

    # --- Cursor helpers ---

    @property
    def cursor(self) -> Tuple[int, int]:
        return self.cursor_line, self.cursor_col

    def _cursor_offset(self) -> int:
        return self.document.offset_of(self.cursor_line, self.cursor_col)

    def _set_cursor_offset(self, offset: int) -> None:
        self.cursor_line, self.cursor_col = self.document.line_col_of(offset)

    def _clamp_cursor(self) -> None:
        line, col = self.document.clamp_position(self.cursor_line, self.cursor_col)
        offset = self.document.align_to_char(self.document.offset_of(line, col))
        self.cursor_line, self.cursor_col = self.document.line_col_of(offset)

    def _clamp_scroll(self) -> None:
        if self.cursor_line < self.scroll_offset:
            self.scroll_offset = self.cursor_line
        elif self.cursor_line >= self.scroll_offset + self.viewport_height:
            self.scroll_offset = self.cursor_line - self.viewport_height + 1
        max_scroll = max(0, self.document.num_lines() - self.viewport_height)
        self.scroll_offset = max(0, min(self.scroll_offset, max_scroll))

    def _indent_width(self, line: int) -> int:
        return len(self.document.leading_whitespace(line))

    def _snap_to_indent(self, line: int, col: int) -> int:
        col = min(col, self.document.line_length(line))
        return max(col, self._indent_width(line))

    def _move_cursor(self, direction: str) -> None:
        doc = self.document
        last_line = doc.num_lines() - 1
        if direction == "up":
            if self.cursor_line > 0:
                self.cursor_line -= 1
                self.cursor_col = self._snap_to_indent(self.cursor_line, self.cursor_col)
        elif direction == "down":
            if self.cursor_line < last_line:
                self.cursor_line += 1
                self.cursor_col = self._snap_to_indent(self.cursor_line, self.cursor_col)
        elif direction == "left":
            self._set_cursor_offset(doc.prev_char_offset(self._cursor_offset()))
        elif direction == "right":
            offset = self._cursor_offset()
            if offset < doc.total_length() - 1:
                self._set_cursor_offset(doc.next_char_offset(offset))
        elif direction == "home":
            indent = self._indent_width(self.cursor_line)
            self.cursor_col = 0 if self.cursor_col == indent else indent
        elif direction == "end":
            self.cursor_col = doc.line_length(self.cursor_line)
        elif direction == "pageup":
            self.cursor_line = max(0, self.cursor_line - self.viewport_height)
        elif direction == "pagedown":
            self.cursor_line = min(last_line, self.cursor_line + self.viewport_height)

    # --- Edits ---

    def _insert(self, text: str) -> None:
        data = text.encode("utf-8")
        offset = self.document.insert(self._cursor_offset(), data)
        self.history.record_insert(offset, data)
        self._set_cursor_offset(offset + len(data))

    def _delete(self, offset: int, length: int) -> bool:
        removed = self.document.delete_range(offset, length)
        if not removed:
            return False
        self.history.record_delete(offset, removed)
        self._set_cursor_offset(offset)
        return True

    def _delete_backward(self) -> None:
        offset = self._cursor_offset()
        if offset == 0:
            return
        start = self.document.prev_char_offset(offset)
        self._delete(start, offset - start)

    def _delete_forward(self) -> None:
        offset = self._cursor_offset()
        self._delete(offset, self.document.next_char_offset(offset) - offset)

    def _delete_line(self) -> None:
        doc = self.document
        line = self.cursor_line
        start = doc.offset_of(line, 0)
        length = doc.line_length(line)
        if line < doc.num_lines() - 1:
            self._delete(start, length + 1)
        elif line > 0:
            self._delete(start - 1, length + 1)
        else:
            self._delete(start, length)
        self.cursor_col = 0

    def _delete_to_line_start(self) -> None:
        start = self.document.offset_of(self.cursor_line, 0)
        self._delete(start, self._cursor_offset() - start)

    def _undo(self) -> None:
        if self.history.undo():
            self._set_cursor_offset(self.history.cursor_offset or 0)
        else:
            self.status_message = "Nothing to undo"

    def _redo(self) -> None:
        if self.history.redo():
            self._set_cursor_offset(self.history.cursor_offset or 0)
        else:
            self.status_message = "Nothing to redo"

    def _find(self, command: Find) -> None:
        line, col = command.origin
        found = self.document.find(command.query, line, col, command.case_sensitive, command.backward)
        if found is None:
            self.status_message = f"'{command.query}' not found"
            return
        self.cursor_line, self.cursor_col = found
        self.status_message = ""

    def goto_line(self, line_number: int) -> None:
        """Moves the cursor to the 1-based `line_number`, clamped to the document."""
        line_number = max(1, min(line_number, self.document.num_lines()))
        self.cursor_line = line_number - 1
        self.cursor_col = 0

    def _replace_once(self, command: ReplaceOnce) -> None:
        found = self.document.replace_next(
            command.search, command.replace, self.cursor_line, self.cursor_col, command.case_sensitive
        )
        self.history.clear()
        if found is None:
            self.status_message = f"'{command.search}' not found"
            return
        self.cursor_line, self.cursor_col = found
        self.status_message = "Replaced 1 occurrence"

    def save(self) -> bool:
        if self.document.save():
            self.status_message = f"Saved '{self.document.file_name}'"
            return True
        self.status_message = f"Save failed: {self.document.file_name}"
        return False

    def save_as(self, filename: str) -> bool:
        if self.document.save_as(filename):
            self.status_message = f"Saved '{self.document.file_name}'"
            return True
        self.status_message = f"Save failed: {filename or '(empty name)'}"
        return False

    def open_file(self) -> bool:
        return self.open_first(list_candidate_files(self.working_dir, self.open_candidates_limit))

    def exit_editor(self) -> None:
        self.running = False
        logger.info("Nova: exit requested.")

    def _execute_command(self, command: Command) -> None:
        logger.debug(f"Nova: command {command!r}")
        if isinstance(command, InsertText):
            self._insert(command.text)
        elif isinstance(command, SplitLine):
            self._insert("\n" + command.indent)
        elif isinstance(command, DeleteBackward):
            self._delete_backward()
        elif isinstance(command, DeleteForward):
            self._delete_forward()
        elif isinstance(command, DeleteLine):
            self._delete_line()
        elif isinstance(command, DeleteToLineStart):
            self._delete_to_line_start()
        elif isinstance(command, MoveCursor):
            self._move_cursor(command.direction)
        elif isinstance(command, Undo):
            self._undo()
        elif isinstance(command, Redo):
            self._redo()
        elif isinstance(command, Save):
            self.save()
        elif isinstance(command, OpenFile):
            self.open_file()
        elif isinstance(command, Quit):
            self.exit_editor()
        elif isinstance(command, Find):
            self._find(command)
        elif isinstance(command, GoTo):
            self.goto_line(command.line)
        elif isinstance(command, ReplaceOnce):
            self._replace_once(command)
        elif isinstance(command, ToggleLineNumbers):
            self.show_line_numbers = not self.show_line_numbers
        elif isinstance(command, ToggleHelpBar):
            self.show_help_bar = not self.show_help_bar
        else:
            logger.warning(f"Nova: unhandled command {command!r}")

    def _execute_action(self, action: PendingAction) -> None:
        """Runs a pending action: the document mutation first, then quit-or-continue."""
        logger.debug(f"Nova: pending action {action!r}")
        if isinstance(action, SaveAndQuit):
            if self.save():
                self.exit_editor()
        elif isinstance(action, QuitWithoutSave):
            self.exit_editor()
        elif isinstance(action, SaveAs):
            if action.filename and action.filename not in self.save_as_history[-1:]:
                self.save_as_history.append(action.filename)
            if self.save_as(action.filename) and action.quit_after_save:
                self.exit_editor()
        elif isinstance(action, ReplaceAll):
            count = self.document.replace_all(action.search, action.replace, action.case_sensitive)
            self.history.clear()
            self.status_message = f"Replaced {count} occurrence(s)"
        else:
            logger.warning(f"Nova: unhandled pending action {action!r}")

    # --- Frame ticks ---

    def _reset_blink(self) -> None:
        self.cursor_visible = True
        self._last_blink = self._clock()

    def tick(self, now: Optional[float] = None) -> bool:
        """Advances the cursor blink timer. Returns True if the phase flipped."""
        now = self._clock() if now is None else now
        if now - self._last_blink < BLINK_INTERVAL:
            return False
        self.cursor_visible = not self.cursor_visible
        self._last_blink = now
        return True

    def resize(self, viewport_height: int) -> None:
        self.viewport_height = max(1, viewport_height)
        self._clamp_scroll()

    # --- Rendering ---

    def _dialog(self) -> Optional[Dialog]:
        mode = self.mode
        if isinstance(mode, Confirm):
            return Dialog("confirm", mode.title, mode.message, mode.options, mode.selected)
        if isinstance(mode, Input):
            return Dialog("input", mode.title, mode.input)
        if isinstance(mode, GoToLine):
            return Dialog("input", "Go to line", mode.input)
        return None

    def snapshot(self) -> Snapshot:
        doc = self.document
        end = min(doc.num_lines(), self.scroll_offset + self.viewport_height)
        lines = tuple((n, doc.get_line(n)) for n in range(self.scroll_offset, end))
        before_cursor = doc.line_bytes(self.cursor_line)[: self.cursor_col].decode("utf-8", errors="replace")
        text = status_text(self.mode) or f"Ln {self.cursor_line + 1}, Col {len(before_cursor) + 1}"
        help_entries: Tuple[Tuple[str, str], ...] = ()
        if isinstance(self.mode, Help):
            help_entries = tuple(
                (", ".join(self.keymap.keys_for(action)), description) for action, description in HELP_ENTRIES
            )
        return Snapshot(
            lines=lines,
            scroll=self.scroll_offset,
            cursor=self.cursor,
            cursor_display_col=get_display_width(before_cursor.expandtabs(self.settings.tab_size)),
            cursor_visible=self.cursor_visible,
            mode_name=self.mode.name,
            status_text=text,
            status_message=self.status_message,
            dialog=self._dialog(),
            modified=doc.modified,
            file_name=doc.file_name,
            language=doc.language,
            num_lines=doc.num_lines(),
            viewport_height=self.viewport_height,
            show_line_numbers=self.show_line_numbers,
            show_help_bar=self.show_help_bar,
            tab_size=self.settings.tab_size,
            help_entries=help_entries,
        )
