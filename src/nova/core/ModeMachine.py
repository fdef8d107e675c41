# nova/core/ModeMachine.py
"""ModeMachine Module for Nova Editor
===================================
The modal keystroke state machine of the editor.

Every interaction that spans several keystrokes (search-as-you-type, replace,
go-to-line, confirmation and input dialogs) is a *mode*: an immutable value
that owns its transient fields. `step()` is a pure function

    step(mode, key, context) -> Step(mode, action, command)

that never touches the document. It returns the next mode plus at most one
`PendingAction` (a one-shot deferred command such as save-and-quit) and at
most one editor *command* (an edit or cursor movement) for the controller to
carry out. Leaving a mode discards its fields; Esc in any mode other than
Normal cancels without emitting anything.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional, Tuple, Union

from nova.core.KeyMap import CONTROL, KeyEvent, KeyMap
from nova.utils.utils import Settings

logger = logging.getLogger("nova")

Position = Tuple[int, int]


## ==================== Modes ====================
@dataclass(frozen=True)
class Normal:
    name = "NORMAL"


@dataclass(frozen=True)
class Search:
    query: str = ""
    case_sensitive: bool = True
    backward: bool = False
    origin: Position = (0, 0)
    name = "SEARCH"


@dataclass(frozen=True)
class Replace:
    search: str = ""
    replace: str = ""
    case_sensitive: bool = True
    all: bool = False
    confirmed: bool = False
    field: str = "search"
    name = "REPLACE"


@dataclass(frozen=True)
class GoToLine:
    input: str = ""
    name = "GOTO"


@dataclass(frozen=True)
class Confirm:
    title: str
    message: str
    options: Tuple[str, ...] = ("Yes", "No", "Cancel")
    selected: int = 0
    name = "CONFIRM"

    @property
    def choice(self) -> str:
        return self.options[self.selected]


@dataclass(frozen=True)
class Input:
    title: str = "Save As"
    input: str = ""
    history: Tuple[str, ...] = ()
    quit_after_save: bool = False
    recall: Optional[int] = None
    name = "INPUT"


@dataclass(frozen=True)
class Help:
    name = "HELP"


Mode = Union[Normal, Search, Replace, GoToLine, Confirm, Input, Help]


## ==================== Pending actions ====================
@dataclass(frozen=True)
class SaveAndQuit:
    pass


@dataclass(frozen=True)
class QuitWithoutSave:
    pass


@dataclass(frozen=True)
class SaveAs:
    filename: str
    quit_after_save: bool = False


@dataclass(frozen=True)
class ReplaceAll:
    search: str
    replace: str
    case_sensitive: bool = True


PendingAction = Union[SaveAndQuit, QuitWithoutSave, SaveAs, ReplaceAll]


## ==================== Editor commands ====================
@dataclass(frozen=True)
class InsertText:
    text: str


@dataclass(frozen=True)
class SplitLine:
    indent: str = ""


@dataclass(frozen=True)
class DeleteBackward:
    pass


@dataclass(frozen=True)
class DeleteForward:
    pass


@dataclass(frozen=True)
class DeleteLine:
    pass


@dataclass(frozen=True)
class DeleteToLineStart:
    pass


@dataclass(frozen=True)
class MoveCursor:
    direction: str


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Redo:
    pass


@dataclass(frozen=True)
class Save:
    pass


@dataclass(frozen=True)
class OpenFile:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Find:
    query: str
    case_sensitive: bool = True
    backward: bool = False
    origin: Position = (0, 0)


@dataclass(frozen=True)
class GoTo:
    line: int


@dataclass(frozen=True)
class ReplaceOnce:
    search: str
    replace: str
    case_sensitive: bool = True


@dataclass(frozen=True)
class ToggleLineNumbers:
    pass


@dataclass(frozen=True)
class ToggleHelpBar:
    pass


Command = Union[
    InsertText, SplitLine, DeleteBackward, DeleteForward, DeleteLine, DeleteToLineStart,
    MoveCursor, Undo, Redo, Save, OpenFile, Quit, Find, GoTo, ReplaceOnce,
    ToggleLineNumbers, ToggleHelpBar,
]

MOVE_KEYS = frozenset({"up", "down", "left", "right", "home", "end", "pageup", "pagedown"})


@dataclass(frozen=True)
class ModeContext:
    """Read-only view of the editor that `step()` may consult."""

    has_path: bool = False
    modified: bool = False
    file_name: str = "[No Name]"
    current_line: str = ""
    cursor: Position = (0, 0)
    settings: Settings = field(default_factory=Settings)
    keymap: KeyMap = field(default_factory=KeyMap)
    save_as_history: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Step:
    mode: Mode
    action: Optional[PendingAction] = None
    command: Optional[Command] = None


def _stay(mode: Mode) -> Step:
    return Step(mode)


def save_as_prompt(ctx: ModeContext, quit_after_save: bool) -> Input:
    return Input(title="Save As", history=ctx.save_as_history, quit_after_save=quit_after_save)


# --- Normal ---

def _auto_indent(ctx: ModeContext) -> str:
    if not ctx.settings.auto_indent:
        return ""
    line = ctx.current_line
    indent = line[: len(line) - len(line.lstrip(" \t"))]
    return indent[: ctx.cursor[1]]


def _quit_requested(mode: Mode, ctx: ModeContext) -> Step:
    if not ctx.has_path:
        return Step(save_as_prompt(ctx, quit_after_save=True))
    if ctx.modified:
        return Step(Confirm("Unsaved Changes", f"Save changes to '{ctx.file_name}' before quitting?"))
    return Step(Normal(), command=Quit())


_NORMAL_ACTIONS: Dict[str, Callable[[Mode, ModeContext], Step]] = {
    "find": lambda m, ctx: Step(Search(origin=ctx.cursor)),
    "replace": lambda m, ctx: Step(Replace()),
    "goto_line": lambda m, ctx: Step(GoToLine()),
    "undo": lambda m, ctx: Step(m, command=Undo()),
    "redo": lambda m, ctx: Step(m, command=Redo()),
    "quit": _quit_requested,
    "save_file": lambda m, ctx: (
        Step(m, command=Save()) if ctx.has_path else Step(save_as_prompt(ctx, quit_after_save=False))
    ),
    "open_file": lambda m, ctx: Step(m, command=OpenFile()),
    "help": lambda m, ctx: Step(Help()),
    "delete_line": lambda m, ctx: Step(m, command=DeleteLine()),
    "delete_to_line_start": lambda m, ctx: Step(m, command=DeleteToLineStart()),
    "delete_char": lambda m, ctx: Step(m, command=DeleteForward()),
    "toggle_line_numbers": lambda m, ctx: Step(m, command=ToggleLineNumbers()),
    "toggle_help_bar": lambda m, ctx: Step(m, command=ToggleHelpBar()),
}


def _step_normal(mode: Normal, key: KeyEvent, ctx: ModeContext) -> Step:
    action = ctx.keymap.lookup(key)
    if action is not None:
        return _NORMAL_ACTIONS[action](mode, ctx)
    if key.is_key("enter"):
        return Step(mode, command=SplitLine(_auto_indent(ctx)))
    if key.is_key("backspace"):
        return Step(mode, command=DeleteBackward())
    if key.is_key("tab"):
        return Step(mode, command=InsertText(ctx.settings.indent_unit))
    if key.code in MOVE_KEYS and key.is_key(key.code):
        return Step(mode, command=MoveCursor(key.code))
    if key.is_printable:
        return Step(mode, command=InsertText(key.code))
    return _stay(mode)


# --- Search ---

def _step_search(mode: Search, key: KeyEvent, ctx: ModeContext) -> Step:
    if key.is_key("esc"):
        return Step(Normal())
    if key.is_key("enter"):
        if not mode.query:
            return Step(Normal())
        # Final jump: the next match after wherever typing left the cursor.
        return Step(Normal(), command=Find(mode.query, mode.case_sensitive, mode.backward, ctx.cursor))
    if key.is_key("backspace"):
        return Step(replace(mode, query=mode.query[:-1]))
    if key.modifiers == {CONTROL} and key.code == "c":
        return Step(replace(mode, case_sensitive=not mode.case_sensitive))
    if key.modifiers == {CONTROL} and key.code == "r":
        return Step(replace(mode, backward=not mode.backward))
    if key.is_printable:
        new_mode = replace(mode, query=mode.query + key.code)
        return Step(
            new_mode,
            command=Find(new_mode.query, new_mode.case_sensitive, new_mode.backward, new_mode.origin),
        )
    return _stay(mode)


# --- Replace ---

def _edit_replace_field(mode: Replace, edit: Callable[[str], str]) -> Replace:
    if mode.field == "replace":
        return replace(mode, replace=edit(mode.replace))
    return replace(mode, search=edit(mode.search))


def _step_replace_confirmed(mode: Replace, key: KeyEvent) -> Step:
    if key.is_key("enter"):
        if mode.all:
            return Step(Normal(), action=ReplaceAll(mode.search, mode.replace, mode.case_sensitive))
        return Step(Normal(), command=ReplaceOnce(mode.search, mode.replace, mode.case_sensitive))
    if key.modifiers == {CONTROL} and key.code == "a" or key.is_key("a") or key.is_key("A"):
        return Step(replace(mode, all=not mode.all))
    if key.is_key("c") or key.is_key("C"):
        return Step(Normal())
    return _stay(mode)


def _step_replace(mode: Replace, key: KeyEvent, ctx: ModeContext) -> Step:
    if key.is_key("esc"):
        return Step(Normal())
    if mode.confirmed:
        return _step_replace_confirmed(mode, key)
    if key.is_key("enter"):
        if not mode.search:
            return _stay(mode)
        return Step(replace(mode, confirmed=True))
    if key.is_key("tab"):
        if not mode.search:
            return Step(replace(mode, search=ctx.current_line))
        return Step(replace(mode, replace="", field="replace"))
    if key.is_key("backspace"):
        return Step(_edit_replace_field(mode, lambda s: s[:-1]))
    if key.modifiers == {CONTROL} and key.code == "a":
        return Step(replace(mode, all=not mode.all))
    if key.modifiers == {CONTROL} and key.code == "c":
        return Step(replace(mode, case_sensitive=not mode.case_sensitive))
    if key.is_printable:
        return Step(_edit_replace_field(mode, lambda s: s + key.code))
    return _stay(mode)


# --- Go to line ---

def _step_goto(mode: GoToLine, key: KeyEvent, ctx: ModeContext) -> Step:
    if key.is_key("esc"):
        return Step(Normal())
    if key.is_key("enter"):
        if mode.input.isdigit():
            return Step(Normal(), command=GoTo(int(mode.input)))
        return Step(Normal())
    if key.is_key("backspace"):
        return Step(replace(mode, input=mode.input[:-1]))
    if key.is_printable and key.code.isdigit():
        return Step(replace(mode, input=mode.input + key.code))
    return _stay(mode)


# --- Confirm ---

def _step_confirm(mode: Confirm, key: KeyEvent, ctx: ModeContext) -> Step:
    if key.is_key("esc"):
        return Step(Normal())
    if key.is_key("up"):
        return Step(replace(mode, selected=max(0, mode.selected - 1)))
    if key.is_key("down"):
        return Step(replace(mode, selected=min(len(mode.options) - 1, mode.selected + 1)))
    if key.is_key("enter"):
        if mode.choice == "Yes":
            if ctx.has_path:
                return Step(Normal(), action=SaveAndQuit())
            return Step(save_as_prompt(ctx, quit_after_save=True))
        if mode.choice == "No":
            return Step(Normal(), action=QuitWithoutSave())
        return Step(Normal())
    return _stay(mode)


# --- Input ---

def _recall(mode: Input, delta: int) -> Input:
    if not mode.history:
        return mode
    if mode.recall is None:
        if delta > 0:
            return mode
        index = len(mode.history) - 1
    else:
        index = mode.recall + delta
    if index >= len(mode.history):
        return replace(mode, input="", recall=None)
    index = max(0, index)
    return replace(mode, input=mode.history[index], recall=index)


def _step_input(mode: Input, key: KeyEvent, ctx: ModeContext) -> Step:
    if key.is_key("esc"):
        return Step(Normal())
    if key.is_key("enter"):
        return Step(Normal(), action=SaveAs(mode.input, mode.quit_after_save))
    if key.is_key("backspace"):
        return Step(replace(mode, input=mode.input[:-1], recall=None))
    if key.is_key("tab"):
        return Step(replace(mode, input=mode.input + "\t"))
    if key.is_key("up"):
        return Step(_recall(mode, -1))
    if key.is_key("down"):
        return Step(_recall(mode, 1))
    if key.is_printable:
        return Step(replace(mode, input=mode.input + key.code, recall=None))
    return _stay(mode)


# --- Help ---

def _step_help(mode: Help, key: KeyEvent, ctx: ModeContext) -> Step:
    if key.is_key("esc") or ctx.keymap.lookup(key) == "help":
        return Step(Normal())
    return _stay(mode)


_STEPS: Dict[type, Callable] = {
    Normal: _step_normal,
    Search: _step_search,
    Replace: _step_replace,
    GoToLine: _step_goto,
    Confirm: _step_confirm,
    Input: _step_input,
    Help: _step_help,
}


def step(mode: Mode, key: KeyEvent, ctx: Optional[ModeContext] = None) -> Step:
    """Feeds one key event to `mode` and returns the resulting transition.

    Release events and unknown keys leave the mode unchanged.
    """
    if not key.is_press:
        return _stay(mode)
    result = _STEPS[type(mode)](mode, key, ctx or ModeContext())
    if type(result.mode) is not type(mode):
        logger.debug(f"ModeMachine: {mode.name} -> {result.mode.name} on '{key.spec()}'.")
    return result


def status_text(mode: Mode) -> Optional[str]:
    """Status-bar text for `mode`, or None when the cursor position should be shown."""
    if isinstance(mode, Search):
        return f"Search: {mode.query}"
    if isinstance(mode, Replace):
        if mode.confirmed:
            return f"Replace '{mode.search}' with '{mode.replace}'? [Enter=Yes, A=all, C=cancel]"
        return f"Replace: {mode.search} -> {mode.replace}"
    if isinstance(mode, GoToLine):
        return f"Go to line: {mode.input}"
    if isinstance(mode, Confirm):
        return f"{mode.title} - {mode.message}"
    if isinstance(mode, Input):
        return f"{mode.title}: {mode.input}"
    return None
