# nova/core/KeyMap.py
"""KeyMap Module for Nova Editor
==============================
Key event value type and the configurable Normal-mode keybindings.

A `KeyEvent` is what the terminal front end hands to the editor core:
a character or named key, a set of modifiers and whether the key was pressed
or released. Only presses drive the editor.

Bindings are written as key specs such as ``"ctrl+f"``, ``"f1"`` or
``"alt-h"`` and are read from the ``[keybindings]`` table of the
configuration; every action accepts a single spec or a list of specs.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from wcwidth import wcwidth

from nova.utils.utils import DEFAULT_CONFIG

logger = logging.getLogger("nova")

CONTROL = "control"
SHIFT = "shift"
ALT = "alt"

PRESS = "press"
RELEASE = "release"

NAMED_KEYS = frozenset(
    {
        "enter", "esc", "backspace", "tab", "delete", "insert",
        "up", "down", "left", "right", "home", "end", "pageup", "pagedown",
    }
    | {f"f{n}" for n in range(1, 13)}
)

MODIFIER_ALIASES = {
    "ctrl": CONTROL, "control": CONTROL,
    "shift": SHIFT,
    "alt": ALT, "meta": ALT,
}

KEY_ALIASES = {
    "del": "delete", "return": "enter", "escape": "esc", "bs": "backspace",
    "pgup": "pageup", "page_up": "pageup", "pgdn": "pagedown", "page_down": "pagedown",
    "space": " ", "plus": "+", "minus": "-", "backslash": "\\",
}

KeySpec = Tuple[str, FrozenSet[str]]


@dataclass(frozen=True)
class KeyEvent:
    code: str
    modifiers: FrozenSet[str] = field(default_factory=frozenset)
    kind: str = PRESS

    @classmethod
    def char(cls, ch: str) -> "KeyEvent":
        return cls(ch)

    @classmethod
    def ctrl(cls, ch: str) -> "KeyEvent":
        return cls(ch.lower(), frozenset({CONTROL}))

    @classmethod
    def alt(cls, ch: str) -> "KeyEvent":
        return cls(ch, frozenset({ALT}))

    @classmethod
    def named(cls, name: str, *modifiers: str) -> "KeyEvent":
        return cls(name, frozenset(modifiers))

    @property
    def is_press(self) -> bool:
        return self.kind == PRESS

    @property
    def is_named(self) -> bool:
        return self.code in NAMED_KEYS

    @property
    def is_printable(self) -> bool:
        """True for a single visible character typed without Ctrl/Alt."""
        if len(self.code) != 1 or CONTROL in self.modifiers or ALT in self.modifiers:
            return False
        return wcwidth(self.code) > 0

    def is_key(self, name: str) -> bool:
        """True if this is the named key `name`, ignoring Shift."""
        return self.code == name and not (self.modifiers - {SHIFT})

    def spec(self) -> str:
        mods = [m for m in (CONTROL, ALT, SHIFT) if m in self.modifiers]
        names = {CONTROL: "ctrl", ALT: "alt", SHIFT: "shift"}
        return "+".join([names[m] for m in mods] + [self.code])


def parse_key_spec(spec: str) -> KeySpec:
    """Decodes a key spec like ``"ctrl+f"`` into `(code, modifiers)`.

    Raises:
        ValueError: If the spec is empty or uses an unknown modifier or key name.
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ValueError(f"Empty key spec: {spec!r}")
    raw = spec.strip()
    if raw.endswith("++"):
        parts = raw[:-2].split("+") + ["+"]
    else:
        parts = raw.split("+")
        if len(parts) == 1 and "-" in raw[1:]:
            parts = raw.split("-")
    *mod_parts, key_part = parts
    modifiers = set()
    for part in mod_parts:
        name = MODIFIER_ALIASES.get(part.strip().lower())
        if name is None:
            raise ValueError(f"Unknown modifier {part!r} in key spec {spec!r}")
        modifiers.add(name)

    key = key_part if len(key_part) == 1 else key_part.strip().lower()
    key = KEY_ALIASES.get(key, key)
    if len(key) != 1 and key not in NAMED_KEYS:
        raise ValueError(f"Unknown key {key_part!r} in key spec {spec!r}")
    if len(key) == 1 and CONTROL in modifiers:
        key = key.lower()
    return key, frozenset(modifiers)


## ==================== KeyMap Class ====================
class KeyMap:
    """Maps key events to Normal-mode action names.

    Defaults come from `DEFAULT_CONFIG["keybindings"]`; a ``[keybindings]``
    table in `config` overrides them per action.
    """

    ACTIONS = frozenset(DEFAULT_CONFIG["keybindings"])

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self._bindings: Dict[KeySpec, str] = {}
        bindings = dict(DEFAULT_CONFIG["keybindings"])
        user_bindings = (config or {}).get("keybindings", {})
        if isinstance(user_bindings, dict):
            bindings.update(user_bindings)
        self._load_keybindings(bindings)

    def _load_keybindings(self, bindings: Dict[str, Any]) -> None:
        for action, specs in bindings.items():
            if action not in self.ACTIONS:
                logger.warning(f"KeyMap: ignoring unknown action '{action}'.")
                continue
            if isinstance(specs, str):
                specs = [specs]
            if not isinstance(specs, (list, tuple)):
                logger.warning(f"KeyMap: invalid binding for '{action}': {specs!r}")
                continue
            for spec in specs:
                try:
                    key = parse_key_spec(spec)
                except ValueError as e:
                    logger.error(f"KeyMap: {e}")
                    continue
                if key in self._bindings and self._bindings[key] != action:
                    logger.warning(
                        f"KeyMap: '{spec}' rebound from '{self._bindings[key]}' to '{action}'."
                    )
                self._bindings[key] = action
        logger.debug(f"KeyMap: {len(self._bindings)} key binding(s) loaded.")

    def __len__(self) -> int:
        return len(self._bindings)

    def bind(self, spec: str, action: str) -> None:
        if action not in self.ACTIONS:
            raise ValueError(f"Unknown action: {action!r}")
        self._bindings[parse_key_spec(spec)] = action

    def keys_for(self, action: str) -> Iterable[str]:
        return [KeyEvent(code, mods).spec() for (code, mods), name in self._bindings.items() if name == action]

    def lookup(self, event: KeyEvent) -> Optional[str]:
        """Returns the action bound to `event`, if any."""
        code = event.code.lower() if CONTROL in event.modifiers and len(event.code) == 1 else event.code
        action = self._bindings.get((code, event.modifiers))
        if action is None and SHIFT in event.modifiers:
            action = self._bindings.get((code, event.modifiers - {SHIFT}))
        return action
