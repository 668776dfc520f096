"""Decoding of raw terminal input into line-editing key events.

An SSH pty delivers keystrokes as they are typed: single control characters,
printable text (several characters at once when pasting) and escape sequences
for the cursor and editing keys, possibly mixed within one chunk.
``decode_input`` runs a chunk through prompt_toolkit's VT100 parser and maps
the resulting key presses onto the closed set of events the line editor
understands.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from prompt_toolkit.input.vt100_parser import Vt100Parser
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys


class InputKind(Enum):
    SUBMIT = "submit"
    BACKSPACE = "backspace"
    DELETE = "delete"
    CURSOR_LEFT = "cursor_left"
    CURSOR_RIGHT = "cursor_right"
    INTERRUPT = "interrupt"
    PRINTABLE = "printable"
    IGNORED = "ignored"


@dataclass(frozen=True)
class KeyInput:
    kind: InputKind
    char: str = ""


KEY_KINDS: dict[Keys, InputKind] = {
    Keys.ControlM: InputKind.SUBMIT,
    Keys.ControlJ: InputKind.SUBMIT,
    Keys.ControlH: InputKind.BACKSPACE,
    Keys.Delete: InputKind.DELETE,
    Keys.Left: InputKind.CURSOR_LEFT,
    Keys.Right: InputKind.CURSOR_RIGHT,
    Keys.ControlC: InputKind.INTERRUPT,
}

IGNORED = KeyInput(InputKind.IGNORED)


def printable(text: str) -> list[KeyInput]:
    return [KeyInput(InputKind.PRINTABLE, char) for char in text if char.isprintable()]


def decode_key_press(press: KeyPress) -> list[KeyInput]:
    if press.key == Keys.BracketedPaste:
        return printable(press.data)
    if isinstance(press.key, Keys):
        return [KeyInput(KEY_KINDS.get(press.key, InputKind.IGNORED))]
    if press.key.isprintable():
        return [KeyInput(InputKind.PRINTABLE, press.key)]
    return [IGNORED]


def decode_input(data: str) -> list[KeyInput]:
    presses: list[KeyPress] = []
    parser = Vt100Parser(presses.append)
    # A chunk holds whole key presses, so a trailing ESC is the Escape key.
    parser.feed_and_flush(data)
    return [key for press in presses for key in decode_key_press(press)]
