from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from sshchat.constants import COLOUR_RESET


class OutputSink(Protocol):
    """The subset of an asyncssh server channel the chat core writes to."""

    def write(self, data: str) -> None:
        pass

    def write_eof(self) -> None:
        pass

    def exit(self, status: int) -> None:
        pass

    def close(self) -> None:
        pass


class SessionMode(Enum):
    NORMAL = "normal"
    WHISPER = "whisper"


@dataclass(eq=False)
class Session:
    identifier: str
    username: str
    channel: OutputSink
    colour: str = COLOUR_RESET

    buffer: list[str] = field(default_factory=list)
    position: int = 0
    mode: SessionMode = SessionMode.NORMAL
    whisper_target: str | None = None

    @property
    def text(self) -> str:
        return "".join(self.buffer)

    def reset_input(self) -> None:
        self.buffer.clear()
        self.position = 0

    def enter_whisper(self, target_identifier: str) -> None:
        self.mode = SessionMode.WHISPER
        self.whisper_target = target_identifier

    def leave_whisper(self) -> None:
        self.mode = SessionMode.NORMAL
        self.whisper_target = None

    @property
    def is_whispering(self) -> bool:
        return self.mode is SessionMode.WHISPER
