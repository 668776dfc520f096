from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from sshchat.constants import MESSAGE_LOG_SIZE, NEWLINE
from sshchat.models import HistoryEntry

if TYPE_CHECKING:
    from sshchat.repositories.session_repository import SessionRepository


class HistoryRepository:
    def __init__(
        self, sessions: "SessionRepository", capacity: int = MESSAGE_LOG_SIZE
    ):
        self.sessions = sessions
        self.capacity = capacity
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, sender_identifier: str, sender_username: str, message: str) -> None:
        # deque(maxlen=...) drops the oldest entry on overflow
        self._entries.append(
            HistoryEntry(
                sender_identifier=sender_identifier,
                sender_username=sender_username,
                message=message,
            )
        )

    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def display_name(self, entry: HistoryEntry) -> str:
        session = self.sessions.find(entry.sender_identifier)
        if session is not None:
            return session.username
        return f"{entry.sender_username} (offline)"

    def formatted(self) -> str:
        return NEWLINE.join(
            f"{self.display_name(entry)}: {entry.message}" for entry in self._entries
        )
