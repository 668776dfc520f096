from __future__ import annotations

import logging

from sshchat.constants import COLOURS, MAX_CONNECTION_COUNT
from sshchat.state import OutputSink, Session

logger = logging.getLogger(__name__)


class SessionRegistryError(Exception):
    pass


class DuplicateSessionError(SessionRegistryError):
    pass


class CapacityExceededError(SessionRegistryError):
    pass


class DuplicateUsernameError(SessionRegistryError):
    pass


class SessionRepository:
    """Connected sessions keyed by identifier, kept in connection order."""

    def __init__(self, max_sessions: int = MAX_CONNECTION_COUNT):
        self.max_sessions = max_sessions
        self._sessions: dict[str, Session] = {}
        self._slot = 0

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._sessions

    def count(self) -> int:
        return len(self._sessions)

    def add(self, identifier: str, username: str, channel: OutputSink) -> Session:
        if identifier in self._sessions:
            logger.error(
                "Attempted to add an existing session %s (%s) to the registry",
                identifier,
                username,
            )
            raise DuplicateSessionError(
                f"Session '{identifier}' is already registered."
            )
        if len(self._sessions) >= self.max_sessions:
            logger.warning(
                "Refusing session %s (%s): %s of %s slots in use",
                identifier,
                username,
                len(self._sessions),
                self.max_sessions,
            )
            raise CapacityExceededError("Server at capacity.")
        if self.find_by_username(username) is not None:
            logger.warning(
                "Refusing session %s: username '%s' is already connected",
                identifier,
                username,
            )
            raise DuplicateUsernameError(f"Username '{username}' is already in use.")

        session = Session(
            identifier=identifier,
            username=username,
            channel=channel,
            colour=COLOURS[self._slot % len(COLOURS)],
        )
        self._slot += 1
        self._sessions[identifier] = session
        logger.info("New user connection: %s - %s", identifier, username)
        return session

    def remove(self, identifier: str) -> Session | None:
        session = self._sessions.pop(identifier, None)
        if session is None:
            logger.warning(
                "Tried to remove a session that doesn't exist: %s", identifier
            )
        return session

    def find(self, identifier: str | None) -> Session | None:
        if identifier is None:
            return None
        return self._sessions.get(identifier)

    def find_by_username(self, username: str) -> Session | None:
        for session in self._sessions.values():
            if session.username == username:
                return session
        return None

    def all(self) -> list[Session]:
        return list(self._sessions.values())

    def all_except(self, identifier: str) -> list[Session]:
        return [s for s in self._sessions.values() if s.identifier != identifier]

    def list_usernames(self, exclude: str | None = None) -> list[str]:
        return [s.username for s in self._sessions.values() if s.identifier != exclude]
