from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sshchat.constants import NEWLINE
from sshchat.state import Session
from sshchat.view import (
    clear_line,
    cursor_to,
    move_cursor,
    newline_prompt_for,
    prompt_for,
    prompt_width,
)

if TYPE_CHECKING:
    from chat import ChatServerApp

logger = logging.getLogger(__name__)


class DeliveryService:
    """Writes to session terminals without clobbering what users are typing."""

    def __init__(self, app: "ChatServerApp"):
        self.app = app

    def write(self, session: Session, data: str) -> None:
        if not data:
            return
        try:
            session.channel.write(data)
        except OSError as exc:
            logger.warning(
                "Failed writing to %s - %s: %s",
                session.identifier,
                session.username,
                exc,
            )

    def restore_cursor(self, session: Session) -> None:
        if session.position < len(session.buffer):
            column = prompt_width(session, self.app.sessions) + session.position
            self.write(session, cursor_to(column))

    def redraw_line(self, session: Session) -> None:
        self.write(session, clear_line())
        self.write(session, prompt_for(session, self.app.sessions))
        self.write(session, session.text)
        self.restore_cursor(session)

    def clear_send_restore(self, session: Session, message: str) -> None:
        self.write(session, clear_line())
        self.write(session, message)
        self.write(session, newline_prompt_for(session, self.app.sessions))
        self.write(session, session.text)
        if session.position < len(session.buffer):
            self.write(session, move_cursor(session.position - len(session.buffer)))

    def broadcast(self, message: str, exclude: str | None = None) -> None:
        recipients = (
            self.app.sessions.all()
            if exclude is None
            else self.app.sessions.all_except(exclude)
        )
        for session in recipients:
            self.clear_send_restore(session, message)

    def end_session(self, session: Session) -> None:
        try:
            session.channel.write_eof()
            session.channel.exit(0)
        except OSError as exc:
            logger.warning(
                "Failed ending session %s - %s: %s",
                session.identifier,
                session.username,
                exc,
            )

    def send_to_session(self, session: Session, message: str) -> None:
        self.write(session, f"{NEWLINE}{NEWLINE}{message}{NEWLINE}")

    def finish_command(self, session: Session) -> None:
        session.reset_input()
        self.write(session, newline_prompt_for(session, self.app.sessions))

    def finish_message(self, session: Session, line: str) -> None:
        session.reset_input()
        self.write(session, clear_line())
        self.write(session, line)
        self.write(session, newline_prompt_for(session, self.app.sessions))
