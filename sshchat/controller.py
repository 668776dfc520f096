from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sshchat.commands.registry import CommandHandler, CommandRegistry
from sshchat.keys import InputKind, KeyInput, decode_input
from sshchat.services.help_service import unknown_command
from sshchat.state import Session
from sshchat.view import move_cursor

if TYPE_CHECKING:
    from chat import ChatServerApp
    from sshchat.services.delivery_service import DeliveryService

logger = logging.getLogger(__name__)


class ChatController:
    """Applies keystrokes to a session's input line and dispatches submitted lines."""

    def __init__(self, app: "ChatServerApp"):
        self.app = app
        self.command_handlers: dict[str, CommandHandler] = CommandRegistry(app).build()

    @property
    def delivery(self) -> "DeliveryService":
        return self.app.delivery_service

    def handle_data(self, identifier: str, data: str) -> None:
        session = self.app.sessions.find(identifier)
        if session is None:
            logger.warning(
                "Tried to accept input for session that doesn't exist: %s", identifier
            )
            return

        for key in decode_input(data):
            if key.kind is InputKind.INTERRUPT:
                self.interrupt(session)
                return
            self.handle_key(session, key)

    def handle_key(self, session: Session, key: KeyInput) -> None:
        match key.kind:
            case InputKind.SUBMIT:
                self.submit(session)
            case InputKind.BACKSPACE:
                self.backspace(session)
            case InputKind.DELETE:
                self.delete(session)
            case InputKind.CURSOR_LEFT:
                self.cursor_left(session)
            case InputKind.CURSOR_RIGHT:
                self.cursor_right(session)
            case InputKind.INTERRUPT:
                self.interrupt(session)
            case InputKind.PRINTABLE:
                self.insert(session, key.char)
            case InputKind.IGNORED:
                pass

    def submit(self, session: Session) -> None:
        if not session.buffer:
            return
        self.handle_line(session, session.text)

    def backspace(self, session: Session) -> None:
        if session.position == 0:
            return
        del session.buffer[session.position - 1]
        session.position -= 1
        self.delivery.redraw_line(session)

    def delete(self, session: Session) -> None:
        if session.position >= len(session.buffer):
            return
        del session.buffer[session.position]
        self.delivery.redraw_line(session)

    def cursor_left(self, session: Session) -> None:
        if session.position == 0:
            return
        session.position -= 1
        self.delivery.write(session, move_cursor(-1))

    def cursor_right(self, session: Session) -> None:
        if session.position >= len(session.buffer):
            return
        session.position += 1
        self.delivery.write(session, move_cursor(1))

    def insert(self, session: Session, char: str) -> None:
        session.buffer.insert(session.position, char)
        session.position += 1
        tail = "".join(session.buffer[session.position :])
        self.delivery.write(session, char + tail)
        if tail:
            self.delivery.write(session, move_cursor(-len(tail)))

    def interrupt(self, session: Session) -> None:
        logger.info(
            "%s - %s pressed Ctrl-C, ending session",
            session.identifier,
            session.username,
        )
        self.delivery.end_session(session)

    def handle_line(self, session: Session, text: str) -> None:
        if text.startswith("/"):
            self.handle_command(session, text)
            return
        self.app.messaging_service.handle_message(session, text)

    def handle_command(self, session: Session, text: str) -> None:
        parts = text.split(maxsplit=1)
        command = parts[0]
        args = parts[1] if len(parts) > 1 else ""
        handler = self.command_handlers.get(command)
        if handler is None:
            logger.debug("Unknown command %r from %s", command, session.username)
            self.delivery.send_to_session(session, unknown_command(command))
            self.delivery.finish_command(session)
            return
        handler(session, args)
