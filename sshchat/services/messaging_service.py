from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sshchat.constants import WHISPER_TARGET_GONE
from sshchat.state import Session
from sshchat.view import (
    format_chat_line,
    format_connected,
    format_disconnected,
    format_own_line,
    format_whisper_received,
    format_whisper_sent,
)

if TYPE_CHECKING:
    from chat import ChatServerApp
    from sshchat.services.delivery_service import DeliveryService

logger = logging.getLogger(__name__)


class MessagingService:
    def __init__(self, app: "ChatServerApp"):
        self.app = app

    @property
    def delivery(self) -> "DeliveryService":
        return self.app.delivery_service

    def handle_message(self, sender: Session, text: str) -> None:
        if sender.is_whispering:
            target = self.app.sessions.find(sender.whisper_target)
            if target is None:
                logger.info(
                    "Whisper target %s of %s is gone; leaving whisper mode",
                    sender.whisper_target,
                    sender.username,
                )
                sender.leave_whisper()
                self.delivery.send_to_session(sender, WHISPER_TARGET_GONE)
                self.delivery.finish_command(sender)
                return
            self.send_whisper(sender, target, text)
            return
        self.send_chat(sender, text)

    def send_chat(self, sender: Session, text: str) -> None:
        logger.debug("Chat from %s (%s): %s", sender.username, sender.identifier, text)
        line = format_chat_line(sender, text)
        for recipient in self.app.sessions.all_except(sender.identifier):
            self.delivery.clear_send_restore(recipient, line)
        self.delivery.finish_message(sender, format_own_line(text))
        self.app.history.add(sender.identifier, sender.username, text)

    def send_whisper(self, sender: Session, target: Session, text: str) -> None:
        logger.debug(
            "Whisper from %s to %s: %s", sender.username, target.username, text
        )
        self.delivery.clear_send_restore(target, format_whisper_received(sender, text))
        self.delivery.finish_message(sender, format_whisper_sent(target, text))

    def announce_connected(self, session: Session) -> None:
        self.delivery.broadcast(format_connected(session), exclude=session.identifier)

    def announce_disconnected(self, username: str) -> None:
        self.delivery.broadcast(format_disconnected(username))
