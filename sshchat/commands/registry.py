from collections.abc import Callable
from typing import TYPE_CHECKING

from sshchat.state import Session
from sshchat.view import format_user_list

if TYPE_CHECKING:
    from chat import ChatServerApp

CommandHandler = Callable[[Session, str], None]


class CommandRegistry:
    def __init__(self, app: "ChatServerApp"):
        self.app = app

    def build(self) -> dict[str, CommandHandler]:
        return {
            "/commands": self.command_commands,
            "/help": self.command_help,
            "/users": self.command_users,
            "/whisper": self.command_whisper,
        }

    def command_commands(self, session: Session, _args: str) -> None:
        self.app.delivery_service.send_to_session(
            session, self.app.help_service.render_commands()
        )
        self.app.delivery_service.finish_command(session)

    def command_help(self, session: Session, args: str) -> None:
        name = args.split()[0] if args.split() else ""
        self.app.delivery_service.send_to_session(
            session, self.app.help_service.render_help(name)
        )
        self.app.delivery_service.finish_command(session)

    def command_users(self, session: Session, _args: str) -> None:
        usernames = self.app.sessions.list_usernames(exclude=session.identifier)
        self.app.delivery_service.send_to_session(session, format_user_list(usernames))
        self.app.delivery_service.finish_command(session)

    def command_whisper(self, session: Session, args: str) -> None:
        delivery = self.app.delivery_service
        parts = args.split(maxsplit=1)
        if not parts:
            session.leave_whisper()
            delivery.finish_command(session)
            return

        target_name = parts[0]
        target = self.app.sessions.find_by_username(target_name)
        if target is None:
            delivery.send_to_session(
                session, f"Unable to find given user '{target_name}'"
            )
            delivery.finish_command(session)
            return
        if target.identifier == session.identifier:
            delivery.send_to_session(session, "You cannot whisper to yourself")
            delivery.finish_command(session)
            return

        if len(parts) == 1:
            session.enter_whisper(target.identifier)
            delivery.finish_command(session)
            return
        self.app.messaging_service.send_whisper(session, target, parts[1])
