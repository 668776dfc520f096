from typing import TYPE_CHECKING

from sshchat.constants import NEWLINE
from sshchat.help_catalog import COMMAND_TOPICS, render_usage

if TYPE_CHECKING:
    from chat import ChatServerApp


def unknown_command(name: str) -> str:
    return f"{name} is not known or currently implemented"


class HelpService:
    def __init__(self, app: "ChatServerApp") -> None:
        self.app = app

    def render_commands(self) -> str:
        return NEWLINE.join(
            f"{name}: {topic['helper']}" for name, topic in COMMAND_TOPICS.items()
        )

    def render_help(self, name: str | None = None) -> str:
        name = (name or "").strip()
        if not name:
            return render_usage(COMMAND_TOPICS["/help"])
        if not name.startswith("/"):
            name = f"/{name}"
        topic = COMMAND_TOPICS.get(name)
        if topic is None:
            return unknown_command(name)
        return render_usage(topic)
