from typing import TypedDict

from sshchat.constants import NEWLINE, TAB


class CommandTopic(TypedDict):
    helper: str
    usage: list[tuple[str, str]]


COMMAND_TOPICS: dict[str, CommandTopic] = {
    "/commands": {
        "helper": "Display all available commands",
        "usage": [],
    },
    "/help": {
        "helper": "Display additional help information about a command",
        "usage": [
            ("/help <command>", "quick help information for <command>"),
        ],
    },
    "/users": {
        "helper": "Display all connected users",
        "usage": [],
    },
    "/whisper": {
        "helper": "Privately chat with another user in the server",
        "usage": [
            ("/whisper", "exit whisper mode"),
            ("/whisper <username>", "enter private whisper mode with <username>"),
            (
                "/whisper <username> <message>",
                "send private <message> to <username> (without entering whisper mode)",
            ),
        ],
    },
}


def render_usage(topic: CommandTopic) -> str:
    if not topic["usage"]:
        return topic["helper"]
    lines = ["Usage:"]
    for syntax, description in topic["usage"]:
        lines.append(f"{syntax}{TAB}{description}")
    return NEWLINE.join(lines)
