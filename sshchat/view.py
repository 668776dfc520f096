from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from sshchat.constants import (
    BANNER_RULE,
    COLOUR_RESET,
    CSI,
    NEWLINE,
    NO_OTHER_USERS,
    PROMPT,
    WHISPER_PROMPT_PREFIX,
)

if TYPE_CHECKING:
    from sshchat.repositories.session_repository import SessionRepository
    from sshchat.state import Session

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def colourize(colour: str, text: str) -> str:
    return f"{colour}{text}{COLOUR_RESET}"


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def visible_width(text: str) -> int:
    return len(strip_ansi(text))


def clear_line() -> str:
    """Erase the whole current line and return the cursor to column 0."""
    return f"{CSI}2K{CSI}1G"


def cursor_to(column: int) -> str:
    return f"{CSI}{column + 1}G"


def move_cursor(dx: int) -> str:
    if dx > 0:
        return f"{CSI}{dx}C"
    if dx < 0:
        return f"{CSI}{-dx}D"
    return ""


def prompt_for(session: "Session", sessions: "SessionRepository") -> str:
    if session.is_whispering:
        target = sessions.find(session.whisper_target)
        if target is not None:
            label = colourize(
                target.colour, f"{WHISPER_PROMPT_PREFIX}{target.username}"
            )
            return f"{label}{PROMPT}"
    return PROMPT


def newline_prompt_for(session: "Session", sessions: "SessionRepository") -> str:
    return f"{NEWLINE}{prompt_for(session, sessions)}"


def prompt_width(session: "Session", sessions: "SessionRepository") -> int:
    return visible_width(prompt_for(session, sessions))


def format_chat_line(sender: "Session", message: str) -> str:
    return f"{colourize(sender.colour, sender.username)}: {message}"


def format_own_line(message: str) -> str:
    return f"me: {message}"


def format_whisper_received(sender: "Session", message: str) -> str:
    return f"{colourize(sender.colour, sender.username)} [whisper]: {message}"


def format_whisper_sent(target: "Session", message: str) -> str:
    label = colourize(target.colour, f"{WHISPER_PROMPT_PREFIX}{target.username}")
    return f"me [whisper {label}]: {message}"


def format_user_list(usernames: Sequence[str]) -> str:
    if not usernames:
        return NO_OTHER_USERS
    return NEWLINE.join(f"- {name}" for name in usernames)


def format_connected(session: "Session") -> str:
    return f"User '{colourize(session.colour, session.username)}' has connected"


def format_disconnected(username: str) -> str:
    return f"User '{username}' has disconnected"


def format_server_time(now: datetime) -> str:
    return now.strftime("%d %B %Y at %H:%M:%S")


def welcome_banner(other_usernames: Sequence[str], now: datetime | None = None) -> str:
    now = now or datetime.now().astimezone()
    users = format_user_list(other_usernames).replace(NEWLINE, f"{NEWLINE}  ")
    lines = [
        BANNER_RULE,
        "Welcome to SSH Chat!",
        "",
        f"Current server time: {format_server_time(now)}",
        "Current active users:",
        f"  {users}",
        "",
        "Type '/commands' to view all available chat commands",
        "",
        "Please be civil and have a nice time 🥳",
        BANNER_RULE,
    ]
    return NEWLINE.join(lines) + NEWLINE
