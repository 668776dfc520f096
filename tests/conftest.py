import pytest

import chat
from sshchat.models import ServerConfig


class FakeChannel:
    def __init__(self):
        self.writes: list[str] = []
        self.stderr: list[str] = []
        self.eof = False
        self.exit_status: int | None = None
        self.closed = False

    def write(self, data: str) -> None:
        self.writes.append(data)

    def write_stderr(self, data: str) -> None:
        self.stderr.append(data)

    def write_eof(self) -> None:
        self.eof = True

    def exit(self, status: int) -> None:
        self.exit_status = status

    def close(self) -> None:
        self.closed = True

    @property
    def output(self) -> str:
        return "".join(self.writes)

    def clear(self) -> None:
        self.writes.clear()


@pytest.fixture
def make_channel():
    return FakeChannel


@pytest.fixture
def app():
    return chat.ChatServerApp(ServerConfig())


@pytest.fixture
def connect(app):
    def _connect(username: str, target_app: chat.ChatServerApp | None = None):
        target_app = target_app or app
        channel = FakeChannel()
        session = target_app.on_shell_open(f"id-{username}", username, channel)
        channel.clear()
        return session, channel

    return _connect
