import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from dependency_injector import providers  # type: ignore[import-not-found]

import chat
from sshchat.constants import (
    CAPACITY_EXCEEDED,
    ENV_OVERRIDES,
    EXEC_NOT_SUPPORTED,
    NO_OTHER_USERS,
    PROMPT,
)
from sshchat.container import ChatServerContainer
from sshchat.models import ServerConfig
from sshchat.repositories import (
    DuplicateSessionError,
    HistoryRepository,
    SessionRepository,
)
from sshchat.view import strip_ansi


def test_shell_open_sends_banner_then_prompt(app, make_channel):
    channel = make_channel()
    session = app.on_shell_open("id-alice", "alice", channel)

    assert session is not None
    assert "Welcome to SSH Chat!" in channel.output
    assert NO_OTHER_USERS in channel.output
    assert channel.output.endswith(PROMPT)


def test_shell_open_announces_and_replays_history(app, connect, make_channel):
    alice, alice_channel = connect("alice")
    app.on_data(alice.identifier, "hi\r")
    alice_channel.clear()

    channel = make_channel()
    app.on_shell_open("id-bob", "bob", channel)

    assert "User 'bob' has connected" in strip_ansi(alice_channel.output)
    assert "- alice" in channel.output
    assert "alice: hi" in channel.output
    assert "has connected" not in strip_ansi(channel.output)

    app.on_close(alice.identifier)
    late_channel = make_channel()
    app.on_shell_open("id-carol", "carol", late_channel)
    assert "alice (offline): hi" in late_channel.output


def test_shell_open_at_capacity_refuses(connect, make_channel):
    small_app = chat.ChatServerApp(ServerConfig(max_sessions=1))
    _, alice_channel = connect("alice", small_app)

    channel = make_channel()
    assert small_app.on_shell_open("id-bob", "bob", channel) is None

    assert channel.output.startswith(CAPACITY_EXCEEDED)
    assert channel.closed is True
    assert alice_channel.output == ""
    assert small_app.sessions.count() == 1


def test_shell_open_duplicate_username_refuses(app, connect, make_channel):
    connect("alice")
    channel = make_channel()
    assert app.on_shell_open("id-other", "alice", channel) is None
    assert "'alice' is already in use" in channel.output
    assert channel.closed is True


def test_shell_open_duplicate_identifier_reraises(app, connect, make_channel):
    connect("alice")
    channel = make_channel()
    with pytest.raises(DuplicateSessionError):
        app.on_shell_open("id-alice", "someone", channel)
    assert channel.closed is True


def test_close_removes_and_announces(app, connect):
    alice, _ = connect("alice")
    _, bob_channel = connect("bob")

    app.on_close(alice.identifier)

    assert alice.identifier not in app.sessions
    assert "User 'alice' has disconnected" in bob_channel.output
    bob_channel.clear()
    app.on_close(alice.identifier)
    assert bob_channel.output == ""


def test_error_logs_closes_and_announces(app, connect, caplog):
    alice, alice_channel = connect("alice")
    _, bob_channel = connect("bob")

    with caplog.at_level(logging.ERROR):
        app.on_error(alice.identifier, ConnectionResetError("peer reset"))

    assert "id-alice - alice encountered an error: peer reset" in caplog.text
    assert alice_channel.closed is True
    assert alice.identifier not in app.sessions
    assert "User 'alice' has disconnected" in bob_channel.output


def test_exec_is_rejected(app, make_channel):
    channel = make_channel()
    app.on_exec(channel, "uptime")
    assert channel.stderr == [EXEC_NOT_SUPPORTED]
    assert channel.exit_status == 0
    assert app.sessions.count() == 0


def test_authentication_accepts_anyone(app):
    server = chat.ChatSSHServer(app)
    assert server.begin_auth("alice") is True
    assert server.username == "alice"
    assert server.validate_password("alice", "anything") is True
    assert server.get_kbdint_challenge("alice", "", "") is True


def test_shell_session_drives_app(app, make_channel):
    server = chat.ChatSSHServer(app)
    server.begin_auth("alice")
    shell = server.session_requested()
    channel = make_channel()

    shell.connection_made(channel)
    assert shell.pty_requested("xterm", (80, 24, 0, 0), {}) is True
    assert shell.shell_requested() is True
    shell.session_started()

    session = app.sessions.find(shell.identifier)
    assert session.username == "alice"
    shell.data_received("yo", None)
    assert session.text == "yo"

    shell.connection_lost(None)
    assert app.sessions.count() == 0


def test_shell_session_exec_request(app, make_channel):
    shell = chat.ChatShellSession(app, "id-x", "alice")
    channel = make_channel()
    shell.connection_made(channel)
    assert shell.exec_requested("ls") is True
    shell.session_started()

    assert channel.stderr == [EXEC_NOT_SUPPORTED]
    assert app.sessions.count() == 0
    shell.data_received("ignored", None)
    shell.connection_lost(None)


def test_shell_session_error_goes_through_on_error(app, make_channel):
    shell = chat.ChatShellSession(app, "id-x", "alice")
    channel = make_channel()
    shell.connection_made(channel)
    shell.shell_requested()
    shell.session_started()

    with patch.object(app, "on_error") as on_error:
        error = OSError("boom")
        shell.connection_lost(error)
    on_error.assert_called_once_with("id-x", error)


def test_app_from_container_uses_overridden_config():
    container = ChatServerContainer()
    container.server_config.override(
        providers.Object(ServerConfig(max_sessions=3, history_size=2))
    )
    app = chat.ChatServerApp.from_container(container)
    assert app.sessions.max_sessions == 3
    assert app.history.capacity == 2
    assert app.history.sessions is app.sessions


def test_app_uses_injected_repositories():
    container = ChatServerContainer()
    app = chat.ChatServerApp.from_container(container)
    assert app.sessions is container.session_repository()
    assert app.history is container.history_repository()

    sessions = SessionRepository(max_sessions=2)
    history = HistoryRepository(sessions, capacity=1)
    app = chat.ChatServerApp(ServerConfig(), sessions=sessions, history=history)
    assert app.sessions is sessions
    assert app.history is history


def test_each_shell_channel_gets_its_own_identifier(app, make_channel):
    server = chat.ChatSSHServer(app)
    server.begin_auth("alice")
    first = server.session_requested()
    second = server.session_requested()
    assert first.identifier != second.identifier

    for shell in (first, second):
        shell.connection_made(make_channel())
        shell.shell_requested()
        shell.session_started()

    assert app.sessions.list_usernames() == ["alice"]
    assert second._chan.closed is True
    assert "already in use" in second._chan.output


def test_load_host_keys_prefers_existing_file(tmp_path):
    key_path = tmp_path / "host_key"
    key_path.write_text("key", encoding="utf-8")
    config = ServerConfig(host_key_path=str(key_path))
    assert chat.load_host_keys(config) == [str(key_path)]


def test_load_host_keys_generates_missing_key(tmp_path, caplog):
    key_path = str(tmp_path / "host_key")
    fake_key = MagicMock()
    with patch("chat.asyncssh.generate_private_key", return_value=fake_key):
        with caplog.at_level(logging.WARNING):
            keys = chat.load_host_keys(ServerConfig(host_key_path=key_path))
    assert keys == [fake_key]
    fake_key.write_private_key.assert_called_once_with(key_path)
    assert "generating one" in caplog.text


def test_main_save_config_applies_cli_overrides(tmp_path, monkeypatch):
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    config_file = tmp_path / "chat_server.json"
    argv = ["--config", str(config_file), "--save-config", "--port", "2300"]

    assert chat.main([*argv, "--host", "0.0.0.0"]) == 0

    payload = json.loads(config_file.read_text(encoding="utf-8"))
    assert payload["port"] == 2300
    assert payload["host"] == "0.0.0.0"
    assert "private_key" not in payload


def test_main_falls_back_on_invalid_log_level(tmp_path, monkeypatch):
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.setenv("SSH_CHAT_LOG_LEVEL", "LOUD")
    config_file = tmp_path / "chat_server.json"

    assert chat.main(["--config", str(config_file), "--save-config"]) == 0

    payload = json.loads(config_file.read_text(encoding="utf-8"))
    assert payload["log_level"] == "INFO"


def test_main_rejects_unknown_cli_log_level():
    with pytest.raises(SystemExit):
        chat.main(["--log-level", "loud"])
