from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Any
from uuid import uuid4

import asyncssh
from dependency_injector import providers  # type: ignore[import-not-found]

from sshchat.constants import (
    CAPACITY_EXCEEDED,
    EXEC_NOT_SUPPORTED,
    LOG_FORMAT,
    LOG_LEVELS,
    NEWLINE,
    PROMPT,
    USERNAME_IN_USE,
)
from sshchat.container import ChatServerContainer
from sshchat.controller import ChatController
from sshchat.models import ServerConfig
from sshchat.repositories import (
    CapacityExceededError,
    ConfigRepository,
    DuplicateSessionError,
    DuplicateUsernameError,
    HistoryRepository,
    SessionRepository,
)
from sshchat.services import DeliveryService, HelpService, MessagingService
from sshchat.state import OutputSink, Session
from sshchat.view import welcome_banner

logger = logging.getLogger(__name__)


class ChatServerApp:
    def __init__(
        self,
        config: ServerConfig | None = None,
        sessions: SessionRepository | None = None,
        history: HistoryRepository | None = None,
    ):
        self.config = config if config is not None else ServerConfig()
        if sessions is None:
            sessions = SessionRepository(max_sessions=self.config.max_sessions)
        if history is None:
            history = HistoryRepository(sessions, capacity=self.config.history_size)
        self.sessions = sessions
        self.history = history
        self.delivery_service = DeliveryService(self)
        self.help_service = HelpService(self)
        self.messaging_service = MessagingService(self)
        self.controller = ChatController(self)

    @classmethod
    def from_container(cls, container: ChatServerContainer) -> "ChatServerApp":
        return cls(
            config=container.server_config(),
            sessions=container.session_repository(),
            history=container.history_repository(),
        )

    def generate_session_id(self) -> str:
        return uuid4().hex

    def on_authenticate(self, username: str) -> bool:
        logger.debug("Accepting credentials for '%s'", username)
        return True

    def on_shell_open(
        self, identifier: str, username: str, channel: OutputSink
    ) -> Session | None:
        try:
            session = self.sessions.add(identifier, username, channel)
        except CapacityExceededError:
            channel.write(f"{CAPACITY_EXCEEDED}{NEWLINE}")
            channel.close()
            return None
        except DuplicateUsernameError:
            channel.write(f"{USERNAME_IN_USE.format(username=username)}{NEWLINE}")
            channel.close()
            return None
        except DuplicateSessionError:
            logger.exception("Session registry invariant violated for %s", identifier)
            channel.close()
            raise

        self.messaging_service.announce_connected(session)
        others = self.sessions.list_usernames(exclude=identifier)
        self.delivery_service.write(session, welcome_banner(others))
        history = self.history.formatted()
        if history:
            self.delivery_service.write(session, f"{history}{NEWLINE}")
        self.delivery_service.write(session, PROMPT)
        return session

    def on_data(self, identifier: str, data: str) -> None:
        self.controller.handle_data(identifier, data)

    def on_close(self, identifier: str) -> None:
        session = self.sessions.remove(identifier)
        if session is None:
            return
        logger.info("%s - %s closed their connection", identifier, session.username)
        self.messaging_service.announce_disconnected(session.username)

    def on_error(self, identifier: str, exc: BaseException) -> None:
        session = self.sessions.remove(identifier)
        if session is None:
            logger.error("Connection %s encountered an error: %s", identifier, exc)
            return
        logger.error(
            "User %s - %s encountered an error: %s", identifier, session.username, exc
        )
        session.channel.close()
        self.messaging_service.announce_disconnected(session.username)

    def on_exec(self, channel: Any, command: str) -> None:
        logger.info("Rejecting exec request: %r", command)
        channel.write_stderr(EXEC_NOT_SUPPORTED)
        channel.exit(0)


class ChatShellSession(asyncssh.SSHServerSession):
    def __init__(self, app: ChatServerApp, identifier: str, username: str):
        self.app = app
        self.identifier = identifier
        self.username = username
        self._chan: asyncssh.SSHServerChannel | None = None
        self._command: str | None = None
        self._shell_requested = False
        self._registered = False

    def connection_made(self, chan: asyncssh.SSHServerChannel) -> None:
        self._chan = chan

    def pty_requested(self, term_type: str, term_size: tuple, term_modes: dict) -> bool:
        logger.debug(
            "PTY requested by %s: %s %s", self.identifier, term_type, term_size
        )
        return True

    def shell_requested(self) -> bool:
        self._shell_requested = True
        return True

    def exec_requested(self, command: str) -> bool:
        self._command = command
        return True

    def session_started(self) -> None:
        if self._chan is None:
            return
        if self._command is not None:
            self.app.on_exec(self._chan, self._command)
            return
        if self._shell_requested:
            session = self.app.on_shell_open(self.identifier, self.username, self._chan)
            self._registered = session is not None

    def data_received(self, data: str, datatype: asyncssh.DataType) -> None:
        if self._registered:
            self.app.on_data(self.identifier, data)

    def connection_lost(self, exc: Exception | None) -> None:
        if self._registered:
            if exc is not None:
                self.app.on_error(self.identifier, exc)
            else:
                self.app.on_close(self.identifier)
            self._registered = False
        self._chan = None


class ChatSSHServer(asyncssh.SSHServer):
    def __init__(self, app: ChatServerApp):
        self.app = app
        self.identifier = app.generate_session_id()
        self.username = ""
        super().__init__()

    def connection_made(self, conn: asyncssh.SSHServerConnection) -> None:
        logger.info(
            "New connection from %s assigned %s",
            conn.get_extra_info("peername"),
            self.identifier,
        )

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            logger.error(
                "Connection %s - %s lost: %s", self.identifier, self.username, exc
            )
        else:
            logger.info("Connection %s - %s closed", self.identifier, self.username)

    def begin_auth(self, username: str) -> bool:
        self.username = username
        return True

    def password_auth_supported(self) -> bool:
        return True

    def validate_password(self, username: str, password: str) -> bool:
        return self.app.on_authenticate(username)

    def kbdint_auth_supported(self) -> bool:
        return True

    def get_kbdint_challenge(self, username: str, lang: str, submethods: str) -> bool:
        return self.app.on_authenticate(username)

    def session_requested(self) -> ChatShellSession:
        identifier = self.app.generate_session_id()
        logger.debug("Connection %s opened session %s", self.identifier, identifier)
        return ChatShellSession(self.app, identifier, self.username)


def load_host_keys(config: ServerConfig) -> list[Any]:
    if config.private_key:
        return [asyncssh.import_private_key(config.private_key)]
    if os.path.exists(config.host_key_path):
        return [config.host_key_path]
    logger.warning("No host key at %s, generating one", config.host_key_path)
    key = asyncssh.generate_private_key("ssh-ed25519")
    key.write_private_key(config.host_key_path)
    return [key]


async def start_server(app: ChatServerApp) -> asyncssh.SSHAcceptor:
    config = app.config
    server = await asyncssh.create_server(
        lambda: ChatSSHServer(app),
        config.host,
        config.port,
        server_host_keys=load_host_keys(config),
        line_editor=False,
    )
    logger.info("Listening on %s:%s", config.host, server.get_port())
    return server


async def serve(app: ChatServerApp) -> None:
    server = await start_server(app)
    await server.wait_closed()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multi-user chat over SSH.")
    parser.add_argument("--config", help="Path to the JSON config file.")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--host-key", dest="host_key_path")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS)
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the effective configuration to the config file and exit.",
    )
    return parser


def build_container(args: argparse.Namespace) -> ChatServerContainer:
    container = ChatServerContainer()
    if args.config:
        container.config_repository.override(
            providers.Singleton(ConfigRepository, config_file=args.config)
        )
    overrides = {
        field: value
        for field, value in (
            ("host", args.host),
            ("port", args.port),
            ("host_key_path", args.host_key_path),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    if overrides:
        config = container.server_config().model_copy(update=overrides)
        container.server_config.override(providers.Object(config))
    return container


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    container = build_container(args)
    config = container.server_config()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    if args.save_config:
        container.config_repository().save_config(config)
        return 0

    app = ChatServerApp.from_container(container)
    try:
        asyncio.run(serve(app))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except (OSError, asyncssh.Error) as exc:
        logger.error("Error starting server: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
