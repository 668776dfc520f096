from __future__ import annotations

from dependency_injector import containers, providers  # type: ignore[import-not-found]

from sshchat.repositories import (
    ConfigRepository,
    HistoryRepository,
    SessionRepository,
)


class ChatServerContainer(containers.DeclarativeContainer):
    config_repository = providers.Singleton(ConfigRepository)
    server_config = providers.Singleton(ConfigRepository.load_config, config_repository)

    session_repository = providers.Singleton(
        SessionRepository,
        max_sessions=server_config.provided.max_sessions,
    )
    history_repository = providers.Singleton(
        HistoryRepository,
        sessions=session_repository,
        capacity=server_config.provided.history_size,
    )
