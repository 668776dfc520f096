from sshchat.repositories.config_repository import ConfigRepository
from sshchat.repositories.history_repository import HistoryRepository
from sshchat.repositories.session_repository import (
    CapacityExceededError,
    DuplicateSessionError,
    DuplicateUsernameError,
    SessionRegistryError,
    SessionRepository,
)

__all__ = [
    "CapacityExceededError",
    "ConfigRepository",
    "DuplicateSessionError",
    "DuplicateUsernameError",
    "HistoryRepository",
    "SessionRegistryError",
    "SessionRepository",
]
