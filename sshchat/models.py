from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sshchat.constants import (
    DEFAULT_HOST,
    DEFAULT_HOST_KEY_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    LOG_LEVELS,
    MAX_CONNECTION_COUNT,
    MESSAGE_LOG_SIZE,
)


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    host_key_path: str = DEFAULT_HOST_KEY_PATH
    private_key: str | None = None
    max_sessions: int = Field(default=MAX_CONNECTION_COUNT, ge=1)
    history_size: int = Field(default=MESSAGE_LOG_SIZE, ge=0)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}'")
        return level

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        return cls(**data)


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender_identifier: str
    sender_username: str
    message: str

