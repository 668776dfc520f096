from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from sshchat.constants import CONFIG_FILE, ENV_OVERRIDES
from sshchat.models import ServerConfig

logger = logging.getLogger(__name__)


class ConfigRepository:
    def __init__(
        self,
        config_file: str = CONFIG_FILE,
        environ: Mapping[str, str] | None = None,
    ):
        self.config_file = config_file
        self.environ = os.environ if environ is None else environ

    def load_config_data(self) -> dict[str, Any]:
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        return data
                    logger.warning(
                        "Ignoring config in %s: expected a JSON object",
                        self.config_file,
                    )
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning(
                    "Failed to load config from %s: %s", self.config_file, exc
                )
        return {}

    def load_env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for env_name, field_name in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value is None or not value.strip():
                continue
            overrides[field_name] = value.strip()
        return overrides

    def load_config(self) -> ServerConfig:
        data = self.load_config_data()
        data.update(self.load_env_overrides())
        try:
            return ServerConfig.from_dict(data)
        except ValidationError as exc:
            logger.warning("Invalid server config, using defaults: %s", exc)
            return ServerConfig()

    def save_config(self, config: ServerConfig) -> None:
        payload = config.to_dict()
        payload.pop("private_key", None)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
