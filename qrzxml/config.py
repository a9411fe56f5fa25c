"""Client settings loader"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.exceptions import ConfigError
from .core.types import DEFAULT_BASE_URL, DEFAULT_USER_AGENT, ApiVersion, ClientConfig

logger = logging.getLogger(__name__)

USERNAME_ENV = "QRZ_USERNAME"
PASSWORD_ENV = "QRZ_PASSWORD"


@dataclass(frozen=True)
class Settings:
    """Everything needed to build a client"""

    username: str
    password: str = field(repr=False)
    api_version: ApiVersion = field(default_factory=ApiVersion.current)
    config: ClientConfig = field(default_factory=ClientConfig)
    session_cache: str | None = None


def _read_provider_section(config_path: Path) -> dict:
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}, using environment")
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}")

    if not isinstance(config, dict) or not isinstance(config.get("providers", {}), dict):
        raise ConfigError(f"'providers' in {config_path} must be an object")

    section = config.get("providers", {}).get("qrz", {})
    if not isinstance(section, dict):
        raise ConfigError(f"'providers.qrz' in {config_path} must be an object")
    return section


def load_settings(config_path: str | Path = "config.json") -> Settings:
    """
    Load client settings from the "providers.qrz" section of a JSON file.

    Credentials fall back to QRZ_USERNAME / QRZ_PASSWORD when the file
    does not provide them.
    """
    section = _read_provider_section(Path(config_path))

    username = section.get("username") or os.environ.get(USERNAME_ENV, "")
    password = section.get("password") or os.environ.get(PASSWORD_ENV, "")
    if not username or not password:
        raise ConfigError(
            f"QRZ credentials missing: set providers.qrz.username/password in"
            f" {config_path} or {USERNAME_ENV}/{PASSWORD_ENV}"
        )

    try:
        client_config = ClientConfig(
            base_url=section.get("base_url", DEFAULT_BASE_URL),
            user_agent=section.get("user_agent", DEFAULT_USER_AGENT),
            timeout_seconds=float(section.get("timeout_seconds", 30.0)),
            max_retries=int(section.get("max_retries", 3)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid providers.qrz value in {config_path}: {e}")

    return Settings(
        username=username,
        password=password,
        api_version=ApiVersion.parse(str(section.get("api_version", "current"))),
        config=client_config,
        session_cache=section.get("session_cache"),
    )
