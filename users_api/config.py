"""
Runtime configuration for the Users API.

Settings are read from the process environment. A ``.env`` file in the
working directory is loaded first; variables already present in the
environment take precedence over it.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ID_STRATEGIES = ("length", "max")

_TRUTHY = {"1", "true", "yes", "on"}


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class Settings:
    """Resolved settings for the API server and CLI."""

    # Configuration defaults
    DEFAULT_HOST = "localhost"
    DEFAULT_PORT = 4000
    DEFAULT_USERS_FILE = "data/users.json"
    DEFAULT_STATIC_DIR = "public"

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    users_file: str = DEFAULT_USERS_FILE
    static_dir: str = DEFAULT_STATIC_DIR
    id_strategy: str = "length"
    write_error_status: int = 500
    create_file: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if self.id_strategy not in ID_STRATEGIES:
            raise ValueError(
                f"Unknown id strategy {self.id_strategy!r}, "
                f"expected one of: {', '.join(ID_STRATEGIES)}"
            )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env_file: Optional path to a dotenv file (default: ./.env)

        Returns:
            Settings populated from the environment with static fallbacks
        """
        load_dotenv(env_file or ".env", override=False)

        host = os.getenv("USERS_API_HOST") or os.getenv("HOST") or cls.DEFAULT_HOST
        port_var = "USERS_API_PORT" if os.getenv("USERS_API_PORT") else "PORT"

        return cls(
            host=host,
            port=_int_from_env(port_var, cls.DEFAULT_PORT),
            users_file=os.getenv("USERS_API_USERS_FILE", cls.DEFAULT_USERS_FILE),
            static_dir=os.getenv("USERS_API_STATIC_DIR", cls.DEFAULT_STATIC_DIR),
            id_strategy=os.getenv("USERS_API_ID_STRATEGY", "length").strip().lower(),
            write_error_status=_int_from_env("USERS_API_WRITE_ERROR_STATUS", 500),
            create_file=_bool_from_env("USERS_API_CREATE_FILE", True),
            log_level=os.getenv("USERS_API_LOG_LEVEL", "INFO").upper(),
        )
