"""Tool configuration loaded from WORKSPACES_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_config_path() -> Path:
    return Path("~/.config/workspaces/workspaces.yaml").expanduser()


class WorkspacesSettings(BaseSettings):
    """devworkspaces settings.

    All fields are read from environment variables with the ``WORKSPACES_``
    prefix.  For example, ``WORKSPACES_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    Command-line options take precedence over these values.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKSPACES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "WARNING"
    """Baseline level; ``-v`` / ``-q`` on the command line shift it."""

    # -- Config document -------------------------------------------------------
    config_path: Path = Field(default_factory=default_config_path)

    # -- Git -------------------------------------------------------------------
    git_binary: str = "git"


@lru_cache(maxsize=1)
def get_settings() -> WorkspacesSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return WorkspacesSettings()
