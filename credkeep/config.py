"""Runtime configuration — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``CREDKEEP_*`` environment variables.

Examples
--------
Override via environment::

    export CREDKEEP_HOME=/srv/credkeep
    export CREDKEEP_CREDENTIALS_DB_PATH=/srv/credkeep/creds.yaml
    export CREDKEEP_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

CREDS_PATH_STEM = "credentials"
CREDS_DB_FILENAME = "db.yaml"
PLUGIN_GROUP = "credkeep.credentials"


class CredkeepSettings(BaseSettings):
    """Settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CREDKEEP_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    home: Path = Path("~/.credkeep")
    credentials_db_path: Path | None = None
    log_level: str = "WARNING"
    plugin_group: str = PLUGIN_GROUP

    @property
    def home_dir(self) -> Path:
        """The resolved configuration home directory."""
        return self.home.expanduser()

    @property
    def db_path(self) -> Path:
        """Location of the credentials document.

        ``credentials_db_path`` wins when set; otherwise the document lives
        at ``<home>/credentials/db.yaml``.
        """
        if self.credentials_db_path is not None:
            return self.credentials_db_path.expanduser()
        return self.home_dir / CREDS_PATH_STEM / CREDS_DB_FILENAME
