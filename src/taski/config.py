"""Configuration management for taski."""

import sys
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Floor for the periodic sync interval, in seconds
MIN_SYNC_INTERVAL = 30

# Quiet period after the last save before a sync runs, in seconds
SAVE_DEBOUNCE_SECONDS = 10


def default_taski_dir() -> Path:
    """Conventional per-user notes directory."""
    return Path.home() / "taski"


class Settings(BaseSettings):
    """taski configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="TASKI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Git sync
    git_auto_sync: bool = Field(
        default=True,
        description="Automatically commit, pull and push the notes directory",
    )
    git_sync_interval: int = Field(
        default=MIN_SYNC_INTERVAL,
        description=f"Sync interval in seconds (minimum {MIN_SYNC_INTERVAL})",
    )

    @property
    def sync_interval_seconds(self) -> int:
        """Sync interval clamped to the minimum."""
        return max(self.git_sync_interval, MIN_SYNC_INTERVAL)

    # Scanning
    additional_directories: Annotated[list[Path], NoDecode] = Field(
        default_factory=list,
        description="Extra directories scanned for task files",
    )
    exclude_directories: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Glob patterns excluded from scanning (e.g. **/archive/**)",
    )
    include_workspace: bool = Field(
        default=False,
        description="Also scan the current working directory",
    )

    @field_validator("additional_directories", "exclude_directories", mode="before")
    @classmethod
    def parse_list(cls, v: str | list | None) -> list:
        """Parse lists from comma-separated strings."""
        if v is None or v == "":
            return []
        if isinstance(v, list):
            return v
        return [x.strip() for x in str(v).split(",") if x.strip()]

    @field_validator("additional_directories")
    @classmethod
    def expand_directories(cls, v: list[Path]) -> list[Path]:
        """Expand ``~`` in directory paths."""
        return [Path(p).expanduser() for p in v]

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def taski_dir(self) -> Path:
        """Notes directory that is scanned and synchronized."""
        return default_taski_dir()


def load_settings(root: Path | None = None) -> Settings:
    """Load settings from environment and .env file.

    Args:
        root: Optional directory to look for a .env file in.

    Returns:
        Validated Settings instance.

    Raises:
        SystemExit: If the configuration is invalid.
    """
    env_file = None
    if root:
        env_file = root / ".env"
        if not env_file.exists():
            env_file = root / ".taski" / ".env"
            if not env_file.exists():
                env_file = None

    try:
        if env_file:
            return Settings(_env_file=env_file)  # type: ignore[call-arg]
        return Settings()

    except ValidationError as e:
        _print_config_help(e)
        sys.exit(1)


def _print_config_help(error: Exception) -> None:
    """Print helpful message for invalid configuration."""
    print("\n" + "=" * 60)
    print("taski Configuration Error")
    print("=" * 60 + "\n")

    print("Example .env file:")
    print("-" * 40)
    print("TASKI_GIT_AUTO_SYNC=true")
    print(f"TASKI_GIT_SYNC_INTERVAL={MIN_SYNC_INTERVAL}")
    print("TASKI_ADDITIONAL_DIRECTORIES=~/work-notes,~/journal")
    print("TASKI_EXCLUDE_DIRECTORIES=**/archive/**")
    print("TASKI_LOG_LEVEL=INFO")
    print("-" * 40)
    print()

    print(f"Validation error: {error}")
    print()
