"""Client configuration, read from JOURNAL_* environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Passed explicitly to the journal app at startup."""

    model_config = {
        "env_prefix": "JOURNAL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    base_url: str = Field(default="http://localhost:8000")

    # Pre-issued token supplied by the hosting environment, if any
    initial_auth_token: str = Field(default="")

    download_dir: Path = Field(default=Path("."))
    copy_ack_seconds: float = Field(default=2.0)
