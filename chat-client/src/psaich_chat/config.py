"""Configuration for the chat client."""

from pathlib import Path

from pydantic import BaseModel

from psaich_shared import Language


class Config(BaseModel):
    """Local configuration for this installation.

    Without ``user_id`` the client runs signed out.
    """

    user_id: str | None = None
    firebase_credentials_path: Path
    storage_bucket: str | None = None
    openai_model: str = "gpt-4"
    openai_api_key: str | None = None
    language: Language = Language.PT_BR
    cache_dir: Path | None = None


def load_config(path: Path) -> Config:
    """Load configuration from a JSON file."""
    return Config.model_validate_json(path.read_text())
