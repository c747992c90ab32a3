"""Local cache for signed-out usage and preferences."""

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from psaich_shared import FREE_MESSAGES_PER_MONTH, Language

logger = logging.getLogger(__name__)


class CachedMessageCount(BaseModel):
    """Free messages left for a signed-out user, with timestamp."""

    count: int
    updated_at: datetime


class LocalCache:
    """Manages local state for users who are not signed in."""

    def __init__(self, cache_dir: Path):
        self._cache_dir = cache_dir
        self._cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def _message_count_path(self) -> Path:
        return self._cache_dir / "message_count.json"

    @property
    def _preferences_path(self) -> Path:
        return self._cache_dir / "preferences.json"

    def save_message_count(self, count: int) -> None:
        """Cache the signed-out message count."""
        cached = CachedMessageCount(count=count, updated_at=datetime.now())
        self._message_count_path.write_text(cached.model_dump_json(indent=2))
        logger.debug("Saved message count %d to cache", count)

    def load_message_count(self) -> int:
        """Load the signed-out message count.

        A missing cache is initialised with a full monthly quota.
        """
        if self._message_count_path.exists():
            try:
                cached = CachedMessageCount.model_validate_json(
                    self._message_count_path.read_text()
                )
                return cached.count
            except Exception:
                logger.exception("Failed to load message count cache")

        self.save_message_count(FREE_MESSAGES_PER_MONTH)
        return FREE_MESSAGES_PER_MONTH

    def save_language(self, language: Language) -> None:
        """Remember the preferred chat language."""
        self._preferences_path.write_text(
            json.dumps({"preferredLanguage": language.value}, indent=2)
        )

    def load_language(self) -> Language | None:
        """Load the preferred language. Returns None if none was saved."""
        if not self._preferences_path.exists():
            return None
        try:
            data = json.loads(self._preferences_path.read_text())
            return Language(data["preferredLanguage"])
        except Exception:
            logger.exception("Failed to load preferences cache")
            return None
