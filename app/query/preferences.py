# app/query/preferences.py

import json
import logging
from pathlib import Path

import aiofiles

from app.core.locales import DEFAULT_LANGUAGE, Language, normalize_language

logger = logging.getLogger(__name__)


class LanguagePreference:
    """The user's language ('en' or 'ar') kept in a small JSON file."""
    def __init__(self, state_dir: str | Path, filename: str = "language.json"):
        self.path = Path(state_dir) / filename
        self.current: Language = DEFAULT_LANGUAGE

    async def load(self) -> Language:
        if not self.path.exists():
            self.current = DEFAULT_LANGUAGE
            return self.current
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                stored = json.loads(await f.read()).get("language")
        except (ValueError, AttributeError) as e:
            logger.warning(f"Unreadable language preference at {self.path}: {e}")
            stored = None
        self.current = normalize_language(stored)
        return self.current

    async def save(self, language: str) -> Language:
        self.current = normalize_language(language)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(json.dumps({"language": self.current}))
        return self.current

    def __call__(self) -> Language:
        return self.current
