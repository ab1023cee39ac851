# -*- coding: utf-8 -*-
"""
User-facing message catalog.

Every message the wizard shows (step titles, URL check results, submission
errors) goes through ``tr``. Unknown keys come back unchanged so a missing
entry is visible in the UI instead of raising.
"""

from typing import Dict

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LANGUAGE = "en"


class TranslationManager:
    """Singleton holding the loaded catalogs."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._language = DEFAULT_LANGUAGE
            cls._instance._catalogs = cls._load_catalogs()
        return cls._instance

    @staticmethod
    def _load_catalogs() -> Dict[str, Dict[str, str]]:
        from services.translations.en import EN_TRANSLATIONS
        return {"en": EN_TRANSLATIONS}

    @property
    def language(self) -> str:
        return self._language

    def tr(self, key: str, **kwargs) -> str:
        template = self._catalogs.get(self._language, {}).get(key)
        if template is None and self._language != DEFAULT_LANGUAGE:
            template = self._catalogs[DEFAULT_LANGUAGE].get(key)
        if template is None:
            logger.debug(f"Missing translation: {key}")
            return key
        if not kwargs:
            return template
        try:
            return template.format(**kwargs)
        except (KeyError, IndexError, ValueError) as e:
            logger.warning(f"Could not format translation '{key}' with {sorted(kwargs)}: {e!r}")
            return template


_translator = TranslationManager()


def tr(key: str, **kwargs) -> str:
    return _translator.tr(key, **kwargs)
