"""Internationalization module"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_LANG = os.getenv("XENOPETS_LANG", "en")
_TRANSLATIONS: Optional[Dict[str, Any]] = None
_FALLBACK: Optional[Dict[str, Any]] = None
_TRANSLATIONS_DIR = Path(__file__).parent


def _read(lang: str) -> Dict[str, Any]:
    json_path = _TRANSLATIONS_DIR / f"{lang}.json"
    if not json_path.exists():
        logger.warning(f"No translations for language '{lang}'")
        return {}
    try:
        with open(json_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading translations for '{lang}': {e}")
        return {}


def load_translations(lang: str = "en") -> Dict[str, Any]:
    """Load translations from JSON file (English is the fallback for missing keys)"""
    global _TRANSLATIONS, _FALLBACK, _LANG
    _LANG = lang
    _TRANSLATIONS = _read(lang)
    _FALLBACK = _TRANSLATIONS if lang == "en" else _read("en")
    return _TRANSLATIONS


def _lookup(table: Dict[str, Any], key: str) -> Optional[str]:
    value: Any = table
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return None
    return value if isinstance(value, str) else None


def get(key: str, default: Optional[str] = None, **kwargs) -> str:
    """
    Get a translated string by key, with optional formatting.

    Args:
        key: Translation key (supports dot notation like "errors.connectivity")
        default: Default value if key not found
        **kwargs: Format arguments for string formatting

    Returns:
        Translated string or default (formatted if kwargs provided)
    """
    if _TRANSLATIONS is None:
        load_translations(_LANG)

    result = _lookup(_TRANSLATIONS, key)
    if result is None:
        result = _lookup(_FALLBACK, key)
    if result is None:
        result = default or key
    return result.format(**kwargs) if kwargs else result


def get_language() -> str:
    return _LANG


def set_language(lang: str):
    """Set the current language and reload translations"""
    load_translations(lang)


# Load translations on import
load_translations(_LANG)
