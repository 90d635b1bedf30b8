"""
Translation catalogs (English and Nepali).

Keys are dotted paths into the nested catalogs, e.g. ``accounting.debit``.
A missing key falls back to English, then to the key itself.
"""
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, Optional
import json
import logging

from finerp.core.config import settings

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"
SUPPORTED_LANGUAGES = ("en", "ne")
FALLBACK_LANGUAGE = "en"

Translator = Callable[[str], str]


@lru_cache(maxsize=None)
def load_catalog(lang: str) -> Dict[str, str]:
    """Load a catalog and flatten it to dotted keys."""
    path = LOCALES_DIR / f"{lang}.json"
    with path.open(encoding="utf-8") as f:
        nested = json.load(f)

    flat: Dict[str, str] = {}

    def walk(prefix: str, node):
        for key, value in node.items():
            dotted = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                walk(dotted, value)
            else:
                flat[dotted] = value

    walk("", nested)
    return flat


def normalize_language(lang: Optional[str]) -> Optional[str]:
    if not lang:
        return None
    code = lang.strip().lower().replace("_", "-").split("-")[0]
    return code if code in SUPPORTED_LANGUAGES else None


def translate(key: str, lang: str = FALLBACK_LANGUAGE) -> str:
    lang = normalize_language(lang) or FALLBACK_LANGUAGE
    value = load_catalog(lang).get(key)
    if value is None and lang != FALLBACK_LANGUAGE:
        value = load_catalog(FALLBACK_LANGUAGE).get(key)
    if value is None:
        logger.debug(f"Missing translation for '{key}' ({lang})")
        return key
    return value


def get_translator(lang: str) -> Translator:
    def t(key: str) -> str:
        return translate(key, lang)
    return t


def parse_accept_language(header: Optional[str]) -> Optional[str]:
    """Return the first supported language in an Accept-Language header, by quality."""
    if not header:
        return None
    candidates = []
    for position, part in enumerate(header.split(",")):
        pieces = part.strip().split(";")
        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        candidates.append((-quality, position, pieces[0]))
    for _, _, tag in sorted(candidates):
        lang = normalize_language(tag)
        if lang:
            return lang
    return None


def resolve_language(
    query_lang: Optional[str] = None,
    cookie_lang: Optional[str] = None,
    tenant_lang: Optional[str] = None,
    accept_language: Optional[str] = None,
) -> str:
    return (
        normalize_language(query_lang)
        or normalize_language(cookie_lang)
        or normalize_language(tenant_lang)
        or parse_accept_language(accept_language)
        or normalize_language(settings.DEFAULT_LANGUAGE)
        or FALLBACK_LANGUAGE
    )
