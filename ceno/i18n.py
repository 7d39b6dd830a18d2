"""
ceno.i18n: Localization catalog.

Catalogs are YAML files named ``<locale>.yaml`` (for example ``en-us.yaml``)
mapping message ids to text. Text may carry ``{Name}`` placeholders that are
filled from the parameters given at lookup time.

The active locale is chosen from the UI language the process was started
with, falling back to the default locale when that language is unset or has
no catalog.
"""

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from ceno.config import CenoConfig
from ceno.errors import TranslationError
from ceno.logger import get_logger

CATALOG_SUFFIX = ".yaml"


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def normalize_tag(tag: str) -> str:
    """Turn ``fr_FR.UTF-8`` or ``FR-fr`` into ``fr-fr``."""
    tag = tag.split(".", 1)[0].split("@", 1)[0]
    return tag.strip().replace("_", "-").lower()


def available_locales(translations_dir: str | Path) -> tuple[str, ...]:
    directory = Path(translations_dir)
    if not directory.is_dir():
        return ()
    return tuple(sorted(p.stem for p in directory.glob(f"*{CATALOG_SUFFIX}")))


def resolve_locale(
    requested: str | None,
    default: str,
    available: tuple[str, ...],
) -> str:
    """
    Pick the locale to use for a requested language tag.

    An exact match wins, then any catalog sharing the primary language
    (``fr`` matches ``fr-fr``). Anything else yields the default.
    """
    if not requested:
        return default
    tag = normalize_tag(requested)
    if tag in available:
        return tag
    language = tag.split("-", 1)[0]
    for candidate in available:
        if candidate.split("-", 1)[0] == language:
            return candidate
    return default


@lru_cache(maxsize=32)
def load_catalog(path: str) -> Mapping[str, str]:
    """Load one catalog file. Loaded catalogs are cached and read-only."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise TranslationError(
            stage="i18n",
            message=f"Cannot read catalog: {path}",
            payload={"path": path, "error": str(e)},
        )
    except yaml.YAMLError as e:
        raise TranslationError(
            stage="i18n",
            message=f"Malformed catalog: {path}",
            payload={"path": path, "error": str(e)},
        )

    if not isinstance(data, dict):
        raise TranslationError(
            stage="i18n",
            message=f"Catalog must be a mapping: {path}",
            payload={"path": path},
        )
    return MappingProxyType({str(k): str(v) for k, v in data.items()})


class Translator:
    """Look up localized text, falling back to the default catalog, then to the id."""

    def __init__(
        self,
        locale: str,
        messages: Mapping[str, str],
        fallback: Mapping[str, str] | None = None,
    ):
        self.locale = locale
        self._messages = messages
        self._fallback = fallback or {}

    def __call__(self, key: str, params: Mapping[str, Any] | None = None) -> str:
        text = self._messages.get(key)
        if text is None:
            text = self._fallback.get(key, key)
        if params:
            try:
                return text.format_map(_KeepMissing(params))
            except (ValueError, IndexError, AttributeError):
                # Braces that are not placeholders; show the text as written.
                return text
        return text

    def has(self, key: str) -> bool:
        return key in self._messages or key in self._fallback


def _catalog_or_empty(directory: Path, locale: str) -> Mapping[str, str]:
    try:
        return load_catalog(str(directory / f"{locale}{CATALOG_SUFFIX}"))
    except TranslationError as e:
        get_logger().error(str(e), stage="i18n", **e.payload)
        return {}


def tfunc(config: CenoConfig, environ: Mapping[str, str] | None = None) -> Translator:
    """Build the translation function for the process's UI language."""
    directory = Path(config.locale.translations_dir)
    locale = resolve_locale(
        config.language(environ),
        config.locale.default,
        available_locales(directory),
    )
    fallback = _catalog_or_empty(directory, config.locale.default)
    if locale == config.locale.default:
        return Translator(locale, fallback)
    return Translator(locale, _catalog_or_empty(directory, locale), fallback)
