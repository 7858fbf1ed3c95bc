"""gettext helpers for user-facing messages."""

from __future__ import annotations

import gettext as _gettext
import os
from collections.abc import Iterable, Sequence
from gettext import GNUTranslations, NullTranslations, _expand_lang
from io import BytesIO
from pathlib import Path
from typing import Final

import polib

DOMAIN: Final = "proxyview"

_TRANSLATION: NullTranslations = NullTranslations()


def gettext(message: str) -> str:
    """Translate *message* with the active catalogue."""
    return _TRANSLATION.gettext(message)


def ngettext(singular: str, plural: str, number: int) -> str:
    """Translate a pluralisable message for *number*."""
    return _TRANSLATION.ngettext(singular, plural, number)


_: Final = gettext


def install(
    localedir: str | os.PathLike[str],
    languages: Iterable[str] | None = None,
    *,
    domain: str = DOMAIN,
) -> NullTranslations:
    """Activate translations for *domain* found under *localedir*.

    Compiled ``.mo`` catalogues are preferred; when none is found the
    matching ``.po`` source is compiled in memory with :mod:`polib`.
    Without any catalogue the identity translation stays active.
    """
    localedir_path = Path(localedir)
    requested = _requested_languages(languages)
    translation = _gettext.translation(
        domain,
        localedir=str(localedir_path),
        languages=requested or None,
        fallback=True,
    )
    if type(translation) is NullTranslations:
        compiled = _compile_po(domain, localedir_path, requested)
        if compiled is not None:
            translation = compiled
    global _TRANSLATION
    _TRANSLATION = translation
    return translation


def reset() -> None:
    """Return to untranslated messages."""
    global _TRANSLATION
    _TRANSLATION = NullTranslations()


def _requested_languages(languages: Iterable[str] | None) -> list[str]:
    if languages is None:
        raw: list[str] = []
        for name in ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"):
            value = os.environ.get(name)
            if value:
                raw.extend(token.strip() for token in value.split(":") if token.strip())
        languages = raw
    seen: set[str] = set()
    expanded: list[str] = []
    for language in languages:
        if not language:
            continue
        for candidate in _expand_lang(language):
            if candidate and candidate not in seen:
                seen.add(candidate)
                expanded.append(candidate)
    return expanded


def _compile_po(
    domain: str, localedir: Path, languages: Sequence[str]
) -> NullTranslations | None:
    for language in languages:
        po_path = localedir / language / "LC_MESSAGES" / f"{domain}.po"
        if not po_path.exists():
            continue
        try:
            catalog = polib.pofile(str(po_path))
        except (OSError, ValueError):
            continue
        return GNUTranslations(BytesIO(catalog.to_binary()))
    return None


__all__ = ["DOMAIN", "_", "gettext", "install", "ngettext", "reset"]
