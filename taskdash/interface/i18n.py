import os
from typing import Optional

from taskdash.interface.constants import LANG_PACK


def _fill_lang_pack_defaults(base_lang: str = "en") -> None:
    """Backfill missing translations with English defaults."""
    base = LANG_PACK.get(base_lang, {})
    for lang, values in LANG_PACK.items():
        if lang == base_lang:
            continue
        for key, val in base.items():
            values.setdefault(key, val)


_fill_lang_pack_defaults()


def effective_lang(preferred: Optional[str] = None) -> str:
    """Resolve active language: env override, then ``preferred``, then English.

    ``preferred`` is the ``lang`` of the loaded settings, so ``--config`` and
    ``--lang`` both reach it.
    """
    env_lang = os.getenv("TASKDASH_LANG")
    if env_lang and env_lang in LANG_PACK:
        return env_lang
    return preferred if preferred in LANG_PACK else "en"


def translate(key: str, lang: Optional[str] = None, **kwargs) -> str:
    base = LANG_PACK.get("en", {})
    lang_map = LANG_PACK.get(effective_lang(lang), base)
    template = lang_map.get(key) or base.get(key, key)
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template


def translator(lang: Optional[str] = None):
    """Bind ``lang`` so callers can pass ``translate(key, **kwargs)`` around."""

    def _t(key: str, **kwargs) -> str:
        return translate(key, lang=lang, **kwargs)

    return _t


__all__ = ["effective_lang", "translate", "translator"]
