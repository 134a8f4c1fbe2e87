from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .alternatives import grammarbot_provider, sapling_provider, textgears_provider
from .http_provider import DEFAULT_TIMEOUT
from .languagetool import LANGUAGETOOL_MIRRORS, mirror_languagetool, premium_languagetool, public_languagetool
from .local_languagetool import local_languagetool
from .provider import GrammarProvider, ProviderFactory

_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "languagetool": public_languagetool,
    **{name: mirror_languagetool(name) for name in LANGUAGETOOL_MIRRORS},
    "languagetoolplus": premium_languagetool,
    "languagetool-local": local_languagetool,
    "grammarbot": grammarbot_provider,
    "textgears": textgears_provider,
    "sapling": sapling_provider,
}

DEFAULT_PROVIDERS = ("languagetool", *LANGUAGETOOL_MIRRORS)


def available_providers() -> list[str]:
    return list(_PROVIDER_FACTORIES)


def _split_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


def create_provider_chain(
    *,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
    dotenv_path: str | Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[GrammarProvider]:
    """Return configured providers honoring environment/priority hints.

    Names come from the arguments or, failing that, from ``GRAMMAR_PRIMARY``
    and ``GRAMMAR_FALLBACK`` (comma separated).
    """

    # Load early so GRAMMAR_PRIMARY/GRAMMAR_FALLBACK are visible below.
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)

    candidates: list[str] = []
    if primary:
        candidates.extend(_split_names(primary))
    else:
        candidates.extend(_split_names(os.environ.get("GRAMMAR_PRIMARY")))

    if fallbacks:
        candidates.extend(name.strip().lower() for name in fallbacks)
    else:
        candidates.extend(_split_names(os.environ.get("GRAMMAR_FALLBACK")))

    if not candidates:
        candidates = list(DEFAULT_PROVIDERS)

    order: list[str] = []
    seen: set[str] = set()
    for name in candidates:
        if name in seen:
            continue
        seen.add(name)
        if name not in _PROVIDER_FACTORIES:
            raise ValueError(f"Unknown grammar provider '{name}'")
        order.append(name)

    return [_PROVIDER_FACTORIES[name](dotenv_path=dotenv_path, timeout=timeout) for name in order]
