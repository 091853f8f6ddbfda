"""Domain vocabulary loaded from data files.

Spelling variants, possessive prefixes and the feminine noun list are words of
the locale, not logic, so they ship as JSON next to the package and can be
replaced with ``Settings.vocabulary_path``.
"""

from __future__ import annotations

import json
import logging
import re
from functools import cached_property, lru_cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "hi_IN.json"


class Vocabulary(BaseModel):
    """Canonical forms, possessive tokens and gendered nouns for one locale."""

    variants: dict[str, list[str]] = Field(default_factory=dict)
    possessives: list[str] = Field(default_factory=list)
    feminine_nouns: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @cached_property
    def canonical_by_variant(self) -> dict[str, str]:
        table: dict[str, str] = {}
        for canonical, spellings in self.variants.items():
            table[canonical.lower()] = canonical
            for spelling in spellings:
                table[spelling.lower().strip()] = canonical
        return table

    @cached_property
    def possessive_re(self) -> re.Pattern[str] | None:
        if not self.possessives:
            return None
        alternatives = "|".join(re.escape(p) for p in self.possessives)
        return re.compile(rf"^(?:{alternatives})\s+", re.IGNORECASE)

    @cached_property
    def feminine_re(self) -> re.Pattern[str] | None:
        if not self.feminine_nouns:
            return None
        alternatives = "|".join(re.escape(n) for n in self.feminine_nouns)
        return re.compile(rf"(?:{alternatives})", re.IGNORECASE)


def load_vocabulary(path: Path | None = None) -> Vocabulary:
    """Load a vocabulary file, or the bundled hi-IN table when ``path`` is None."""

    if path is None:
        raw = resources.files("yaad_rakhna.data").joinpath(DEFAULT_RESOURCE).read_text(
            encoding="utf-8"
        )
        source = DEFAULT_RESOURCE
    else:
        raw = Path(path).read_text(encoding="utf-8")
        source = str(path)
    vocabulary = Vocabulary.model_validate(json.loads(raw))
    logger.debug(
        "vocabulary_loaded",
        extra={"event_type": "vocabulary_loaded", "source": source},
    )
    return vocabulary


@lru_cache(maxsize=1)
def default_vocabulary() -> Vocabulary:
    return load_vocabulary()
